"""EventMapper - keep dated, located events in sync across a calendar and a map."""

from eventmapper.errors import NotFoundOrForbidden, Outcome, PersistenceError, ValidationError
from eventmapper.index import EventIndex
from eventmapper.models import CalendarDay, Event, EventDraft, Location, Selection
from eventmapper.selection import SelectionController
from eventmapper.workspace import Workspace

__all__ = [
    "CalendarDay",
    "Event",
    "EventDraft",
    "EventIndex",
    "Location",
    "NotFoundOrForbidden",
    "Outcome",
    "PersistenceError",
    "Selection",
    "SelectionController",
    "ValidationError",
    "Workspace",
]
