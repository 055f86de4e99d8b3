"""UI-facing wiring of the event index, selection, calendar and map."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

from eventmapper.auth import AuthSession
from eventmapper.errors import EventMapperError, NotFoundOrForbidden, Outcome
from eventmapper.grid import build_month, month_start, shift_month
from eventmapper.index import UPCOMING_LIMIT, EventIndex
from eventmapper.models import CalendarDay, Event, EventDraft, Selection
from eventmapper.selection import SelectionController
from eventmapper.store import EventStore
from eventmapper.viewport import Directive, compute_viewport

logger = logging.getLogger(__name__)


class Workspace:
    """Everything one signed-in screen needs, driven by user intents.

    Subscribes to *auth*: signing in loads that owner's events, signing out
    clears the events and the selected event. ``remove`` clears the
    selection when the removed event was selected.
    """

    def __init__(
        self,
        store: EventStore,
        auth: AuthSession,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._clock = clock
        self.auth = auth
        self.index = EventIndex(store)
        self.selection = SelectionController(clock())
        self.anchor = month_start(clock())
        self.last_error: Optional[EventMapperError] = None
        self._unsubscribe = auth.subscribe(self._on_session_changed)
        if auth.owner_id is not None:
            self._on_session_changed(auth.owner_id)

    def today(self) -> date:
        return self._clock()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def _on_session_changed(self, owner_id: Optional[str]) -> None:
        self.index.clear()
        self.selection.clear()
        if owner_id is None:
            return
        self.selection.reset(self.today())
        outcome = self.index.load(owner_id)
        self.last_error = outcome.error

    def reload(self) -> Outcome:
        """Fetch the current owner's events again."""
        if self.auth.owner_id is None:
            return Outcome()
        outcome = self.index.load(self.auth.owner_id)
        self.last_error = outcome.error
        return outcome

    def close(self) -> None:
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, draft: EventDraft) -> Outcome:
        return self._remember(self.index.add(draft))

    def update(self, event_id: str, patch: dict) -> Outcome:
        outcome = self._remember(self.index.update(event_id, patch))
        if outcome.ok and outcome.event is not None and self.selection.is_selected(outcome.event):
            self.selection.select_event(outcome.event)
        return outcome

    def remove(self, event_id: str) -> Outcome:
        outcome = self._remember(self.index.remove(event_id))
        selected = self.selection.selected_event
        if outcome.ok and selected is not None and selected.id == event_id:
            self.selection.clear()
        return outcome

    def _remember(self, outcome: Outcome) -> Outcome:
        self.last_error = outcome.error
        return outcome

    def draft_for(self, day: Optional[date] = None) -> EventDraft:
        """Blank draft for *day*, or a fully blank one."""
        if day is None:
            return EventDraft()
        return EventDraft.for_day(day)

    # ------------------------------------------------------------------
    # Selection intents (from either projection)
    # ------------------------------------------------------------------

    def select_date(self, day: date) -> Selection:
        return self.selection.select_date(day)

    def select_event(self, event: Event) -> Selection:
        return self.selection.select_event(event)

    def select_event_id(self, event_id: str) -> Outcome:
        event = self.index.get(event_id)
        if event is None:
            return Outcome.failed(NotFoundOrForbidden(f"event {event_id} is not loaded"))
        self.selection.select_event(event)
        return Outcome(event=event)

    def clear_selection(self) -> Selection:
        return self.selection.clear()

    # ------------------------------------------------------------------
    # Calendar navigation
    # ------------------------------------------------------------------

    def next_month(self) -> date:
        self.anchor = shift_month(self.anchor, 1)
        return self.anchor

    def previous_month(self) -> date:
        self.anchor = shift_month(self.anchor, -1)
        return self.anchor

    def go_to(self, anchor: date) -> date:
        self.anchor = month_start(anchor)
        return self.anchor

    def go_to_today(self) -> date:
        return self.go_to(self.today())

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def calendar(self) -> list[CalendarDay]:
        return build_month(self.anchor, self.index.grouped_by_date())

    def selected_day_events(self) -> list[Event]:
        return self.index.for_date(self.selection.selected_date)

    def viewport(self) -> Directive:
        return compute_viewport(self.index.events, self.selection.selected_event)

    def upcoming(self, limit: Optional[int] = UPCOMING_LIMIT) -> list[Event]:
        return self.index.upcoming(self.today(), limit=limit)

    def stats(self) -> dict:
        return self.index.stats(self.today())

    def __repr__(self) -> str:
        return f"<Workspace owner={self.auth.owner_id!r} anchor={self.anchor:%Y-%m} events={len(self.index)}>"
