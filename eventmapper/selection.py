"""Shared selection state read by both the calendar and the map."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from eventmapper.models import Event, Selection

logger = logging.getLogger(__name__)


class SelectionController:
    """Single owner of the selected date and selected event.

    Both projections send intents here and read ``snapshot()`` back, so they
    always agree. Selecting an event also moves the selected date to that
    event's date; selecting a date leaves the selected event alone.
    """

    def __init__(self, today: date) -> None:
        self._selected_date = today
        self._selected_event: Optional[Event] = None

    def select_date(self, day: date) -> Selection:
        self._selected_date = day
        logger.debug("Selected date %s", day)
        return self.snapshot()

    def select_event(self, event: Event) -> Selection:
        self._selected_event = event
        self._selected_date = event.date
        logger.debug("Selected %r", event)
        return self.snapshot()

    def clear(self) -> Selection:
        """Drop the selected event; the selected date stays."""
        self._selected_event = None
        return self.snapshot()

    def reset(self, today: date) -> Selection:
        """Start over for a new session."""
        self._selected_date = today
        self._selected_event = None
        return self.snapshot()

    def snapshot(self) -> Selection:
        return Selection(selected_date=self._selected_date, selected_event=self._selected_event)

    @property
    def selected_date(self) -> date:
        return self._selected_date

    @property
    def selected_event(self) -> Optional[Event]:
        return self._selected_event

    def is_selected(self, event: Event) -> bool:
        return self._selected_event is not None and self._selected_event.id == event.id

    def __repr__(self) -> str:
        return f"<SelectionController date={self._selected_date} event={self._selected_event!r}>"
