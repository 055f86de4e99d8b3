"""In-memory event collection for the signed-in owner, plus derived views."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Optional

from eventmapper.errors import EventMapperError, Outcome, PersistenceError, ValidationError
from eventmapper.models import Event, EventDraft
from eventmapper.store import EventStore

logger = logging.getLogger(__name__)

# How many events the upcoming list shows by default.
UPCOMING_LIMIT = 5


def _as_date(now: date) -> date:
    """Strip the time off a datetime; pass dates through."""
    if isinstance(now, datetime):
        return now.date()
    return now


class EventIndex:
    """Owns the cached events of one owner.

    Mutations go through the store first and touch the local collection only
    after the store confirms them. Failures come back as an ``Outcome`` with
    ``error`` set; nothing raised by the store escapes these methods.

    The local list is kept in arrival order. Derived views never rely on it
    being sorted and sort explicitly.

    Removing the event that is currently selected does not touch any
    selection state here: whoever calls ``remove`` must also clear the
    selection (``Workspace.remove`` does).
    """

    def __init__(self, store: EventStore) -> None:
        self._store = store
        self._events: list[Event] = []
        self._owner_id: Optional[str] = None
        # Bumped on clear(); responses started under an older generation are dropped.
        self._generation = 0

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    @property
    def events(self) -> tuple[Event, ...]:
        """Snapshot of the current collection."""
        return tuple(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def get(self, event_id: str) -> Optional[Event]:
        """Return the cached event with *event_id*, or None."""
        for event in self._events:
            if event.id == event_id:
                return event
        return None

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def load(self, owner_id: str) -> Outcome:
        """Replace the collection with *owner_id*'s events from the store.

        On failure the previous collection stays as it was. If ``clear()``
        runs while the request is outstanding, the result is discarded.
        """
        generation = self._generation
        try:
            events = self._store.list(owner_id)
        except EventMapperError as exc:
            logger.warning("Loading events for %s failed: %s", owner_id, exc)
            return Outcome.failed(exc)

        if generation != self._generation:
            logger.warning("Session changed while loading %s; discarding %d event(s)", owner_id, len(events))
            return Outcome()

        self._owner_id = owner_id
        self._events = list(events)
        logger.info("Loaded %d event(s) for %s", len(self._events), owner_id)
        return Outcome()

    def clear(self) -> None:
        """Forget the owner and all cached events (sign-out)."""
        self._generation += 1
        self._owner_id = None
        self._events = []
        logger.debug("Event index cleared (generation %d)", self._generation)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, draft: EventDraft) -> Outcome:
        """Validate *draft*, create it in the store, then append it locally."""
        try:
            draft.validate()
        except ValidationError as exc:
            return Outcome.failed(exc)
        if self._owner_id is None:
            return Outcome.failed(PersistenceError("not signed in"))

        generation = self._generation
        try:
            event = self._store.create(self._owner_id, draft)
        except EventMapperError as exc:
            logger.warning("Creating %r failed: %s", draft.title, exc)
            return Outcome.failed(exc)

        if generation == self._generation:
            self._events.append(event)
            logger.info("Added %r", event)
        return Outcome(event=event)

    def update(self, event_id: str, patch: dict) -> Outcome:
        """Send *patch* (flat row keys) for *event_id* and replace the local copy."""
        current = self.get(event_id)
        if current is not None:
            try:
                merged = EventDraft.from_dict({**current.to_dict(), **patch})
                merged.validate()
            except ValidationError as exc:
                return Outcome.failed(exc)
            except (TypeError, ValueError) as exc:
                return Outcome.failed(ValidationError([str(exc)]))
            # Send the normalized values (ISO dates, stripped text) for the patched keys only.
            row = merged.to_dict()
            patch = {k: row[k] for k in patch if k in row}
        if self._owner_id is None:
            return Outcome.failed(PersistenceError("not signed in"))

        generation = self._generation
        try:
            event = self._store.update(event_id, self._owner_id, patch)
        except EventMapperError as exc:
            logger.warning("Updating %s failed: %s", event_id, exc)
            return Outcome.failed(exc)

        if generation == self._generation:
            self._events = [event if e.id == event_id else e for e in self._events]
            logger.info("Updated %r", event)
        return Outcome(event=event)

    def remove(self, event_id: str) -> Outcome:
        """Delete *event_id* in the store, then drop it locally."""
        if self._owner_id is None:
            return Outcome.failed(PersistenceError("not signed in"))

        generation = self._generation
        try:
            self._store.delete(event_id, self._owner_id)
        except EventMapperError as exc:
            logger.warning("Removing %s failed: %s", event_id, exc)
            return Outcome.failed(exc)

        removed = self.get(event_id)
        if generation == self._generation:
            self._events = [e for e in self._events if e.id != event_id]
            logger.info("Removed %s", event_id)
        return Outcome(event=removed)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def grouped_by_date(self) -> dict[date, list[Event]]:
        """Bucket events by date; each bucket keeps collection order."""
        buckets: dict[date, list[Event]] = defaultdict(list)
        for event in self._events:
            buckets[event.date].append(event)
        return dict(buckets)

    def for_date(self, day: date) -> list[Event]:
        """Events on *day*, by time of day. Equal times keep collection order."""
        day = _as_date(day)
        return sorted((e for e in self._events if e.date == day), key=lambda e: e.time)

    def upcoming(self, now: date, limit: Optional[int] = UPCOMING_LIMIT) -> list[Event]:
        """Events dated today or later, by (date, time), at most *limit* of them."""
        today = _as_date(now)
        result = sorted((e for e in self._events if e.date >= today), key=lambda e: (e.date, e.time))
        if limit is not None:
            result = result[:limit]
        return result

    def month_count(self, anchor: date) -> int:
        """Number of events in *anchor*'s month and year."""
        return sum(1 for e in self._events if (e.date.year, e.date.month) == (anchor.year, anchor.month))

    def stats(self, now: date) -> dict:
        """Return the quick-stats counts shown beside the calendar."""
        return {
            "total": len(self._events),
            "this_month": self.month_count(_as_date(now)),
            "upcoming": len(self.upcoming(now, limit=None)),
        }

    def __repr__(self) -> str:
        return f"<EventIndex owner={self._owner_id!r} events={len(self._events)}>"
