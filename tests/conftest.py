"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import itertools
from datetime import date
from typing import Callable, Optional

import pytest

from eventmapper.errors import NotFoundOrForbidden, PersistenceError
from eventmapper.models import Event, EventDraft, Location
from eventmapper.store import EventStore

OWNER = "user-1"


def make_event(
    id: str,
    day: str = "2024-03-01",
    time: str = "09:00",
    category: str = "other",
    lat: float = 35.0,
    lng: float = 139.0,
    owner_id: str = OWNER,
    title: Optional[str] = None,
) -> Event:
    return Event(
        id=id,
        owner_id=owner_id,
        title=title or f"Event {id}",
        date=date.fromisoformat(day),
        time=time,
        location=Location(name=f"Place {id}", address=f"{id} Main St", lat=lat, lng=lng),
        category=category,
    )


def make_draft(**overrides) -> EventDraft:
    draft = EventDraft(
        title="Dentist",
        date=date(2024, 3, 5),
        time="14:30",
        location=Location(name="Clinic", address="1 Health Ave", lat=35.45, lng=139.63),
        category="health",
    )
    for key, value in overrides.items():
        setattr(draft, key, value)
    return draft


class FakeEventStore(EventStore):
    """In-memory store. Set ``fail`` to make the next calls raise."""

    def __init__(self, events: Optional[list[Event]] = None) -> None:
        self.rows: list[Event] = list(events or [])
        self.fail: Optional[Exception] = None
        self.calls: list[str] = []
        self.on_list: Optional[Callable[[], None]] = None
        self._ids = itertools.count(1)

    def _maybe_fail(self, name: str) -> None:
        self.calls.append(name)
        if self.fail is not None:
            raise self.fail

    def list(self, owner_id):
        self._maybe_fail("list")
        if self.on_list is not None:
            self.on_list()
        return sorted((e for e in self.rows if e.owner_id == owner_id), key=lambda e: e.date)

    def create(self, owner_id, draft):
        self._maybe_fail("create")
        row = {**draft.to_dict(), "id": f"new-{next(self._ids)}", "user_id": owner_id}
        event = Event.from_dict(row)
        self.rows.append(event)
        return event

    def update(self, event_id, owner_id, patch):
        self._maybe_fail("update")
        for i, e in enumerate(self.rows):
            if e.id == event_id and e.owner_id == owner_id:
                self.rows[i] = e.apply(patch)
                return self.rows[i]
        raise NotFoundOrForbidden(event_id)

    def delete(self, event_id, owner_id):
        self._maybe_fail("delete")
        kept = [e for e in self.rows if not (e.id == event_id and e.owner_id == owner_id)]
        if len(kept) == len(self.rows):
            raise NotFoundOrForbidden(event_id)
        self.rows = kept


@pytest.fixture
def sample_events():
    """A handful of events across two months, deliberately unsorted."""
    return [
        make_event("a", "2024-03-01", "09:00", "work", lat=35.0, lng=139.0),
        make_event("b", "2024-03-01", "08:00", "personal", lat=36.0, lng=140.0),
        make_event("c", "2024-02-28", "12:00", "social", lat=34.0, lng=138.0),
        make_event("d", "2024-03-15", "18:30", "hobby", lat=35.5, lng=139.5),
        make_event("e", "2024-04-02", "07:15", "health", lat=35.2, lng=139.2),
        make_event("x", "2024-03-01", "10:00", "other", owner_id="someone-else"),
    ]


@pytest.fixture
def store(sample_events):
    return FakeEventStore(sample_events)


@pytest.fixture
def failing():
    return PersistenceError("connection refused")
