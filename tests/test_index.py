"""Tests for EventIndex: loading, mutations and derived views."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime

import pytest

from conftest import OWNER, FakeEventStore, make_draft, make_event
from eventmapper.errors import NotFoundOrForbidden, PersistenceError, ValidationError
from eventmapper.index import EventIndex


@pytest.fixture
def index(store):
    idx = EventIndex(store)
    assert idx.load(OWNER).ok
    return idx


class TestLoad:
    def test_load_scopes_to_owner(self, index):
        assert index.owner_id == OWNER
        assert {e.id for e in index.events} == {"a", "b", "c", "d", "e"}

    def test_empty_result_is_not_an_error(self):
        idx = EventIndex(FakeEventStore())
        outcome = idx.load(OWNER)
        assert outcome.ok
        assert idx.events == ()
        assert idx.grouped_by_date() == {}
        assert idx.upcoming(date(2024, 1, 1)) == []
        assert idx.for_date(date(2024, 1, 1)) == []
        assert idx.month_count(date(2024, 1, 1)) == 0

    def test_failed_load_keeps_previous_collection(self, index, store, failing):
        before = index.events
        store.fail = failing
        outcome = index.load(OWNER)
        assert not outcome.ok
        assert outcome.error is failing
        assert index.events == before

    def test_load_discarded_when_cleared_midway(self, store):
        idx = EventIndex(store)
        store.on_list = idx.clear
        outcome = idx.load(OWNER)
        assert outcome.ok
        assert idx.events == ()
        assert idx.owner_id is None


class TestMutations:
    def test_add_appends_server_event(self, index, store):
        outcome = index.add(make_draft())
        assert outcome.ok
        assert outcome.event.id.startswith("new-")
        assert outcome.event.owner_id == OWNER
        assert index.events[-1] == outcome.event

    def test_add_rejects_missing_fields_before_store(self, index, store):
        draft = make_draft(title="", time="")
        outcome = index.add(draft)
        assert isinstance(outcome.error, ValidationError)
        assert "title is required" in outcome.error.problems
        assert "time is required" in outcome.error.problems
        assert "create" not in store.calls

    def test_add_failure_leaves_collection(self, index, store, failing):
        before = index.events
        store.fail = failing
        outcome = index.add(make_draft())
        assert isinstance(outcome.error, PersistenceError)
        assert index.events == before

    def test_add_without_owner(self, store):
        outcome = EventIndex(store).add(make_draft())
        assert isinstance(outcome.error, PersistenceError)

    def test_update_replaces_entry(self, index):
        outcome = index.update("a", {"title": "Renamed", "time": "11:00"})
        assert outcome.ok
        updated = index.get("a")
        assert updated.title == "Renamed"
        assert updated.time == "11:00"
        assert len(index) == 5

    def test_update_not_owned(self, index):
        before = index.events
        outcome = index.update("x", {"title": "Hijack"})
        assert isinstance(outcome.error, NotFoundOrForbidden)
        assert index.events == before

    def test_update_validates_merged_fields(self, index, store):
        outcome = index.update("a", {"time": "9am"})
        assert isinstance(outcome.error, ValidationError)
        assert "update" not in store.calls

    def test_update_rejects_bad_date(self, index):
        outcome = index.update("a", {"date": "not-a-date"})
        assert isinstance(outcome.error, ValidationError)

    def test_remove(self, index, store):
        outcome = index.remove("b")
        assert outcome.ok
        assert outcome.event.id == "b"
        assert index.get("b") is None
        assert all(e.id != "b" for e in store.rows)

    def test_remove_missing(self, index):
        outcome = index.remove("nope")
        assert isinstance(outcome.error, NotFoundOrForbidden)
        assert len(index) == 5


class TestDerivedViews:
    def test_grouping_keeps_every_event_once(self, index):
        grouped = index.grouped_by_date()
        flattened = [e for bucket in grouped.values() for e in bucket]
        assert Counter(e.id for e in flattened) == Counter(e.id for e in index.events)
        for day, bucket in grouped.items():
            assert all(e.date == day for e in bucket)

    def test_for_date_sorts_by_time(self, index):
        # personal 08:00 comes before work 09:00
        result = index.for_date(date(2024, 3, 1))
        assert [e.category for e in result] == ["personal", "work"]

    def test_for_date_is_stable_for_equal_times(self):
        events = [make_event(i, "2024-05-05", "10:00") for i in ("p", "q", "r")]
        events.insert(1, make_event("early", "2024-05-05", "07:00"))
        idx = EventIndex(FakeEventStore(events))
        idx.load(OWNER)
        assert [e.id for e in idx.for_date(date(2024, 5, 5))] == ["early", "p", "q", "r"]

    def test_upcoming_includes_today_excludes_past(self, index):
        result = index.upcoming(date(2024, 3, 1), limit=None)
        assert [e.id for e in result] == ["b", "a", "d", "e"]
        assert all(e.date >= date(2024, 3, 1) for e in result)

    def test_upcoming_accepts_datetime(self, index):
        result = index.upcoming(datetime(2024, 3, 15, 23, 59))
        assert [e.id for e in result] == ["d", "e"]

    def test_upcoming_limit(self, index):
        assert len(index.upcoming(date(2024, 1, 1), limit=2)) == 2
        assert len(index.upcoming(date(2024, 1, 1))) == 5

    def test_views_do_not_rely_on_collection_order(self, index):
        index.add(make_draft(date=date(2024, 3, 1), time="07:00"))
        assert index.for_date(date(2024, 3, 1))[0].time == "07:00"
        assert index.upcoming(date(2024, 3, 1))[0].time == "07:00"

    def test_month_count(self, index):
        assert index.month_count(date(2024, 3, 20)) == 3
        assert index.month_count(date(2024, 2, 1)) == 1
        assert index.month_count(date(2023, 3, 1)) == 0

    def test_stats(self, index):
        assert index.stats(date(2024, 3, 10)) == {"total": 5, "this_month": 3, "upcoming": 2}
