"""Tests for the event model, drafts and category colours."""

from __future__ import annotations

from datetime import date

import pytest

from conftest import make_draft, make_event
from eventmapper.categories import CATEGORIES, color_of, glyph_of, label_of, legend
from eventmapper.errors import ValidationError
from eventmapper.models import DEFAULT_LAT, DEFAULT_LNG, Event, EventDraft


class TestCategories:
    def test_every_category_has_colour_and_glyph(self):
        assert len(CATEGORIES) == 6
        assert len({color_of(c) for c in CATEGORIES}) == 6
        assert [glyph_of(c) for c in CATEGORIES] == ["W", "P", "S", "H", "Y", "O"]

    def test_glyphs_tell_categories_apart(self):
        assert len({glyph_of(c) for c in CATEGORIES}) == len(CATEGORIES)

    def test_unknown_category_is_rejected(self):
        with pytest.raises(KeyError):
            color_of("party")
        with pytest.raises(KeyError):
            glyph_of("party")
        with pytest.raises(KeyError):
            label_of("party")

    def test_legend_order(self):
        assert [row[0] for row in legend()] == list(CATEGORIES)


class TestEvent:
    def test_row_conversion(self):
        row = {
            "id": "42",
            "user_id": "u",
            "title": "Lunch",
            "description": "",
            "date": "2024-03-01",
            "time": "12:30:00",
            "location_name": "Cafe",
            "location_address": "2 Side St",
            "location_lat": "35.1",
            "location_lng": 139.2,
            "category": "social",
            "created_at": "2024-02-01T10:00:00",
        }
        event = Event.from_dict(row)
        assert event.date == date(2024, 3, 1)
        assert event.time == "12:30"
        assert event.location.lat == 35.1
        assert event.description is None
        assert Event.from_dict(event.to_dict()) == event

    def test_apply_keeps_identity(self):
        event = make_event("a")
        patched = event.apply({"id": "zzz", "user_id": "evil", "title": "New", "location_lat": 1.5})
        assert patched.id == "a"
        assert patched.owner_id == event.owner_id
        assert patched.title == "New"
        assert patched.location.lat == 1.5

    def test_sort_key(self):
        early = make_event("a", "2024-03-01", "08:00")
        late = make_event("b", "2024-03-01", "21:00")
        assert sorted([late, early], key=lambda e: e.sort_key) == [early, late]


class TestEventDraft:
    def test_valid_draft(self):
        make_draft().validate()

    def test_blank_draft_lists_every_missing_field(self):
        with pytest.raises(ValidationError) as excinfo:
            EventDraft().validate()
        assert excinfo.value.problems == [
            "title is required",
            "date is required",
            "time is required",
            "location.name is required",
            "location.address is required",
        ]

    @pytest.mark.parametrize("time", ["9:00", "24:00", "12:60", "noon"])
    def test_bad_time(self, time):
        with pytest.raises(ValidationError):
            make_draft(time=time).validate()

    def test_bad_category(self):
        with pytest.raises(ValidationError):
            make_draft(category="party").validate()

    def test_coordinates_out_of_range(self):
        draft = make_draft().with_coordinates(91.0, 0.0)
        with pytest.raises(ValidationError, match="lat"):
            draft.validate()

    def test_for_day_defaults(self):
        draft = EventDraft.for_day(date(2024, 3, 1))
        assert draft.time == "09:00"
        assert draft.category == "other"
        assert draft.location.point == (DEFAULT_LAT, DEFAULT_LNG)

    def test_with_coordinates_only_fills_blank_name(self):
        blank = EventDraft().with_coordinates(1.0, 2.0, name="Station")
        assert blank.location.name == "Station"
        named = make_draft().with_coordinates(1.0, 2.0, name="Station")
        assert named.location.name == "Clinic"
        assert named.location.point == (1.0, 2.0)

    def test_from_event_round_trip(self):
        event = make_event("a")
        assert EventDraft.from_event(event).to_dict()["location_name"] == event.location.name
