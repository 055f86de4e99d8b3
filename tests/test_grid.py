"""Tests for the month grid builder."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from conftest import make_event
from eventmapper.grid import GRID_CELLS, build_month, grid_start, month_start, shift_month, weeks


def _months(start_year: int, count: int):
    anchor = date(start_year, 1, 1)
    for _ in range(count):
        yield anchor
        anchor = shift_month(anchor, 1)


class TestBuildMonth:
    @pytest.mark.parametrize("anchor", list(_months(2023, 30)))
    def test_always_42_cells_and_current_month_flags(self, anchor):
        cells = build_month(anchor, {})
        assert len(cells) == GRID_CELLS == 42
        assert cells[0].date.weekday() == 6  # Sunday
        for prev, cell in zip(cells, cells[1:]):
            assert cell.date - prev.date == timedelta(days=1)

        in_month = [c.date for c in cells if c.is_current_month]
        first = month_start(anchor)
        last = shift_month(anchor, 1) - timedelta(days=1)
        assert in_month[0] == first
        assert in_month[-1] == last
        assert len(in_month) == last.day

    def test_month_starting_on_sunday_has_trailing_filler_rows(self):
        # September 2024 starts on a Sunday and needs only five rows of its own.
        cells = build_month(date(2024, 9, 10), {})
        assert cells[0].date == date(2024, 9, 1)
        last_row = weeks(cells)[-1]
        assert all(not c.is_current_month for c in last_row)

    def test_february_non_leap_starting_sunday(self):
        cells = build_month(date(2015, 2, 1), {})
        rows = weeks(cells)
        assert len(rows) == 6
        assert all(len(r) == 7 for r in rows)
        assert sum(c.is_current_month for c in cells) == 28

    def test_cells_carry_their_bucket(self):
        a = make_event("a", "2024-03-01")
        b = make_event("b", "2024-03-01")
        spill = make_event("s", "2024-04-01")
        grouped = {a.date: [a, b], spill.date: [spill]}
        cells = build_month(date(2024, 3, 1), grouped)
        by_date = {c.date: c for c in cells}
        assert by_date[date(2024, 3, 1)].events == (a, b)
        # next-month filler still shows its events
        assert by_date[date(2024, 4, 1)].events == (spill,)
        assert by_date[date(2024, 3, 2)].events == ()

    def test_pure(self):
        grouped = {date(2024, 3, 1): [make_event("a")]}
        assert build_month(date(2024, 3, 1), grouped) == build_month(date(2024, 3, 1), grouped)


class TestMonthHelpers:
    def test_shift_month_crosses_years(self):
        assert shift_month(date(2024, 12, 31), 1) == date(2025, 1, 1)
        assert shift_month(date(2024, 1, 15), -1) == date(2023, 12, 1)
        assert shift_month(date(2024, 3, 31), -13) == date(2023, 2, 1)

    def test_grid_start(self):
        # 2024-03-01 is a Friday
        assert grid_start(date(2024, 3, 20)) == date(2024, 2, 25)
