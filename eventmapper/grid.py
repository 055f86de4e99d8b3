"""Month grid construction for the calendar projection."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Mapping, Sequence

from eventmapper.models import CalendarDay, Event

logger = logging.getLogger(__name__)

# Fixed layout: always six rows, weeks start on Sunday.
WEEKS = 6
DAYS_PER_WEEK = 7
GRID_CELLS = WEEKS * DAYS_PER_WEEK
WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def month_start(day: date) -> date:
    """First day of *day*'s month."""
    return day.replace(day=1)


def shift_month(anchor: date, months: int) -> date:
    """Return the first day of the month *months* away from *anchor*."""
    index = anchor.year * 12 + (anchor.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def grid_start(anchor: date) -> date:
    """The Sunday on or before the first day of *anchor*'s month."""
    first = month_start(anchor)
    # date.weekday(): Monday=0 .. Sunday=6
    return first - timedelta(days=(first.weekday() + 1) % 7)


def build_month(anchor: date, grouped_by_date: Mapping[date, Sequence[Event]]) -> list[CalendarDay]:
    """Build the 42 cells needed to draw *anchor*'s month.

    Cells run from the Sunday on or before the 1st, in order, for six full
    weeks. Trailing rows made only of next-month days are kept so the grid
    height never changes between months.
    """
    start = grid_start(anchor)
    cells: list[CalendarDay] = []
    for offset in range(GRID_CELLS):
        day = start + timedelta(days=offset)
        cells.append(
            CalendarDay(
                date=day,
                is_current_month=(day.year, day.month) == (anchor.year, anchor.month),
                events=tuple(grouped_by_date.get(day, ())),
            )
        )
    logger.debug("Built grid for %s starting %s", anchor.strftime("%Y-%m"), start)
    return cells


def weeks(cells: Sequence[CalendarDay]) -> list[list[CalendarDay]]:
    """Split a flat cell list into rows of seven."""
    return [list(cells[i : i + DAYS_PER_WEEK]) for i in range(0, len(cells), DAYS_PER_WEEK)]
