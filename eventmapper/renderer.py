"""Render events and month grids as plain text / Markdown for the terminal."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from eventmapper.categories import glyph_of, label_of, legend
from eventmapper.grid import WEEKDAY_NAMES, weeks
from eventmapper.models import CalendarDay, Event

logger = logging.getLogger(__name__)

CELL_WIDTH = 11
EVENTS_PER_CELL = 2  # the rest collapse into "+N more"


def _format_date_heading(day: date) -> str:
    """Convert 2024-03-01 to 'Friday, March 1, 2024'."""
    return day.strftime("%A, %B %d, %Y").replace(" 0", " ")


def _format_time(time_24: str) -> str:
    """Convert '19:30' to '7:30 PM'."""
    dt = datetime.strptime(time_24, "%H:%M")
    return dt.strftime("%I:%M %p").lstrip("0")


# ------------------------------------------------------------------
# Event entry
# ------------------------------------------------------------------

def render_event(event: Event) -> str:
    """Render a single event as a Markdown block."""
    lines: list[str] = [f"### {event.title}", ""]
    lines.append(f"- **When:** {_format_date_heading(event.date)}, {_format_time(event.time)}")
    lines.append(f"- **Where:** {event.location.name}")
    lines.append(f"- **Address:** {event.location.address}")
    lines.append(f"- **Coordinates:** {event.location.lat:.5f}, {event.location.lng:.5f}")
    lines.append(f"- **Category:** {label_of(event.category)}")
    if event.description:
        lines.append(f"- **Description:** {event.description}")
    lines.append(f"- **ID:** `{event.id}`")
    return "\n".join(lines)


def _render_line(event: Event) -> str:
    """One-line summary: '[W] 09:00  Standup @ Office (id)'."""
    return f"[{glyph_of(event.category)}] {event.time}  {event.title} @ {event.location.name}  ({event.id})"


# ------------------------------------------------------------------
# Lists
# ------------------------------------------------------------------

def render_day(day: date, events: Sequence[Event]) -> str:
    """Agenda for one day; *events* should already be sorted by time."""
    lines = [f"## {_format_date_heading(day)}", ""]
    if not events:
        lines.append("*No events scheduled.*")
    for event in events:
        lines.append(f"- {_render_line(event)}")
    return "\n".join(lines)


def render_upcoming(events: Sequence[Event]) -> str:
    """Upcoming list, one line per event."""
    lines = ["## Upcoming Events", ""]
    if not events:
        lines.append("*No upcoming events.*")
    for event in events:
        lines.append(f"- {event.date.isoformat()} {_render_line(event)}")
    return "\n".join(lines)


def render_stats(stats: dict) -> str:
    return "\n".join(
        [
            f"Total events:    {stats['total']}",
            f"This month:      {stats['this_month']}",
            f"Upcoming:        {stats['upcoming']}",
        ]
    )


# ------------------------------------------------------------------
# Month grid
# ------------------------------------------------------------------

def _cell_lines(cell: CalendarDay, selected: Optional[date], today: Optional[date]) -> list[str]:
    marker = ""
    if cell.date == selected:
        marker = "*"
    elif cell.date == today:
        marker = "!"
    number = f"{cell.date.day}{marker}" if cell.is_current_month else f"({cell.date.day})"
    lines = [number]
    for event in cell.events[:EVENTS_PER_CELL]:
        lines.append(f"{glyph_of(event.category)} {event.time}")
    extra = len(cell.events) - EVENTS_PER_CELL
    if extra > 0:
        lines.append(f"+{extra} more")
    return lines


def render_month(
    anchor: date,
    cells: Sequence[CalendarDay],
    selected: Optional[date] = None,
    today: Optional[date] = None,
) -> str:
    """Draw the grid built by ``grid.build_month`` as a fixed-width table.

    Days outside the anchor month are shown in parentheses; ``*`` marks the
    selected date and ``!`` marks today. Each cell lists at most two events
    as ``<glyph> <time>``.
    """
    sep = "+" + "+".join("-" * CELL_WIDTH for _ in WEEKDAY_NAMES) + "+"
    out = [anchor.strftime("%B %Y"), sep]
    out.append("|" + "|".join(name.center(CELL_WIDTH) for name in WEEKDAY_NAMES) + "|")
    out.append(sep)

    for row in weeks(cells):
        stacked = [_cell_lines(cell, selected, today) for cell in row]
        height = max(EVENTS_PER_CELL + 2, max(len(s) for s in stacked))
        for i in range(height):
            parts = [(s[i] if i < len(s) else "").ljust(CELL_WIDTH)[:CELL_WIDTH] for s in stacked]
            out.append("|" + "|".join(parts) + "|")
        out.append(sep)

    out.append("  ".join(f"{glyph}={label_of(cat)}" for cat, _color, glyph in legend()))
    return "\n".join(out)
