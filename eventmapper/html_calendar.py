"""Render a month grid and an event map as one self-contained HTML page."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from eventmapper.categories import color_of, glyph_of, label_of, legend
from eventmapper.grid import WEEKDAY_NAMES, weeks
from eventmapper.models import CalendarDay, Event
from eventmapper.renderer import EVENTS_PER_CELL
from eventmapper.viewport import Directive, to_dict

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("output")
LEAFLET_VERSION = "1.9.4"
TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"


def _escape_html(text: str) -> str:
    """Basic HTML escape."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


_STYLE = """
    body { font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; margin: 0; padding: 20px; background: #f9fafb; color: #1f2937; }
    h1 { margin: 0 0 16px; }
    .layout { display: grid; grid-template-columns: 3fr 2fr; gap: 20px; }
    .grid { display: grid; grid-template-columns: repeat(7, 1fr); gap: 2px; background: #e5e7eb; }
    .weekday { background: #f3f4f6; padding: 6px; text-align: center; font-size: 0.8em; color: #6b7280; }
    .day { background: #fff; min-height: 80px; padding: 4px; font-size: 0.85em; }
    .day.other { background: #f9fafb; color: #9ca3af; }
    .day.today { background: #dbeafe; }
    .day.selected { outline: 2px solid #3b82f6; }
    .chip { color: #fff; border-radius: 3px; padding: 1px 3px; margin-top: 2px; white-space: nowrap; overflow: hidden; text-overflow: ellipsis; }
    .more { color: #6b7280; font-size: 0.8em; }
    #map { height: 600px; border-radius: 8px; }
    .legend span { display: inline-block; margin-right: 10px; }
    .dot { display: inline-block; width: 10px; height: 10px; border-radius: 50%; margin-right: 4px; }
"""


def _render_cell(cell: CalendarDay, selected: Optional[date], today: Optional[date]) -> str:
    classes = ["day"]
    if not cell.is_current_month:
        classes.append("other")
    if cell.date == today:
        classes.append("today")
    if cell.date == selected:
        classes.append("selected")

    parts = [f'<div class="{" ".join(classes)}" data-date="{cell.date.isoformat()}">', f"<div>{cell.date.day}</div>"]
    for event in cell.events[:EVENTS_PER_CELL]:
        title = _escape_html(f"{event.title} at {event.time}")
        parts.append(
            f'<div class="chip" style="background:{color_of(event.category)}" title="{title}">'
            f"{_escape_html(event.time)} {_escape_html(event.title)}</div>"
        )
    extra = len(cell.events) - EVENTS_PER_CELL
    if extra > 0:
        parts.append(f'<div class="more">+{extra} more</div>')
    parts.append("</div>")
    return "".join(parts)


def _marker_payload(events: Sequence[Event], selected_event: Optional[Event]) -> list[dict]:
    return [
        {
            "id": e.id,
            "lat": e.location.lat,
            "lng": e.location.lng,
            "title": e.title,
            "when": f"{e.date.isoformat()} {e.time}",
            "place": e.location.name,
            "category": label_of(e.category),
            "color": color_of(e.category),
            "glyph": glyph_of(e.category),
            "selected": selected_event is not None and e.id == selected_event.id,
        }
        for e in events
    ]


def render_calendar_html(
    anchor: date,
    cells: Sequence[CalendarDay],
    events: Sequence[Event],
    directive: Directive,
    selected_date: Optional[date] = None,
    selected_event: Optional[Event] = None,
    today: Optional[date] = None,
) -> str:
    """Render the calendar grid beside a Leaflet map.

    The map's initial camera is *directive*, so the page shows the same focus
    as ``viewport.compute_viewport`` decided.
    """
    grid_rows = "\n".join(
        "".join(_render_cell(cell, selected_date, today) for cell in row) for row in weeks(cells)
    )
    weekday_header = "".join(f'<div class="weekday">{name}</div>' for name in WEEKDAY_NAMES)
    legend_html = "".join(
        f'<span><i class="dot" style="background:{color}"></i>{label_of(cat)}</span>' for cat, color, _g in legend()
    )
    # "</" inside an inline script would end it early
    markers = json.dumps(_marker_payload(events, selected_event)).replace("</", "<\\/")
    camera = json.dumps(to_dict(directive))
    title = anchor.strftime("%B %Y")

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>Events - {title}</title>
<link rel="stylesheet" href="https://unpkg.com/leaflet@{LEAFLET_VERSION}/dist/leaflet.css">
<script src="https://unpkg.com/leaflet@{LEAFLET_VERSION}/dist/leaflet.js"></script>
<style>{_STYLE}</style>
</head>
<body>
<h1>{title}</h1>
<div class="layout">
  <div>
    <div class="grid">{weekday_header}
{grid_rows}
    </div>
  </div>
  <div>
    <div id="map"></div>
    <p>{len(events)} event{"" if len(events) == 1 else "s"} on the map</p>
    <div class="legend">{legend_html}</div>
  </div>
</div>
<script>
  const markers = {markers};
  const camera = {camera};
  const map = L.map('map');
  L.tileLayer('{TILE_URL}', {{ attribution: '&copy; OpenStreetMap contributors' }}).addTo(map);
  for (const m of markers) {{
    const size = m.selected ? 35 : 25;
    const icon = L.divIcon({{
      className: '',
      html: `<div style="background:${{m.color}};width:${{size}}px;height:${{size}}px;border-radius:50%;border:3px solid #fff;color:#fff;display:flex;align-items:center;justify-content:center;font-weight:bold">${{m.glyph}}</div>`,
      iconSize: [size, size],
      iconAnchor: [size / 2, size / 2],
    }});
    const popup = document.createElement('div');
    popup.innerHTML = '<b></b><br><span></span><br><span></span><br><span></span>';
    popup.children[0].textContent = m.title;
    popup.children[2].textContent = m.when;
    popup.children[4].textContent = m.place;
    popup.children[6].textContent = m.category;
    L.marker([m.lat, m.lng], {{ icon }}).addTo(map).bindPopup(popup);
  }}
  if (camera.kind === 'fit') {{
    map.fitBounds(camera.bounds);
  }} else {{
    map.setView(camera.center, camera.zoom);
  }}
</script>
</body>
</html>
"""


# ------------------------------------------------------------------
# File writer
# ------------------------------------------------------------------

def publish(html: str, output_dir: Optional[Path] = None, filename: str = "calendar.html") -> Path:
    """Write *html* into the output directory and return the path."""
    out = output_dir or DEFAULT_OUTPUT_DIR
    out.mkdir(parents=True, exist_ok=True)
    path = out / filename
    path.write_text(html, encoding="utf-8")
    logger.info("Wrote %s", path)
    return path
