"""Camera directives for the map projection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from eventmapper.models import Event

logger = logging.getLogger(__name__)

SELECTED_ZOOM = 15
BOUNDS_PADDING = 0.1  # fraction of the box's span added on every side
DEFAULT_CENTER = (35.4437, 139.6380)  # Yokohama
DEFAULT_ZOOM = 10


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned lat/lng rectangle, south-west to north-east."""

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def around(cls, points: Sequence[tuple[float, float]]) -> Bounds:
        """Smallest rectangle containing every ``(lat, lng)`` in *points*."""
        lats = [p[0] for p in points]
        lngs = [p[1] for p in points]
        return cls(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))

    def pad(self, ratio: float) -> Bounds:
        """Grow each side by *ratio* of the span, kept inside valid coordinates."""
        dlat = (self.north - self.south) * ratio
        dlng = (self.east - self.west) * ratio
        return Bounds(
            south=max(self.south - dlat, -90.0),
            west=max(self.west - dlng, -180.0),
            north=min(self.north + dlat, 90.0),
            east=min(self.east + dlng, 180.0),
        )

    @property
    def center(self) -> tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)

    @property
    def is_point(self) -> bool:
        return self.south == self.north and self.west == self.east

    def as_leaflet(self) -> list[list[float]]:
        """``[[south, west], [north, east]]`` as Leaflet's fitBounds expects."""
        return [[self.south, self.west], [self.north, self.east]]


@dataclass(frozen=True)
class CenterDirective:
    """Center the map on a point at a zoom level."""

    center: tuple[float, float]
    zoom: int
    kind: str = "focus"  # "focus" for a selected event, "default" for the fallback


@dataclass(frozen=True)
class BoundsDirective:
    """Fit the map to a rectangle (already padded)."""

    bounds: Bounds
    padding: float = BOUNDS_PADDING
    kind: str = "fit"


Directive = Union[CenterDirective, BoundsDirective]


def default_directive() -> CenterDirective:
    return CenterDirective(center=DEFAULT_CENTER, zoom=DEFAULT_ZOOM, kind="default")


def compute_viewport(events: Sequence[Event], selected_event: Optional[Event] = None) -> Directive:
    """Pick the camera for *events* given the current selection.

    - A selected event wins: zoom in on its marker, whatever else is shown.
    - Otherwise fit every event's coordinate, padded by BOUNDS_PADDING.
    - With nothing to show, fall back to the fixed default center.

    Pure: the result depends only on the two arguments.
    """
    if selected_event is not None:
        return CenterDirective(center=selected_event.location.point, zoom=SELECTED_ZOOM)

    if events:
        bounds = Bounds.around([e.location.point for e in events]).pad(BOUNDS_PADDING)
        logger.debug("Fitting %d event(s) into %s", len(events), bounds)
        return BoundsDirective(bounds=bounds)

    return default_directive()


def to_dict(directive: Directive) -> dict:
    """Plain-dict form for templates and JSON."""
    if isinstance(directive, BoundsDirective):
        return {"kind": directive.kind, "bounds": directive.bounds.as_leaflet(), "padding": directive.padding}
    return {"kind": directive.kind, "center": list(directive.center), "zoom": directive.zoom}
