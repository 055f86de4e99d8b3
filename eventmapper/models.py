"""Event data model."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Optional

from eventmapper.categories import CATEGORIES
from eventmapper.errors import ValidationError

# Coordinates a fresh draft starts with before the address is resolved.
DEFAULT_LAT = 40.7128
DEFAULT_LNG = -74.0060
DEFAULT_CATEGORY = "other"
DEFAULT_TIME = "09:00"

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# Flat row keys owned by the user (everything except id/user_id/created_at).
DRAFT_KEYS = (
    "title",
    "description",
    "date",
    "time",
    "location_name",
    "location_address",
    "location_lat",
    "location_lng",
    "category",
)


def parse_date(value: Any) -> date:
    """Accept a ``date`` or an ISO string ('2024-03-01', '2024-03-01T00:00:00')."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass(frozen=True)
class Location:
    """A named place with coordinates."""

    name: str
    address: str
    lat: float
    lng: float

    @property
    def point(self) -> tuple[float, float]:
        return (self.lat, self.lng)


@dataclass(frozen=True)
class Event:
    """A single persisted event, owned by one user."""

    id: str
    owner_id: str
    title: str
    date: date
    time: str  # 24-hr, zero padded: "09:30"
    location: Location
    category: str = DEFAULT_CATEGORY
    description: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize to the flat row shape used by the events table."""
        return {
            "id": self.id,
            "user_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat(),
            "time": self.time,
            "location_name": self.location.name,
            "location_address": self.location.address,
            "location_lat": self.location.lat,
            "location_lng": self.location.lng,
            "category": self.category,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Event:
        """Deserialize from a flat events-table row."""
        return cls(
            id=str(data["id"]),
            owner_id=str(data["user_id"]),
            title=data["title"],
            description=data.get("description") or None,
            date=parse_date(data["date"]),
            # Postgres `time` columns come back as "HH:MM:SS"
            time=str(data["time"])[:5],
            location=Location(
                name=data["location_name"],
                address=data["location_address"],
                lat=float(data["location_lat"]),
                lng=float(data["location_lng"]),
            ),
            category=data.get("category") or DEFAULT_CATEGORY,
            created_at=data.get("created_at"),
        )

    def apply(self, patch: dict) -> Event:
        """Return a copy with the flat-row *patch* applied.

        ``id`` and ``user_id`` are never overwritten.
        """
        row = self.to_dict()
        row.update({k: v for k, v in patch.items() if k in DRAFT_KEYS})
        return Event.from_dict(row)

    @property
    def sort_key(self) -> tuple:
        """Key for chronological sorting."""
        return (self.date, self.time, self.title.lower())

    def __repr__(self) -> str:
        return f"<Event {self.id} '{self.title}' on {self.date} {self.time} @ {self.location.name}>"


@dataclass
class EventDraft:
    """User-editable fields of an event, before the store assigns an id."""

    title: str = ""
    date: Optional[date] = None
    time: str = ""
    location: Location = field(
        default_factory=lambda: Location(name="", address="", lat=DEFAULT_LAT, lng=DEFAULT_LNG)
    )
    category: str = DEFAULT_CATEGORY
    description: Optional[str] = None

    @classmethod
    def for_day(cls, day: date) -> EventDraft:
        """Blank draft prefilled for a clicked calendar day."""
        return cls(date=day, time=DEFAULT_TIME)

    @classmethod
    def from_event(cls, event: Event) -> EventDraft:
        return cls(
            title=event.title,
            date=event.date,
            time=event.time,
            location=event.location,
            category=event.category,
            description=event.description,
        )

    @classmethod
    def from_dict(cls, data: dict) -> EventDraft:
        """Build a draft from flat row keys; missing keys keep their defaults."""
        draft = cls()
        if data.get("date"):
            draft.date = parse_date(data["date"])
        draft.title = data.get("title") or ""
        draft.time = data.get("time") or ""
        draft.category = data.get("category") or DEFAULT_CATEGORY
        draft.description = data.get("description") or None
        draft.location = Location(
            name=data.get("location_name") or "",
            address=data.get("location_address") or "",
            lat=float(data.get("location_lat", DEFAULT_LAT)),
            lng=float(data.get("location_lng", DEFAULT_LNG)),
        )
        return draft

    def with_coordinates(self, lat: float, lng: float, name: Optional[str] = None) -> EventDraft:
        """Return a copy with resolved coordinates; *name* only fills a blank name."""
        location = replace(self.location, lat=lat, lng=lng)
        if name and not location.name:
            location = replace(location, name=name)
        return replace(self, location=location)

    def validate(self) -> None:
        """Raise ValidationError listing every problem with this draft."""
        problems: list[str] = []
        if not self.title.strip():
            problems.append("title is required")
        if self.date is None:
            problems.append("date is required")
        if not self.time:
            problems.append("time is required")
        elif not _TIME_RE.match(self.time):
            problems.append(f"time must be HH:MM, got {self.time!r}")
        if not self.location.name.strip():
            problems.append("location.name is required")
        if not self.location.address.strip():
            problems.append("location.address is required")
        if not -90.0 <= self.location.lat <= 90.0:
            problems.append(f"location.lat out of range: {self.location.lat}")
        if not -180.0 <= self.location.lng <= 180.0:
            problems.append(f"location.lng out of range: {self.location.lng}")
        if self.category not in CATEGORIES:
            problems.append(f"unknown category {self.category!r}")
        if problems:
            raise ValidationError(problems)

    def to_dict(self) -> dict:
        """Flat row without the store-assigned keys."""
        return {
            "title": self.title.strip(),
            "description": self.description or None,
            "date": self.date.isoformat() if self.date else None,
            "time": self.time,
            "location_name": self.location.name.strip(),
            "location_address": self.location.address.strip(),
            "location_lat": self.location.lat,
            "location_lng": self.location.lng,
            "category": self.category,
        }


@dataclass(frozen=True)
class CalendarDay:
    """One cell of the month grid. Rebuilt on every render."""

    date: date
    is_current_month: bool
    events: tuple[Event, ...] = ()


@dataclass(frozen=True)
class Selection:
    """Read-only snapshot of what both projections highlight."""

    selected_date: date
    selected_event: Optional[Event] = None
