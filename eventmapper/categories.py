"""Category colours and glyphs shared by the calendar grid and the map."""

from __future__ import annotations

# Closed set, in legend order.
CATEGORIES: tuple[str, ...] = ("work", "personal", "social", "health", "hobby", "other")

_COLORS: dict[str, str] = {
    "work": "#3B82F6",
    "personal": "#10B981",
    "social": "#8B5CF6",
    "health": "#EF4444",
    "hobby": "#F59E0B",
    "other": "#6B7280",
}

# Marker letters; health and hobby share an initial, so hobby takes Y.
_GLYPHS: dict[str, str] = {
    "work": "W",
    "personal": "P",
    "social": "S",
    "health": "H",
    "hobby": "Y",
    "other": "O",
}


def color_of(category: str) -> str:
    """Return the hex colour token for *category*.

    Raises KeyError for anything outside CATEGORIES; there is no fallback.
    """
    return _COLORS[category]


def glyph_of(category: str) -> str:
    """Return the single-character marker label, e.g. 'work' -> 'W'."""
    return _GLYPHS[category]


def label_of(category: str) -> str:
    """Human-readable category name ('hobby' -> 'Hobby')."""
    if category not in _COLORS:
        raise KeyError(category)
    return category.capitalize()


def legend() -> list[tuple[str, str, str]]:
    """Return ``(category, colour, glyph)`` for every category, in order."""
    return [(c, color_of(c), glyph_of(c)) for c in CATEGORIES]
