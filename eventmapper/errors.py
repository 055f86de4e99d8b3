"""Error taxonomy and the result type returned by EventIndex mutations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from eventmapper.models import Event


class EventMapperError(Exception):
    """Base class for every error raised inside eventmapper."""


class ValidationError(EventMapperError):
    """A draft is missing required fields or carries out-of-range values."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class PersistenceError(EventMapperError):
    """The event store could not be reached or refused the request."""


class NotFoundOrForbidden(EventMapperError):
    """The target event does not exist or is not owned by the caller."""


@dataclass
class Outcome:
    """Result of a mutation or load.

    Exactly one of ``error`` or a successful state is set; ``event`` carries
    the server's copy after ``add``/``update``.
    """

    event: Optional["Event"] = None
    error: Optional[EventMapperError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: EventMapperError) -> Outcome:
        return cls(error=error)

    def __bool__(self) -> bool:
        return self.ok
