"""Current-owner tracking and session-change notifications."""

from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

SessionListener = Callable[[Optional[str]], None]


class AuthSession:
    """Holds the signed-in owner id and tells subscribers when it changes.

    Listeners receive the new owner id, or None after sign-out.
    """

    def __init__(self, owner_id: Optional[str] = None) -> None:
        self._owner_id = owner_id
        self._listeners: list[SessionListener] = []

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    @property
    def signed_in(self) -> bool:
        return self._owner_id is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, owner_id: str) -> None:
        if not owner_id:
            raise ValueError("owner_id must be non-empty")
        self._set(owner_id)

    def sign_out(self) -> None:
        self._set(None)

    def _set(self, owner_id: Optional[str]) -> None:
        if owner_id == self._owner_id:
            return
        self._owner_id = owner_id
        logger.info("Session changed: %s", owner_id or "signed out")
        for listener in list(self._listeners):
            listener(owner_id)
