"""Event stores: the persistence collaborator behind EventIndex.

Every operation is scoped by owner id. Stores raise PersistenceError or
NotFoundOrForbidden; turning those into returned outcomes is EventIndex's job.
"""

from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import httpx

from eventmapper.errors import NotFoundOrForbidden, PersistenceError
from eventmapper.models import DRAFT_KEYS, Event, EventDraft

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("data")
EVENTS_FILE = "events.json"
HTTP_TIMEOUT = 20  # seconds


class EventStore(ABC):
    """Narrow capability interface over the events table."""

    @abstractmethod
    def list(self, owner_id: str) -> list[Event]:
        """Return every event owned by *owner_id*, ordered by date ascending."""

    @abstractmethod
    def create(self, owner_id: str, draft: EventDraft) -> Event:
        """Insert *draft* for *owner_id* and return the stored event."""

    @abstractmethod
    def update(self, event_id: str, owner_id: str, patch: dict) -> Event:
        """Apply *patch* (flat row keys) and return the stored event."""

    @abstractmethod
    def delete(self, event_id: str, owner_id: str) -> None:
        """Delete the event, or raise NotFoundOrForbidden."""

    def close(self) -> None:
        """Release any held resources."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"


class JsonEventStore(EventStore):
    """Keeps every owner's rows in a single JSON file.

    File layout:
        data/
            events.json  -- list of flat event rows, sorted chronologically
    """

    def __init__(self, data_dir: Optional[Path] = None) -> None:
        self.data_dir = data_dir or DEFAULT_DATA_DIR
        self._events_path = self.data_dir / EVENTS_FILE

    # ------------------------------------------------------------------
    # EventStore
    # ------------------------------------------------------------------

    def list(self, owner_id: str) -> list[Event]:
        events = [e for e in self._load() if e.owner_id == owner_id]
        return sorted(events, key=lambda e: e.date)

    def create(self, owner_id: str, draft: EventDraft) -> Event:
        row = draft.to_dict()
        row["id"] = uuid.uuid4().hex
        row["user_id"] = owner_id
        row["created_at"] = datetime.now().isoformat(timespec="seconds")
        event = Event.from_dict(row)

        events = self._load()
        events.append(event)
        self._save(events)
        logger.debug("Created %s for owner %s", event.id, owner_id)
        return event

    def update(self, event_id: str, owner_id: str, patch: dict) -> Event:
        events = self._load()
        for i, existing in enumerate(events):
            if existing.id == event_id and existing.owner_id == owner_id:
                events[i] = existing.apply(patch)
                self._save(events)
                return events[i]
        raise NotFoundOrForbidden(f"event {event_id} not found for owner {owner_id}")

    def delete(self, event_id: str, owner_id: str) -> None:
        events = self._load()
        kept = [e for e in events if not (e.id == event_id and e.owner_id == owner_id)]
        if len(kept) == len(events):
            raise NotFoundOrForbidden(f"event {event_id} not found for owner {owner_id}")
        self._save(kept)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load(self) -> list[Event]:
        if not self._events_path.exists():
            return []
        try:
            with open(self._events_path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, list):
                raise PersistenceError(f"cannot read {self._events_path}: expected a list of rows")
            return [Event.from_dict(item) for item in raw]
        except (OSError, json.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError) as exc:
            raise PersistenceError(f"cannot read {self._events_path}: {exc}") from exc

    def _save(self, events: list[Event]) -> None:
        events = sorted(events, key=lambda e: e.sort_key)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(self._events_path, "w", encoding="utf-8") as f:
                json.dump([e.to_dict() for e in events], f, indent=2, ensure_ascii=False)
        except OSError as exc:
            raise PersistenceError(f"cannot write {self._events_path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"<JsonEventStore path={str(self._events_path)!r}>"


class RestEventStore(EventStore):
    """PostgREST-style client for a hosted ``events`` table.

    Rows are filtered with ``?id=eq.<id>&user_id=eq.<owner>`` so the server
    only touches rows the owner holds. ``Prefer: return=representation``
    makes inserts, updates and deletes echo the affected rows; an empty echo
    means nothing matched.
    """

    table = "events"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        access_token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
            "Prefer": "return=representation",
        }
        self._client = client or httpx.Client(timeout=HTTP_TIMEOUT, follow_redirects=True)
        self._client.headers.update(headers)
        self._url = f"{base_url.rstrip('/')}/{self.table}"

    # ------------------------------------------------------------------
    # EventStore
    # ------------------------------------------------------------------

    def list(self, owner_id: str) -> list[Event]:
        rows = self._request(
            "GET",
            params={"select": "*", "user_id": f"eq.{owner_id}", "order": "date.asc"},
        )
        return self._to_events(rows)

    def create(self, owner_id: str, draft: EventDraft) -> Event:
        body = {**draft.to_dict(), "user_id": owner_id}
        rows = self._request("POST", json=[body])
        if not rows:
            raise PersistenceError("insert returned no row")
        return self._to_events(rows)[0]

    def update(self, event_id: str, owner_id: str, patch: dict) -> Event:
        body = {k: (v.isoformat() if isinstance(v, date) else v) for k, v in patch.items() if k in DRAFT_KEYS}
        rows = self._request("PATCH", params=self._scope(event_id, owner_id), json=body)
        if not rows:
            raise NotFoundOrForbidden(f"event {event_id} not found for owner {owner_id}")
        return self._to_events(rows)[0]

    def delete(self, event_id: str, owner_id: str) -> None:
        rows = self._request("DELETE", params=self._scope(event_id, owner_id))
        if not rows:
            raise NotFoundOrForbidden(f"event {event_id} not found for owner {owner_id}")

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    # ------------------------------------------------------------------
    # HTTP helper
    # ------------------------------------------------------------------

    def _to_events(self, rows: list[dict]) -> list[Event]:
        try:
            return [Event.from_dict(row) for row in rows]
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"malformed row from {self._url}: {exc}") from exc

    @staticmethod
    def _scope(event_id: str, owner_id: str) -> dict:
        return {"id": f"eq.{event_id}", "user_id": f"eq.{owner_id}"}

    def _request(self, method: str, **kwargs) -> list[dict]:
        logger.debug("%s %s %s", method, self._url, kwargs.get("params", ""))
        try:
            resp = self._client.request(method, self._url, **kwargs)
        except httpx.HTTPError as exc:
            raise PersistenceError(f"{method} {self._url} failed: {exc}") from exc

        if resp.status_code >= 400:
            raise PersistenceError(f"{method} {self._url}: HTTP {resp.status_code} {resp.text[:200]}")
        if not resp.content:
            return []
        try:
            data = resp.json()
        except ValueError as exc:
            raise PersistenceError(f"{method} {self._url}: invalid JSON body") from exc
        return data if isinstance(data, list) else [data]

    def __repr__(self) -> str:
        return f"<RestEventStore url={self._url!r}>"
