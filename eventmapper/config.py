"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from eventmapper.geocode import DEFAULT_USER_AGENT, NOMINATIM_URL
from eventmapper.store import DEFAULT_DATA_DIR, EventStore, JsonEventStore, RestEventStore

BACKENDS = ("json", "rest")


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass
class Settings:
    """Runtime configuration for the CLI and embedding applications."""

    backend: str = "json"
    data_dir: Path = DEFAULT_DATA_DIR
    owner_id: Optional[str] = None
    rest_url: Optional[str] = None
    rest_key: Optional[str] = None
    geocoder_url: str = NOMINATIM_URL
    user_agent: str = DEFAULT_USER_AGENT

    def override(self, **changes) -> Settings:
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def validate(self) -> None:
        if self.backend not in BACKENDS:
            raise ConfigError(f"Unknown backend {self.backend!r}; expected one of {', '.join(BACKENDS)}.")
        if self.backend == "rest" and not (self.rest_url and self.rest_key):
            raise ConfigError("The rest backend needs EVENTMAPPER_REST_URL and EVENTMAPPER_REST_KEY.")

    def make_store(self) -> EventStore:
        """Instantiate the configured event store."""
        self.validate()
        if self.backend == "rest":
            return RestEventStore(self.rest_url, self.rest_key)
        return JsonEventStore(data_dir=self.data_dir)


def load_settings(environ: Optional[dict] = None) -> Settings:
    """Load settings from ``EVENTMAPPER_*`` environment variables.

    Raises:
        ConfigError: if the backend is unknown or the rest backend lacks its URL/key.
    """
    env = os.environ if environ is None else environ
    settings = Settings(
        backend=env.get("EVENTMAPPER_BACKEND", "json").strip().lower(),
        data_dir=Path(env.get("EVENTMAPPER_DATA_DIR") or DEFAULT_DATA_DIR),
        owner_id=env.get("EVENTMAPPER_OWNER") or None,
        rest_url=env.get("EVENTMAPPER_REST_URL") or None,
        rest_key=env.get("EVENTMAPPER_REST_KEY") or None,
        geocoder_url=env.get("EVENTMAPPER_GEOCODER_URL") or NOMINATIM_URL,
        user_agent=env.get("EVENTMAPPER_USER_AGENT") or DEFAULT_USER_AGENT,
    )
    settings.validate()
    return settings
