"""Address lookup used to prefill event coordinates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_USER_AGENT = "eventmapper/0.1"
HTTP_TIMEOUT = 20  # seconds


@dataclass(frozen=True)
class ResolvedAddress:
    """A geocoder hit."""

    lat: float
    lng: float
    display_name: str

    @property
    def short_name(self) -> str:
        """First comma-separated part of the display name, e.g. 'Yokohama Station'."""
        return self.display_name.split(",")[0].strip()


class NominatimResolver:
    """Resolves free-text addresses through an OSM Nominatim endpoint.

    Lookups never raise for network or server trouble: the failure is logged
    and ``resolve`` returns None, same as for an address with no match.
    """

    def __init__(
        self,
        url: str = NOMINATIM_URL,
        user_agent: str = DEFAULT_USER_AGENT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self._client = client or httpx.Client(timeout=HTTP_TIMEOUT, follow_redirects=True)
        # Nominatim's usage policy rejects requests without an identifying agent.
        self._client.headers["User-Agent"] = user_agent

    def resolve(self, address: str) -> Optional[ResolvedAddress]:
        """Return the best match for *address*, or None."""
        address = " ".join(address.split())
        if not address:
            return None

        try:
            logger.debug("Geocoding %r", address)
            resp = self._client.get(self.url, params={"format": "json", "q": address, "limit": 1})
        except httpx.HTTPError as exc:
            logger.warning("Geocoding %r failed: %s", address, exc)
            return None

        if resp.status_code >= 400:
            logger.warning("Geocoding %r failed: HTTP %d", address, resp.status_code)
            return None

        try:
            hits = resp.json()
            if not hits:
                logger.info("No geocoding match for %r", address)
                return None
            hit = hits[0]
            return ResolvedAddress(
                lat=float(hit["lat"]),
                lng=float(hit["lon"]),
                display_name=hit.get("display_name", address),
            )
        except (ValueError, KeyError, TypeError, IndexError) as exc:
            logger.warning("Unexpected geocoder response for %r: %s", address, exc)
            return None

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __repr__(self) -> str:
        return f"<NominatimResolver url={self.url!r}>"
