"""
Street Geocoder — Geocoding Client
===================================
Resolves one free-text address to a WGS84 coordinate pair.

Architecture:
    ``GeocodingClient`` is an abstract strategy.  The batch processor only
    depends on :meth:`GeocodingClient.lookup`, so tests and alternative
    providers can swap in without touching the loop.

Classes:
    Coordinates         Nullable latitude / longitude pair.
    GeocoderConfig      Endpoint, country restriction and timing settings.
    GeocodingClient     Abstract base for geocoding providers.
    NominatimClient     OSM Nominatim search API client.

Usage::

    from street_geocoder.client import NominatimClient

    client = NominatimClient()
    coords = client.lookup("Pracherbusch 10a", "21493 Schwarzenbek")
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

import requests

from shared.python.exceptions import GeocodingError, GeocodingRateLimitError
from street_geocoder.normalize import build_query, normalize_address, standardize_address

logger = logging.getLogger("street_geocoder.client")


@dataclass(frozen=True)
class Coordinates:
    """Result of one lookup.  Both fields are ``None`` when nothing matched."""

    latitude: float | None
    longitude: float | None

    @property
    def found(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass
class GeocoderConfig:
    """Settings shared by the client and the batch processor.

    Attributes:
        base_url: Nominatim search endpoint.
        user_agent: Sent as ``User-Agent``; Nominatim rejects anonymous
                    clients.
        country_code: ISO code passed as ``countrycodes``.
        country_name: Appended to every query string.
        result_limit: Candidates requested per query.  Only the first is used.
        timeout: HTTP timeout in seconds.
        delay_seconds: Pause between consecutive lookups.  Nominatim's usage
                       policy allows at most one request per second.
        standardize: Expand street abbreviations before querying.
    """

    base_url: str = "https://nominatim.openstreetmap.org/search"
    user_agent: str = "AddressGeocoderTool/1.0"
    country_code: str = "de"
    country_name: str = "Deutschland"
    result_limit: int = 1
    timeout: float = 10.0
    delay_seconds: float = 1.0
    standardize: bool = False


class GeocodingClient(ABC):
    """Abstract strategy for a geocoding provider.

    Subclass this and implement :meth:`lookup` to add a new provider.
    """

    @abstractmethod
    def lookup(self, address_text: str, location_hint: str | None = None) -> Coordinates:
        """Geocode a single address.

        Args:
            address_text: The address, e.g. ``"Pracherbusch 10a"``.
            location_hint: Optional ``"<postal code> <city>"`` to disambiguate.

        Returns:
            :class:`Coordinates`; both fields ``None`` if nothing matched.

        Raises:
            GeocodingError: On transport, HTTP or parse failure.
        """


class NominatimClient(GeocodingClient):
    """Geocoding client for OpenStreetMap's Nominatim search API.

    Performs exactly one GET per :meth:`lookup`.  It does not sleep,
    retry or cache; pacing is the batch processor's job.

    Args:
        config: Endpoint and query settings.  Defaults to
                :class:`GeocoderConfig` with German country restriction.
        session: Optional pre-built :class:`requests.Session`.

    Reference:
        https://nominatim.org/release-docs/develop/api/Search/
    """

    def __init__(
        self,
        config: GeocoderConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or GeocoderConfig()
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = self.config.user_agent

    def prepare_query(self, address_text: str, location_hint: str | None = None) -> str:
        """Normalise *address_text* and append the hint and country name."""
        address = normalize_address(address_text)
        if self.config.standardize:
            address = standardize_address(address)
        return build_query(address, location_hint, self.config.country_name)

    def lookup(self, address_text: str, location_hint: str | None = None) -> Coordinates:
        """Geocode *address_text* via Nominatim.

        Raises:
            GeocodingRateLimitError: On HTTP 429.
            GeocodingError: On any other HTTP error, network error or
                unparseable payload.
        """
        params = {
            "q": self.prepare_query(address_text, location_hint),
            "format": "json",
            "limit": str(self.config.result_limit),
            "countrycodes": self.config.country_code,
        }
        try:
            response = self._session.get(
                self.config.base_url, params=params, timeout=self.config.timeout
            )
        except requests.RequestException as exc:
            raise GeocodingError(f"Request failed: {exc}") from exc

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise GeocodingRateLimitError(
                "Nominatim",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if not response.ok:
            raise GeocodingError(f"HTTP Error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise GeocodingError(f"Invalid JSON from Nominatim: {exc}") from exc

        if not isinstance(data, list):
            raise GeocodingError("Unexpected Nominatim payload: expected a list of matches.")
        if not data:
            logger.debug("No results for address: %s", address_text)
            return Coordinates(latitude=None, longitude=None)

        hit = data[0]
        try:
            lat, lon = float(hit["lat"]), float(hit["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodingError(f"Malformed Nominatim result: {exc}") from exc
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise GeocodingError(
                f"Malformed Nominatim result: non-finite coordinates ({lat}, {lon})"
            )
        return Coordinates(latitude=lat, longitude=lon)

    def close(self) -> None:
        self._session.close()
