"""Nominatim (OpenStreetMap) geocoding adapter.

Nominatim's usage policy allows roughly one request per second per client,
so every call passes through a RequestThrottle first.
"""

import logging
import time
from typing import Any

import httpx

from restaurant_ordering_service.adapters.base_adapter import GeocodingAdapter, RequestThrottle
from restaurant_ordering_service.errors import ServiceUnavailableError
from restaurant_ordering_service.models.location_models import (
    LocationCandidate,
    ReverseGeocodeResult,
)
from restaurant_ordering_service.observability.metrics import record_geocoding_call

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://nominatim.openstreetmap.org"
USER_AGENT = "RestaurantOrdering/1.0 (location-service)"
SEARCH_RESULT_LIMIT = 6


def pick_city(address: dict[str, Any]) -> str | None:
    """City, falling back through town, village and county."""
    for key in ("city", "town", "village", "county"):
        if address.get(key):
            return address[key]
    return None


def pick_line1(address: dict[str, Any]) -> str | None:
    """Street line from house number and road, else suburb or neighbourhood."""
    street = " ".join(
        part for part in (address.get("house_number"), address.get("road")) if part
    ).strip()
    return street or address.get("suburb") or address.get("neighbourhood") or None


class NominatimAdapter(GeocodingAdapter):
    """Adapter for the Nominatim reverse and search APIs."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        contact_email: str | None = None,
        min_interval_seconds: float = 1.1,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        """Initialize Nominatim adapter.

        Args:
            base_url: Nominatim server base URL
            contact_email: Contact address sent with each request, per usage policy
            min_interval_seconds: Minimum spacing between requests
            transport: Optional httpx transport (used in tests)
            timeout_seconds: Per-request timeout
        """
        super().__init__("nominatim")
        self.base_url = base_url.rstrip("/")
        self.contact_email = contact_email
        self.throttle = RequestThrottle(min_interval_seconds)
        self.transport = transport
        self.timeout_seconds = timeout_seconds

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        """Look up the address at a coordinate.

        Args:
            latitude: Latitude in degrees
            longitude: Longitude in degrees

        Returns:
            ReverseGeocodeResult with whatever fields the provider knows

        Raises:
            ServiceUnavailableError: If the provider fails
        """
        payload = await self._get(
            "/reverse",
            {"lat": str(latitude), "lon": str(longitude)},
            operation="reverse",
            unavailable_message="Location service is temporarily unavailable.",
        )

        if not isinstance(payload, dict):
            logger.error(f"Unexpected Nominatim reverse payload: {type(payload).__name__}")
            raise ServiceUnavailableError("Location service is temporarily unavailable.")

        # An {"error": ...} reply for an unaddressable point yields an empty result
        address = payload.get("address")
        if not isinstance(address, dict):
            address = {}
        return ReverseGeocodeResult(
            latitude=latitude,
            longitude=longitude,
            display_name=payload.get("display_name"),
            line1=pick_line1(address),
            city=pick_city(address),
            postcode=address.get("postcode"),
            state=address.get("state"),
        )

    async def search(self, query: str) -> list[LocationCandidate]:
        """Search for addresses matching free text.

        Args:
            query: Free-text location query

        Returns:
            Up to six ranked candidates, empty for a blank query

        Raises:
            ServiceUnavailableError: If the provider fails
        """
        term = query.strip()
        if not term:
            return []

        payload = await self._get(
            "/search",
            {"q": term, "limit": str(SEARCH_RESULT_LIMIT)},
            operation="search",
            unavailable_message="Location search is temporarily unavailable.",
        )

        if not isinstance(payload, list):
            logger.error(f"Unexpected Nominatim search payload: {payload!r}")
            raise ServiceUnavailableError("Location search is temporarily unavailable.")

        try:
            return [
                LocationCandidate(
                    display_name=result["display_name"],
                    latitude=float(result["lat"]),
                    longitude=float(result["lon"]),
                    city=pick_city(result.get("address") or {}),
                    postcode=(result.get("address") or {}).get("postcode"),
                )
                for result in payload
            ]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed Nominatim search result: {e}")
            raise ServiceUnavailableError("Location search is temporarily unavailable.") from e

    async def _get(
        self,
        path: str,
        params: dict[str, str],
        operation: str,
        unavailable_message: str,
    ) -> Any:
        """Send a throttled GET and return the decoded JSON body.

        Raises:
            ServiceUnavailableError: On transport errors, non-2xx responses or bad JSON
        """
        query = {"format": "jsonv2", "addressdetails": "1", **params}
        if self.contact_email:
            query["email"] = self.contact_email

        await self.throttle.wait()
        started = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                transport=self.transport, timeout=self.timeout_seconds
            ) as client:
                response = await client.get(
                    f"{self.base_url}{path}",
                    params=query,
                    headers={"User-Agent": USER_AGENT, "Accept-Language": "en"},
                )
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as e:
            logger.error(f"Nominatim {operation} request failed: {e}")
            raise ServiceUnavailableError(unavailable_message) from e
        finally:
            record_geocoding_call(operation, time.perf_counter() - started)
