"""Base adapter for geocoding providers.

Geocoding results only pre-fill address fields in the UI. They are never an
authority for delivery eligibility. Providers raise ServiceUnavailableError
when the upstream service fails; callers surface it as-is and never retry.
"""

import asyncio
import time
from abc import ABC, abstractmethod

from restaurant_ordering_service.models.location_models import (
    LocationCandidate,
    ReverseGeocodeResult,
)


class RequestThrottle:
    """Spaces consecutive calls at least ``min_interval_seconds`` apart.

    State is a single last-call timestamp held in this process. It does not
    coordinate multiple processes or hosts; a multi-instance deployment needs a
    shared limiter instead.
    """

    def __init__(self, min_interval_seconds: float) -> None:
        """Initialize the throttle.

        Args:
            min_interval_seconds: Minimum spacing between calls
        """
        self.min_interval_seconds = min_interval_seconds
        self._last_call_at: float | None = None
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        """Sleep until the next call is allowed, then claim the slot."""
        async with self._lock:
            if self._last_call_at is not None:
                elapsed = time.monotonic() - self._last_call_at
                if elapsed < self.min_interval_seconds:
                    await asyncio.sleep(self.min_interval_seconds - elapsed)
            self._last_call_at = time.monotonic()


class GeocodingAdapter(ABC):
    """Abstract base class for reverse-geocoding and address-search providers."""

    def __init__(self, provider_name: str) -> None:
        """Initialize the adapter.

        Args:
            provider_name: Name of the provider (e.g., 'nominatim')
        """
        self.provider_name = provider_name

    @abstractmethod
    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        """Look up the address closest to a coordinate.

        Raises:
            ServiceUnavailableError: If the provider fails
        """

    @abstractmethod
    async def search(self, query: str) -> list[LocationCandidate]:
        """Return ranked address candidates for a free-text query.

        A blank query returns an empty list without calling the provider.

        Raises:
            ServiceUnavailableError: If the provider fails
        """
