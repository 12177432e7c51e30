"""Geocoding results used to pre-fill address fields.

These are hints for the UI only and are never used to decide eligibility.
"""

from restaurant_ordering_service.models.base import ApiModel


class ReverseGeocodeResult(ApiModel):
    """Best address guess for a coordinate."""

    latitude: float
    longitude: float
    display_name: str | None = None
    line1: str | None = None
    city: str | None = None
    postcode: str | None = None
    state: str | None = None


class LocationCandidate(ApiModel):
    """One ranked result of a free-text location search."""

    display_name: str
    latitude: float
    longitude: float
    city: str | None = None
    postcode: str | None = None
