"""Normalization and distance helpers shared by zone matching and zone validation."""

import math
import re

EARTH_RADIUS_METERS = 6_371_000

_WHITESPACE = re.compile(r"\s+")


def normalize_postcode(value: str | None) -> str | None:
    """Uppercase a postcode and strip all whitespace.

    Returns:
        Normalized postcode, or None when nothing is left
    """
    if not value:
        return None
    normalized = _WHITESPACE.sub("", value.upper())
    return normalized or None


def normalize_city(value: str | None) -> str | None:
    """Trim and lowercase a city name, None when blank."""
    if not value:
        return None
    normalized = value.strip().lower()
    return normalized or None


def normalize_postcode_prefixes(prefixes: list[str] | None) -> list[str] | None:
    """Normalize prefixes, drop blanks and de-duplicate keeping first occurrence.

    Returns:
        Normalized prefixes, or None when no list was given
    """
    if prefixes is None:
        return None
    normalized = (normalize_postcode(prefix) for prefix in prefixes)
    return list(dict.fromkeys(prefix for prefix in normalized if prefix))


def sanitize_string(value: str | None) -> str | None:
    """Trim free text, None when blank."""
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def haversine_distance_meters(
    latitude_a: float, longitude_a: float, latitude_b: float, longitude_b: float
) -> float:
    """Great-circle distance between two points in meters."""
    lat_a = math.radians(latitude_a)
    lat_b = math.radians(latitude_b)
    delta_lat = math.radians(latitude_b - latitude_a)
    delta_lon = math.radians(longitude_b - longitude_a)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat_a) * math.cos(lat_b) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c
