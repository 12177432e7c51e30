"""Delivery zone models.

Zones are stored in DynamoDB with zone_id as partition key. Coordinates are
kept as Decimal in storage and exposed as float.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import Field

from restaurant_ordering_service.models.base import ApiModel, to_decimal, to_float


class ZoneKind(str, Enum):
    """How a zone decides eligibility."""

    POSTCODE_PREFIX = "POSTCODE_PREFIX"
    CIRCLE = "CIRCLE"


class DeliveryZone(ApiModel):
    """Admin-defined delivery region."""

    id: str = Field(..., description="Unique zone identifier")
    name: str = Field(..., description="Display name")
    kind: ZoneKind = Field(..., description="Zone matching strategy")
    city: str | None = Field(None, description="City matched case-insensitively")
    postcode_prefixes: list[str] = Field(
        default_factory=list, description="Normalized postcode prefixes"
    )
    center_latitude: float | None = Field(None, ge=-90, le=90)
    center_longitude: float | None = Field(None, ge=-180, le=180)
    radius_meters: int | None = Field(None, ge=1)
    is_active: bool = Field(default=True)
    created_at: datetime
    updated_at: datetime | None = None

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "zone_id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "postcode_prefixes": list(self.postcode_prefixes),
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
        }

        if self.city is not None:
            item["city"] = self.city

        if self.center_latitude is not None:
            item["center_latitude"] = to_decimal(self.center_latitude)

        if self.center_longitude is not None:
            item["center_longitude"] = to_decimal(self.center_longitude)

        if self.radius_meters is not None:
            item["radius_meters"] = self.radius_meters

        if self.updated_at is not None:
            item["updated_at"] = self.updated_at.isoformat()

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "DeliveryZone":
        """Create DeliveryZone from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            DeliveryZone: Parsed model instance
        """
        radius = item.get("radius_meters")
        updated_at = item.get("updated_at")
        return cls(
            id=item["zone_id"],
            name=item["name"],
            kind=ZoneKind(item["kind"]),
            city=item.get("city"),
            postcode_prefixes=list(item.get("postcode_prefixes", [])),
            center_latitude=to_float(item.get("center_latitude")),
            center_longitude=to_float(item.get("center_longitude")),
            radius_meters=int(radius) if radius is not None else None,
            is_active=item.get("is_active", True),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )


class CreateZoneRequest(ApiModel):
    """Payload for creating a zone."""

    name: str
    kind: ZoneKind
    city: str | None = None
    postcode_prefixes: list[str] | None = None
    center_latitude: float | None = Field(None, ge=-90, le=90)
    center_longitude: float | None = Field(None, ge=-180, le=180)
    radius_meters: int | None = Field(None, ge=1)
    is_active: bool | None = None


class UpdateZoneRequest(ApiModel):
    """Partial zone update. Omitted fields keep their stored values."""

    name: str | None = None
    kind: ZoneKind | None = None
    city: str | None = None
    postcode_prefixes: list[str] | None = None
    center_latitude: float | None = Field(None, ge=-90, le=90)
    center_longitude: float | None = Field(None, ge=-180, le=180)
    radius_meters: int | None = Field(None, ge=1)
    is_active: bool | None = None


class EligibilityCandidate(ApiModel):
    """Address fragment or coordinate checked against the zone catalog."""

    city: str | None = None
    postcode: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


class MatchedZone(ApiModel):
    """Summary of the zone that accepted a candidate."""

    id: str
    name: str
    kind: ZoneKind


class EligibilityResult(ApiModel):
    """Outcome of a delivery eligibility check."""

    deliverable: bool
    reason: str
    matched_zone: MatchedZone | None = None
