"""Delivery zone catalog and eligibility matcher."""

import logging
import uuid
from datetime import UTC, datetime

from restaurant_ordering_service.errors import NotFoundError
from restaurant_ordering_service.models.pagination import PaginatedResponse, paginate
from restaurant_ordering_service.models.zone_models import (
    CreateZoneRequest,
    DeliveryZone,
    EligibilityCandidate,
    EligibilityResult,
    MatchedZone,
    UpdateZoneRequest,
    ZoneKind,
)
from restaurant_ordering_service.observability.decorators import traced
from restaurant_ordering_service.observability.metrics import record_eligibility_check
from restaurant_ordering_service.repositories.zone_repository import DeliveryZoneRepository
from restaurant_ordering_service.services.normalization import (
    haversine_distance_meters,
    normalize_city,
    normalize_postcode,
)
from restaurant_ordering_service.services.zone_validator import ZoneDraft, ZoneValidator

logger = logging.getLogger(__name__)

NO_ZONES_REASON = "No active delivery zones configured yet."
OUTSIDE_ZONES_REASON = "Address is outside configured delivery zones."
IN_RANGE_REASON = "Address is in delivery range."


def matches_circle(zone: DeliveryZone, latitude: float | None, longitude: float | None) -> bool:
    """Whether a point lies inside a zone's circle, boundary included."""
    if (
        latitude is None
        or longitude is None
        or zone.center_latitude is None
        or zone.center_longitude is None
        or zone.radius_meters is None
    ):
        return False

    distance = haversine_distance_meters(
        latitude, longitude, zone.center_latitude, zone.center_longitude
    )
    return distance <= zone.radius_meters


def matches_postcode_or_city(
    zone: DeliveryZone, normalized_postcode: str | None, normalized_city: str | None
) -> bool:
    """Whether a normalized postcode starts with a zone prefix, or the city equals the zone city."""
    if normalized_postcode:
        for prefix in zone.postcode_prefixes:
            normalized_prefix = normalize_postcode(prefix)
            if normalized_prefix and normalized_postcode.startswith(normalized_prefix):
                return True

    zone_city = normalize_city(zone.city)
    return bool(normalized_city and zone_city and zone_city == normalized_city)


def zone_matches(zone: DeliveryZone, candidate: EligibilityCandidate) -> bool:
    """Whether a single zone accepts the candidate."""
    if zone.kind == ZoneKind.CIRCLE and matches_circle(
        zone, candidate.latitude, candidate.longitude
    ):
        return True

    return matches_postcode_or_city(
        zone, normalize_postcode(candidate.postcode), normalize_city(candidate.city)
    )


def find_matching_zone(
    zones: list[DeliveryZone], candidate: EligibilityCandidate
) -> DeliveryZone | None:
    """Return the first zone, in the given order, that accepts the candidate."""
    return next((zone for zone in zones if zone_matches(zone, candidate)), None)


class ZoneService:
    """Service for zone administration and delivery eligibility.

    Eligibility is evaluated zone by zone in ascending creation order and the
    first qualifying zone wins, regardless of how tight the match is.
    """

    def __init__(
        self,
        zone_repository: DeliveryZoneRepository,
        validator: ZoneValidator | None = None,
    ) -> None:
        """Initialize the ZoneService.

        Args:
            zone_repository: Repository for zone storage
            validator: Structural validator for zone payloads
        """
        self.zone_repository = zone_repository
        self.validator = validator or ZoneValidator()

    @traced("check_delivery_eligibility")
    async def check_eligibility(self, candidate: EligibilityCandidate) -> EligibilityResult:
        """Decide whether a candidate address or point can be delivered to.

        With no active zones, delivery is open to everyone.

        Args:
            candidate: City, postcode and/or coordinates to check

        Returns:
            EligibilityResult with the first matching zone, if any
        """
        active_zones = self.zone_repository.list_zones(active_only=True)

        # No zones configured means delivery is open
        if not active_zones:
            record_eligibility_check(deliverable=True, matched=False)
            return EligibilityResult(deliverable=True, reason=NO_ZONES_REASON)

        # First matching zone wins
        zone = find_matching_zone(active_zones, candidate)
        if zone is None:
            logger.info("Delivery candidate rejected: outside configured zones")
            record_eligibility_check(deliverable=False, matched=False)
            return EligibilityResult(deliverable=False, reason=OUTSIDE_ZONES_REASON)

        record_eligibility_check(deliverable=True, matched=True)
        return EligibilityResult(
            deliverable=True,
            reason=IN_RANGE_REASON,
            matched_zone=MatchedZone(id=zone.id, name=zone.name, kind=zone.kind),
        )

    async def list_active_zones(self) -> list[DeliveryZone]:
        """List active zones, oldest first."""
        return self.zone_repository.list_zones(active_only=True)

    async def list_zones(
        self,
        page: int | None = None,
        page_size: int | None = None,
        search: str | None = None,
    ) -> PaginatedResponse[DeliveryZone]:
        """List all zones for administration, newest first.

        Args:
            page: 1-based page number
            page_size: Zones per page
            search: Case-insensitive filter on name or city

        Returns:
            One page of zones
        """
        zones = list(reversed(self.zone_repository.list_zones()))

        term = (search or "").strip().lower()
        if term:
            zones = [
                zone
                for zone in zones
                if term in zone.name.lower() or term in (zone.city or "").lower()
            ]

        return paginate(zones, page, page_size)

    async def create_zone(self, request: CreateZoneRequest) -> DeliveryZone:
        """Validate and store a new zone.

        Raises:
            ValidationError: If the zone is structurally invalid
        """
        draft = self.validator.draft_for_create(request)
        now = datetime.now(UTC)
        zone = self._zone_from_draft(f"zone_{uuid.uuid4().hex}", draft, created_at=now)

        logger.info(f"Creating delivery zone {zone.id} ({zone.kind.value})")
        return self.zone_repository.save_zone(zone)

    async def update_zone(self, zone_id: str, request: UpdateZoneRequest) -> DeliveryZone:
        """Apply a partial update to a zone.

        Raises:
            NotFoundError: If the zone does not exist
            ValidationError: If the merged zone is structurally invalid
        """
        existing = self.zone_repository.get_zone(zone_id)
        if existing is None:
            raise NotFoundError("Delivery zone not found.")

        draft = self.validator.draft_for_update(existing, request)
        zone = self._zone_from_draft(
            existing.id, draft, created_at=existing.created_at, updated_at=datetime.now(UTC)
        )

        logger.info(f"Updating delivery zone {zone_id}")
        return self.zone_repository.save_zone(zone)

    async def delete_zone(self, zone_id: str) -> None:
        """Delete a zone.

        Raises:
            NotFoundError: If the zone does not exist
        """
        self.zone_repository.delete_zone(zone_id)
        logger.info(f"Deleted delivery zone {zone_id}")

    @staticmethod
    def _zone_from_draft(
        zone_id: str,
        draft: ZoneDraft,
        created_at: datetime,
        updated_at: datetime | None = None,
    ) -> DeliveryZone:
        return DeliveryZone(
            id=zone_id,
            name=draft.name,
            kind=draft.kind,
            city=draft.city,
            postcode_prefixes=draft.postcode_prefixes,
            center_latitude=draft.center_latitude,
            center_longitude=draft.center_longitude,
            radius_meters=draft.radius_meters,
            is_active=draft.is_active,
            created_at=created_at,
            updated_at=updated_at,
        )
