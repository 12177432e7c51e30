"""Structural validation for delivery zones on create and update."""

from dataclasses import dataclass, field

from restaurant_ordering_service.errors import ValidationError
from restaurant_ordering_service.models.zone_models import (
    CreateZoneRequest,
    DeliveryZone,
    UpdateZoneRequest,
    ZoneKind,
)
from restaurant_ordering_service.services.normalization import (
    normalize_postcode_prefixes,
    sanitize_string,
)


@dataclass
class ZoneDraft:
    """Sanitized zone fields ready to be validated and stored.

    Attributes:
        name: Trimmed zone name
        kind: Matching strategy
        city: Trimmed city, None when absent
        postcode_prefixes: Normalized, de-duplicated prefixes
        center_latitude: Circle center latitude
        center_longitude: Circle center longitude
        radius_meters: Circle radius
        is_active: Whether the matcher considers the zone
    """

    name: str
    kind: ZoneKind
    city: str | None = None
    postcode_prefixes: list[str] = field(default_factory=list)
    center_latitude: float | None = None
    center_longitude: float | None = None
    radius_meters: int | None = None
    is_active: bool = True


class ZoneValidator:
    """Builds and validates zone drafts from admin payloads."""

    def draft_for_create(self, request: CreateZoneRequest) -> ZoneDraft:
        """Sanitize and validate a create payload.

        Raises:
            ValidationError: If the zone is structurally invalid
        """
        draft = ZoneDraft(
            name=self._require_name(request.name),
            kind=request.kind,
            city=sanitize_string(request.city),
            postcode_prefixes=normalize_postcode_prefixes(request.postcode_prefixes) or [],
            center_latitude=request.center_latitude,
            center_longitude=request.center_longitude,
            radius_meters=request.radius_meters,
            is_active=request.is_active if request.is_active is not None else True,
        )
        self.validate(draft)
        return draft

    def draft_for_update(self, existing: DeliveryZone, request: UpdateZoneRequest) -> ZoneDraft:
        """Merge a partial update onto the stored zone and validate the result.

        Fields absent from the payload keep their stored values. An explicit
        blank city clears the city.

        Raises:
            ValidationError: If the merged zone is structurally invalid
        """
        provided = request.model_fields_set

        name = existing.name
        if "name" in provided:
            name = self._require_name(request.name)

        # An explicit null keeps the stored prefixes; an empty list clears them
        prefixes = existing.postcode_prefixes
        if request.postcode_prefixes is not None:
            prefixes = normalize_postcode_prefixes(request.postcode_prefixes) or []

        draft = ZoneDraft(
            name=name,
            kind=request.kind if request.kind is not None else existing.kind,
            city=sanitize_string(request.city) if "city" in provided else existing.city,
            postcode_prefixes=prefixes,
            center_latitude=(
                request.center_latitude
                if "center_latitude" in provided
                else existing.center_latitude
            ),
            center_longitude=(
                request.center_longitude
                if "center_longitude" in provided
                else existing.center_longitude
            ),
            radius_meters=(
                request.radius_meters if "radius_meters" in provided else existing.radius_meters
            ),
            is_active=request.is_active if request.is_active is not None else existing.is_active,
        )
        self.validate(draft)
        return draft

    def validate(self, draft: ZoneDraft) -> None:
        """Enforce the per-kind structural rules.

        Raises:
            ValidationError: If the draft breaks a rule
        """
        if draft.kind == ZoneKind.POSTCODE_PREFIX:
            if not draft.city and not draft.postcode_prefixes:
                raise ValidationError(
                    "Postcode/city zone needs at least one postcode prefix or a city."
                )
            return

        if (
            draft.center_latitude is None
            or draft.center_longitude is None
            or draft.radius_meters is None
        ):
            raise ValidationError(
                "Circle zone requires center latitude, center longitude and radius."
            )

        if draft.radius_meters <= 0:
            raise ValidationError("Circle zone radius must be positive.")

    def _require_name(self, name: str | None) -> str:
        trimmed = sanitize_string(name)
        if not trimmed:
            raise ValidationError("Zone name is required.")
        return trimmed
