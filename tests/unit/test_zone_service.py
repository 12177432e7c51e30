"""Unit tests for ZoneService and the zone matching functions."""

import math
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from restaurant_ordering_service.errors import NotFoundError, ValidationError
from restaurant_ordering_service.models.zone_models import (
    CreateZoneRequest,
    DeliveryZone,
    EligibilityCandidate,
    UpdateZoneRequest,
    ZoneKind,
)
from restaurant_ordering_service.repositories.zone_repository import DeliveryZoneRepository
from restaurant_ordering_service.services.normalization import EARTH_RADIUS_METERS
from restaurant_ordering_service.services.zone_service import (
    IN_RANGE_REASON,
    NO_ZONES_REASON,
    OUTSIDE_ZONES_REASON,
    ZoneService,
    find_matching_zone,
    matches_circle,
    zone_matches,
)


def make_zone(zone_id: str, created_at: datetime, **fields: object) -> DeliveryZone:
    """Build a zone with sensible defaults."""
    values: dict[str, object] = {
        "id": zone_id,
        "name": zone_id,
        "kind": ZoneKind.POSTCODE_PREFIX,
        "created_at": created_at,
    }
    values.update(fields)
    return DeliveryZone(**values)


@pytest.mark.unit
class TestZoneMatching:
    """Tests for the pure matching functions."""

    def test_circle_boundary_is_inclusive(
        self, created_at: datetime, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that a distance equal to the radius qualifies and one epsilon beyond does not."""
        zone = make_zone(
            "edge",
            created_at,
            kind=ZoneKind.CIRCLE,
            center_latitude=53.4808,
            center_longitude=-2.2426,
            radius_meters=1000,
        )

        monkeypatch.setattr(
            "restaurant_ordering_service.services.zone_service.haversine_distance_meters",
            lambda *args: 1000.0,
        )
        assert matches_circle(zone, 53.49, -2.2426) is True

        monkeypatch.setattr(
            "restaurant_ordering_service.services.zone_service.haversine_distance_meters",
            lambda *args: 1000.000001,
        )
        assert matches_circle(zone, 53.49, -2.2426) is False

    def test_points_either_side_of_the_edge(self, created_at: datetime) -> None:
        """Test points about 0.1 m inside and outside a 1 km circle along a meridian."""
        zone = make_zone(
            "edge",
            created_at,
            kind=ZoneKind.CIRCLE,
            center_latitude=53.4808,
            center_longitude=-2.2426,
            radius_meters=1000,
        )
        edge_latitude = 53.4808 + math.degrees(1000 / EARTH_RADIUS_METERS)

        assert matches_circle(zone, edge_latitude - 1e-6, -2.2426) is True
        assert matches_circle(zone, edge_latitude + 1e-6, -2.2426) is False

    def test_circle_needs_candidate_coordinates(self, circle_zone: DeliveryZone) -> None:
        """Test that a missing coordinate never matches a circle."""
        assert matches_circle(circle_zone, None, -0.12) is False
        assert matches_circle(circle_zone, 51.5, None) is False

    def test_circle_outside_radius(self, circle_zone: DeliveryZone) -> None:
        """Test that a point about 11 km away is outside a 5 km circle."""
        assert matches_circle(circle_zone, 51.6, -0.12) is False

    def test_postcode_prefix_match_is_normalized(self, prefix_zone: DeliveryZone) -> None:
        """Test that candidate postcodes are normalized before prefix matching."""
        assert zone_matches(prefix_zone, EligibilityCandidate(postcode=" sw1a 2aa")) is True
        assert zone_matches(prefix_zone, EligibilityCandidate(postcode="SE1 7PB")) is False

    def test_city_match_is_case_insensitive(self, created_at: datetime) -> None:
        """Test that cities compare after trimming and lowercasing."""
        zone = make_zone("leeds", created_at, city="Leeds")

        assert zone_matches(zone, EligibilityCandidate(city="  LEEDS ")) is True

    def test_circle_zone_also_matches_by_postcode(
        self, circle_zone: DeliveryZone
    ) -> None:
        """Test that prefixes apply to circle zones too."""
        zone = circle_zone.model_copy(update={"postcode_prefixes": ["WC2"]})

        assert zone_matches(zone, EligibilityCandidate(postcode="WC2N 5DU")) is True

    def test_prefix_zone_ignores_coordinates(
        self, prefix_zone: DeliveryZone
    ) -> None:
        """Test that coordinates alone never match a postcode/city zone."""
        candidate = EligibilityCandidate(latitude=51.5, longitude=-0.12)

        assert zone_matches(prefix_zone, candidate) is False

    def test_first_match_wins(self, created_at: datetime) -> None:
        """Test that the earliest matching zone is returned even if a later one is tighter."""
        broad = make_zone("broad", created_at, postcode_prefixes=["M"])
        narrow = make_zone(
            "narrow", created_at + timedelta(minutes=1), postcode_prefixes=["M1"]
        )

        match = find_matching_zone([broad, narrow], EligibilityCandidate(postcode="M1 1AE"))

        assert match is broad


@pytest.mark.unit
@pytest.mark.asyncio
class TestCheckEligibility:
    """Tests for ZoneService.check_eligibility."""

    @pytest.fixture
    def mock_repository(self) -> MagicMock:
        """Create a mock zone repository."""
        return MagicMock(spec=DeliveryZoneRepository)

    @pytest.fixture
    def service(self, mock_repository: MagicMock) -> ZoneService:
        """Create a ZoneService with a mocked repository."""
        return ZoneService(zone_repository=mock_repository)

    @pytest.fixture
    def manchester(self, created_at: datetime) -> DeliveryZone:
        """Manchester postcode/city zone."""
        return make_zone(
            "zone_manchester",
            created_at,
            name="Manchester",
            city="Manchester",
            postcode_prefixes=["M"],
        )

    async def test_postcode_inside_zone(
        self, service: ZoneService, mock_repository: MagicMock, manchester: DeliveryZone
    ) -> None:
        """Test a Manchester postcode is deliverable and names the zone."""
        mock_repository.list_zones.return_value = [manchester]

        result = await service.check_eligibility(EligibilityCandidate(postcode="M1 1AE"))

        assert result.deliverable is True
        assert result.reason == IN_RANGE_REASON
        assert result.matched_zone is not None
        assert result.matched_zone.name == "Manchester"
        mock_repository.list_zones.assert_called_once_with(active_only=True)

    async def test_city_outside_zones(
        self, service: ZoneService, mock_repository: MagicMock, manchester: DeliveryZone
    ) -> None:
        """Test London is rejected by a Manchester-only catalog."""
        mock_repository.list_zones.return_value = [manchester]

        result = await service.check_eligibility(EligibilityCandidate(city="London"))

        assert result.deliverable is False
        assert result.reason == OUTSIDE_ZONES_REASON
        assert result.matched_zone is None

    async def test_circle_center(
        self, service: ZoneService, mock_repository: MagicMock, created_at: datetime
    ) -> None:
        """Test a point at the circle center is deliverable."""
        mock_repository.list_zones.return_value = [
            make_zone(
                "zone_circle",
                created_at,
                kind=ZoneKind.CIRCLE,
                center_latitude=53.4808,
                center_longitude=-2.2426,
                radius_meters=3000,
            )
        ]

        result = await service.check_eligibility(
            EligibilityCandidate(latitude=53.4808, longitude=-2.2426)
        )

        assert result.deliverable is True
        assert result.matched_zone is not None
        assert result.matched_zone.kind == ZoneKind.CIRCLE

    async def test_no_active_zones_means_open_delivery(
        self, service: ZoneService, mock_repository: MagicMock
    ) -> None:
        """Test that an empty catalog accepts any candidate."""
        mock_repository.list_zones.return_value = []

        result = await service.check_eligibility(EligibilityCandidate())

        assert result.deliverable is True
        assert result.reason == NO_ZONES_REASON
        assert result.matched_zone is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestZoneAdministration:
    """Tests for zone CRUD and listing."""

    @pytest.fixture
    def mock_repository(self) -> MagicMock:
        """Create a mock zone repository that echoes saved zones."""
        repository = MagicMock(spec=DeliveryZoneRepository)
        repository.save_zone.side_effect = lambda zone: zone
        return repository

    @pytest.fixture
    def service(self, mock_repository: MagicMock) -> ZoneService:
        """Create a ZoneService with a mocked repository."""
        return ZoneService(zone_repository=mock_repository)

    async def test_create_zone(self, service: ZoneService, mock_repository: MagicMock) -> None:
        """Test that a valid zone is stored with a generated id."""
        zone = await service.create_zone(
            CreateZoneRequest(
                name="Manchester",
                kind=ZoneKind.POSTCODE_PREFIX,
                city="Manchester",
                postcode_prefixes=["m"],
            )
        )

        assert zone.id.startswith("zone_")
        assert zone.postcode_prefixes == ["M"]
        assert zone.updated_at is None
        mock_repository.save_zone.assert_called_once_with(zone)

    async def test_create_invalid_zone_is_not_stored(
        self, service: ZoneService, mock_repository: MagicMock
    ) -> None:
        """Test that validation runs before anything is written."""
        with pytest.raises(ValidationError):
            await service.create_zone(
                CreateZoneRequest(name="Circle", kind=ZoneKind.CIRCLE, radius_meters=100)
            )

        mock_repository.save_zone.assert_not_called()

    async def test_update_zone(
        self, service: ZoneService, mock_repository: MagicMock, prefix_zone: DeliveryZone
    ) -> None:
        """Test that an update keeps id and creation time."""
        mock_repository.get_zone.return_value = prefix_zone

        zone = await service.update_zone("zone_prefix", UpdateZoneRequest(name="Westminster"))

        assert zone.id == prefix_zone.id
        assert zone.name == "Westminster"
        assert zone.created_at == prefix_zone.created_at
        assert zone.updated_at is not None

    async def test_update_unknown_zone(
        self, service: ZoneService, mock_repository: MagicMock
    ) -> None:
        """Test that updating an unknown id raises NotFoundError."""
        mock_repository.get_zone.return_value = None

        with pytest.raises(NotFoundError):
            await service.update_zone("zone_missing", UpdateZoneRequest(name="X"))

        mock_repository.save_zone.assert_not_called()

    async def test_delete_unknown_zone(
        self, service: ZoneService, mock_repository: MagicMock
    ) -> None:
        """Test that repository NotFoundError propagates."""
        mock_repository.delete_zone.side_effect = NotFoundError("Delivery zone not found.")

        with pytest.raises(NotFoundError):
            await service.delete_zone("zone_missing")

    async def test_list_zones_newest_first_with_search(
        self, service: ZoneService, mock_repository: MagicMock, created_at: datetime
    ) -> None:
        """Test admin listing order, search and pagination."""
        mock_repository.list_zones.return_value = [
            make_zone("a", created_at, name="Central", city="London"),
            make_zone("b", created_at + timedelta(hours=1), name="North", city="Leeds"),
            make_zone("c", created_at + timedelta(hours=2), name="Docklands", city="London"),
        ]

        response = await service.list_zones(page=1, page_size=1, search="london")

        assert [zone.id for zone in response.items] == ["c"]
        assert response.total_items == 2
        assert response.total_pages == 2
        mock_repository.list_zones.assert_called_once_with()
