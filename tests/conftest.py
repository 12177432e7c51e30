"""Shared pytest fixtures and configuration for all tests."""

import os
from datetime import UTC, datetime

import pytest

os.environ.setdefault("ENVIRONMENT", "test")

from restaurant_ordering_service.models.menu_models import (  # noqa: E402
    AddOn,
    Customer,
    MenuItem,
    StoreSettings,
)
from restaurant_ordering_service.models.zone_models import DeliveryZone, ZoneKind  # noqa: E402


@pytest.fixture
def created_at() -> datetime:
    """Fixture providing a fixed creation timestamp."""
    return datetime(2024, 1, 15, 10, 30, tzinfo=UTC)


@pytest.fixture
def prefix_zone(created_at: datetime) -> DeliveryZone:
    """Fixture providing an active postcode-prefix zone for SW1."""
    return DeliveryZone(
        id="zone_prefix",
        name="Central",
        kind=ZoneKind.POSTCODE_PREFIX,
        postcode_prefixes=["SW1"],
        created_at=created_at,
    )


@pytest.fixture
def circle_zone(created_at: datetime) -> DeliveryZone:
    """Fixture providing an active 5 km circle zone around central London."""
    return DeliveryZone(
        id="zone_circle",
        name="5km",
        kind=ZoneKind.CIRCLE,
        center_latitude=51.5,
        center_longitude=-0.12,
        radius_meters=5000,
        created_at=created_at,
    )


@pytest.fixture
def burger() -> MenuItem:
    """Fixture providing a 1000-cent burger in the burgers category."""
    return MenuItem(
        id="item_burger",
        category_id="cat_burgers",
        name="Burger",
        description="Beef patty",
        price_cents=1000,
    )


@pytest.fixture
def cheese() -> AddOn:
    """Fixture providing a 150-cent add-on restricted to burgers."""
    return AddOn(id="addon_cheese", category_id="cat_burgers", name="Cheese", price_cents=150)


@pytest.fixture
def store_settings() -> StoreSettings:
    """Fixture providing store settings with a 300-cent delivery fee."""
    return StoreSettings(store_name="Test Kitchen", delivery_fee_cents=300)


@pytest.fixture
def customer() -> Customer:
    """Fixture providing a customer with a saved profile address."""
    return Customer(
        id="cust_123",
        name="Ada Lovelace",
        email="ada@example.com",
        phone="+447700900000",
        address_line1="10 Downing Street",
        address_city="London",
        address_postcode="SW1A 2AA",
    )
