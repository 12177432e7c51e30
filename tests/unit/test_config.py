"""Unit tests for ServiceSettings."""

import os
from unittest.mock import patch

import pytest

from restaurant_ordering_service.config import DEVELOPMENT_API_KEY, ServiceSettings


@pytest.mark.unit
class TestServiceSettings:
    """Tests for ServiceSettings.from_env."""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self) -> None:
        """Test the defaults used when nothing is configured."""
        settings = ServiceSettings.from_env()

        assert settings.aws_region == "us-east-1"
        assert settings.dynamodb_endpoint is None
        assert settings.tables.orders == "orders"
        assert settings.admin_api_keys == [DEVELOPMENT_API_KEY]
        assert settings.address_geo_enabled is True
        assert settings.geocoder_min_interval_seconds == 1.1
        assert settings.port == 8001

    @patch.dict(
        os.environ,
        {
            "AWS_REGION": "eu-west-2",
            "DYNAMODB_ENDPOINT": "http://localhost:8000",
            "DYNAMODB_ZONES_TABLE": "zones-dev",
            "DYNAMODB_ADDRESSES_TABLE": "addresses-dev",
            "ADMIN_API_KEY": "key-a, key-b,",
            "ADDRESS_GEO_ENABLED": "false",
            "NOMINATIM_EMAIL": "ops@example.com",
            "GEOCODER_MIN_INTERVAL_SECONDS": "2.5",
            "PORT": "9000",
        },
        clear=True,
    )
    def test_reads_environment(self) -> None:
        """Test that every setting is read from its variable."""
        settings = ServiceSettings.from_env()

        assert settings.aws_region == "eu-west-2"
        assert settings.dynamodb_endpoint == "http://localhost:8000"
        assert settings.tables.zones == "zones-dev"
        assert settings.tables.addresses == "addresses-dev"
        assert settings.tables.menu_items == "menu-items"
        assert settings.admin_api_keys == ["key-a", "key-b"]
        assert settings.address_geo_enabled is False
        assert settings.nominatim_email == "ops@example.com"
        assert settings.geocoder_min_interval_seconds == 2.5
        assert settings.port == 9000

    def test_settings_are_frozen(self) -> None:
        """Test that settings cannot be changed after loading."""
        settings = ServiceSettings()

        with pytest.raises(AttributeError):
            settings.port = 1  # type: ignore[misc]
