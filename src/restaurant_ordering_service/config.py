"""Service configuration loaded from environment variables."""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEVELOPMENT_API_KEY = "dummy-key-for-development"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class TableNames:
    """DynamoDB table names, one per stored entity."""

    zones: str = "delivery-zones"
    orders: str = "orders"
    addresses: str = "addresses"
    menu_items: str = "menu-items"
    add_ons: str = "add-ons"
    settings: str = "store-settings"
    customers: str = "customers"


@dataclass(frozen=True)
class ServiceSettings:
    """Runtime settings for the ordering service.

    Attributes:
        log_level: Root log level
        aws_region: AWS region for DynamoDB
        dynamodb_endpoint: Local DynamoDB endpoint, None for AWS
        tables: DynamoDB table names
        admin_api_keys: Accepted X-API-Key values for admin routes
        address_geo_enabled: Whether the address table stores coordinates
        nominatim_base_url: Geocoding provider base URL
        nominatim_email: Contact email sent to the geocoding provider
        geocoder_min_interval_seconds: Minimum spacing between geocoding calls
        host: Bind address for the development server
        port: Port for the development server
    """

    log_level: str = "INFO"
    aws_region: str = "us-east-1"
    dynamodb_endpoint: str | None = None
    tables: TableNames = field(default_factory=TableNames)
    admin_api_keys: list[str] = field(default_factory=lambda: [DEVELOPMENT_API_KEY])
    address_geo_enabled: bool = True
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    nominatim_email: str | None = None
    geocoder_min_interval_seconds: float = 1.1
    host: str = "0.0.0.0"
    port: int = 8001

    @classmethod
    def from_env(cls) -> "ServiceSettings":
        """Build settings from the process environment.

        Returns:
            ServiceSettings with defaults for anything unset
        """
        defaults = TableNames()
        tables = TableNames(
            zones=os.getenv("DYNAMODB_ZONES_TABLE", defaults.zones),
            orders=os.getenv("DYNAMODB_ORDERS_TABLE", defaults.orders),
            addresses=os.getenv("DYNAMODB_ADDRESSES_TABLE", defaults.addresses),
            menu_items=os.getenv("DYNAMODB_MENU_ITEMS_TABLE", defaults.menu_items),
            add_ons=os.getenv("DYNAMODB_ADD_ONS_TABLE", defaults.add_ons),
            settings=os.getenv("DYNAMODB_SETTINGS_TABLE", defaults.settings),
            customers=os.getenv("DYNAMODB_CUSTOMERS_TABLE", defaults.customers),
        )

        api_keys_str = os.getenv("ADMIN_API_KEY", "")
        api_keys = [key.strip() for key in api_keys_str.split(",") if key.strip()]
        if not api_keys:
            logger.warning("No ADMIN_API_KEY configured - using development key")
            api_keys = [DEVELOPMENT_API_KEY]

        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            dynamodb_endpoint=os.getenv("DYNAMODB_ENDPOINT") or None,
            tables=tables,
            admin_api_keys=api_keys,
            address_geo_enabled=_env_flag("ADDRESS_GEO_ENABLED", True),
            nominatim_base_url=os.getenv(
                "NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org"
            ),
            nominatim_email=os.getenv("NOMINATIM_EMAIL") or None,
            geocoder_min_interval_seconds=float(
                os.getenv("GEOCODER_MIN_INTERVAL_SECONDS", "1.1")
            ),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8001")),
        )
