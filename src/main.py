"""Main application entry point for the restaurant ordering service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os
from typing import Any

import boto3
from fastapi import FastAPI

from restaurant_ordering_service.adapters.nominatim_adapter import NominatimAdapter
from restaurant_ordering_service.config import ServiceSettings
from restaurant_ordering_service.handlers.api_handler import create_app
from restaurant_ordering_service.observability import configure_logging, setup_observability
from restaurant_ordering_service.repositories.catalog_repositories import (
    CustomerRepository,
    MenuCatalogRepository,
    StoreSettingsRepository,
)
from restaurant_ordering_service.repositories.order_repository import OrderRepository
from restaurant_ordering_service.repositories.zone_repository import DeliveryZoneRepository
from restaurant_ordering_service.services.order_service import OrderService
from restaurant_ordering_service.services.pricing_calculator import PricingCalculator
from restaurant_ordering_service.services.zone_service import ZoneService

logger = logging.getLogger(__name__)


def get_dynamodb_resource(settings: ServiceSettings) -> Any:
    """Create DynamoDB resource with appropriate configuration.

    Args:
        settings: Service settings carrying region and optional local endpoint

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    if settings.dynamodb_endpoint:
        logger.info(f"Using local DynamoDB at {settings.dynamodb_endpoint}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=settings.dynamodb_endpoint,
            region_name=settings.aws_region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

    logger.info(f"Using AWS DynamoDB in region {settings.aws_region}")
    return boto3.resource("dynamodb", region_name=settings.aws_region)


def create_geocoding_adapter(settings: ServiceSettings) -> NominatimAdapter:
    """Create the geocoding adapter from settings."""
    if not settings.nominatim_email:
        logger.warning("NOMINATIM_EMAIL not set - geocoding requests carry no contact address")

    return NominatimAdapter(
        base_url=settings.nominatim_base_url,
        contact_email=settings.nominatim_email,
        min_interval_seconds=settings.geocoder_min_interval_seconds,
    )


def create_application(settings: ServiceSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the DynamoDB resource and repositories
    3. Creates services
    4. Configures the geocoding adapter
    5. Creates the FastAPI app
    6. Sets up observability

    Args:
        settings: Service settings, read from the environment when omitted

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or ServiceSettings.from_env()
    configure_logging(settings.log_level)

    logger.info("Initializing restaurant ordering service...")

    dynamodb_resource = get_dynamodb_resource(settings)
    tables = settings.tables

    zone_repository = DeliveryZoneRepository(dynamodb_resource, tables.zones)
    order_repository = OrderRepository(
        dynamodb_resource,
        orders_table=tables.orders,
        addresses_table=tables.addresses,
        store_address_coordinates=settings.address_geo_enabled,
    )
    catalog_repository = MenuCatalogRepository(
        dynamodb_resource,
        menu_items_table=tables.menu_items,
        add_ons_table=tables.add_ons,
    )
    settings_repository = StoreSettingsRepository(dynamodb_resource, tables.settings)
    customer_repository = CustomerRepository(dynamodb_resource, tables.customers)

    logger.info(f"Repositories configured - zones: {tables.zones}, orders: {tables.orders}")
    if not settings.address_geo_enabled:
        logger.warning("ADDRESS_GEO_ENABLED is off - address coordinates will not be stored")

    zone_service = ZoneService(zone_repository=zone_repository)
    order_service = OrderService(
        order_repository=order_repository,
        settings_repository=settings_repository,
        customer_repository=customer_repository,
        zone_service=zone_service,
        pricing_calculator=PricingCalculator(catalog_repository),
    )

    logger.info("Services initialized")

    app = create_app(
        zone_service=zone_service,
        order_service=order_service,
        geocoding_adapter=create_geocoding_adapter(settings),
        api_keys=settings.admin_api_keys,
    )
    setup_observability(app)

    logger.info("Restaurant ordering service initialized successfully")

    return app


# Only build the real application outside of tests so that importing this
# module never touches AWS during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    import uvicorn

    server_settings = ServiceSettings.from_env()

    logger.info(f"Starting development server on {server_settings.host}:{server_settings.port}")
    logger.info(
        f"API documentation available at http://{server_settings.host}:{server_settings.port}/docs"
    )

    uvicorn.run(
        "main:app",
        host=server_settings.host,
        port=server_settings.port,
        reload=True,
        log_level=server_settings.log_level.lower(),
    )
