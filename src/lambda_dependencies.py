"""Cached dependency factory for the Lambda handler.

Objects are built once per Lambda container and reused across warm
invocations.
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

# Module-level caches for Lambda container reuse
_settings: ServiceSettings | None = None
_dynamodb_resource: Any | None = None
_zone_service: ZoneService | None = None
_order_service: OrderService | None = None
_geocoding_adapter: NominatimAdapter | None = None
_fastapi_app: FastAPI | None = None


def get_settings() -> ServiceSettings:
    """Read or retrieve cached service settings."""
    global _settings

    if _settings is None:
        _settings = ServiceSettings.from_env()
    return _settings


def get_dynamodb_resource() -> Any:
    """Create or retrieve cached DynamoDB resource.

    Returns:
        Boto3 DynamoDB resource configured for environment
    """
    global _dynamodb_resource

    if _dynamodb_resource is not None:
        return _dynamodb_resource

    settings = get_settings()
    if settings.dynamodb_endpoint:
        logger.info(f"Using local DynamoDB at {settings.dynamodb_endpoint}")
        _dynamodb_resource = boto3.resource(
            "dynamodb",
            endpoint_url=settings.dynamodb_endpoint,
            region_name=settings.aws_region,
            aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )
    else:
        logger.info(f"Using AWS DynamoDB in region {settings.aws_region}")
        _dynamodb_resource = boto3.resource("dynamodb", region_name=settings.aws_region)

    return _dynamodb_resource


def get_zone_service() -> ZoneService:
    """Create or retrieve cached zone service.

    Returns:
        Configured ZoneService instance
    """
    global _zone_service

    if _zone_service is not None:
        return _zone_service

    settings = get_settings()
    zone_repository = DeliveryZoneRepository(get_dynamodb_resource(), settings.tables.zones)
    _zone_service = ZoneService(zone_repository=zone_repository)

    logger.info("Zone service initialized")
    return _zone_service


def get_order_service() -> OrderService:
    """Create or retrieve cached order service.

    Returns:
        Configured OrderService instance
    """
    global _order_service

    if _order_service is not None:
        return _order_service

    settings = get_settings()
    tables = settings.tables
    dynamodb_resource = get_dynamodb_resource()

    _order_service = OrderService(
        order_repository=OrderRepository(
            dynamodb_resource,
            orders_table=tables.orders,
            addresses_table=tables.addresses,
            store_address_coordinates=settings.address_geo_enabled,
        ),
        settings_repository=StoreSettingsRepository(dynamodb_resource, tables.settings),
        customer_repository=CustomerRepository(dynamodb_resource, tables.customers),
        zone_service=get_zone_service(),
        pricing_calculator=PricingCalculator(
            MenuCatalogRepository(
                dynamodb_resource,
                menu_items_table=tables.menu_items,
                add_ons_table=tables.add_ons,
            )
        ),
    )

    logger.info("Order service initialized")
    return _order_service


def get_geocoding_adapter() -> NominatimAdapter:
    """Create or retrieve the cached geocoding adapter.

    The adapter's throttle lives as long as the container does.
    """
    global _geocoding_adapter

    if _geocoding_adapter is None:
        settings = get_settings()
        _geocoding_adapter = NominatimAdapter(
            base_url=settings.nominatim_base_url,
            contact_email=settings.nominatim_email,
            min_interval_seconds=settings.geocoder_min_interval_seconds,
        )
    return _geocoding_adapter


def get_fastapi_app() -> FastAPI:
    """Create or retrieve cached FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    global _fastapi_app

    if _fastapi_app is not None:
        return _fastapi_app

    _fastapi_app = create_app(
        zone_service=get_zone_service(),
        order_service=get_order_service(),
        geocoding_adapter=get_geocoding_adapter(),
        api_keys=get_settings().admin_api_keys,
    )
    setup_observability(_fastapi_app)

    logger.info("FastAPI application initialized")
    return _fastapi_app


def initialize_lambda_environment() -> None:
    """Configure logging once during Lambda cold start."""
    configure_logging(get_settings().log_level)

    logger.info("Lambda environment initialized")
