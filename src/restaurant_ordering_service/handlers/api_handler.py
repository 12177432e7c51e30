"""FastAPI application for the ordering, delivery-zone and location endpoints."""

import logging
from datetime import date
from typing import Annotated

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from restaurant_ordering_service.adapters.base_adapter import GeocodingAdapter
from restaurant_ordering_service.auth.api_dependencies import (
    get_api_key_from_header,
    get_optional_customer_id,
    get_required_customer_id,
)
from restaurant_ordering_service.auth.api_key_validator import APIKeyValidator
from restaurant_ordering_service.errors import ServiceError
from restaurant_ordering_service.models.location_models import (
    LocationCandidate,
    ReverseGeocodeResult,
)
from restaurant_ordering_service.models.order_models import (
    CreateOrderRequest,
    Order,
    OrderStatus,
    UpdateOrderStatusRequest,
)
from restaurant_ordering_service.models.pagination import PaginatedResponse
from restaurant_ordering_service.models.zone_models import (
    CreateZoneRequest,
    DeliveryZone,
    EligibilityCandidate,
    EligibilityResult,
    UpdateZoneRequest,
)
from restaurant_ordering_service.services.order_service import (
    OrderRange,
    OrderService,
    OrderView,
)
from restaurant_ordering_service.services.zone_service import ZoneService

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class DeleteResponse(BaseModel):
    """Acknowledgement returned by delete endpoints."""

    ok: bool


def create_app(
    zone_service: ZoneService,
    order_service: OrderService,
    geocoding_adapter: GeocodingAdapter,
    api_keys: list[str],
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        zone_service: Delivery zone catalog and eligibility matcher
        order_service: Order placement and management
        geocoding_adapter: Reverse-geocoding and address-search provider
        api_keys: Valid API keys for the admin endpoints

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Restaurant Ordering Service API",
        description="Ordering, delivery-zone and location endpoints for a single restaurant",
        version="1.0.0",
    )

    app.state.zone_service = zone_service
    app.state.order_service = order_service
    app.state.geocoding_adapter = geocoding_adapter
    app.state.api_key_validator = APIKeyValidator(api_keys=api_keys)

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
        else:
            logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Malformed bodies and query parameters are client errors like any other ValidationError
        logger.info(f"Request validation failed on {request.method} {request.url.path}")
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    def validate_api_key(x_api_key: str | None = Header(None)) -> str:
        """Dependency to validate the admin API key."""
        return get_api_key_from_header(x_api_key=x_api_key, validator=app.state.api_key_validator)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    # Delivery zones

    @app.post(
        "/delivery-zones/check",
        response_model=EligibilityResult,
        tags=["Delivery Zones"],
    )
    async def check_delivery_zone(candidate: EligibilityCandidate) -> EligibilityResult:
        """Check whether an address can be delivered to."""
        result: EligibilityResult = await app.state.zone_service.check_eligibility(candidate)
        return result

    @app.get("/delivery-zones", response_model=list[DeliveryZone], tags=["Delivery Zones"])
    async def list_active_zones() -> list[DeliveryZone]:
        """List active zones in creation order."""
        zones: list[DeliveryZone] = await app.state.zone_service.list_active_zones()
        return zones

    @app.get(
        "/admin/delivery-zones",
        response_model=PaginatedResponse[DeliveryZone],
        tags=["Delivery Zones"],
    )
    async def list_zones(
        page: int | None = None,
        page_size: Annotated[int | None, Query(alias="pageSize")] = None,
        search: str | None = None,
        _api_key: str = Depends(validate_api_key),
    ) -> PaginatedResponse[DeliveryZone]:
        """List all zones for the back-office, newest first.

        Args:
            page: 1-based page number
            page_size: Zones per page
            search: Case-insensitive match on name or city
        """
        response: PaginatedResponse[DeliveryZone] = await app.state.zone_service.list_zones(
            page=page, page_size=page_size, search=search
        )
        return response

    @app.post(
        "/admin/delivery-zones",
        response_model=DeliveryZone,
        status_code=201,
        tags=["Delivery Zones"],
    )
    async def create_zone(
        request: CreateZoneRequest,
        _api_key: str = Depends(validate_api_key),
    ) -> DeliveryZone:
        """Create a delivery zone."""
        zone: DeliveryZone = await app.state.zone_service.create_zone(request)
        return zone

    @app.put(
        "/admin/delivery-zones/{zone_id}",
        response_model=DeliveryZone,
        tags=["Delivery Zones"],
    )
    async def update_zone(
        zone_id: str,
        request: UpdateZoneRequest,
        _api_key: str = Depends(validate_api_key),
    ) -> DeliveryZone:
        """Apply a partial update to a delivery zone."""
        zone: DeliveryZone = await app.state.zone_service.update_zone(zone_id, request)
        return zone

    @app.delete(
        "/admin/delivery-zones/{zone_id}",
        response_model=DeleteResponse,
        tags=["Delivery Zones"],
    )
    async def delete_zone(
        zone_id: str,
        _api_key: str = Depends(validate_api_key),
    ) -> DeleteResponse:
        """Delete a delivery zone."""
        await app.state.zone_service.delete_zone(zone_id)
        return DeleteResponse(ok=True)

    # Orders

    @app.post("/orders", response_model=Order, status_code=201, tags=["Orders"])
    async def create_order(
        request: CreateOrderRequest,
        customer_id: str | None = Depends(get_optional_customer_id),
    ) -> Order:
        """Place an order as a guest or an authenticated customer."""
        order: Order = await app.state.order_service.create_order(request, customer_id)
        return order

    @app.get("/orders/{order_id}", response_model=Order, tags=["Orders"])
    async def get_order(order_id: str) -> Order:
        """Fetch a single order with its lines and address."""
        order: Order = await app.state.order_service.get_order(order_id)
        return order

    @app.get("/auth/orders", response_model=PaginatedResponse[Order], tags=["Orders"])
    async def list_my_orders(
        view: OrderView | None = None,
        on_date: Annotated[date | None, Query(alias="date")] = None,
        search: str | None = None,
        page: int | None = None,
        page_size: Annotated[int | None, Query(alias="pageSize")] = None,
        customer_id: str = Depends(get_required_customer_id),
    ) -> PaginatedResponse[Order]:
        """List the authenticated customer's orders, newest first.

        Args:
            view: "active" or "past"
            on_date: Only orders created on this date
            search: Case-insensitive match on order id or item names
            page: 1-based page number
            page_size: Orders per page
        """
        response: PaginatedResponse[Order] = await app.state.order_service.list_orders_for_customer(
            customer_id,
            view=view,
            on_date=on_date,
            search=search,
            page=page,
            page_size=page_size,
        )
        return response

    @app.get("/admin/orders", response_model=PaginatedResponse[Order], tags=["Orders"])
    async def list_orders(
        status: OrderStatus | None = None,
        order_range: Annotated[OrderRange, Query(alias="range")] = "all",
        search: str | None = None,
        page: int | None = None,
        page_size: Annotated[int | None, Query(alias="pageSize")] = None,
        _api_key: str = Depends(validate_api_key),
    ) -> PaginatedResponse[Order]:
        """List all orders for the back-office, newest first.

        Args:
            status: Only orders in this status
            order_range: today, week, month, year, custom or all
            search: Case-insensitive match on id, contact, address or item names
            page: 1-based page number
            page_size: Orders per page
        """
        response: PaginatedResponse[Order] = await app.state.order_service.list_orders(
            status=status,
            order_range=order_range,
            search=search,
            page=page,
            page_size=page_size,
        )
        return response

    @app.patch("/admin/orders/{order_id}/status", response_model=Order, tags=["Orders"])
    async def update_order_status(
        order_id: str,
        request: UpdateOrderStatusRequest,
        _api_key: str = Depends(validate_api_key),
    ) -> Order:
        """Set an order's status. Any status may follow any other."""
        order: Order = await app.state.order_service.update_status(order_id, request.status)
        return order

    # Location

    @app.get("/location/reverse", response_model=ReverseGeocodeResult, tags=["Location"])
    async def reverse_geocode(
        lat: Annotated[float, Query(ge=-90, le=90)],
        lon: Annotated[float, Query(ge=-180, le=180)],
    ) -> ReverseGeocodeResult:
        """Look up the address at a coordinate to pre-fill checkout fields."""
        result: ReverseGeocodeResult = await app.state.geocoding_adapter.reverse_geocode(lat, lon)
        return result

    @app.get("/location/search", response_model=list[LocationCandidate], tags=["Location"])
    async def search_location(
        q: Annotated[str, Query(min_length=2)],
    ) -> list[LocationCandidate]:
        """Search for addresses matching free text."""
        candidates: list[LocationCandidate] = await app.state.geocoding_adapter.search(q)
        return candidates

    return app
