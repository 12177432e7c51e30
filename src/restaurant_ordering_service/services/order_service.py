"""Order orchestration: validation, eligibility, pricing and atomic persistence."""

import logging
import uuid
from datetime import UTC, date, datetime, time, timedelta
from typing import Literal

from restaurant_ordering_service.errors import NotFoundError, ServiceError, ValidationError
from restaurant_ordering_service.models.order_models import (
    PAST_ORDER_STATUSES,
    CreateOrderRequest,
    FulfillmentType,
    Order,
    OrderStatus,
    OrderType,
    PaymentMethod,
)
from restaurant_ordering_service.models.menu_models import Customer
from restaurant_ordering_service.models.pagination import PaginatedResponse, paginate
from restaurant_ordering_service.models.zone_models import EligibilityCandidate
from restaurant_ordering_service.observability.decorators import traced
from restaurant_ordering_service.observability.metrics import (
    record_order_created,
    record_order_rejected,
)
from restaurant_ordering_service.repositories.catalog_repositories import (
    CustomerRepository,
    StoreSettingsRepository,
)
from restaurant_ordering_service.repositories.order_repository import OrderRepository
from restaurant_ordering_service.services.address_resolver import AddressResolver
from restaurant_ordering_service.services.pricing_calculator import PricingCalculator
from restaurant_ordering_service.services.zone_service import ZoneService

logger = logging.getLogger(__name__)

SUPPORTED_PAYMENT_METHOD = PaymentMethod.CASH

OrderRange = Literal["all", "today", "week", "month", "year", "custom"]
OrderView = Literal["active", "past"]

RANGE_DAYS = {"week": 7, "month": 30, "year": 365}


def range_cutoff(order_range: OrderRange, now: datetime) -> datetime | None:
    """Earliest creation time included by an admin listing range.

    Returns:
        Cutoff datetime, or None when the range has no lower bound
    """
    if order_range == "today":
        return datetime.combine(now.date(), time.min, tzinfo=UTC)
    if order_range in RANGE_DAYS:
        return now - timedelta(days=RANGE_DAYS[order_range])
    return None


def _contains(term: str, *values: str | None) -> bool:
    return any(value and term in value.lower() for value in values)


def contact_field(supplied: str | None, customer: Customer | None, field: str) -> str | None:
    """Contact value from the request, falling back to the profile only when absent.

    An empty string from the request is kept as given.
    """
    if supplied is not None:
        return supplied
    return getattr(customer, field) if customer else None


class OrderService:
    """Service for placing, reading and updating orders.

    Order creation is a single unit of work: every check runs before anything
    is written, and the final write of address + order + lines is atomic.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        settings_repository: StoreSettingsRepository,
        customer_repository: CustomerRepository,
        zone_service: ZoneService,
        pricing_calculator: PricingCalculator,
        address_resolver: AddressResolver | None = None,
    ) -> None:
        """Initialize the OrderService.

        Args:
            order_repository: Repository for order persistence
            settings_repository: Repository for store settings
            customer_repository: Repository for customer profiles
            zone_service: Delivery eligibility matcher
            pricing_calculator: Catalog resolution and line pricing
            address_resolver: Delivery address resolution
        """
        self.order_repository = order_repository
        self.settings_repository = settings_repository
        self.customer_repository = customer_repository
        self.zone_service = zone_service
        self.pricing_calculator = pricing_calculator
        self.address_resolver = address_resolver or AddressResolver()

    @traced("place_order", attributes={"component": "orders"})
    async def create_order(
        self, request: CreateOrderRequest, customer_id: str | None = None
    ) -> Order:
        """Validate, price and persist a new order.

        This method orchestrates the complete creation flow:
        1. Reject unsupported payment methods (cash only)
        2. Reject an empty cart
        3. Resolve menu items and add-ons
        4. Load store settings and the customer, if authenticated
        5. Resolve the address and, for delivery, check zone eligibility
        6. Price the lines
        7. Persist address + order + lines atomically

        Args:
            request: Order request
            customer_id: Authenticated customer, None for guests

        Returns:
            The persisted order with its derived order type

        Raises:
            ValidationError: If any check rejects the request
            InternalError: If persistence fails (nothing is committed)
        """
        try:
            order = await self._create_order(request, customer_id)
        except ServiceError as e:
            record_order_rejected(type(e).__name__)
            raise

        record_order_created(order.fulfillment_type.value, order.total_cents)
        logger.info(
            f"Order {order.id} placed: {order.fulfillment_type.value}, "
            f"{len(order.lines)} lines, total {order.total_cents} cents"
        )
        return order

    async def _create_order(self, request: CreateOrderRequest, customer_id: str | None) -> Order:
        if request.payment_method != SUPPORTED_PAYMENT_METHOD:
            raise ValidationError("Cash only at the moment.")

        if not request.items:
            raise ValidationError("Order must contain at least one item.")

        # Look up every product and option
        catalog = self.pricing_calculator.resolve_catalog(request.items)

        settings = self.settings_repository.get_settings()
        customer = self.customer_repository.get_customer(customer_id) if customer_id else None
        if customer_id and customer is None:
            logger.warning(f"Authenticated customer {customer_id} has no profile record")

        # Resolve the delivery address
        address = self.address_resolver.resolve(
            request.fulfillment_type, request.address, customer
        )

        # Check delivery zones
        if request.fulfillment_type == FulfillmentType.DELIVERY and address is not None:
            eligibility = await self.zone_service.check_eligibility(
                EligibilityCandidate(
                    city=address.city,
                    postcode=address.postcode,
                    latitude=address.latitude,
                    longitude=address.longitude,
                )
            )
            if not eligibility.deliverable:
                raise ValidationError(eligibility.reason)

        # Price lines from the catalog, never from the client
        priced = self.pricing_calculator.price_order(
            request.items, catalog, request.fulfillment_type, settings
        )

        now = datetime.now(UTC)
        order = Order(
            id=f"ord_{uuid.uuid4().hex}",
            status=OrderStatus.PLACED,
            payment_method=request.payment_method,
            fulfillment_type=request.fulfillment_type,
            order_type=request.order_type or OrderType.NORMAL,
            subtotal_cents=priced.subtotal_cents,
            delivery_fee_cents=priced.delivery_fee_cents,
            total_cents=priced.total_cents,
            customer_id=customer_id,
            customer_name=contact_field(request.customer_name, customer, "name"),
            customer_email=contact_field(request.customer_email, customer, "email"),
            customer_phone=contact_field(request.customer_phone, customer, "phone"),
            address_id=address.id if address else None,
            lines=priced.lines,
            created_at=now,
            updated_at=now,
        )

        # Write order, lines and address snapshot in one transaction
        return self.order_repository.create_order(order, address)

    async def get_order(self, order_id: str) -> Order:
        """Fetch an order by ID.

        Raises:
            NotFoundError: If the order does not exist
        """
        order = self.order_repository.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found.")
        return order

    async def list_orders(
        self,
        status: OrderStatus | None = None,
        order_range: OrderRange = "all",
        search: str | None = None,
        page: int | None = None,
        page_size: int | None = None,
    ) -> PaginatedResponse[Order]:
        """List orders for the admin back-office, newest first.

        Args:
            status: Only orders in this status
            order_range: Creation-time window ("custom" applies no cutoff)
            search: Case-insensitive match on id, contact, address or line names
            page: 1-based page number
            page_size: Orders per page

        Returns:
            One page of orders
        """
        orders = self.order_repository.list_orders()

        if status is not None:
            orders = [order for order in orders if order.status == status]

        cutoff = range_cutoff(order_range, datetime.now(UTC))
        if cutoff is not None:
            orders = [order for order in orders if order.created_at >= cutoff]

        term = (search or "").strip().lower()
        if term:
            orders = [order for order in orders if self._matches_admin_search(order, term)]

        return paginate(orders, page, page_size)

    async def list_orders_for_customer(
        self,
        customer_id: str,
        view: OrderView | None = None,
        on_date: date | None = None,
        search: str | None = None,
        page: int | None = None,
        page_size: int | None = None,
    ) -> PaginatedResponse[Order]:
        """List a customer's own orders, newest first.

        Args:
            customer_id: Authenticated customer
            view: "active" for open orders, "past" for delivered or cancelled ones
            on_date: Only orders created on this UTC date
            search: Case-insensitive match on id or line names
            page: 1-based page number
            page_size: Orders per page

        Returns:
            One page of orders
        """
        orders = self.order_repository.list_orders_for_customer(customer_id)

        if view == "active":
            orders = [order for order in orders if order.status not in PAST_ORDER_STATUSES]
        elif view == "past":
            orders = [order for order in orders if order.status in PAST_ORDER_STATUSES]

        if on_date is not None:
            day_start = datetime.combine(on_date, time.min, tzinfo=UTC)
            day_end = day_start + timedelta(days=1)
            orders = [order for order in orders if day_start <= order.created_at < day_end]

        term = (search or "").strip().lower()
        if term:
            orders = [
                order
                for order in orders
                if _contains(term, order.id, *(line.name for line in order.lines))
            ]

        return paginate(orders, page, page_size)

    async def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """Set an order's status.

        Any status may follow any other; transitions are not validated.

        Raises:
            NotFoundError: If the order does not exist
        """
        order = self.order_repository.update_status(order_id, status, datetime.now(UTC))
        logger.info(f"Order {order_id} status set to {status.value}")
        return order

    @staticmethod
    def _matches_admin_search(order: Order, term: str) -> bool:
        address = order.address
        return _contains(
            term,
            order.id,
            order.customer_name,
            order.customer_email,
            order.customer_phone,
            address.line1 if address else None,
            address.city if address else None,
            address.postcode if address else None,
            *(line.name for line in order.lines),
        )
