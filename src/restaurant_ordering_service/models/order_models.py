"""Order, line snapshot and address models.

An order and its lines form one DynamoDB item keyed by order_id. Lines are
snapshots copied from the catalog at creation time, so later catalog edits
never change historical pricing. Addresses live in their own table and are
written in the same transaction as the order.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import EmailStr, Field

from restaurant_ordering_service.models.base import ApiModel, to_decimal, to_float

LEGACY_ORDER_TYPE_PREFIX = "ORDER_TYPE:"


class OrderStatus(str, Enum):
    """Order lifecycle states. PLACED is initial, DELIVERED and CANCELLED are terminal."""

    PLACED = "PLACED"
    PREPARING = "PREPARING"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


PAST_ORDER_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


class PaymentMethod(str, Enum):
    """Accepted payment method values. Only CASH is currently supported."""

    CASH = "CASH"
    STRIPE = "STRIPE"


class FulfillmentType(str, Enum):
    """How the order reaches the customer."""

    DELIVERY = "DELIVERY"
    PICKUP = "PICKUP"


class OrderType(str, Enum):
    """Whether the order was placed from a deal bundle."""

    NORMAL = "NORMAL"
    DEAL = "DEAL"


def resolve_order_type(item: dict[str, Any]) -> OrderType:
    """Derive the order type from a stored order item.

    NORMAL unless explicitly tagged DEAL. Items written before order_type was a
    real attribute carry the tag as an ``ORDER_TYPE:`` prefix in notes.
    """
    raw = item.get("order_type")
    if raw is None:
        notes = item.get("notes") or ""
        if not notes.startswith(LEGACY_ORDER_TYPE_PREFIX):
            return OrderType.NORMAL
        raw = notes[len(LEGACY_ORDER_TYPE_PREFIX) :]
    return OrderType.DEAL if raw == OrderType.DEAL.value else OrderType.NORMAL


class AddressInput(ApiModel):
    """Delivery address as supplied in an order request."""

    line1: str = ""
    line2: str | None = None
    city: str = ""
    postcode: str = ""
    instructions: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)


class Address(ApiModel):
    """Persisted delivery address owned by exactly one order."""

    id: str
    line1: str
    line2: str | None = None
    city: str
    postcode: str
    instructions: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    created_at: datetime

    def to_dynamodb_item(self, include_coordinates: bool = True) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Args:
            include_coordinates: Whether latitude/longitude are written

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "address_id": self.id,
            "line1": self.line1,
            "city": self.city,
            "postcode": self.postcode,
            "created_at": self.created_at.isoformat(),
        }

        if self.line2 is not None:
            item["line2"] = self.line2

        if self.instructions is not None:
            item["instructions"] = self.instructions

        if include_coordinates:
            if self.latitude is not None:
                item["latitude"] = to_decimal(self.latitude)
            if self.longitude is not None:
                item["longitude"] = to_decimal(self.longitude)

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Address":
        """Create Address from DynamoDB item."""
        return cls(
            id=item["address_id"],
            line1=item["line1"],
            line2=item.get("line2"),
            city=item["city"],
            postcode=item["postcode"],
            instructions=item.get("instructions"),
            latitude=to_float(item.get("latitude")),
            longitude=to_float(item.get("longitude")),
            created_at=datetime.fromisoformat(item["created_at"]),
        )


class LineAddOn(ApiModel):
    """Name/price snapshot of an add-on attached to an order line."""

    name: str
    price_cents: int = Field(..., ge=0)


class OrderLine(ApiModel):
    """Immutable snapshot of one priced order line."""

    menu_item_id: str
    name: str
    description: str = ""
    base_price_cents: int = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    removals: list[str] = Field(default_factory=list)
    add_ons: list[LineAddOn] = Field(default_factory=list)
    line_total_cents: int = Field(..., ge=0)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to a nested DynamoDB map."""
        return {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "description": self.description,
            "base_price_cents": self.base_price_cents,
            "quantity": self.quantity,
            "removals": list(self.removals),
            "add_ons": [
                {"name": add_on.name, "price_cents": add_on.price_cents}
                for add_on in self.add_ons
            ],
            "line_total_cents": self.line_total_cents,
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "OrderLine":
        """Create OrderLine from a nested DynamoDB map."""
        return cls(
            menu_item_id=item["menu_item_id"],
            name=item["name"],
            description=item.get("description", ""),
            base_price_cents=int(item["base_price_cents"]),
            quantity=int(item["quantity"]),
            removals=list(item.get("removals", [])),
            add_ons=[
                LineAddOn(name=add_on["name"], price_cents=int(add_on["price_cents"]))
                for add_on in item.get("add_ons", [])
            ],
            line_total_cents=int(item["line_total_cents"]),
        )


class Order(ApiModel):
    """Priced order with its line snapshots.

    total_cents always equals subtotal_cents + delivery_fee_cents.
    """

    id: str
    status: OrderStatus = OrderStatus.PLACED
    payment_method: PaymentMethod
    fulfillment_type: FulfillmentType
    order_type: OrderType = OrderType.NORMAL
    subtotal_cents: int = Field(..., ge=0)
    delivery_fee_cents: int = Field(..., ge=0)
    total_cents: int = Field(..., ge=0)
    customer_id: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    address_id: str | None = None
    address: Address | None = None
    lines: list[OrderLine] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format. The address is stored separately.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "order_id": self.id,
            "status": self.status.value,
            "payment_method": self.payment_method.value,
            "fulfillment_type": self.fulfillment_type.value,
            "order_type": self.order_type.value,
            "subtotal_cents": self.subtotal_cents,
            "delivery_fee_cents": self.delivery_fee_cents,
            "total_cents": self.total_cents,
            "lines": [line.to_dynamodb_item() for line in self.lines],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        optional_fields = {
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "address_id": self.address_id,
        }
        item.update({key: value for key, value in optional_fields.items() if value is not None})

        return item

    @classmethod
    def from_dynamodb_item(
        cls, item: dict[str, Any], address: Address | None = None
    ) -> "Order":
        """Create Order from DynamoDB item.

        Args:
            item: DynamoDB item dictionary
            address: Address loaded from the addresses table, if any

        Returns:
            Order: Parsed model instance
        """
        return cls(
            id=item["order_id"],
            status=OrderStatus(item["status"]),
            payment_method=PaymentMethod(item["payment_method"]),
            fulfillment_type=FulfillmentType(item["fulfillment_type"]),
            order_type=resolve_order_type(item),
            subtotal_cents=int(item["subtotal_cents"]),
            delivery_fee_cents=int(item["delivery_fee_cents"]),
            total_cents=int(item["total_cents"]),
            customer_id=item.get("customer_id"),
            customer_name=item.get("customer_name"),
            customer_email=item.get("customer_email"),
            customer_phone=item.get("customer_phone"),
            address_id=item.get("address_id"),
            address=address,
            lines=[OrderLine.from_dynamodb_item(line) for line in item.get("lines", [])],
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item.get("updated_at", item["created_at"])),
        )


class OrderItemRequest(ApiModel):
    """One requested line: a menu item, quantity, add-ons and removals."""

    menu_item_id: str
    quantity: int = Field(..., ge=1, strict=True)
    removals: list[str] = Field(default_factory=list)
    add_on_ids: list[str] = Field(default_factory=list)


class CreateOrderRequest(ApiModel):
    """Payload for placing an order."""

    payment_method: PaymentMethod
    fulfillment_type: FulfillmentType
    order_type: OrderType | None = None
    customer_name: str | None = None
    customer_email: EmailStr | None = None
    customer_phone: str | None = None
    address: AddressInput | None = None
    items: list[OrderItemRequest] = Field(default_factory=list)


class UpdateOrderStatusRequest(ApiModel):
    """Admin status change."""

    status: OrderStatus
