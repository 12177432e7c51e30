"""Menu, store and customer reference data.

These models are read by the ordering pipeline and never written by it.
The admin screens that maintain them live in a separate back-office.
"""

from typing import Any

from pydantic import BaseModel, Field


class MenuItem(BaseModel):
    """Menu item model."""

    id: str = Field(..., description="Unique identifier for the menu item")
    category_id: str = Field(..., description="Category this item belongs to")
    name: str = Field(..., description="Item name")
    description: str = Field(default="", description="Item description")
    price_cents: int = Field(..., description="Item price in minor units", ge=0)
    is_active: bool = Field(default=True, description="Whether item is currently available")
    add_on_ids: list[str] = Field(
        default_factory=list, description="Add-ons linked directly to this item"
    )

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "MenuItem":
        """Create MenuItem from DynamoDB item."""
        return cls(
            id=item["menu_item_id"],
            category_id=item["category_id"],
            name=item["name"],
            description=item.get("description", ""),
            price_cents=int(item["price_cents"]),
            is_active=item.get("is_active", True),
            add_on_ids=list(item.get("add_on_ids", [])),
        )


class AddOn(BaseModel):
    """Optional paid modifier for a menu item."""

    id: str = Field(..., description="Unique identifier for the add-on")
    category_id: str | None = Field(
        None, description="Category the add-on is limited to, None for any item"
    )
    name: str
    price_cents: int = Field(..., ge=0)
    is_active: bool = True

    def applies_to(self, menu_item: MenuItem) -> bool:
        """Whether this add-on may be attached to the given menu item."""
        if self.id in menu_item.add_on_ids:
            return True
        return self.category_id is None or self.category_id == menu_item.category_id

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "AddOn":
        """Create AddOn from DynamoDB item."""
        return cls(
            id=item["add_on_id"],
            category_id=item.get("category_id"),
            name=item["name"],
            price_cents=int(item["price_cents"]),
            is_active=item.get("is_active", True),
        )


class StoreSettings(BaseModel):
    """Store-wide settings relevant to pricing."""

    store_name: str = "Restaurant"
    delivery_fee_cents: int = Field(default=0, ge=0)
    pickup_enabled: bool = True
    delivery_enabled: bool = True

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "StoreSettings":
        """Create StoreSettings from DynamoDB item."""
        return cls(
            store_name=item.get("store_name", "Restaurant"),
            delivery_fee_cents=int(item.get("delivery_fee_cents", 0)),
            pickup_enabled=item.get("pickup_enabled", True),
            delivery_enabled=item.get("delivery_enabled", True),
        )


class Customer(BaseModel):
    """Registered customer with an optional saved delivery address."""

    id: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    address_city: str | None = None
    address_postcode: str | None = None
    address_instructions: str | None = None

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Customer":
        """Create Customer from DynamoDB item."""
        return cls(
            id=item["customer_id"],
            name=item.get("name"),
            email=item.get("email"),
            phone=item.get("phone"),
            address_line1=item.get("address_line1"),
            address_line2=item.get("address_line2"),
            address_city=item.get("address_city"),
            address_postcode=item.get("address_postcode"),
            address_instructions=item.get("address_instructions"),
        )
