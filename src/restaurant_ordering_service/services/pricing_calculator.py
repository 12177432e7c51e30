"""Line-item pricing for orders.

All arithmetic is on integer cents. Lines and add-ons are emitted as
name/price snapshots decoupled from the live catalog.
"""

import logging
from dataclasses import dataclass, field

from restaurant_ordering_service.errors import ValidationError
from restaurant_ordering_service.models.menu_models import AddOn, MenuItem, StoreSettings
from restaurant_ordering_service.models.order_models import (
    FulfillmentType,
    LineAddOn,
    OrderItemRequest,
    OrderLine,
)
from restaurant_ordering_service.repositories.catalog_repositories import MenuCatalogRepository

logger = logging.getLogger(__name__)


@dataclass
class CatalogSnapshot:
    """Menu items and add-ons referenced by one order request.

    Attributes:
        menu_items: Menu items keyed by ID
        add_ons: Add-ons keyed by ID
    """

    menu_items: dict[str, MenuItem] = field(default_factory=dict)
    add_ons: dict[str, AddOn] = field(default_factory=dict)


@dataclass
class PricedOrder:
    """Priced lines and order totals.

    Attributes:
        lines: Line snapshots in request order
        subtotal_cents: Sum of line totals
        delivery_fee_cents: Store delivery fee for DELIVERY, 0 for PICKUP
        total_cents: subtotal_cents + delivery_fee_cents
    """

    lines: list[OrderLine]
    subtotal_cents: int
    delivery_fee_cents: int
    total_cents: int


def validate_quantity(quantity: object) -> int:
    """Return the quantity if it is a positive integer.

    Raises:
        ValidationError: For non-integers (including bools) and values below 1
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("Quantity must be a positive integer.")
    return quantity


def price_line(
    item: OrderItemRequest, menu_item: MenuItem, add_ons: list[AddOn]
) -> OrderLine:
    """Price one line: (base price + add-on prices) * quantity."""
    quantity = validate_quantity(item.quantity)
    add_ons_total = sum(add_on.price_cents for add_on in add_ons)

    return OrderLine(
        menu_item_id=menu_item.id,
        name=menu_item.name,
        description=menu_item.description,
        base_price_cents=menu_item.price_cents,
        quantity=quantity,
        removals=list(item.removals),
        add_ons=[LineAddOn(name=add_on.name, price_cents=add_on.price_cents) for add_on in add_ons],
        line_total_cents=(menu_item.price_cents + add_ons_total) * quantity,
    )


class PricingCalculator:
    """Resolves catalog entries for a request and prices its lines."""

    def __init__(self, catalog_repository: MenuCatalogRepository) -> None:
        """Initialize the calculator.

        Args:
            catalog_repository: Repository for menu item and add-on lookups
        """
        self.catalog_repository = catalog_repository

    def resolve_catalog(self, items: list[OrderItemRequest]) -> CatalogSnapshot:
        """Batch-load every menu item and add-on the request references.

        Args:
            items: Requested order lines

        Returns:
            CatalogSnapshot with all referenced entries

        Raises:
            ValidationError: If any ID is unknown or an add-on does not apply to its item
        """
        menu_item_ids = list(dict.fromkeys(item.menu_item_id for item in items))
        add_on_ids = list(
            dict.fromkeys(add_on_id for item in items for add_on_id in item.add_on_ids)
        )

        menu_items = self.catalog_repository.get_menu_items(menu_item_ids)
        missing_items = [item_id for item_id in menu_item_ids if item_id not in menu_items]
        if missing_items:
            logger.info(f"Order references unknown menu items: {missing_items}")
            raise ValidationError(
                f"Invalid item/add-on: unknown menu items {', '.join(missing_items)}."
            )

        add_ons = self.catalog_repository.get_add_ons(add_on_ids)
        missing_add_ons = [add_on_id for add_on_id in add_on_ids if add_on_id not in add_ons]
        if missing_add_ons:
            logger.info(f"Order references unknown add-ons: {missing_add_ons}")
            raise ValidationError(
                f"Invalid item/add-on: unknown add-ons {', '.join(missing_add_ons)}."
            )

        for item in items:
            menu_item = menu_items[item.menu_item_id]
            for add_on_id in item.add_on_ids:
                if not add_ons[add_on_id].applies_to(menu_item):
                    raise ValidationError(
                        f"Add-on '{add_ons[add_on_id].name}' is not available "
                        f"for '{menu_item.name}'."
                    )

        return CatalogSnapshot(menu_items=menu_items, add_ons=add_ons)

    def price_order(
        self,
        items: list[OrderItemRequest],
        catalog: CatalogSnapshot,
        fulfillment_type: FulfillmentType,
        settings: StoreSettings,
    ) -> PricedOrder:
        """Price every line and compute order totals.

        Args:
            items: Requested order lines
            catalog: Entries returned by resolve_catalog
            fulfillment_type: DELIVERY adds the store delivery fee
            settings: Store settings carrying the delivery fee

        Returns:
            PricedOrder whose total equals subtotal plus delivery fee

        Raises:
            ValidationError: If a quantity is not a positive integer or an ID is
                missing from the catalog
        """
        lines = []
        for item in items:
            menu_item = catalog.menu_items.get(item.menu_item_id)
            if menu_item is None:
                raise ValidationError("Invalid item/add-on: menu item not found.")

            add_ons = []
            for add_on_id in item.add_on_ids:
                add_on = catalog.add_ons.get(add_on_id)
                if add_on is None:
                    raise ValidationError("Invalid item/add-on: add-on not found.")
                add_ons.append(add_on)

            lines.append(price_line(item, menu_item, add_ons))

        subtotal_cents = sum(line.line_total_cents for line in lines)
        delivery_fee_cents = (
            settings.delivery_fee_cents if fulfillment_type == FulfillmentType.DELIVERY else 0
        )

        return PricedOrder(
            lines=lines,
            subtotal_cents=subtotal_cents,
            delivery_fee_cents=delivery_fee_cents,
            total_cents=subtotal_cents + delivery_fee_cents,
        )
