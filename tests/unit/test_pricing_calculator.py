"""Unit tests for PricingCalculator."""

from unittest.mock import MagicMock

import pytest

from restaurant_ordering_service.errors import ValidationError
from restaurant_ordering_service.models.menu_models import AddOn, MenuItem, StoreSettings
from restaurant_ordering_service.models.order_models import FulfillmentType, OrderItemRequest
from restaurant_ordering_service.repositories.catalog_repositories import MenuCatalogRepository
from restaurant_ordering_service.services.pricing_calculator import (
    CatalogSnapshot,
    PricingCalculator,
    price_line,
    validate_quantity,
)


@pytest.mark.unit
class TestPriceLine:
    """Tests for single-line pricing."""

    def test_line_total_includes_add_ons_times_quantity(self) -> None:
        """Test (599 + 99) * 2 = 1396."""
        menu_item = MenuItem(id="item_1", category_id="cat_1", name="Wrap", price_cents=599)
        add_on = AddOn(id="addon_1", name="Sauce", price_cents=99)

        line = price_line(
            OrderItemRequest(menu_item_id="item_1", quantity=2, add_on_ids=["addon_1"]),
            menu_item,
            [add_on],
        )

        assert line.line_total_cents == 1396
        assert line.base_price_cents == 599
        assert line.name == "Wrap"
        assert [(a.name, a.price_cents) for a in line.add_ons] == [("Sauce", 99)]

    def test_removals_are_copied(self, burger: MenuItem) -> None:
        """Test that removals are stored on the line."""
        line = price_line(
            OrderItemRequest(menu_item_id=burger.id, quantity=1, removals=["onion"]),
            burger,
            [],
        )

        assert line.removals == ["onion"]
        assert line.line_total_cents == 1000

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True, "2"])
    def test_invalid_quantity(self, quantity: object) -> None:
        """Test that non-positive and non-integer quantities are rejected."""
        with pytest.raises(ValidationError, match="Quantity"):
            validate_quantity(quantity)


@pytest.mark.unit
class TestResolveCatalog:
    """Tests for catalog resolution."""

    @pytest.fixture
    def mock_repository(self, burger: MenuItem, cheese: AddOn) -> MagicMock:
        """Create a catalog repository holding one burger and one cheese add-on."""
        repository = MagicMock(spec=MenuCatalogRepository)
        repository.get_menu_items.side_effect = lambda ids: {
            i: burger for i in ids if i == burger.id
        }
        repository.get_add_ons.side_effect = lambda ids: {i: cheese for i in ids if i == cheese.id}
        return repository

    @pytest.fixture
    def calculator(self, mock_repository: MagicMock) -> PricingCalculator:
        """Create a calculator with the mocked repository."""
        return PricingCalculator(mock_repository)

    def test_resolves_distinct_ids(
        self, calculator: PricingCalculator, mock_repository: MagicMock
    ) -> None:
        """Test that duplicate references are fetched once."""
        items = [
            OrderItemRequest(menu_item_id="item_burger", quantity=1, add_on_ids=["addon_cheese"]),
            OrderItemRequest(menu_item_id="item_burger", quantity=2, add_on_ids=["addon_cheese"]),
        ]

        catalog = calculator.resolve_catalog(items)

        assert list(catalog.menu_items) == ["item_burger"]
        assert list(catalog.add_ons) == ["addon_cheese"]
        mock_repository.get_menu_items.assert_called_once_with(["item_burger"])
        mock_repository.get_add_ons.assert_called_once_with(["addon_cheese"])

    def test_unknown_menu_item(self, calculator: PricingCalculator) -> None:
        """Test that a missing menu item is a validation error."""
        with pytest.raises(ValidationError, match="Invalid item/add-on"):
            calculator.resolve_catalog([OrderItemRequest(menu_item_id="item_ghost", quantity=1)])

    def test_unknown_add_on(self, calculator: PricingCalculator) -> None:
        """Test that a missing add-on is a validation error."""
        with pytest.raises(ValidationError, match="unknown add-ons addon_ghost"):
            calculator.resolve_catalog(
                [
                    OrderItemRequest(
                        menu_item_id="item_burger", quantity=1, add_on_ids=["addon_ghost"]
                    )
                ]
            )

    def test_add_on_from_other_category(
        self, mock_repository: MagicMock, burger: MenuItem
    ) -> None:
        """Test that an add-on restricted to another category is rejected."""
        syrup = AddOn(id="addon_syrup", category_id="cat_drinks", name="Syrup", price_cents=50)
        mock_repository.get_add_ons.side_effect = lambda ids: {syrup.id: syrup}
        calculator = PricingCalculator(mock_repository)

        with pytest.raises(ValidationError, match="Syrup"):
            calculator.resolve_catalog(
                [
                    OrderItemRequest(
                        menu_item_id=burger.id, quantity=1, add_on_ids=["addon_syrup"]
                    )
                ]
            )

    def test_add_on_linked_directly_to_item(self, mock_repository: MagicMock) -> None:
        """Test that a direct item link overrides a category restriction."""
        linked = MenuItem(
            id="item_burger",
            category_id="cat_burgers",
            name="Burger",
            price_cents=1000,
            add_on_ids=["addon_syrup"],
        )
        syrup = AddOn(id="addon_syrup", category_id="cat_drinks", name="Syrup", price_cents=50)
        mock_repository.get_menu_items.side_effect = lambda ids: {linked.id: linked}
        mock_repository.get_add_ons.side_effect = lambda ids: {syrup.id: syrup}

        catalog = PricingCalculator(mock_repository).resolve_catalog(
            [OrderItemRequest(menu_item_id=linked.id, quantity=1, add_on_ids=[syrup.id])]
        )

        assert catalog.add_ons == {syrup.id: syrup}


@pytest.mark.unit
class TestPriceOrder:
    """Tests for order totals."""

    @pytest.fixture
    def catalog(self) -> CatalogSnapshot:
        """Catalog with a 599-cent wrap and a 99-cent sauce."""
        return CatalogSnapshot(
            menu_items={
                "item_wrap": MenuItem(
                    id="item_wrap", category_id="cat_1", name="Wrap", price_cents=599
                )
            },
            add_ons={"addon_sauce": AddOn(id="addon_sauce", name="Sauce", price_cents=99)},
        )

    @pytest.fixture
    def calculator(self) -> PricingCalculator:
        """Create a calculator; price_order never touches the repository."""
        return PricingCalculator(MagicMock(spec=MenuCatalogRepository))

    def test_delivery_adds_fee(
        self, calculator: PricingCalculator, catalog: CatalogSnapshot
    ) -> None:
        """Test subtotal 1396 plus a 250 fee gives 1646."""
        priced = calculator.price_order(
            [OrderItemRequest(menu_item_id="item_wrap", quantity=2, add_on_ids=["addon_sauce"])],
            catalog,
            FulfillmentType.DELIVERY,
            StoreSettings(delivery_fee_cents=250),
        )

        assert priced.subtotal_cents == 1396
        assert priced.delivery_fee_cents == 250
        assert priced.total_cents == 1646

    def test_pickup_has_no_fee(
        self, calculator: PricingCalculator, catalog: CatalogSnapshot
    ) -> None:
        """Test that pickup orders pay no delivery fee."""
        priced = calculator.price_order(
            [OrderItemRequest(menu_item_id="item_wrap", quantity=1)],
            catalog,
            FulfillmentType.PICKUP,
            StoreSettings(delivery_fee_cents=250),
        )

        assert priced.delivery_fee_cents == 0
        assert priced.total_cents == priced.subtotal_cents == 599

    def test_money_invariant_over_several_lines(
        self, calculator: PricingCalculator, catalog: CatalogSnapshot
    ) -> None:
        """Test that subtotal is the sum of lines and total adds the fee."""
        items = [
            OrderItemRequest(menu_item_id="item_wrap", quantity=3),
            OrderItemRequest(menu_item_id="item_wrap", quantity=1, add_on_ids=["addon_sauce"]),
            OrderItemRequest(
                menu_item_id="item_wrap", quantity=2, add_on_ids=["addon_sauce", "addon_sauce"]
            ),
        ]

        priced = calculator.price_order(
            items, catalog, FulfillmentType.DELIVERY, StoreSettings(delivery_fee_cents=199)
        )

        assert [line.line_total_cents for line in priced.lines] == [1797, 698, 1594]
        assert priced.subtotal_cents == sum(line.line_total_cents for line in priced.lines)
        assert priced.total_cents == priced.subtotal_cents + priced.delivery_fee_cents

    def test_item_missing_from_catalog(
        self, calculator: PricingCalculator, catalog: CatalogSnapshot
    ) -> None:
        """Test that pricing an unresolved item is a validation error."""
        with pytest.raises(ValidationError, match="menu item not found"):
            calculator.price_order(
                [OrderItemRequest(menu_item_id="item_other", quantity=1)],
                catalog,
                FulfillmentType.PICKUP,
                StoreSettings(),
            )

    def test_snapshot_is_independent_of_later_price_changes(
        self, calculator: PricingCalculator, catalog: CatalogSnapshot
    ) -> None:
        """Test that changing the catalog after pricing leaves lines untouched."""
        priced = calculator.price_order(
            [OrderItemRequest(menu_item_id="item_wrap", quantity=1, add_on_ids=["addon_sauce"])],
            catalog,
            FulfillmentType.PICKUP,
            StoreSettings(),
        )

        catalog.menu_items["item_wrap"].price_cents = 9999
        catalog.menu_items["item_wrap"].name = "Renamed"
        catalog.add_ons["addon_sauce"].price_cents = 500

        line = priced.lines[0]
        assert line.base_price_cents == 599
        assert line.name == "Wrap"
        assert line.add_ons[0].price_cents == 99
        assert line.line_total_cents == 698
