"""Unit tests for the catalog, settings and customer repositories."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from restaurant_ordering_service.errors import InternalError
from restaurant_ordering_service.repositories.catalog_repositories import (
    CustomerRepository,
    MenuCatalogRepository,
    StoreSettingsRepository,
    batch_get_items,
)


@pytest.mark.unit
class TestBatchGetItems:
    """Tests for batch_get_items."""

    def test_chunks_requests_of_100_keys(self) -> None:
        """Test that more than 100 ids are split across requests."""
        mock_dynamodb = MagicMock()
        mock_dynamodb.batch_get_item.return_value = {"Responses": {"items": []}}

        batch_get_items(mock_dynamodb, "items", "menu_item_id", [f"id_{i}" for i in range(150)])

        calls = mock_dynamodb.batch_get_item.call_args_list
        assert len(calls) == 2
        assert len(calls[0].kwargs["RequestItems"]["items"]["Keys"]) == 100
        assert len(calls[1].kwargs["RequestItems"]["items"]["Keys"]) == 50

    def test_follows_unprocessed_keys(self) -> None:
        """Test that unprocessed keys are retried."""
        mock_dynamodb = MagicMock()
        leftover = {"items": {"Keys": [{"menu_item_id": "b"}]}}
        mock_dynamodb.batch_get_item.side_effect = [
            {"Responses": {"items": [{"menu_item_id": "a"}]}, "UnprocessedKeys": leftover},
            {"Responses": {"items": [{"menu_item_id": "b"}]}},
        ]

        items = batch_get_items(mock_dynamodb, "items", "menu_item_id", ["a", "b"])

        assert items == [{"menu_item_id": "a"}, {"menu_item_id": "b"}]
        assert mock_dynamodb.batch_get_item.call_args_list[1].kwargs["RequestItems"] == leftover

    def test_gives_up_on_persistent_unprocessed_keys(self) -> None:
        """Test that endless unprocessed keys raise RuntimeError."""
        mock_dynamodb = MagicMock()
        leftover = {"items": {"Keys": [{"menu_item_id": "a"}]}}
        mock_dynamodb.batch_get_item.return_value = {"Responses": {}, "UnprocessedKeys": leftover}

        with pytest.raises(RuntimeError):
            batch_get_items(mock_dynamodb, "items", "menu_item_id", ["a"])


@pytest.mark.unit
class TestMenuCatalogRepository:
    """Test suite for MenuCatalogRepository."""

    @pytest.fixture
    def mock_dynamodb(self) -> MagicMock:
        """Create a mock DynamoDB resource."""
        return MagicMock()

    @pytest.fixture
    def repository(self, mock_dynamodb: MagicMock) -> MenuCatalogRepository:
        """Create a repository with mocked DynamoDB."""
        return MenuCatalogRepository(
            dynamodb_resource=mock_dynamodb,
            menu_items_table="menu-items",
            add_ons_table="add-ons",
        )

    def test_get_menu_items(
        self, repository: MenuCatalogRepository, mock_dynamodb: MagicMock
    ) -> None:
        """Test that found items are keyed by id."""
        mock_dynamodb.batch_get_item.return_value = {
            "Responses": {
                "menu-items": [
                    {
                        "menu_item_id": "item_1",
                        "category_id": "cat_1",
                        "name": "Burger",
                        "price_cents": 1000,
                        "add_on_ids": ["addon_1"],
                    }
                ]
            }
        }

        items = repository.get_menu_items(["item_1", "item_ghost"])

        assert list(items) == ["item_1"]
        assert items["item_1"].price_cents == 1000
        assert items["item_1"].add_on_ids == ["addon_1"]

    def test_get_add_ons_empty_skips_dynamodb(
        self, repository: MenuCatalogRepository, mock_dynamodb: MagicMock
    ) -> None:
        """Test that no add-on ids means no request."""
        assert repository.get_add_ons([]) == {}
        mock_dynamodb.batch_get_item.assert_not_called()

    def test_dynamodb_error(
        self, repository: MenuCatalogRepository, mock_dynamodb: MagicMock
    ) -> None:
        """Test that DynamoDB errors raise InternalError."""
        mock_dynamodb.batch_get_item.side_effect = ClientError(
            {"Error": {"Code": "InternalServerError", "Message": "x"}}, "BatchGetItem"
        )

        with pytest.raises(InternalError):
            repository.get_add_ons(["addon_1"])


@pytest.mark.unit
class TestStoreSettingsRepository:
    """Test suite for StoreSettingsRepository."""

    def test_missing_settings_fall_back_to_defaults(self) -> None:
        """Test that no stored record means a zero delivery fee."""
        mock_dynamodb = MagicMock()
        mock_dynamodb.Table.return_value.get_item.return_value = {}

        settings = StoreSettingsRepository(mock_dynamodb, "settings").get_settings()

        assert settings.delivery_fee_cents == 0
        mock_dynamodb.Table.return_value.get_item.assert_called_once_with(
            Key={"settings_id": "store"}
        )

    def test_stored_settings(self) -> None:
        """Test that the stored fee is read."""
        mock_dynamodb = MagicMock()
        mock_dynamodb.Table.return_value.get_item.return_value = {
            "Item": {"settings_id": "store", "store_name": "Kitchen", "delivery_fee_cents": 250}
        }

        settings = StoreSettingsRepository(mock_dynamodb, "settings").get_settings()

        assert settings.store_name == "Kitchen"
        assert settings.delivery_fee_cents == 250


@pytest.mark.unit
class TestCustomerRepository:
    """Test suite for CustomerRepository."""

    def test_get_customer(self) -> None:
        """Test that a stored profile is parsed."""
        mock_dynamodb = MagicMock()
        mock_dynamodb.Table.return_value.get_item.return_value = {
            "Item": {"customer_id": "cust_1", "name": "Ada", "address_city": "London"}
        }

        customer = CustomerRepository(mock_dynamodb, "customers").get_customer("cust_1")

        assert customer is not None
        assert customer.address_city == "London"

    def test_get_customer_error(self) -> None:
        """Test that DynamoDB errors raise InternalError."""
        mock_dynamodb = MagicMock()
        mock_dynamodb.Table.return_value.get_item.side_effect = ClientError(
            {"Error": {"Code": "InternalServerError", "Message": "x"}}, "GetItem"
        )

        with pytest.raises(InternalError):
            CustomerRepository(mock_dynamodb, "customers").get_customer("cust_1")
