"""DynamoDB repositories for read-mostly reference data.

Menu items, add-ons, store settings and customers are maintained by the
back-office. The ordering pipeline only reads them.
"""

import logging
from collections.abc import Iterable
from typing import Any

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_ordering_service.errors import InternalError
from restaurant_ordering_service.models.menu_models import (
    AddOn,
    Customer,
    MenuItem,
    StoreSettings,
)

logger = logging.getLogger(__name__)

# DynamoDB BatchGetItem accepts at most 100 keys per request
BATCH_GET_LIMIT = 100
MAX_UNPROCESSED_ROUNDS = 5

STORE_SETTINGS_KEY = "store"


def batch_get_items(
    dynamodb_resource: DynamoDBServiceResource,
    table_name: str,
    key_name: str,
    ids: Iterable[str],
) -> list[dict[str, Any]]:
    """Fetch items by primary key in batches, following UnprocessedKeys.

    Args:
        dynamodb_resource: Boto3 DynamoDB resource
        table_name: Table to read
        key_name: Partition key attribute name
        ids: Distinct key values to fetch

    Returns:
        list: Raw items that exist (missing keys are simply absent)

    Raises:
        ClientError: If DynamoDB fails
        RuntimeError: If DynamoDB keeps returning unprocessed keys
    """
    unique_ids = list(dict.fromkeys(ids))
    items: list[dict[str, Any]] = []

    for start in range(0, len(unique_ids), BATCH_GET_LIMIT):
        chunk = unique_ids[start : start + BATCH_GET_LIMIT]
        request: dict[str, Any] = {table_name: {"Keys": [{key_name: key} for key in chunk]}}

        for _ in range(MAX_UNPROCESSED_ROUNDS):
            response = dynamodb_resource.batch_get_item(RequestItems=request)
            items.extend(response.get("Responses", {}).get(table_name, []))
            request = response.get("UnprocessedKeys") or {}
            if not request:
                break
        else:
            raise RuntimeError(f"DynamoDB left keys unprocessed in {table_name}")

    return items


class MenuCatalogRepository:
    """Repository for batch lookups of menu items and add-ons."""

    def __init__(
        self,
        dynamodb_resource: DynamoDBServiceResource,
        menu_items_table: str,
        add_ons_table: str,
    ) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            menu_items_table: Name of the menu items table
            add_ons_table: Name of the add-ons table
        """
        self.dynamodb = dynamodb_resource
        self.menu_items_table = menu_items_table
        self.add_ons_table = add_ons_table

    def get_menu_items(self, menu_item_ids: Iterable[str]) -> dict[str, MenuItem]:
        """Fetch menu items by ID.

        Args:
            menu_item_ids: Menu item identifiers

        Returns:
            dict: Found menu items keyed by ID

        Raises:
            InternalError: If DynamoDB fails
        """
        try:
            items = batch_get_items(
                self.dynamodb, self.menu_items_table, "menu_item_id", menu_item_ids
            )
        except (ClientError, RuntimeError) as e:
            logger.error(f"Failed to load menu items: {e}")
            raise InternalError("Failed to load menu items.") from e

        menu_items = (MenuItem.from_dynamodb_item(item) for item in items)
        return {menu_item.id: menu_item for menu_item in menu_items}

    def get_add_ons(self, add_on_ids: Iterable[str]) -> dict[str, AddOn]:
        """Fetch add-ons by ID.

        Args:
            add_on_ids: Add-on identifiers

        Returns:
            dict: Found add-ons keyed by ID

        Raises:
            InternalError: If DynamoDB fails
        """
        ids = list(add_on_ids)
        if not ids:
            return {}

        try:
            items = batch_get_items(self.dynamodb, self.add_ons_table, "add_on_id", ids)
        except (ClientError, RuntimeError) as e:
            logger.error(f"Failed to load add-ons: {e}")
            raise InternalError("Failed to load add-ons.") from e

        add_ons = (AddOn.from_dynamodb_item(item) for item in items)
        return {add_on.id: add_on for add_on in add_ons}


class StoreSettingsRepository:
    """Repository for the single store settings record."""

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_settings(self) -> StoreSettings:
        """Retrieve store settings, falling back to defaults when none are stored.

        Raises:
            InternalError: If DynamoDB fails
        """
        try:
            response = self.table.get_item(Key={"settings_id": STORE_SETTINGS_KEY})
        except ClientError as e:
            logger.error(f"Failed to get store settings: {e}")
            raise InternalError("Failed to load store settings.") from e

        if "Item" not in response:
            logger.warning("No store settings stored, using defaults")
            return StoreSettings()

        return StoreSettings.from_dynamodb_item(response["Item"])


class CustomerRepository:
    """Repository for customer profile lookups."""

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_customer(self, customer_id: str) -> Customer | None:
        """Retrieve a customer by ID.

        Returns:
            Customer if found, None otherwise

        Raises:
            InternalError: If DynamoDB fails
        """
        try:
            response = self.table.get_item(Key={"customer_id": customer_id})
        except ClientError as e:
            logger.error(f"Failed to get customer {customer_id}: {e}")
            raise InternalError("Failed to load customer.") from e

        if "Item" not in response:
            return None

        return Customer.from_dynamodb_item(response["Item"])
