"""DynamoDB repository for orders and their delivery addresses.

An order item embeds its line snapshots. The delivery address lives in its own
table and is written together with the order in a single TransactWriteItems
call, so either the whole address + order + lines graph exists or none of it.
"""

import logging
from datetime import datetime
from typing import Any

from boto3.dynamodb.conditions import Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_ordering_service.errors import InternalError, NotFoundError
from restaurant_ordering_service.models.order_models import Address, Order, OrderStatus
from restaurant_ordering_service.repositories.catalog_repositories import batch_get_items

logger = logging.getLogger(__name__)

CUSTOMER_INDEX_NAME = "customer_id-index"


class OrderRepository:
    """Repository for order persistence and lookups.

    Orders are keyed by order_id. A Global Secondary Index on customer_id
    serves customer order history.
    """

    def __init__(
        self,
        dynamodb_resource: DynamoDBServiceResource,
        orders_table: str,
        addresses_table: str,
        store_address_coordinates: bool = True,
    ) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            orders_table: Name of the orders table
            addresses_table: Name of the addresses table
            store_address_coordinates: Whether address latitude/longitude are
                persisted. Decided once at startup from configuration.
        """
        self.dynamodb = dynamodb_resource
        self.orders_table_name = orders_table
        self.addresses_table_name = addresses_table
        self.store_address_coordinates = store_address_coordinates
        self.orders_table: Table = dynamodb_resource.Table(orders_table)
        self.serializer = TypeSerializer()

    def _serialize(self, item: dict[str, Any]) -> dict[str, Any]:
        return {key: self.serializer.serialize(value) for key, value in item.items()}

    def create_order(self, order: Order, address: Address | None) -> Order:
        """Persist an order and its address atomically.

        Args:
            order: Priced order with line snapshots
            address: Delivery address owned by the order, if any

        Returns:
            The persisted order with its address attached

        Raises:
            InternalError: If the transaction fails. Nothing is committed.
        """
        transact_items: list[dict[str, Any]] = []

        if address is not None:
            address_item = address.to_dynamodb_item(
                include_coordinates=self.store_address_coordinates
            )
            transact_items.append(
                {
                    "Put": {
                        "TableName": self.addresses_table_name,
                        "Item": self._serialize(address_item),
                        "ConditionExpression": "attribute_not_exists(address_id)",
                    }
                }
            )

        transact_items.append(
            {
                "Put": {
                    "TableName": self.orders_table_name,
                    "Item": self._serialize(order.to_dynamodb_item()),
                    "ConditionExpression": "attribute_not_exists(order_id)",
                }
            }
        )

        try:
            self.dynamodb.meta.client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            logger.error(f"Failed to persist order {order.id}: {e}")
            raise InternalError("Failed to place order.") from e

        if address is not None and not self.store_address_coordinates:
            address = address.model_copy(update={"latitude": None, "longitude": None})

        return order.model_copy(update={"address": address})

    def get_order(self, order_id: str) -> Order | None:
        """Retrieve an order with its address.

        Args:
            order_id: Order identifier

        Returns:
            Order if found, None otherwise

        Raises:
            InternalError: If DynamoDB fails
        """
        try:
            response = self.orders_table.get_item(Key={"order_id": order_id})
        except ClientError as e:
            logger.error(f"Failed to get order {order_id}: {e}")
            raise InternalError("Failed to load order.") from e

        if "Item" not in response:
            return None

        return self._hydrate([response["Item"]])[0]

    def list_orders(self) -> list[Order]:
        """List every order, newest first.

        Raises:
            InternalError: If DynamoDB fails
        """
        scan_kwargs: dict[str, Any] = {}
        items: list[dict[str, Any]] = []
        try:
            while True:
                response = self.orders_table.scan(**scan_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            logger.error(f"Failed to scan orders: {e}")
            raise InternalError("Failed to load orders.") from e

        return self._newest_first(self._hydrate(items))

    def list_orders_for_customer(self, customer_id: str) -> list[Order]:
        """List a customer's orders, newest first.

        Uses a Global Secondary Index on customer_id.

        Raises:
            InternalError: If DynamoDB fails
        """
        query_kwargs: dict[str, Any] = {
            "IndexName": CUSTOMER_INDEX_NAME,
            "KeyConditionExpression": Key("customer_id").eq(customer_id),
        }
        items: list[dict[str, Any]] = []
        try:
            while True:
                response = self.orders_table.query(**query_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            logger.error(f"Failed to query orders for customer {customer_id}: {e}")
            raise InternalError("Failed to load orders.") from e

        return self._newest_first(self._hydrate(items))

    def update_status(self, order_id: str, status: OrderStatus, updated_at: datetime) -> Order:
        """Set the status of an existing order.

        Args:
            order_id: Order identifier
            status: New status (any status may follow any other)
            updated_at: Modification timestamp

        Returns:
            The updated order

        Raises:
            NotFoundError: If the order does not exist
            InternalError: If DynamoDB fails
        """
        try:
            response = self.orders_table.update_item(
                Key={"order_id": order_id},
                UpdateExpression="SET #status = :status, updated_at = :updated_at",
                ConditionExpression="attribute_exists(order_id)",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={
                    ":status": status.value,
                    ":updated_at": updated_at.isoformat(),
                },
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise NotFoundError("Order not found.") from e
            logger.error(f"Failed to update status of order {order_id}: {e}")
            raise InternalError("Failed to update order status.") from e

        return self._hydrate([response["Attributes"]])[0]

    def _hydrate(self, items: list[dict[str, Any]]) -> list[Order]:
        """Attach addresses to raw order items."""
        address_ids = [item["address_id"] for item in items if item.get("address_id")]
        addresses: dict[str, Address] = {}

        if address_ids:
            try:
                raw_addresses = batch_get_items(
                    self.dynamodb, self.addresses_table_name, "address_id", address_ids
                )
            except (ClientError, RuntimeError) as e:
                logger.error(f"Failed to load order addresses: {e}")
                raise InternalError("Failed to load orders.") from e
            for raw in raw_addresses:
                address = Address.from_dynamodb_item(raw)
                addresses[address.id] = address

        return [
            Order.from_dynamodb_item(item, address=addresses.get(item.get("address_id", "")))
            for item in items
        ]

    @staticmethod
    def _newest_first(orders: list[Order]) -> list[Order]:
        return sorted(orders, key=lambda order: (order.created_at, order.id), reverse=True)
