"""DynamoDB repository for delivery zones.

Lookups return None for a missing zone. Storage failures raise InternalError;
an unreadable catalog is never reported as an empty one.
"""

import logging
from typing import Any

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_ordering_service.errors import InternalError, NotFoundError
from restaurant_ordering_service.models.zone_models import DeliveryZone

logger = logging.getLogger(__name__)


def _is_conditional_check_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class DeliveryZoneRepository:
    """Repository for delivery zone CRUD operations.

    Manages zone records in DynamoDB with zone_id as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def get_zone(self, zone_id: str) -> DeliveryZone | None:
        """Retrieve a zone by ID.

        Args:
            zone_id: Zone identifier

        Returns:
            DeliveryZone if found, None otherwise

        Raises:
            InternalError: If DynamoDB fails
        """
        try:
            response = self.table.get_item(Key={"zone_id": zone_id})
        except ClientError as e:
            logger.error(f"Failed to get delivery zone {zone_id}: {e}")
            raise InternalError("Failed to load delivery zone.") from e

        if "Item" not in response:
            return None

        return DeliveryZone.from_dynamodb_item(response["Item"])

    def list_zones(self, active_only: bool = False) -> list[DeliveryZone]:
        """List zones ordered by creation time, oldest first.

        Ties on created_at are broken by zone_id so ordering is deterministic.

        Args:
            active_only: Only return zones with is_active set

        Returns:
            list: Zones in ascending creation order

        Raises:
            InternalError: If DynamoDB fails
        """
        scan_kwargs: dict[str, Any] = {}
        if active_only:
            scan_kwargs["FilterExpression"] = Attr("is_active").eq(True)

        items: list[dict[str, Any]] = []
        try:
            while True:
                response = self.table.scan(**scan_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            logger.error(f"Failed to scan delivery zones: {e}")
            raise InternalError("Failed to load delivery zones.") from e

        zones = [DeliveryZone.from_dynamodb_item(item) for item in items]
        return sorted(zones, key=lambda zone: (zone.created_at, zone.id))

    def save_zone(self, zone: DeliveryZone) -> DeliveryZone:
        """Create or replace a zone.

        Args:
            zone: DeliveryZone to save

        Returns:
            The saved zone

        Raises:
            InternalError: If DynamoDB fails
        """
        try:
            self.table.put_item(Item=zone.to_dynamodb_item())
        except ClientError as e:
            logger.error(f"Failed to save delivery zone {zone.id}: {e}")
            raise InternalError("Failed to save delivery zone.") from e

        return zone

    def delete_zone(self, zone_id: str) -> None:
        """Delete a zone.

        Args:
            zone_id: Zone identifier

        Raises:
            NotFoundError: If no zone has this ID
            InternalError: If DynamoDB fails
        """
        try:
            self.table.delete_item(
                Key={"zone_id": zone_id},
                ConditionExpression="attribute_exists(zone_id)",
            )
        except ClientError as e:
            if _is_conditional_check_failure(e):
                raise NotFoundError("Delivery zone not found.") from e
            logger.error(f"Failed to delete delivery zone {zone_id}: {e}")
            raise InternalError("Failed to delete delivery zone.") from e
