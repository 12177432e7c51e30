"""Resolves the delivery address for an order request."""

import logging
import uuid
from datetime import UTC, datetime

from restaurant_ordering_service.errors import ValidationError
from restaurant_ordering_service.models.menu_models import Customer
from restaurant_ordering_service.models.order_models import (
    Address,
    AddressInput,
    FulfillmentType,
)
from restaurant_ordering_service.services.normalization import sanitize_string

logger = logging.getLogger(__name__)

ADDRESS_REQUIRED_MESSAGE = "Delivery address required."


class AddressResolver:
    """Picks and normalizes the address an order will be delivered to.

    Resolution order for DELIVERY orders:
    1. The address supplied with the request
    2. The authenticated customer's saved profile address
    3. Otherwise the request is rejected

    PICKUP orders never carry an address.
    """

    def resolve(
        self,
        fulfillment_type: FulfillmentType,
        address: AddressInput | None,
        customer: Customer | None,
    ) -> Address | None:
        """Resolve and validate the delivery address.

        Args:
            fulfillment_type: DELIVERY or PICKUP
            address: Address supplied with the request, if any
            customer: Authenticated customer, if any

        Returns:
            A new, unsaved Address for DELIVERY, None for PICKUP

        Raises:
            ValidationError: If a DELIVERY order has no usable address
        """
        if fulfillment_type == FulfillmentType.PICKUP:
            if address is not None:
                logger.debug("Ignoring address supplied with a pickup order")
            return None

        if address is None and customer is not None:
            address = self.from_profile(customer)

        if address is None:
            raise ValidationError(ADDRESS_REQUIRED_MESSAGE)

        line1 = sanitize_string(address.line1)
        city = sanitize_string(address.city)
        postcode = sanitize_string(address.postcode)
        if not line1 or not city or not postcode:
            raise ValidationError(ADDRESS_REQUIRED_MESSAGE)

        return Address(
            id=f"addr_{uuid.uuid4().hex}",
            line1=line1,
            line2=sanitize_string(address.line2),
            city=city,
            postcode=postcode,
            instructions=sanitize_string(address.instructions),
            latitude=address.latitude,
            longitude=address.longitude,
            created_at=datetime.now(UTC),
        )

    @staticmethod
    def from_profile(customer: Customer) -> AddressInput:
        """Build an address from a customer's saved profile fields."""
        return AddressInput(
            line1=customer.address_line1 or "",
            line2=customer.address_line2,
            city=customer.address_city or "",
            postcode=customer.address_postcode or "",
            instructions=customer.address_instructions,
        )
