"""FastAPI dependencies for admin and customer authentication.

Admin routes require an X-API-Key header. Customer identity is established by
the upstream authorizer and arrives as a trusted X-Customer-Id header.
"""

from typing import Annotated

from fastapi import Header, HTTPException

from restaurant_ordering_service.auth.api_key_validator import APIKeyValidator


def get_api_key_from_header(
    x_api_key: Annotated[str | None, Header()] = None,
    validator: APIKeyValidator | None = None,
) -> str:
    """Extract and validate the admin API key.

    Args:
        x_api_key: API key from the X-API-Key header
        validator: Validator holding the configured keys

    Returns:
        str: The validated API key

    Raises:
        HTTPException: 401 if the key is missing or not accepted
    """
    if not x_api_key:
        raise HTTPException(status_code=401, detail="Missing API key")

    if validator is not None and not validator.validate(x_api_key):
        raise HTTPException(status_code=401, detail="Invalid API key")

    return x_api_key


def get_optional_customer_id(
    x_customer_id: Annotated[str | None, Header()] = None,
) -> str | None:
    """Return the authenticated customer's ID, or None for guests."""
    if x_customer_id is None:
        return None
    customer_id = x_customer_id.strip()
    return customer_id or None


def get_required_customer_id(
    x_customer_id: Annotated[str | None, Header()] = None,
) -> str:
    """Return the authenticated customer's ID.

    Raises:
        HTTPException: 401 if the request is not authenticated
    """
    customer_id = get_optional_customer_id(x_customer_id)
    if customer_id is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return customer_id
