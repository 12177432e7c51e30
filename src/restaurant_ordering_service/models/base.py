"""Shared pydantic base for API-facing models."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Model serialized with camelCase aliases but populated by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def to_decimal(value: float | None) -> Decimal | None:
    """Convert a float coordinate to Decimal for DynamoDB storage."""
    if value is None:
        return None
    return Decimal(str(value))


def to_float(value: Any) -> float | None:
    """Convert a DynamoDB number back to float."""
    if value is None:
        return None
    return float(value)
