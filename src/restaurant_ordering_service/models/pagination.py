"""Pagination helpers shared by admin and customer listings."""

import math
from typing import Generic, TypeVar

from restaurant_ordering_service.models.base import ApiModel

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 10


class PaginatedResponse(ApiModel, Generic[T]):
    """One page of results plus totals."""

    items: list[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int


def resolve_page(page: int | None) -> int:
    return page if page and page > 0 else 1


def resolve_page_size(page_size: int | None, fallback: int = DEFAULT_PAGE_SIZE) -> int:
    return page_size if page_size and page_size > 0 else fallback


def paginate(items: list[T], page: int | None, page_size: int | None) -> PaginatedResponse[T]:
    """Slice an already-sorted list into a page.

    Args:
        items: Full, ordered result set
        page: Requested 1-based page (invalid values fall back to 1)
        page_size: Requested page size (invalid values fall back to 10)

    Returns:
        PaginatedResponse with at least one total page
    """
    resolved_page = resolve_page(page)
    resolved_size = resolve_page_size(page_size)
    start = (resolved_page - 1) * resolved_size

    return PaginatedResponse(
        items=items[start : start + resolved_size],
        page=resolved_page,
        page_size=resolved_size,
        total_items=len(items),
        total_pages=max(1, math.ceil(len(items) / resolved_size)),
    )
