"""
Pagination and list filters for dashboard tables.
"""

import datetime as dt
import math
from typing import Generic, Optional, Sequence, TypeVar

from pydantic import BaseModel

from freight_cms.data.models.enums import RecordStatus
from freight_cms.data.models.freight import Freight

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """One page of a table."""

    items: list[T]
    page: int
    limit: int
    total_items: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def label(self) -> str:
        return f"Página {self.page} de {self.total_pages}"


def paginate(items: Sequence[T], page: int = 1, limit: int = 10) -> Page[T]:
    """
    Slice a sequence into a page.

    Out-of-range page numbers are clamped to the first or last page; an empty
    sequence still has one (empty) page.

    Args:
        items: Full, already filtered and sorted sequence
        page: Requested 1-based page number
        limit: Page size

    Returns:
        Page with the clamped page number
    """
    if limit < 1:
        raise ValueError(f"Page size must be positive, got {limit}")

    total_items = len(items)
    total_pages = max(1, math.ceil(total_items / limit))
    page = min(max(page, 1), total_pages)

    start = (page - 1) * limit
    return Page(
        items=list(items[start : start + limit]),
        page=page,
        limit=limit,
        total_items=total_items,
        total_pages=total_pages,
    )


class FreightFilter(BaseModel):
    """Filters of the freight and financial tables."""

    driver_id: Optional[int] = None
    client: Optional[str] = None
    date: Optional[dt.date] = None
    status: Optional[RecordStatus] = None
    search: Optional[str] = None
    with_values_only: bool = False

    def matches(self, freight: Freight) -> bool:
        if self.driver_id is not None and freight.driver_id != self.driver_id:
            return False
        if self.client and freight.client != self.client:
            return False
        if self.date is not None and freight.date != self.date:
            return False
        if self.status is not None and freight.status != self.status:
            return False
        if self.with_values_only and not (freight.total_value > 0 or freight.total_value_transportadora > 0):
            return False
        if self.search:
            needle = self.search.lower()
            haystack = " ".join(
                filter(None, [freight.driver_name, freight.client, freight.plate])
            ).lower()
            if needle not in haystack:
                return False
        return True


def filter_freights(freights: Sequence[Freight], freight_filter: FreightFilter) -> list[Freight]:
    """Apply a filter and sort by date, newest first."""
    matched = [f for f in freights if freight_filter.matches(f)]
    return sorted(matched, key=lambda f: f.date, reverse=True)
