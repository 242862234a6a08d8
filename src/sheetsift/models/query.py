"""Query-side types.

``QueryState`` is the only mutable piece of a session and it is replaced, never
edited in place: every transition in :mod:`sheetsift.application.pipeline.query`
returns a new instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sheetsift.models.table import Record

DEFAULT_PAGE_SIZE = 250


class SortDirection(str, Enum):
    """Ordering applied to the sort key."""

    ASCENDING = "ascending"
    DESCENDING = "descending"


@dataclass(frozen=True)
class QueryState:
    """Current filter/search/sort/pagination configuration."""

    category_filter: str | None = None
    search_term: str = ""
    sort_key: str | None = None
    sort_direction: SortDirection = SortDirection.ASCENDING
    page_index: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    # field name -> substring; every entry must match
    field_filters: tuple[tuple[str, str], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Page:
    """One page of the current view plus the counts a renderer needs."""

    records: list[Record]
    total_count: int
    total_pages: int
    current_page: int


__all__ = ["DEFAULT_PAGE_SIZE", "Page", "QueryState", "SortDirection"]
