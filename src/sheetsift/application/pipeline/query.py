"""Filter, search, sort and paginate a record set.

Transitions are pure functions of ``(records, state) -> state``. The view is
always recomputed from scratch in a fixed order: category and field filters,
then search, then sort, then the page slice. Sorting must see the whole
filtered set, never a single page.
"""

from __future__ import annotations

import math
import re
import threading
from dataclasses import replace
from functools import cmp_to_key
from typing import Any, Sequence

from sheetsift.application.pipeline.classify import NOT_APPLICABLE
from sheetsift.models.query import DEFAULT_PAGE_SIZE, Page, QueryState, SortDirection
from sheetsift.models.table import Record

# Plain decimal text only; float() would also take "1_000", "inf" or "nan".
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def total_pages(count: int, page_size: int) -> int:
    return max(1, math.ceil(count / max(page_size, 1)))


def _clean_field(field: str | None) -> str | None:
    if field is None:
        return None
    text = str(field).strip()
    return text or None


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def set_category_filter(state: QueryState, field: str | None) -> QueryState:
    return replace(state, category_filter=_clean_field(field))


def set_search_term(state: QueryState, text: str | None) -> QueryState:
    return replace(state, search_term=text or "")


def set_sort(state: QueryState, field: str | None) -> QueryState:
    """Sort by ``field``; choosing the current ascending key again flips to descending."""

    key = _clean_field(field)
    if key is None:
        return replace(state, sort_key=None, sort_direction=SortDirection.ASCENDING)
    if key == state.sort_key and state.sort_direction is SortDirection.ASCENDING:
        return replace(state, sort_direction=SortDirection.DESCENDING)
    return replace(state, sort_key=key, sort_direction=SortDirection.ASCENDING)


def set_page_size(state: QueryState, size: int) -> QueryState:
    return replace(state, page_size=max(1, int(size)), page_index=1)


def set_page_index(state: QueryState, index: int, *, records: Sequence[Record]) -> QueryState:
    pages = total_pages(len(compute_view(records, state)), state.page_size)
    return replace(state, page_index=min(max(1, int(index)), pages))


def set_field_filter(state: QueryState, field: str, text: str | None) -> QueryState:
    key = _clean_field(field)
    if key is None:
        return state
    filters = {name: value for name, value in state.field_filters if name != key}
    if text:
        filters[key] = text
    return replace(state, field_filters=tuple(filters.items()))


def clear_field_filters(state: QueryState) -> QueryState:
    return replace(state, field_filters=())


# ---------------------------------------------------------------------------
# View computation
# ---------------------------------------------------------------------------


def _text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip()
        if not _NUMBER_RE.fullmatch(text):
            return None
        number = float(text)
        return number if math.isfinite(number) else None
    return None


def compare_values(left: Any, right: Any) -> int:
    """Natural ordering: numeric when both sides are numbers, else case-sensitive text."""

    left_num, right_num = _as_number(left), _as_number(right)
    if left_num is not None and right_num is not None:
        a, b = left_num, right_num
    else:
        a, b = _text(left), _text(right)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def filter_by_category(records: Sequence[Record], field: str | None) -> list[Record]:
    if field is None:
        return list(records)
    return [r for r in records if field in r and r[field] != NOT_APPLICABLE]


def filter_by_fields(records: Sequence[Record], filters: Sequence[tuple[str, str]]) -> list[Record]:
    if not filters:
        return list(records)
    needles = [(name, text.casefold()) for name, text in filters]
    return [
        r
        for r in records
        if all(name in r and needle in _text(r[name]).casefold() for name, needle in needles)
    ]


def search_records(records: Sequence[Record], term: str) -> list[Record]:
    """Case-insensitive substring search over every field value.

    ``"N/A"`` placeholders count as absent, like missing fields.
    """

    if not term:
        return list(records)
    needle = term.casefold()
    return [
        r
        for r in records
        if any(value != NOT_APPLICABLE and needle in _text(value).casefold() for value in r.values())
    ]


def sort_records(
    records: Sequence[Record],
    key: str | None,
    direction: SortDirection = SortDirection.ASCENDING,
) -> list[Record]:
    """Stable sort on ``key``; records without the key go last in either direction."""

    if key is None:
        return list(records)

    present = [r for r in records if key in r]
    missing = [r for r in records if key not in r]

    if direction is SortDirection.DESCENDING:
        cmp = lambda a, b: compare_values(b[key], a[key])  # noqa: E731
    else:
        cmp = lambda a, b: compare_values(a[key], b[key])  # noqa: E731

    return sorted(present, key=cmp_to_key(cmp)) + missing


def compute_view(records: Sequence[Record], state: QueryState) -> list[Record]:
    view = filter_by_category(records, state.category_filter)
    view = filter_by_fields(view, state.field_filters)
    view = search_records(view, state.search_term)
    return sort_records(view, state.sort_key, state.sort_direction)


def paginate(view: Sequence[Record], state: QueryState) -> Page:
    pages = total_pages(len(view), state.page_size)
    current = min(max(1, state.page_index), pages)
    start = (current - 1) * state.page_size
    return Page(
        records=list(view[start : start + state.page_size]),
        total_count=len(view),
        total_pages=pages,
        current_page=current,
    )


# ---------------------------------------------------------------------------
# Stateful holder
# ---------------------------------------------------------------------------


class QueryEngine:
    """Holds the working record set and query state; keeps the view current.

    Every mutation recomputes the full view under a lock so readers never see
    a half-applied filter/sort/page sequence.
    """

    def __init__(
        self,
        records: Sequence[Record] | None = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        lock: threading.RLock | None = None,
    ) -> None:
        self._lock = lock or threading.RLock()
        self._records: list[Record] = list(records or [])
        self._state = QueryState(page_size=max(1, page_size))
        self._view: list[Record] = []
        self._recompute()

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def records(self) -> list[Record]:
        with self._lock:
            return list(self._records)

    def _recompute(self) -> None:
        view = compute_view(self._records, self._state)
        pages = total_pages(len(view), self._state.page_size)
        if self._state.page_index > pages:
            self._state = replace(self._state, page_index=pages)
        self._view = view

    def _apply(self, state: QueryState) -> QueryState:
        with self._lock:
            self._state = state
            self._recompute()
            return self._state

    # Dataset ----------------------------------------------------------
    def extend(self, records: Sequence[Record]) -> None:
        with self._lock:
            self._records.extend(records)
            self._recompute()

    def reset(self, *, page_size: int | None = None) -> None:
        with self._lock:
            self._records = []
            self._state = QueryState(page_size=max(1, page_size or self._state.page_size))
            self._recompute()

    # Transitions ------------------------------------------------------
    def set_category_filter(self, field: str | None) -> QueryState:
        with self._lock:
            return self._apply(set_category_filter(self._state, field))

    def set_search_term(self, text: str | None) -> QueryState:
        with self._lock:
            return self._apply(set_search_term(self._state, text))

    def set_sort(self, field: str | None) -> QueryState:
        with self._lock:
            return self._apply(set_sort(self._state, field))

    def set_page_size(self, size: int) -> QueryState:
        with self._lock:
            return self._apply(set_page_size(self._state, size))

    def set_page_index(self, index: int) -> QueryState:
        with self._lock:
            pages = total_pages(len(self._view), self._state.page_size)
            return self._apply(replace(self._state, page_index=min(max(1, int(index)), pages)))

    def set_field_filter(self, field: str, text: str | None) -> QueryState:
        with self._lock:
            return self._apply(set_field_filter(self._state, field, text))

    def clear_field_filters(self) -> QueryState:
        with self._lock:
            return self._apply(clear_field_filters(self._state))

    # Reads ------------------------------------------------------------
    def view(self) -> list[Record]:
        with self._lock:
            return list(self._view)

    def get_page(self) -> Page:
        with self._lock:
            return paginate(self._view, self._state)


__all__ = [
    "QueryEngine",
    "clear_field_filters",
    "compare_values",
    "compute_view",
    "filter_by_category",
    "filter_by_fields",
    "paginate",
    "search_records",
    "set_category_filter",
    "set_field_filter",
    "set_page_index",
    "set_page_size",
    "set_search_term",
    "set_sort",
    "sort_records",
    "total_pages",
]
