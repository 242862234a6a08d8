"""Locate the header row inside a noisy sheet grid."""

from __future__ import annotations

import logging
from typing import Iterable

from sheetsift.infrastructure.observability.logger import SessionLogger
from sheetsift.models.errors import NO_HEADER, NoHeaderFound
from sheetsift.models.table import Grid, Row, is_absent

DEFAULT_SCAN_LIMIT = 5


def row_has_value(row: Row) -> bool:
    return any(not is_absent(cell) for cell in row)


def first_non_empty_row(grid: Grid) -> int | NoHeaderFound:
    for idx, row in enumerate(grid):
        if row_has_value(row):
            return idx
    return NO_HEADER


def _row_matches_keywords(row: Row, keywords: tuple[str, ...]) -> bool:
    for cell in row:
        if not isinstance(cell, str) or is_absent(cell):
            continue
        text = cell.strip().lower()
        if any(keyword in text for keyword in keywords):
            return True
    return False


def locate_header(
    grid: Grid,
    *,
    keywords: Iterable[str] | None = None,
    scan_limit: int = DEFAULT_SCAN_LIMIT,
    logger: SessionLogger | None = None,
) -> int | NoHeaderFound:
    """Return the index of the header row in ``grid``.

    Without ``keywords`` the first row holding any non-empty cell wins. With
    ``keywords`` only the first ``scan_limit`` rows are examined and the first
    row with a text cell containing a keyword wins; when none matches, the
    first non-empty row is used instead.

    Returns ``NO_HEADER`` when every row is empty.
    """

    normalized = tuple(k.strip().lower() for k in (keywords or ()) if k and k.strip())

    if normalized:
        for idx, row in enumerate(grid[: max(scan_limit, 1)]):
            if _row_matches_keywords(row, normalized):
                if logger and logger.isEnabledFor(logging.DEBUG):
                    logger.debug("Header row matched keywords", extra={"data": {"row_index": idx}})
                return idx

    return first_non_empty_row(grid)


__all__ = ["DEFAULT_SCAN_LIMIT", "first_non_empty_row", "locate_header", "row_has_value"]
