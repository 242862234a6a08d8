"""Turn grid rows below a header into records."""

from __future__ import annotations

from typing import Iterable

from sheetsift.models.table import Grid, Record, Row, is_absent


def header_keys(header_row: Row) -> list[tuple[int, str]]:
    """Return ``(column_index, trimmed_name)`` for every non-empty header cell."""

    keys: list[tuple[int, str]] = []
    for col_idx, cell in enumerate(header_row):
        if is_absent(cell):
            continue
        keys.append((col_idx, str(cell).strip()))
    return keys


def build_record(keys: list[tuple[int, str]], row: Row) -> Record:
    record: Record = {}
    for col_idx, name in keys:
        if col_idx >= len(row):
            continue
        value = row[col_idx]
        if is_absent(value):
            continue
        # Later duplicate header names overwrite earlier ones.
        record[name] = value
    return record


def normalize_grid(grid: Grid, header_index: int) -> list[Record]:
    """Build records for every row below ``header_index``; empty records are dropped."""

    if header_index < 0 or header_index >= len(grid):
        return []

    keys = header_keys(grid[header_index])
    if not keys:
        return []

    records: list[Record] = []
    for row in grid[header_index + 1 :]:
        record = build_record(keys, row)
        if record:
            records.append(record)
    return records


def merge_records(batches: Iterable[Iterable[Record]]) -> list[Record]:
    """Concatenate record batches in the given order. Duplicates are kept."""

    merged: list[Record] = []
    for batch in batches:
        merged.extend(batch)
    return merged


__all__ = ["build_record", "header_keys", "merge_records", "normalize_grid"]
