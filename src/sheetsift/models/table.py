"""Grid and record types shared by the ingestion stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias

Cell: TypeAlias = str | int | float | None
Row: TypeAlias = list[Cell]
Grid: TypeAlias = list[Row]
Record: TypeAlias = dict[str, Any]


def is_absent(value: Any) -> bool:
    """Return True for cells that carry no value (``None`` or blank text)."""

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


@dataclass(frozen=True)
class SheetGrid:
    """One decoded worksheet: its title and raw cell grid."""

    sheet_name: str
    grid: Grid = field(default_factory=list)


__all__ = ["Cell", "Grid", "Record", "Row", "SheetGrid", "is_absent"]
