"""Serialize the current (unpaginated) view into an xlsx payload."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence

import polars as pl
from openpyxl.utils.exceptions import IllegalCharacterError
from openpyxl.worksheet.worksheet import Worksheet

from sheetsift.infrastructure.io.workbook import create_output_workbook, workbook_to_bytes
from sheetsift.models.errors import EncodeError
from sheetsift.models.ingest import ExportResult
from sheetsift.models.table import Record

MAX_ROWS = 1_048_576
MAX_COLUMNS = 16_384
MAX_CELL_TEXT = 32_767


@dataclass
class SheetWriter:
    """Worksheet writer that tracks an explicit row cursor.

    Text starting with ``=`` is written as a plain string so exported data is
    never turned into formulas.
    """

    worksheet: Worksheet
    row: int = 0  # last written row index (1-based); 0 means "nothing written yet"

    def write_row(self, values: Sequence[Any]) -> int:
        self.row += 1
        for col_idx, value in enumerate(values, start=1):
            if value is None:
                continue
            if isinstance(value, str) and len(value) > MAX_CELL_TEXT:
                raise EncodeError(
                    f"Cell at row {self.row}, column {col_idx} exceeds {MAX_CELL_TEXT} characters"
                )
            cell = self.worksheet.cell(row=self.row, column=col_idx, value=value)
            if isinstance(value, str) and cell.data_type == "f":
                cell.data_type = "s"
        return self.row


def view_columns(records: Sequence[Record]) -> list[str]:
    """Union of field names across ``records`` in first-seen order."""

    seen: dict[str, None] = {}
    for record in records:
        for name in record:
            seen.setdefault(name, None)
    return list(seen)


def build_export_frame(records: Sequence[Record], columns: Sequence[str] | None = None) -> pl.DataFrame:
    """One object column per field; absent fields become nulls."""

    columns = view_columns(records) if columns is None else columns
    return pl.DataFrame(
        [pl.Series(name, [record.get(name) for record in records], dtype=pl.Object) for name in columns]
    )


def suggested_filename(now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
    return f"sheetsift_export_{stamp}.xlsx"


def export_view(
    records: Sequence[Record],
    *,
    sheet_name: str = "Export",
    filename: str | None = None,
) -> ExportResult:
    """Write ``records`` to a single-sheet workbook and return its bytes."""

    headers = view_columns(records)
    if len(headers) > MAX_COLUMNS:
        raise EncodeError(f"View has {len(headers)} columns; xlsx allows at most {MAX_COLUMNS}")
    if len(records) + 1 > MAX_ROWS:
        raise EncodeError(f"View has {len(records)} rows; xlsx allows at most {MAX_ROWS - 1}")

    frame = build_export_frame(records, headers)

    workbook = create_output_workbook()
    try:
        writer = SheetWriter(workbook.create_sheet(title=sheet_name))
        if headers:
            writer.write_row(headers)
            for row in frame.iter_rows(named=False):
                writer.write_row(row)
        payload = workbook_to_bytes(workbook)
    except IllegalCharacterError as exc:
        raise EncodeError(f"View contains characters that cannot be stored in xlsx: {exc}") from exc
    except EncodeError:
        raise
    except (OSError, ValueError, TypeError) as exc:
        raise EncodeError(f"Failed to write workbook: {exc}") from exc
    finally:
        workbook.close()

    return ExportResult(
        payload=payload,
        filename=filename or suggested_filename(),
        row_count=len(records),
        column_count=len(headers),
    )


__all__ = [
    "MAX_COLUMNS",
    "MAX_ROWS",
    "SheetWriter",
    "build_export_frame",
    "export_view",
    "suggested_filename",
    "view_columns",
]
