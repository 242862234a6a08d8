"""Workbook IO helpers: decode uploaded payloads into grids and encode workbooks back to bytes."""

from __future__ import annotations

import csv
import io
import re
import zipfile
from datetime import date, datetime, time
from pathlib import PurePath
from typing import Any, Iterable

import openpyxl
from openpyxl import Workbook
from openpyxl.utils.exceptions import InvalidFileException

from sheetsift.models.errors import DecodeError
from sheetsift.models.table import Cell, Grid, Row, SheetGrid, is_absent

ZIP_MAGIC = b"PK\x03\x04"
WORKBOOK_EXTENSIONS = {".xlsx", ".xlsm"}
CSV_EXTENSIONS = {".csv"}


def sheet_title(stem: str) -> str:
    """Normalize worksheet names to Excel-safe identifiers."""

    cleaned = re.sub(r"[^A-Za-z0-9]+", " ", stem).strip()
    cleaned = cleaned or "Sheet"
    return cleaned[:31]


def coerce_cell(value: Any) -> Cell:
    """Map a raw openpyxl/csv value onto the string | number | absent cell model."""

    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    text = value if isinstance(value, str) else str(value)
    return None if is_absent(text) else text


def _trim_row(values: Iterable[Any]) -> Row:
    row = [coerce_cell(value) for value in values]
    while row and row[-1] is None:
        row.pop()
    return row


def _trim_grid(rows: Iterable[Iterable[Any]]) -> Grid:
    grid = [_trim_row(values) for values in rows]
    while grid and not grid[-1]:
        grid.pop()
    return grid


def _read_workbook(payload: bytes, name: str) -> list[SheetGrid]:
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(payload), read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException, KeyError, OSError, ValueError) as exc:
        raise DecodeError(f"'{name}' is not a readable workbook: {exc}", filename=name) from exc

    try:
        sheets: list[SheetGrid] = []
        for worksheet in workbook.worksheets:
            if getattr(worksheet, "sheet_state", "visible") != "visible":
                continue
            grid = _trim_grid(worksheet.iter_rows(values_only=True))
            sheets.append(SheetGrid(sheet_name=worksheet.title, grid=grid))
        return sheets
    except (zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise DecodeError(f"'{name}' has unreadable worksheet data: {exc}", filename=name) from exc
    finally:
        workbook.close()


def _read_csv(payload: bytes, name: str) -> list[SheetGrid]:
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"'{name}' is not UTF-8 encoded CSV: {exc}", filename=name) from exc

    # Lift the reader's 128 KiB per-field cap to the payload size.
    csv.field_size_limit(max(csv.field_size_limit(), len(text)))
    try:
        rows = list(csv.reader(io.StringIO(text, newline="")))
    except csv.Error as exc:
        raise DecodeError(f"'{name}' is not valid CSV: {exc}", filename=name) from exc

    return [SheetGrid(sheet_name=sheet_title(PurePath(name).stem), grid=_trim_grid(rows))]


def read_sheets(
    payload: bytes,
    filename: str | None = None,
    *,
    supported_extensions: Iterable[str] | None = None,
) -> list[SheetGrid]:
    """Decode ``payload`` into ``SheetGrid`` objects in workbook order.

    The container is recognized by its zip signature (xlsx/xlsm) or by the
    ``.csv`` extension. Anything else raises :class:`DecodeError`.
    """

    name = filename or "upload"
    suffix = PurePath(name).suffix.lower()

    if supported_extensions is not None and suffix:
        allowed = {ext.lower() for ext in supported_extensions}
        if suffix not in allowed:
            raise DecodeError(f"'{name}' has unsupported extension '{suffix}'", filename=name)

    if not payload:
        raise DecodeError(f"'{name}' is empty", filename=name)

    if payload.startswith(ZIP_MAGIC) or suffix in WORKBOOK_EXTENSIONS:
        return _read_workbook(payload, name)
    if suffix in CSV_EXTENSIONS:
        return _read_csv(payload, name)

    raise DecodeError(f"'{name}' is not a recognizable spreadsheet container", filename=name)


def create_output_workbook() -> Workbook:
    """Create a clean output workbook with no default sheet."""

    workbook = Workbook()
    if workbook.worksheets:
        workbook.remove(workbook.worksheets[0])
    return workbook


def workbook_to_bytes(workbook: Workbook) -> bytes:
    buffer = io.BytesIO()
    try:
        workbook.save(buffer)
    finally:
        workbook.close()
    return buffer.getvalue()


__all__ = [
    "coerce_cell",
    "create_output_workbook",
    "read_sheets",
    "sheet_title",
    "workbook_to_bytes",
]
