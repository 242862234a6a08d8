"""Ingestion boundary: decode uploads concurrently and normalize them in input order."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Sequence

from sheetsift.application.pipeline.classify import FieldClassifier
from sheetsift.application.pipeline.header import locate_header
from sheetsift.application.pipeline.normalize import merge_records, normalize_grid
from sheetsift.infrastructure.io.workbook import read_sheets
from sheetsift.infrastructure.observability.logger import NullLogger, SessionLogger
from sheetsift.infrastructure.settings import Settings
from sheetsift.models.errors import DecodeError, NoHeaderFound
from sheetsift.models.ingest import IngestError, IngestErrorKind, IngestResult
from sheetsift.models.table import Record, SheetGrid

Upload = tuple[str, bytes]


def decode_upload(filename: str, payload: bytes, *, settings: Settings) -> list[SheetGrid]:
    """Decode one upload. Any failure surfaces as :class:`DecodeError`."""

    try:
        return read_sheets(payload, filename, supported_extensions=settings.supported_file_extensions)
    except DecodeError:
        raise
    except Exception as exc:
        raise DecodeError(f"'{filename}' could not be decoded: {exc}", filename=filename) from exc


def normalize_sheets(
    filename: str,
    sheets: Sequence[SheetGrid],
    *,
    settings: Settings,
    classifier: FieldClassifier | None,
    logger: SessionLogger,
) -> tuple[list[Record], list[IngestError]]:
    records: list[Record] = []
    errors: list[IngestError] = []

    for sheet in sheets:
        header_index = locate_header(
            sheet.grid,
            keywords=settings.header_keywords,
            scan_limit=settings.header_scan_limit,
            logger=logger,
        )
        if isinstance(header_index, NoHeaderFound):
            reason = "no row with a non-empty cell"
            errors.append(
                IngestError(
                    filename=filename,
                    kind=IngestErrorKind.NO_HEADER_FOUND,
                    message=f"Sheet '{sheet.sheet_name}' has {reason}",
                    sheet_name=sheet.sheet_name,
                )
            )
            logger.event(
                "sheet.skipped",
                message=f"Skipped sheet {sheet.sheet_name}",
                level=logging.WARNING,
                data={"filename": filename, "sheet_name": sheet.sheet_name, "reason": reason},
            )
            continue

        logger.event(
            "sheet.header_located",
            message=f"Header at row {header_index} on {sheet.sheet_name}",
            level=logging.DEBUG,
            data={
                "filename": filename,
                "sheet_name": sheet.sheet_name,
                "header_row_index": header_index,
                "header_columns": len(sheet.grid[header_index]),
            },
        )

        sheet_records = normalize_grid(sheet.grid, header_index)
        if classifier is not None:
            sheet_records = classifier.classify_all(sheet_records)

        logger.event(
            "sheet.normalized",
            message=f"Normalized {len(sheet_records)} records from {sheet.sheet_name}",
            data={
                "filename": filename,
                "sheet_name": sheet.sheet_name,
                "row_count": max(len(sheet.grid) - header_index - 1, 0),
                "record_count": len(sheet_records),
            },
        )
        records.extend(sheet_records)

    return records, errors


def ingest_uploads(
    uploads: Sequence[Upload],
    *,
    settings: Settings,
    classifier: FieldClassifier | None = None,
    logger: SessionLogger | None = None,
) -> IngestResult:
    """Decode ``uploads`` in parallel and merge their records in input order.

    Never raises for bad input: per-file and per-sheet failures are collected
    on the returned :class:`IngestResult`.
    """

    log = logger or NullLogger()
    result = IngestResult(file_count=len(uploads))
    if not uploads:
        return result

    log.event(
        "ingest.started",
        message=f"Ingesting {len(uploads)} file(s)",
        data={"file_count": len(uploads), "filenames": [name for name, _ in uploads]},
    )

    workers = min(settings.max_workers, len(uploads))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sheetsift-decode") as executor:
        futures: list[Future[list[SheetGrid]]] = [
            executor.submit(decode_upload, name, payload, settings=settings) for name, payload in uploads
        ]

        batches: list[list[Record]] = []
        # Input order, not completion order.
        for (name, _), future in zip(uploads, futures):
            try:
                sheets = future.result()
            except DecodeError as exc:
                result.errors.append(
                    IngestError(filename=name, kind=IngestErrorKind.DECODE_ERROR, message=str(exc))
                )
                log.event(
                    "file.failed",
                    message=f"Could not decode {name}",
                    level=logging.WARNING,
                    data={"filename": name, "error": str(exc)},
                )
                continue

            log.event(
                "file.decoded",
                message=f"Decoded {name}",
                level=logging.DEBUG,
                data={"filename": name, "sheet_count": len(sheets)},
            )
            records, errors = normalize_sheets(
                name,
                sheets,
                settings=settings,
                classifier=classifier,
                logger=log,
            )
            batches.append(records)
            result.errors.extend(errors)

    result.records = merge_records(batches)
    return result


__all__ = ["Upload", "decode_upload", "ingest_uploads", "normalize_sheets"]
