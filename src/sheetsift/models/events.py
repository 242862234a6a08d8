"""Event payload schemas and schema registry for sheetsift logging.

Payload models are strict:
- ``extra="forbid"`` to prevent accidental schema drift
- runtime validation uses ``model_validate(..., strict=True)``
"""

from __future__ import annotations

from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

SHEETSIFT_NAMESPACE = "sheetsift"

VALID_LOG_FORMATS = {"text", "ndjson", "json"}  # "json" is an alias for ndjson
DEFAULT_EVENT = "log"  # fallback event for plain log lines

PayloadModel: TypeAlias = type[BaseModel] | None

NonNegativeInt = Annotated[int, Field(ge=0)]
PositiveInt = Annotated[int, Field(ge=1)]


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class IngestStartedPayload(StrictModel):
    file_count: NonNegativeInt
    filenames: list[str]


class IngestCompletedPayload(StrictModel):
    status: Literal["succeeded", "partial", "failed", "empty"]
    record_count: NonNegativeInt
    error_count: NonNegativeInt
    dataset_size: NonNegativeInt


class FileDecodedPayload(StrictModel):
    filename: str
    sheet_count: NonNegativeInt


class FileFailedPayload(StrictModel):
    filename: str
    error: str


class SheetHeaderLocatedPayload(StrictModel):
    filename: str
    sheet_name: str
    header_row_index: NonNegativeInt
    header_columns: NonNegativeInt


class SheetSkippedPayload(StrictModel):
    filename: str
    sheet_name: str
    reason: str


class SheetNormalizedPayload(StrictModel):
    filename: str
    sheet_name: str
    row_count: NonNegativeInt
    record_count: NonNegativeInt


class QueryChangedPayload(StrictModel):
    category_filter: str | None
    search_term: str
    sort_key: str | None
    sort_direction: Literal["ascending", "descending"]
    page_index: PositiveInt
    page_size: PositiveInt
    total_count: NonNegativeInt
    total_pages: PositiveInt


class ExportWrittenPayload(StrictModel):
    filename: str
    row_count: NonNegativeInt
    column_count: NonNegativeInt
    byte_count: NonNegativeInt


class ExportFailedPayload(StrictModel):
    row_count: NonNegativeInt
    error: str


# Registry:
# - Missing key: unregistered (strict sheetsift.* will error; others are open)
# - Value None: known-but-freeform payload (no validation)
# - Value BaseModel: validate + normalize payload through model
SHEETSIFT_EVENT_SCHEMAS: dict[str, PayloadModel] = {
    f"{SHEETSIFT_NAMESPACE}.{DEFAULT_EVENT}": None,
    f"{SHEETSIFT_NAMESPACE}.settings.effective": None,
    f"{SHEETSIFT_NAMESPACE}.ingest.started": IngestStartedPayload,
    f"{SHEETSIFT_NAMESPACE}.ingest.completed": IngestCompletedPayload,
    f"{SHEETSIFT_NAMESPACE}.file.decoded": FileDecodedPayload,
    f"{SHEETSIFT_NAMESPACE}.file.failed": FileFailedPayload,
    f"{SHEETSIFT_NAMESPACE}.sheet.header_located": SheetHeaderLocatedPayload,
    f"{SHEETSIFT_NAMESPACE}.sheet.skipped": SheetSkippedPayload,
    f"{SHEETSIFT_NAMESPACE}.sheet.normalized": SheetNormalizedPayload,
    f"{SHEETSIFT_NAMESPACE}.dataset.reset": None,
    f"{SHEETSIFT_NAMESPACE}.query.changed": QueryChangedPayload,
    f"{SHEETSIFT_NAMESPACE}.export.written": ExportWrittenPayload,
    f"{SHEETSIFT_NAMESPACE}.export.failed": ExportFailedPayload,
}


__all__ = [
    "DEFAULT_EVENT",
    "PayloadModel",
    "SHEETSIFT_EVENT_SCHEMAS",
    "SHEETSIFT_NAMESPACE",
    "VALID_LOG_FORMATS",
]
