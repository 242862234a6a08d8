"""Ingestion and export outcome types.

These mirror the shape of the ingestion boundary: successes and failures travel
together so callers can tell partial success apart from total failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sheetsift.models.table import Record


class IngestErrorKind(str, Enum):
    """Categorization for per-file and per-sheet ingestion failures."""

    DECODE_ERROR = "decode_error"
    NO_HEADER_FOUND = "no_header_found"


class IngestStatus(str, Enum):
    """Overall ingestion outcome."""

    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"
    EMPTY = "empty"


@dataclass(frozen=True)
class IngestError:
    """A single file or sheet that could not be ingested."""

    filename: str
    kind: IngestErrorKind
    message: str
    sheet_name: str | None = None


@dataclass
class IngestResult:
    """Records added by one ingestion call and the errors collected on the way."""

    records: list[Record] = field(default_factory=list)
    errors: list[IngestError] = field(default_factory=list)
    file_count: int = 0

    @property
    def failed_files(self) -> set[str]:
        return {err.filename for err in self.errors if err.kind is IngestErrorKind.DECODE_ERROR}

    @property
    def status(self) -> IngestStatus:
        if self.file_count == 0:
            return IngestStatus.EMPTY
        if not self.errors:
            return IngestStatus.SUCCEEDED
        if self.records:
            return IngestStatus.PARTIAL
        return IngestStatus.FAILED


@dataclass(frozen=True)
class ExportResult:
    """Serialized view ready to hand to the caller."""

    payload: bytes
    filename: str
    row_count: int
    column_count: int


__all__ = [
    "ExportResult",
    "IngestError",
    "IngestErrorKind",
    "IngestResult",
    "IngestStatus",
]
