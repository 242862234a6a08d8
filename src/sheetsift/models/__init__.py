from sheetsift.models.errors import (
    ConfigError,
    DecodeError,
    EncodeError,
    NO_HEADER,
    NoHeaderFound,
    SheetsiftError,
)
from sheetsift.models.ingest import (
    ExportResult,
    IngestError,
    IngestErrorKind,
    IngestResult,
    IngestStatus,
)
from sheetsift.models.query import DEFAULT_PAGE_SIZE, Page, QueryState, SortDirection
from sheetsift.models.table import Cell, Grid, Record, SheetGrid, is_absent

__all__ = [
    "Cell",
    "ConfigError",
    "DEFAULT_PAGE_SIZE",
    "DecodeError",
    "EncodeError",
    "ExportResult",
    "Grid",
    "IngestError",
    "IngestErrorKind",
    "IngestResult",
    "IngestStatus",
    "NO_HEADER",
    "NoHeaderFound",
    "Page",
    "QueryState",
    "Record",
    "SheetGrid",
    "SheetsiftError",
    "SortDirection",
    "is_absent",
]
