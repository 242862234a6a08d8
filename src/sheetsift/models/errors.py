"""sheetsift error hierarchy."""

from __future__ import annotations


class SheetsiftError(Exception):
    """Base class for sheetsift-specific exceptions."""


class ConfigError(SheetsiftError):
    """Raised when settings or the category table are invalid."""


class DecodeError(SheetsiftError):
    """Raised when a payload is not a recognizable spreadsheet container."""

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        super().__init__(message)
        self.filename = filename


class EncodeError(SheetsiftError):
    """Raised when the current view cannot be serialized to a workbook."""


class NoHeaderFound:
    """Sentinel returned when a grid has no row with a non-empty cell.

    Not an exception: callers skip the grid and carry on with its siblings.
    """

    _instance: "NoHeaderFound | None" = None

    def __new__(cls) -> "NoHeaderFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_HEADER"


NO_HEADER = NoHeaderFound()


__all__ = [
    "ConfigError",
    "DecodeError",
    "EncodeError",
    "NO_HEADER",
    "NoHeaderFound",
    "SheetsiftError",
]
