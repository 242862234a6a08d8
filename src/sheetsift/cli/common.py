"""Shared helpers/options for the sheetsift CLI.

Keep this module dependency-light; it should be safe to import from any CLI command module.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, List, Optional, Sequence

import typer
from typer import BadParameter

from sheetsift.infrastructure.settings import Settings
from sheetsift.models.query import Page


class LogFormat(str, Enum):
    """Supported log output formats."""

    text = "text"
    ndjson = "ndjson"


class OutputFormat(str, Enum):
    """How a page of records is printed."""

    table = "table"
    json = "json"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def resolve_log_level(log_level: Optional[str], default_level: int) -> int:
    """Resolve a string log level to a logging level constant."""
    if not log_level:
        return default_level

    mapping = logging.getLevelNamesMapping()
    resolved = mapping.get(str(log_level).upper())
    if isinstance(resolved, int):
        return resolved

    raise BadParameter(f"Invalid log level: {log_level}", param_hint="log_level")


def resolve_logging(
    *,
    log_format: Optional[LogFormat],
    log_level: Optional[str],
    quiet: bool,
    settings: Settings,
) -> tuple[str, int]:
    """Compute effective log format/level. ``--quiet`` beats ``--log-level``."""
    effective_format = log_format.value if log_format else settings.log_format
    effective_level = logging.WARNING if quiet else resolve_log_level(log_level, settings.log_level)
    return effective_format, effective_level


# ---------------------------------------------------------------------------
# Query options
# ---------------------------------------------------------------------------


def parse_field_filters(values: Sequence[str]) -> List[tuple[str, str]]:
    """Parse repeated ``FIELD=TEXT`` options."""

    parsed: List[tuple[str, str]] = []
    for raw in values:
        field, sep, text = raw.partition("=")
        if not sep or not field.strip():
            raise BadParameter(f"Expected FIELD=TEXT, got {raw!r}", param_hint="filter")
        parsed.append((field.strip(), text))
    return parsed


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _cell_text(value: Any, *, width: int = 40) -> str:
    if value is None:
        return ""
    text = str(value).replace("\n", " ")
    return text if len(text) <= width else text[: width - 1] + "…"


def render_table(page: Page, columns: Sequence[str]) -> str:
    """Plain aligned table of ``page`` restricted to ``columns`` that occur on it."""

    present = [c for c in columns if any(c in record for record in page.records)]
    header = [_cell_text(c) for c in present]
    rows = [[_cell_text(record.get(c)) for c in present] for record in page.records]

    widths = [len(h) for h in header]
    for row in rows:
        for idx, cell in enumerate(row):
            widths[idx] = max(widths[idx], len(cell))

    def _line(cells: Sequence[str]) -> str:
        return "  ".join(cell.ljust(widths[idx]) for idx, cell in enumerate(cells)).rstrip()

    lines = []
    if present:
        lines.append(_line(header))
        lines.append(_line(["-" * w for w in widths]))
        lines.extend(_line(row) for row in rows)
    lines.append(f"Page {page.current_page} of {page.total_pages} ({page.total_count} records)")
    return "\n".join(lines)


def render_json(page: Page) -> str:
    payload = {
        "records": page.records,
        "total_count": page.total_count,
        "total_pages": page.total_pages,
        "current_page": page.current_page,
    }
    return json.dumps(payload, ensure_ascii=False, default=str)


LOG_FORMAT_OPTION = typer.Option(
    None,
    "--log-format",
    case_sensitive=False,
    help="Log output format (default: settings or text).",
)
LOG_LEVEL_OPTION = typer.Option(
    None,
    "--log-level",
    help="Log level (debug, info, warning, error).",
)
QUIET_OPTION = typer.Option(
    False,
    "--quiet",
    "-q",
    help="Only log warnings and errors.",
)


__all__ = [
    "LOG_FORMAT_OPTION",
    "LOG_LEVEL_OPTION",
    "LogFormat",
    "OutputFormat",
    "QUIET_OPTION",
    "parse_field_filters",
    "render_json",
    "render_table",
    "resolve_log_level",
    "resolve_logging",
]
