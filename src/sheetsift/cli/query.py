"""`sheetsift query` command."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from sheetsift.application.engine import Engine
from sheetsift.infrastructure.observability.context import create_session_logger_context
from sheetsift.infrastructure.settings import Settings
from sheetsift.models.errors import EncodeError
from sheetsift.models.ingest import IngestStatus

from .common import (
    LOG_FORMAT_OPTION,
    LOG_LEVEL_OPTION,
    QUIET_OPTION,
    LogFormat,
    OutputFormat,
    parse_field_filters,
    render_json,
    render_table,
    resolve_logging,
)


def query_command(
    files: List[Path] = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Spreadsheet files (.xlsx, .xlsm, .csv) to ingest, in order.",
    ),
    category: Optional[str] = typer.Option(
        None,
        "--category",
        "-c",
        help="Keep only records with a value (other than N/A) in this field.",
    ),
    search: str = typer.Option("", "--search", "-s", help="Case-insensitive text searched in every field."),
    field_filter: List[str] = typer.Option(
        [],
        "--filter",
        "-f",
        help="FIELD=TEXT; keep records whose FIELD contains TEXT. Repeatable.",
    ),
    sort: Optional[str] = typer.Option(None, "--sort", help="Field to sort by."),
    descending: bool = typer.Option(False, "--desc", help="Sort descending (requires --sort)."),
    page: int = typer.Option(1, "--page", "-p", help="1-based page number; clamped to the last page."),
    page_size: Optional[int] = typer.Option(None, "--page-size", help="Records per page (default: settings)."),
    classify: Optional[bool] = typer.Option(
        None,
        "--classify/--no-classify",
        help="Add canonical category fields (default: settings).",
    ),
    header_keyword: List[str] = typer.Option(
        [],
        "--header-keyword",
        "-k",
        help="Keyword marking the header row within the first rows. Repeatable.",
    ),
    output_format: OutputFormat = typer.Option(OutputFormat.table, "--format", case_sensitive=False),
    export: Optional[Path] = typer.Option(
        None,
        "--export",
        "-o",
        dir_okay=False,
        resolve_path=True,
        help="Write the full filtered/sorted view to this .xlsx file.",
    ),
    log_format: Optional[LogFormat] = LOG_FORMAT_OPTION,
    log_level: Optional[str] = LOG_LEVEL_OPTION,
    quiet: bool = QUIET_OPTION,
) -> None:
    """Ingest FILES, apply the query and print one page of records."""

    if descending and not sort:
        raise typer.BadParameter("--desc requires --sort", param_hint="desc")
    if export is not None and export.suffix.lower() != ".xlsx":
        raise typer.BadParameter("--export must end with .xlsx", param_hint="export")

    filters = parse_field_filters(field_filter)

    overrides: dict = {}
    if page_size is not None:
        overrides["page_size"] = max(1, page_size)
    if classify is not None:
        overrides["classify"] = classify
    if header_keyword:
        overrides["header_keywords"] = header_keyword
    settings = Settings(**overrides)

    effective_format, effective_level = resolve_logging(
        log_format=log_format,
        log_level=log_level,
        quiet=quiet,
        settings=settings,
    )

    with create_session_logger_context(log_format=effective_format, log_level=effective_level) as log_ctx:
        engine = Engine(settings=settings, logger=log_ctx.logger)
        engine.log_settings()

        result = engine.ingest_paths(files)
        for error in result.errors:
            where = f"{error.filename}:{error.sheet_name}" if error.sheet_name else error.filename
            typer.echo(f"warning: {where}: {error.message}", err=True)
        if result.status is IngestStatus.FAILED:
            typer.echo("error: no records could be ingested", err=True)
            raise typer.Exit(code=1)

        if category:
            engine.set_category_filter(category)
        for name, text in filters:
            engine.set_field_filter(name, text)
        if search:
            engine.set_search_term(search)
        if sort:
            engine.set_sort(sort)
            if descending:
                engine.set_sort(sort)
        engine.set_page_index(page)

        current = engine.get_page()
        if output_format is OutputFormat.json:
            typer.echo(render_json(current))
        else:
            typer.echo(render_table(current, engine.columns()))

        if export is not None:
            try:
                exported = engine.export()
            except EncodeError as exc:
                typer.echo(f"error: export failed: {exc}", err=True)
                raise typer.Exit(code=1)
            export.parent.mkdir(parents=True, exist_ok=True)
            export.write_bytes(exported.payload)
            typer.echo(f"Exported {exported.row_count} records to {export}", err=True)


__all__ = ["query_command"]
