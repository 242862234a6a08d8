"""CLI entrypoint for :mod:`sheetsift`.

- `query`   - ingest spreadsheets, filter/search/sort/paginate, optionally export.
- `version` - print the package version.
"""

from __future__ import annotations

import typer

from sheetsift import __version__
from sheetsift.cli.query import query_command


app = typer.Typer(
    help=(
        "sheetsift: normalize messy spreadsheets and query the rows.\n\n"
        "### Show the first page of two uploads\n"
        "```bash\n"
        "sheetsift query programs.xlsx extra.csv\n"
        "```\n\n"
        "### Filter, sort and export\n"
        "```bash\n"
        "sheetsift query programs.xlsx \\\n"
        "    --category Cost --search summer --sort Name --desc \\\n"
        "    --export filtered.xlsx\n"
        "```\n"
    ),
    no_args_is_help=True,
    rich_markup_mode="markdown",
)

app.command("query")(query_command)


@app.command("version")
def version_command() -> None:
    """Print the package version."""
    typer.echo(__version__)


def main() -> None:
    """Entrypoint used by console scripts and `python -m sheetsift`."""
    app()


__all__ = ["app", "main"]
