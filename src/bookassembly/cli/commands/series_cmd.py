# ABOUTME: The `bookassembly series` command group for managing book series.
# ABOUTME: Provides add, ls, and rm subcommands; removed series leave orphaned links behind.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookassembly.cli.options import db_option, short_id, user_option
from bookassembly.db.catalog import LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library
from bookassembly.library.types import SeriesRecord
from bookassembly.library.validation import RecordValidationError

console = Console()


@click.group("series")
def series() -> None:
    """Manage book series."""


@series.command("add")
@click.argument("name")
@click.option("--description", default=None)
@click.option("--total", "total_books", type=int, default=None, help="Books in the series.")
@db_option
@user_option
def series_add(
    name: str, description: str | None, total_books: int | None, db_path: Path | None, user_id: str
) -> None:
    """Create a series."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        if catalog.find_series_by_name(name) is not None:
            console.print(f"[red]Series '{name}' already exists.[/red]")
            raise SystemExit(1)
        try:
            series_id = catalog.add_series(
                SeriesRecord(id="", name=name, description=description, total_books=total_books)
            )
        except RecordValidationError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
        console.print(f"Created series [cyan]{name}[/cyan] ({short_id(series_id)}).")
    finally:
        conn.close()


@series.command("ls")
@db_option
@user_option
def series_ls(db_path: Path | None, user_id: str) -> None:
    """List series with the number of books owned."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        records = catalog.list_series()

        if not records:
            console.print("[yellow]No series in the library.[/yellow]")
            return

        table = Table()
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Series", style="cyan")
        table.add_column("Owned", justify="right")
        for record in records:
            owned = len(catalog.get_books_by_series(record.id))
            progress = f"{owned}/{record.total_books}" if record.total_books else str(owned)
            table.add_row(short_id(record.id), record.name, progress)

        console.print(table)
    finally:
        conn.close()


@series.command("rm")
@click.argument("name")
@db_option
@user_option
def series_rm(name: str, db_path: Path | None, user_id: str) -> None:
    """Delete a series by name or ID. Its books keep their link until fixed."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        record = catalog.find_series_by_name(name) or catalog.get_series(name)
        if record is None:
            console.print(f"[red]Series '{name}' not found.[/red]")
            raise SystemExit(1)

        linked = len(catalog.get_books_by_series(record.id))
        catalog.delete_series(record.id)
        console.print(f"Deleted series [cyan]{record.name}[/cyan].")
        if linked:
            console.print(
                f"[yellow]{linked} book(s) still point at it; "
                "`bookassembly health` lists them.[/yellow]"
            )
    finally:
        conn.close()
