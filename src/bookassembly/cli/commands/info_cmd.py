# ABOUTME: The `bookassembly info` command for displaying one book in detail.
# ABOUTME: Shows every stored field plus derived status, completeness, and series name.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookassembly.cli.options import db_option, resolve_book, user_option
from bookassembly.core.filters import STATUS_LABELS, get_book_status
from bookassembly.core.health import calculate_book_completeness
from bookassembly.db.catalog import LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library
from bookassembly.library.timestamps import to_datetime

console = Console()


def _format_timestamp(value: object) -> str:
    resolved = to_datetime(value)
    return resolved.strftime("%Y-%m-%d %H:%M") if resolved else "?"


@click.command("info")
@click.argument("book_ref")
@db_option
@user_option
def info(book_ref: str, db_path: Path | None, user_id: str) -> None:
    """Show detailed metadata for a book by ID (or unique ID prefix)."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        record = resolve_book(catalog, book_ref)

        if record is None:
            console.print(f"[red]Book {book_ref} not found.[/red]")
            raise SystemExit(1)

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Field", style="bold", width=14)
        table.add_column("Value")

        table.add_row("ID", record.id)
        table.add_row("Title", record.title)
        table.add_row("Author", record.author)
        if record.isbn:
            table.add_row("ISBN", record.isbn)
        if record.publisher:
            table.add_row("Publisher", record.publisher)
        if record.published_date:
            table.add_row("Published", record.published_date)
        if record.physical_format:
            table.add_row("Format", record.physical_format)
        if record.page_count:
            table.add_row("Pages", str(record.page_count))
        if record.rating is not None:
            table.add_row("Rating", f"{record.rating:g}/5")
        if record.series_id:
            series = catalog.get_series(record.series_id)
            name = series.name if series and not series.is_deleted else "[red]missing series[/red]"
            if record.series_position is not None:
                name = f"{name} #{record.series_position:g}"
            table.add_row("Series", name)
        if record.genres:
            genres = catalog.genre_lookup()
            table.add_row(
                "Genres",
                ", ".join(genres[g].name if g in genres else f"?{g[:8]}" for g in record.genres),
            )
        table.add_row("Status", STATUS_LABELS[get_book_status(record)])
        for index, read in enumerate(record.reads, start=1):
            started = _format_timestamp(read.started_at) if read.started_at else "?"
            finished = _format_timestamp(read.finished_at) if read.finished_at else "…"
            table.add_row(f"Read {index}", f"{started} → {finished}")
        if record.cover_image_url:
            table.add_row("Cover", record.cover_image_url)
        if record.notes:
            table.add_row("Notes", record.notes)
        table.add_row("Completeness", f"{calculate_book_completeness(record)}%")
        table.add_row("Added", _format_timestamp(record.created_at))
        table.add_row("Modified", _format_timestamp(record.updated_at))
        if record.is_deleted:
            table.add_row("In bin since", _format_timestamp(record.deleted_at))

        console.print(table)
    finally:
        conn.close()
