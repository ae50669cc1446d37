# ABOUTME: The `bookassembly ls` command for listing catalogued books.
# ABOUTME: Applies the filter/sort engine and renders the result as a Rich table.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookassembly.cli.options import db_option, short_id, user_option
from bookassembly.core.filters import (
    STATUS_LABELS,
    FilterSpec,
    ReadingStatus,
    SortDirection,
    SortField,
    SortSpec,
    filter_and_sort,
    get_book_status,
)
from bookassembly.db.catalog import LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library

console = Console()


def format_position(position: float | None) -> str:
    return f"#{position:g}" if position is not None else ""


@click.command("ls")
@click.option("--search", "-s", default=None, help="Match text in title or author.")
@click.option("--author", default=None, help="Filter by author.")
@click.option("--genre", "genre_names", multiple=True, help="Filter by genre name (repeatable).")
@click.option("--series", "series_names", multiple=True, help="Filter by series name (repeatable).")
@click.option("--min-rating", type=click.FloatRange(0, 5), default=None)
@click.option(
    "--status",
    "statuses",
    multiple=True,
    type=click.Choice([s.value for s in ReadingStatus]),
    help="Filter by reading status (repeatable).",
)
@click.option(
    "--sort",
    "sort_field",
    type=click.Choice([f.value for f in SortField]),
    default=SortField.CREATED_AT.value,
    show_default=True,
)
@click.option("--asc/--desc", "ascending", default=False, help="Sort direction (default: desc).")
@click.option("--all", "include_deleted", is_flag=True, help="Include books in the bin.")
@db_option
@user_option
def ls(
    search: str | None,
    author: str | None,
    genre_names: tuple[str, ...],
    series_names: tuple[str, ...],
    min_rating: float | None,
    statuses: tuple[str, ...],
    sort_field: str,
    ascending: bool,
    include_deleted: bool,
    db_path: Path | None,
    user_id: str,
) -> None:
    """List books in the library."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)

        genre_ids = set()
        for name in genre_names:
            genre = catalog.find_genre_by_name(name)
            if genre is None:
                console.print(f"[red]Genre '{name}' not found.[/red]")
                raise SystemExit(1)
            genre_ids.add(genre.id)

        series_ids = set()
        for name in series_names:
            match = catalog.find_series_by_name(name)
            if match is None:
                console.print(f"[red]Series '{name}' not found.[/red]")
                raise SystemExit(1)
            series_ids.add(match.id)

        spec = FilterSpec(
            search=search,
            genre_ids=genre_ids,
            series_ids=series_ids,
            min_rating=min_rating,
            statuses={ReadingStatus(s) for s in statuses},
            author=author,
            include_deleted=include_deleted,
        )
        sort = SortSpec(
            field=SortField(sort_field),
            direction=SortDirection.ASC if ascending else SortDirection.DESC,
        )
        records = filter_and_sort(catalog.list_all_books(), spec, sort)

        if not records:
            console.print("[yellow]No books match.[/yellow]")
            return

        series_names_by_id = {s.id: s.name for s in catalog.list_series()}
        table = Table()
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Title", style="bold")
        table.add_column("Author")
        table.add_column("Series")
        table.add_column("Rating", justify="right")
        table.add_column("Status")

        for record in records:
            series_display = ""
            if record.series_id:
                name = series_names_by_id.get(record.series_id, "[dim]missing[/dim]")
                series_display = f"{name} {format_position(record.series_position)}".strip()
            title = record.title
            if record.is_deleted:
                title += " [dim](bin)[/dim]"
            table.add_row(
                short_id(record.id),
                title,
                record.author,
                series_display,
                f"{record.rating:g}" if record.rating is not None else "",
                STATUS_LABELS[get_book_status(record)],
            )

        console.print(table)
        console.print(f"\n[dim]{len(records)} book(s)[/dim]")
    finally:
        conn.close()
