# ABOUTME: The `bookassembly add` command for cataloguing a book.
# ABOUTME: Optionally looks the ISBN up online, checks for duplicates, then stores the record.

import logging
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console

from bookassembly.cli.options import db_option, short_id, user_option
from bookassembly.core.duplicates import Confidence, check_for_duplicate, find_duplicates
from bookassembly.db.catalog import LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library
from bookassembly.library.types import PHYSICAL_FORMATS, BookRecord, SeriesRecord
from bookassembly.library.validation import RecordValidationError
from bookassembly.metadata.http import BookAssemblyHttpClient
from bookassembly.metadata.lookup import BookLookup

console = Console()
logger = logging.getLogger(__name__)


def _create_lookup() -> BookLookup:
    """Build the online lookup. Patched out in tests."""
    return BookLookup(BookAssemblyHttpClient())


def _resolve_genres(catalog: LibraryCatalog, names: list[str]) -> list[str]:
    """Map genre names to ids, creating genres that do not exist yet."""
    ids: list[str] = []
    for name in names:
        genre = catalog.find_genre_by_name(name)
        if genre is not None:
            genre_id = genre.id
        else:
            try:
                genre_id = catalog.add_genre(name)
            except RecordValidationError:
                logger.warning("Skipping unusable genre name %r", name)
                continue
        if genre_id not in ids:
            ids.append(genre_id)
    return ids


def _resolve_series(catalog: LibraryCatalog, name: str) -> str:
    series = catalog.find_series_by_name(name)
    if series is not None:
        return series.id
    return catalog.add_series(SeriesRecord(id="", name=name))


@click.command("add")
@click.option("--title", default=None, help="Book title.")
@click.option("--author", default=None, help="Book author(s).")
@click.option("--isbn", default=None, help="ISBN-10 or ISBN-13; looked up online.")
@click.option("--no-lookup", is_flag=True, help="Do not look the ISBN up online.")
@click.option("--publisher", default=None)
@click.option("--published", "published_date", default=None, help="Publication date.")
@click.option(
    "--format",
    "physical_format",
    type=click.Choice([f for f in PHYSICAL_FORMATS if f], case_sensitive=False),
    default=None,
)
@click.option("--pages", "page_count", type=int, default=None)
@click.option("--rating", type=click.FloatRange(0, 5), default=None)
@click.option("--genre", "genres", multiple=True, help="Genre name (repeatable).")
@click.option("--series", "series_name", default=None, help="Series name.")
@click.option("--position", "series_position", type=float, default=None)
@click.option("--notes", default=None)
@click.option("--force", is_flag=True, help="Add even if the book looks like a duplicate.")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Restore binned duplicates without asking.")
@db_option
@user_option
def add(
    title: str | None,
    author: str | None,
    isbn: str | None,
    no_lookup: bool,
    publisher: str | None,
    published_date: str | None,
    physical_format: str | None,
    page_count: int | None,
    rating: float | None,
    genres: tuple[str, ...],
    series_name: str | None,
    series_position: float | None,
    notes: str | None,
    force: bool,
    assume_yes: bool,
    db_path: Path | None,
    user_id: str,
) -> None:
    """Add a book to the library."""
    record = BookRecord(id="", title="", author="")
    genre_names: list[str] = []

    if isbn and not no_lookup:
        found = _create_lookup().lookup_isbn(isbn)
        if found is None:
            console.print(f"[yellow]Nothing found online for ISBN {isbn}.[/yellow]")
        else:
            console.print(f"Found [bold]{found.title}[/bold] by {found.author or 'unknown'}.")
            record = found.to_record()
            genre_names = list(found.genres)
            if series_name is None and found.series_name:
                series_name = found.series_name
                if series_position is None and found.series_position is not None:
                    series_position = float(found.series_position)

    overrides = {
        "title": title,
        "author": author,
        "isbn": isbn,
        "publisher": publisher,
        "published_date": published_date,
        "physical_format": physical_format,
        "page_count": page_count,
        "rating": rating,
        "series_position": series_position,
        "notes": notes,
    }
    record = replace(record, **{k: v for k, v in overrides.items() if v is not None})
    genre_names.extend(genres)

    if not record.title or not record.author:
        console.print("[red]Title and author are required (or an ISBN that can be looked up).[/red]")
        raise SystemExit(1)

    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        existing = catalog.list_all_books()

        if not force:
            verdict = check_for_duplicate(record, existing, include_deleted=True)
            if verdict.is_duplicate and verdict.existing_book is not None:
                match = verdict.existing_book
                how = "ISBN" if verdict.match_type == "isbn" else "title and author"
                if match.is_deleted:
                    console.print(
                        f"[yellow]'{match.title}' matches by {how} and is in the bin.[/yellow]"
                    )
                    if assume_yes or click.confirm("Restore it instead?", default=True):
                        catalog.restore_book(match.id)
                        console.print(f"[green]Restored[/green] {match.title} ({short_id(match.id)}).")
                        return
                console.print(
                    f"[red]Already in library:[/red] {match.title} ({short_id(match.id)}), "
                    f"matched by {how}. Use --force to add anyway."
                )
                raise SystemExit(1)

        if series_name:
            record.series_id = _resolve_series(catalog, series_name)
        if genre_names:
            record.genres = _resolve_genres(catalog, genre_names)

        try:
            book_id = catalog.add_book(record)
        except RecordValidationError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc

        console.print(f"[green]Added[/green] {record.title} by {record.author} ({short_id(book_id)}).")

        hints = [
            m for m in find_duplicates(replace(record, id=book_id), existing)
            if m.confidence is Confidence.POSSIBLE
        ]
        for match in hints:
            console.print(
                f"  [dim]Possibly the same as {match.record.title} "
                f"by {match.record.author} ({short_id(match.record.id)})[/dim]"
            )
    finally:
        conn.close()
