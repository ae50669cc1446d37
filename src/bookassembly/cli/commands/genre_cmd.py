# ABOUTME: The `bookassembly genre` command group for managing genres.
# ABOUTME: Provides add, ls, and rm subcommands; rm also strips the genre from books.

from collections import Counter
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookassembly.cli.options import db_option, user_option
from bookassembly.db.catalog import DuplicateGenreError, LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library
from bookassembly.library.validation import RecordValidationError

console = Console()


@click.group("genre")
def genre() -> None:
    """Manage genres."""


@genre.command("add")
@click.argument("name")
@click.option("--color", default=None, help="Hex colour such as #3b82f6.")
@db_option
@user_option
def genre_add(name: str, color: str | None, db_path: Path | None, user_id: str) -> None:
    """Create a genre."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        try:
            catalog.add_genre(name, color)
        except (DuplicateGenreError, RecordValidationError) as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
        console.print(f"Created genre [cyan]{name}[/cyan].")
    finally:
        conn.close()


@genre.command("ls")
@db_option
@user_option
def genre_ls(db_path: Path | None, user_id: str) -> None:
    """List all genres with book counts."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        genres = catalog.list_genres()

        if not genres:
            console.print("[yellow]No genres in the library.[/yellow]")
            return

        counts = Counter(g for book in catalog.list_books() for g in book.genres)
        table = Table()
        table.add_column("Genre", style="cyan")
        table.add_column("Colour")
        table.add_column("Books", style="dim", justify="right")
        for record in genres:
            table.add_row(
                record.name,
                f"[{record.color}]■[/{record.color}] {record.color}",
                str(counts[record.id]),
            )

        console.print(table)
    finally:
        conn.close()


@genre.command("rm")
@click.argument("name")
@db_option
@user_option
def genre_rm(name: str, db_path: Path | None, user_id: str) -> None:
    """Delete a genre and remove it from every book."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        record = catalog.find_genre_by_name(name)
        if record is None:
            console.print(f"[red]Genre '{name}' not found.[/red]")
            raise SystemExit(1)

        updated = catalog.delete_genre(record.id)
        console.print(
            f"Deleted genre [cyan]{record.name}[/cyan] and removed it from {updated} book(s)."
        )
    finally:
        conn.close()
