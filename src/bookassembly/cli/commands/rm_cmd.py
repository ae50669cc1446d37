# ABOUTME: The `bookassembly rm` command for moving a book to the bin.
# ABOUTME: Books in the bin can be restored until they are purged.

from pathlib import Path

import click
from rich.console import Console

from bookassembly.cli.options import db_option, resolve_book, user_option
from bookassembly.db.catalog import BIN_RETENTION_DAYS, LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library

console = Console()


@click.command("rm")
@click.argument("book_ref")
@db_option
@user_option
def rm(book_ref: str, db_path: Path | None, user_id: str) -> None:
    """Move a book to the bin."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        record = resolve_book(catalog, book_ref, include_deleted=False)
        if record is None:
            console.print(f"[red]Book {book_ref} not found.[/red]")
            raise SystemExit(1)

        catalog.soft_delete_book(record.id)
        console.print(
            f"Moved [bold]{record.title}[/bold] to the bin. "
            f"It will be kept for {BIN_RETENTION_DAYS} days."
        )
    finally:
        conn.close()
