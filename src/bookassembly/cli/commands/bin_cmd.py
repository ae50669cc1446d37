# ABOUTME: The `bookassembly bin` command group for soft-deleted books.
# ABOUTME: Provides ls, restore, purge, and empty subcommands.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookassembly.cli.options import db_option, resolve_book, short_id, user_option
from bookassembly.db.catalog import BIN_RETENTION_DAYS, LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library
from bookassembly.library.timestamps import now_ms, to_datetime

console = Console()

_DAY_SECONDS = 24 * 60 * 60


def _days_left(deleted_at: object, now: int) -> int:
    """Whole days until a binned book becomes eligible for purge."""
    deleted = to_datetime(deleted_at)
    if deleted is None:
        return 0
    elapsed = now / 1000 - deleted.timestamp()
    return max(0, BIN_RETENTION_DAYS - int(elapsed // _DAY_SECONDS))


@click.group("bin")
def bin_group() -> None:
    """Manage books in the bin."""


@bin_group.command("ls")
@db_option
@user_option
def bin_ls(db_path: Path | None, user_id: str) -> None:
    """List books in the bin, most recently deleted first."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        records = catalog.list_bin()

        if not records:
            console.print("[yellow]The bin is empty.[/yellow]")
            return

        now = now_ms()
        table = Table()
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Title", style="bold")
        table.add_column("Author")
        table.add_column("Days left", justify="right")

        for record in records:
            table.add_row(
                short_id(record.id),
                record.title,
                record.author,
                str(_days_left(record.deleted_at, now)),
            )

        console.print(table)
        console.print(f"\n[dim]{len(records)} book(s) in the bin[/dim]")
    finally:
        conn.close()


@bin_group.command("restore")
@click.argument("book_ref")
@db_option
@user_option
def bin_restore(book_ref: str, db_path: Path | None, user_id: str) -> None:
    """Restore a book from the bin."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        record = resolve_book(catalog, book_ref)
        if record is None or not record.is_deleted:
            console.print(f"[red]Book {book_ref} is not in the bin.[/red]")
            raise SystemExit(1)

        catalog.restore_book(record.id)
        console.print(f"[green]Restored[/green] {record.title}.")
    finally:
        conn.close()


@bin_group.command("purge")
@click.option(
    "--days",
    type=click.IntRange(min=0),
    default=BIN_RETENTION_DAYS,
    show_default=True,
    help="Purge books that have been in the bin at least this long.",
)
@db_option
@user_option
def bin_purge(days: int, db_path: Path | None, user_id: str) -> None:
    """Permanently delete books that have outlived the retention window."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        purged = catalog.purge_expired(retention_days=days)
        console.print(f"Purged {len(purged)} book(s).")
    finally:
        conn.close()


@bin_group.command("empty")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Do not ask for confirmation.")
@db_option
@user_option
def bin_empty(assume_yes: bool, db_path: Path | None, user_id: str) -> None:
    """Permanently delete every book in the bin."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        records = catalog.list_bin()
        if not records:
            console.print("[yellow]The bin is empty.[/yellow]")
            return
        if not assume_yes and not click.confirm(
            f"Permanently delete {len(records)} book(s)?", default=False
        ):
            console.print("Cancelled.")
            return
        for record in records:
            catalog.delete_book(record.id)
        console.print(f"Deleted {len(records)} book(s) permanently.")
    finally:
        conn.close()
