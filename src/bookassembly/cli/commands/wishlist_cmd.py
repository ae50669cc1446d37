# ABOUTME: The `bookassembly wishlist` command group for books the user wants.
# ABOUTME: Provides add, ls, rm, and move (into the library) subcommands.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookassembly.cli.options import db_option, short_id, user_option
from bookassembly.db.catalog import LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library
from bookassembly.library.types import WISHLIST_PRIORITIES, WishlistItem
from bookassembly.library.validation import RecordValidationError

console = Console()

_PRIORITY_STYLES = {"high": "red", "medium": "yellow", "low": "dim"}


def _resolve_item(catalog: LibraryCatalog, ref: str) -> WishlistItem | None:
    item = catalog.get_wishlist_item(ref)
    if item is not None:
        return item
    matches = [i for i in catalog.list_wishlist() if i.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


@click.group("wishlist")
def wishlist() -> None:
    """Manage the wishlist."""


@wishlist.command("add")
@click.argument("title")
@click.argument("author")
@click.option("--isbn", default=None)
@click.option("--priority", type=click.Choice(WISHLIST_PRIORITIES), default=None)
@click.option("--notes", default=None)
@db_option
@user_option
def wishlist_add(
    title: str,
    author: str,
    isbn: str | None,
    priority: str | None,
    notes: str | None,
    db_path: Path | None,
    user_id: str,
) -> None:
    """Add a book to the wishlist."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        try:
            item_id = catalog.add_wishlist_item(
                WishlistItem(
                    id="", title=title, author=author, isbn=isbn, priority=priority, notes=notes
                )
            )
        except RecordValidationError as exc:
            console.print(f"[red]{exc}[/red]")
            raise SystemExit(1) from exc
        console.print(f"Added [bold]{title}[/bold] to the wishlist ({short_id(item_id)}).")
    finally:
        conn.close()


@wishlist.command("ls")
@db_option
@user_option
def wishlist_ls(db_path: Path | None, user_id: str) -> None:
    """List wishlist items, newest first."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        items = catalog.list_wishlist()
    finally:
        conn.close()

    if not items:
        console.print("[yellow]The wishlist is empty.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("Priority")
    for item in items:
        style = _PRIORITY_STYLES.get(item.priority or "", "")
        priority = f"[{style}]{item.priority}[/{style}]" if style else ""
        table.add_row(short_id(item.id), item.title, item.author, priority)

    console.print(table)


@wishlist.command("rm")
@click.argument("item_ref")
@db_option
@user_option
def wishlist_rm(item_ref: str, db_path: Path | None, user_id: str) -> None:
    """Remove an item from the wishlist."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        item = _resolve_item(catalog, item_ref)
        if item is None:
            console.print(f"[red]Wishlist item {item_ref} not found.[/red]")
            raise SystemExit(1)
        catalog.delete_wishlist_item(item.id)
        console.print(f"Removed [bold]{item.title}[/bold] from the wishlist.")
    finally:
        conn.close()


@wishlist.command("move")
@click.argument("item_ref")
@db_option
@user_option
def wishlist_move(item_ref: str, db_path: Path | None, user_id: str) -> None:
    """Move a wishlist item into the library."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        item = _resolve_item(catalog, item_ref)
        if item is None:
            console.print(f"[red]Wishlist item {item_ref} not found.[/red]")
            raise SystemExit(1)
        book_id = catalog.move_to_library(item.id)
        console.print(
            f"[green]Moved[/green] {item.title} into the library ({short_id(book_id)})."
        )
    finally:
        conn.close()
