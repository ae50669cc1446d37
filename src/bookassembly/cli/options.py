# ABOUTME: Shared Click options for Book Assembly CLI commands.
# ABOUTME: Provides reusable decorators for --db and --user, and the id-prefix resolver.

from pathlib import Path

import click

from bookassembly.db.catalog import LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH
from bookassembly.library.types import BookRecord

SHORT_ID_LENGTH = 8

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    help=f"Path to library database (default: {DEFAULT_DB_PATH})",
)

user_option = click.option(
    "--user",
    "user_id",
    envvar="BOOKASSEMBLY_USER",
    default="default",
    show_default=True,
    help="Whose library to use (env: BOOKASSEMBLY_USER).",
)


def short_id(record_id: str) -> str:
    return record_id[:SHORT_ID_LENGTH]


def resolve_book(
    catalog: LibraryCatalog, ref: str, *, include_deleted: bool = True
) -> BookRecord | None:
    """Find a book by full id or by a unique id prefix as shown in tables."""
    book = catalog.get_book(ref)
    if book is not None:
        return book if include_deleted or not book.is_deleted else None
    books = catalog.list_all_books() if include_deleted else catalog.list_books()
    matches = [b for b in books if b.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None
