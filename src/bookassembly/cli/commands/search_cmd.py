# ABOUTME: The `bookassembly search` command for finding books online.
# ABOUTME: Queries Google Books by free text and shows one page of results.

import click
from rich.console import Console
from rich.table import Table

from bookassembly.metadata.http import BookAssemblyHttpClient
from bookassembly.metadata.lookup import DEFAULT_PAGE_SIZE, BookLookup

console = Console()


def _create_lookup() -> BookLookup:
    """Build the online lookup. Patched out in tests."""
    return BookLookup(BookAssemblyHttpClient())


@click.command("search")
@click.argument("query")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.option(
    "--per-page", type=click.IntRange(1, 40), default=DEFAULT_PAGE_SIZE, show_default=True
)
def search(query: str, page: int, per_page: int) -> None:
    """Search online for books by title, author, or keywords."""
    lookup = _create_lookup()
    result = lookup.search_books(query, start_index=(page - 1) * per_page, max_results=per_page)

    if not result.books:
        console.print("[yellow]No results found.[/yellow]")
        return

    table = Table()
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("ISBN")
    table.add_column("Published")
    for book in result.books:
        table.add_row(
            book.title,
            book.author or "[dim]unknown[/dim]",
            book.isbn or "",
            book.published_date,
        )

    console.print(table)
    footer = f"\n[dim]Page {page}, {result.total_items} result(s) in total"
    if result.has_more:
        footer += f"; next: --page {page + 1}"
    console.print(footer + "[/dim]")
