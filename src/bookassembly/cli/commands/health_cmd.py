# ABOUTME: The `bookassembly health` command for auditing library data quality.
# ABOUTME: Prints issue counts per category, the completeness score, and the worst books.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookassembly.cli.options import db_option, short_id, user_option
from bookassembly.core.health import (
    ISSUE_LABELS,
    analyze_library,
    completeness_rating,
    rank_books_by_issues,
)
from bookassembly.db.catalog import LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library

console = Console()

# Rich has no "amber".
_RATING_STYLES = {"green": "green", "amber": "yellow", "red": "red"}


@click.command("health")
@click.option("--limit", type=int, default=10, show_default=True, help="Books to list.")
@click.option("--strict", is_flag=True, help="Exit with status 1 if any issue is found.")
@db_option
@user_option
def health(limit: int, strict: bool, db_path: Path | None, user_id: str) -> None:
    """Report missing fields and inconsistencies across the library."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        report = analyze_library(catalog.list_books(), catalog.series_lookup())
    finally:
        conn.close()

    if report.total_books == 0:
        console.print("[yellow]No books in the library.[/yellow]")
        return

    rating = completeness_rating(report.completeness_score)
    style = _RATING_STYLES.get(rating.colour, "white")
    console.print(
        f"Completeness: [{style}]{report.completeness_score}% ({rating.label})[/{style}] "
        f"across {report.total_books} book(s)"
    )

    table = Table()
    table.add_column("Issue", style="bold")
    table.add_column("Books", justify="right")
    for category, book_ids in report.issues.items():
        if book_ids:
            table.add_row(ISSUE_LABELS[category], str(len(book_ids)))
    if report.is_healthy:
        console.print("[green]No issues found.[/green]")
        return
    console.print(table)

    if report.fixable_books:
        console.print(
            f"[dim]{report.fixable_books} incomplete book(s) have an ISBN "
            "and could be filled in from an online lookup.[/dim]"
        )

    ranked = rank_books_by_issues(report)[:limit]
    if ranked:
        worst = Table(title="Books needing attention")
        worst.add_column("ID", style="dim", no_wrap=True)
        worst.add_column("Title")
        worst.add_column("Issues")
        for book, categories in ranked:
            worst.add_row(
                short_id(book.id),
                book.title,
                ", ".join(ISSUE_LABELS[c] for c in categories),
            )
        console.print(worst)

    if strict:
        raise SystemExit(1)
