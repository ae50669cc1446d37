# ABOUTME: The `bookassembly dupes` command for finding duplicate books.
# ABOUTME: Scans the active library pairwise and lists each suspected pair once.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookassembly.cli.options import db_option, short_id, user_option
from bookassembly.core.duplicates import Confidence, find_duplicate_groups
from bookassembly.db.catalog import LibraryCatalog
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library

console = Console()

_CONFIDENCE_STYLES = {
    Confidence.EXACT: "red",
    Confidence.PROBABLE: "yellow",
    Confidence.POSSIBLE: "dim",
}


@click.command("dupes")
@click.option(
    "--min-confidence",
    type=click.Choice([c.value for c in Confidence]),
    default=Confidence.PROBABLE.value,
    show_default=True,
    help="Weakest tier to report.",
)
@db_option
@user_option
def dupes(min_confidence: str, db_path: Path | None, user_id: str) -> None:
    """List books that look like duplicates of each other."""
    conn = open_library(db_path or DEFAULT_DB_PATH)
    try:
        catalog = LibraryCatalog(conn, user_id)
        pairs = find_duplicate_groups(
            catalog.list_books(), min_confidence=Confidence(min_confidence)
        )
    finally:
        conn.close()

    if not pairs:
        console.print("[green]No duplicates found.[/green]")
        return

    table = Table()
    table.add_column("Book", style="bold")
    table.add_column("Duplicate of")
    table.add_column("Confidence")
    for record, match in pairs:
        style = _CONFIDENCE_STYLES[match.confidence]
        table.add_row(
            f"{record.title} ({short_id(record.id)})",
            f"{match.record.title} ({short_id(match.record.id)})",
            f"[{style}]{match.confidence.value}[/{style}]",
        )

    console.print(table)
    console.print(f"\n[dim]{len(pairs)} pair(s)[/dim]")
