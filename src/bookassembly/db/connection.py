# ABOUTME: SQLite connection management for the Book Assembly document store.
# ABOUTME: Opens or creates the database, applies schema and migrations.

import logging
import sqlite3
from pathlib import Path

from bookassembly.db.schema import MIGRATIONS, SCHEMA_V1

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".bookassembly" / "library.db"


def _schema_exists(conn: sqlite3.Connection) -> bool:
    """Check if the schema has already been applied."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    return cursor.fetchone() is not None


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the current schema version from the database."""
    cursor = conn.execute("SELECT MAX(version) FROM schema_version")
    row = cursor.fetchone()
    return row[0] or 0


def _apply_migrations(conn: sqlite3.Connection) -> None:
    """Apply pending schema migrations in version order.

    No-op if the database is already at the latest version.
    """
    current = _get_schema_version(conn)
    for version, sql in MIGRATIONS:
        if version > current:
            logger.info("Migrating library schema to version %d", version)
            conn.executescript(sql)


def open_library(path: Path | None = None) -> sqlite3.Connection:
    """Open or create the Book Assembly library database.

    Creates the database file and parent directories if they don't exist,
    applies the schema on first creation, and runs pending migrations.
    Uses WAL journal mode and sqlite3.Row for dict-like column access.

    Args:
        path: Path to the database file. Defaults to ~/.bookassembly/library.db.

    Returns:
        A configured sqlite3.Connection.
    """
    db_path = path or DEFAULT_DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")

    if not _schema_exists(conn):
        conn.executescript(SCHEMA_V1)

    _apply_migrations(conn)

    return conn
