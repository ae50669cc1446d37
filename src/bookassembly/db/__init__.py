# ABOUTME: Public API for the Book Assembly document store.
# ABOUTME: Exports connection management, the per-user catalog, and its errors.

from bookassembly.db.catalog import (
    BIN_RETENTION_DAYS,
    DuplicateGenreError,
    LibraryCatalog,
    RecordNotFoundError,
)
from bookassembly.db.connection import DEFAULT_DB_PATH, open_library

__all__ = [
    "BIN_RETENTION_DAYS",
    "DEFAULT_DB_PATH",
    "DuplicateGenreError",
    "LibraryCatalog",
    "RecordNotFoundError",
    "open_library",
]
