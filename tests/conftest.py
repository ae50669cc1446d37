# ABOUTME: Shared pytest fixtures for Book Assembly tests.
# ABOUTME: Provides temporary library databases and a user-scoped catalog.

import sqlite3
from collections.abc import Iterator
from pathlib import Path

import pytest

from bookassembly.db.catalog import LibraryCatalog
from bookassembly.db.connection import open_library


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path for a library database that does not exist yet."""
    return tmp_path / "library.db"


@pytest.fixture
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """An open, fully migrated library connection."""
    connection = open_library(db_path)
    yield connection
    connection.close()


@pytest.fixture
def catalog(conn: sqlite3.Connection) -> LibraryCatalog:
    """Catalog scoped to the default test user."""
    return LibraryCatalog(conn, "alice")
