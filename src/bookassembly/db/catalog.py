# ABOUTME: Per-user repositories for books, series, genres, and wishlist items.
# ABOUTME: Handles soft delete, bin retention, and validation of every document written.

import logging
import sqlite3
import uuid
from typing import Any

from bookassembly.db.mapping import (
    dump_document,
    row_to_book,
    row_to_genre,
    row_to_series,
    row_to_wishlist_item,
    to_document,
)
from bookassembly.library.normalizer import normalize_genre_name, normalize_text
from bookassembly.library.timestamps import now_ms
from bookassembly.library.types import BookRecord, GenreRecord, SeriesRecord, WishlistItem
from bookassembly.library.validation import (
    validate_book,
    validate_genre,
    validate_series,
    validate_wishlist_item,
)

logger = logging.getLogger(__name__)

# Books stay in the bin this long before they may be purged.
BIN_RETENTION_DAYS = 30

_DAY_MS = 24 * 60 * 60 * 1000


class RecordNotFoundError(ValueError):
    """Raised when an id does not exist in the user's library."""


class DuplicateGenreError(ValueError):
    """Raised when a genre name clashes with an existing one after normalization."""


class LibraryCatalog:
    """Typed CRUD over one user's collections.

    Every query is scoped to the user_id given at construction, so a catalog
    can never read or write another user's documents.
    """

    def __init__(self, conn: sqlite3.Connection, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id is required")
        self._conn = conn
        self.user_id = user_id

    @staticmethod
    def new_id() -> str:
        """Generate an id for a record that has not been stored yet."""
        return uuid.uuid4().hex

    def _fetch_one(self, table: str, record_id: str) -> sqlite3.Row | None:
        cursor = self._conn.execute(
            f"SELECT * FROM {table} WHERE user_id = ? AND id = ?",
            (self.user_id, record_id),
        )
        return cursor.fetchone()

    def _require(self, table: str, record_id: str) -> sqlite3.Row:
        row = self._fetch_one(table, record_id)
        if row is None:
            raise RecordNotFoundError(f"{table} record {record_id} not found")
        return row

    # --- Books ---

    def add_book(self, record: BookRecord) -> str:
        """Store a new book and return its id.

        An empty id is replaced with a fresh one. Timestamps are set by the
        store; any lifecycle markers on the record are ignored.

        Raises:
            RecordValidationError: If the record breaks a field rule.
        """
        book_id = record.id or self.new_id()
        book = validate_book(to_document(record) | {"id": book_id}).unwrap()
        with self._conn:
            self._insert_book(book)
        return book_id

    def _insert_book(self, book: BookRecord) -> None:
        now = now_ms()
        self._conn.execute(
            "INSERT INTO books (id, user_id, data, series_id, deleted_at, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, NULL, ?, ?)",
            (book.id, self.user_id, dump_document(to_document(book)), book.series_id, now, now),
        )

    def get_book(self, book_id: str) -> BookRecord | None:
        """Retrieve a book by id, whether active or in the bin."""
        row = self._fetch_one("books", book_id)
        return row_to_book(row) if row else None

    def list_books(self) -> list[BookRecord]:
        """Active books, most recently added first."""
        cursor = self._conn.execute(
            "SELECT * FROM books WHERE user_id = ? AND deleted_at IS NULL "
            "ORDER BY created_at DESC, rowid DESC",
            (self.user_id,),
        )
        return [row_to_book(row) for row in cursor.fetchall()]

    def list_all_books(self) -> list[BookRecord]:
        """Every book including the bin, most recently added first."""
        cursor = self._conn.execute(
            "SELECT * FROM books WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
            (self.user_id,),
        )
        return [row_to_book(row) for row in cursor.fetchall()]

    def count_books(self) -> int:
        cursor = self._conn.execute(
            "SELECT COUNT(*) FROM books WHERE user_id = ? AND deleted_at IS NULL",
            (self.user_id,),
        )
        return cursor.fetchone()[0]

    def get_books_by_series(self, series_id: str) -> list[BookRecord]:
        """Active books in a series, by position. Unpositioned books go last."""
        cursor = self._conn.execute(
            "SELECT * FROM books WHERE user_id = ? AND series_id = ? AND deleted_at IS NULL "
            "ORDER BY created_at, rowid",
            (self.user_id, series_id),
        )
        books = [row_to_book(row) for row in cursor.fetchall()]
        return sorted(
            books,
            key=lambda b: (b.series_position is None, b.series_position or 0),
        )

    def update_book(self, book_id: str, **fields: Any) -> BookRecord:
        """Update one or more fields on a book and return the stored result.

        Accepts BookRecord field names as keyword arguments.

        Raises:
            RecordNotFoundError: If the book does not exist.
            RecordValidationError: If the merged document breaks a field rule.
        """
        current = row_to_book(self._require("books", book_id))
        document = to_document(current)
        document.update(fields)
        document["id"] = book_id
        book = validate_book(document).unwrap()
        self._conn.execute(
            "UPDATE books SET data = ?, series_id = ?, updated_at = ? "
            "WHERE user_id = ? AND id = ?",
            (
                dump_document(to_document(book)),
                book.series_id,
                now_ms(),
                self.user_id,
                book_id,
            ),
        )
        self._conn.commit()
        return self.get_book(book_id)  # type: ignore[return-value]

    def _set_deleted_at(self, book_id: str, deleted_at: int | None) -> None:
        cursor = self._conn.execute(
            "UPDATE books SET deleted_at = ?, updated_at = ? WHERE user_id = ? AND id = ?",
            (deleted_at, now_ms(), self.user_id, book_id),
        )
        self._conn.commit()
        if cursor.rowcount == 0:
            raise RecordNotFoundError(f"Book {book_id} not found")

    def soft_delete_book(self, book_id: str) -> None:
        """Move a book to the bin."""
        self._set_deleted_at(book_id, now_ms())

    def restore_book(self, book_id: str) -> None:
        """Bring a book back from the bin."""
        self._set_deleted_at(book_id, None)

    def delete_book(self, book_id: str) -> None:
        """Permanently delete a book.

        Raises:
            RecordNotFoundError: If the book does not exist.
        """
        cursor = self._conn.execute(
            "DELETE FROM books WHERE user_id = ? AND id = ?", (self.user_id, book_id)
        )
        self._conn.commit()
        if cursor.rowcount == 0:
            raise RecordNotFoundError(f"Book {book_id} not found")

    def list_bin(self) -> list[BookRecord]:
        """Books in the bin, most recently deleted first."""
        cursor = self._conn.execute(
            "SELECT * FROM books WHERE user_id = ? AND deleted_at IS NOT NULL "
            "ORDER BY deleted_at DESC",
            (self.user_id,),
        )
        return [row_to_book(row) for row in cursor.fetchall()]

    def purge_expired(
        self, retention_days: int = BIN_RETENTION_DAYS, now: int | None = None
    ) -> list[str]:
        """Permanently delete binned books older than the retention window.

        Args:
            retention_days: Days a book stays in the bin. Zero empties the bin.
            now: Current time in epoch milliseconds, for testing.

        Returns:
            Ids of the purged books.
        """
        cutoff = (now if now is not None else now_ms()) - retention_days * _DAY_MS
        cursor = self._conn.execute(
            "SELECT id FROM books WHERE user_id = ? AND deleted_at IS NOT NULL "
            "AND deleted_at <= ?",
            (self.user_id, cutoff),
        )
        expired = [row["id"] for row in cursor.fetchall()]
        if expired:
            self._conn.executemany(
                "DELETE FROM books WHERE user_id = ? AND id = ?",
                [(self.user_id, book_id) for book_id in expired],
            )
            self._conn.commit()
            logger.info("Purged %d book(s) from the bin", len(expired))
        return expired

    # --- Series ---

    def add_series(self, record: SeriesRecord) -> str:
        """Store a new series and return its id.

        Raises:
            RecordValidationError: If the record breaks a field rule.
        """
        series_id = record.id or self.new_id()
        series = validate_series(to_document(record) | {"id": series_id}).unwrap()
        now = now_ms()
        self._conn.execute(
            "INSERT INTO series (id, user_id, data, name_key, deleted_at, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, NULL, ?, ?)",
            (
                series_id,
                self.user_id,
                dump_document(to_document(series)),
                normalize_text(series.name),
                now,
                now,
            ),
        )
        self._conn.commit()
        return series_id

    def get_series(self, series_id: str) -> SeriesRecord | None:
        row = self._fetch_one("series", series_id)
        return row_to_series(row) if row else None

    def find_series_by_name(self, name: str) -> SeriesRecord | None:
        """Live series whose normalized name equals the given one."""
        cursor = self._conn.execute(
            "SELECT * FROM series WHERE user_id = ? AND name_key = ? AND deleted_at IS NULL "
            "ORDER BY created_at LIMIT 1",
            (self.user_id, normalize_text(name)),
        )
        row = cursor.fetchone()
        return row_to_series(row) if row else None

    def list_series(self) -> list[SeriesRecord]:
        """All live series, alphabetically."""
        cursor = self._conn.execute(
            "SELECT * FROM series WHERE user_id = ? AND deleted_at IS NULL ORDER BY name_key",
            (self.user_id,),
        )
        return [row_to_series(row) for row in cursor.fetchall()]

    def update_series(self, series_id: str, **fields: Any) -> SeriesRecord:
        """Update fields on a series. A non-positive total_books is stored as unknown.

        Raises:
            RecordNotFoundError: If the series does not exist.
            RecordValidationError: If the merged document breaks a field rule.
        """
        current = row_to_series(self._require("series", series_id))
        if "total_books" in fields and not (fields["total_books"] and fields["total_books"] > 0):
            fields["total_books"] = None
        document = to_document(current)
        document.update(fields)
        document["id"] = series_id
        series = validate_series(document).unwrap()
        self._conn.execute(
            "UPDATE series SET data = ?, name_key = ?, updated_at = ? "
            "WHERE user_id = ? AND id = ?",
            (
                dump_document(to_document(series)),
                normalize_text(series.name),
                now_ms(),
                self.user_id,
                series_id,
            ),
        )
        self._conn.commit()
        return self.get_series(series_id)  # type: ignore[return-value]

    def delete_series(self, series_id: str) -> None:
        """Delete a series. Books keep their series_id and show up as orphaned.

        Raises:
            RecordNotFoundError: If the series does not exist.
        """
        cursor = self._conn.execute(
            "DELETE FROM series WHERE user_id = ? AND id = ?", (self.user_id, series_id)
        )
        self._conn.commit()
        if cursor.rowcount == 0:
            raise RecordNotFoundError(f"Series {series_id} not found")

    def series_lookup(self) -> dict[str, SeriesRecord]:
        """Live series keyed by id."""
        return {series.id: series for series in self.list_series()}

    # --- Genres ---

    def add_genre(self, name: str, color: str | None = None) -> str:
        """Create a genre and return its id.

        Raises:
            DuplicateGenreError: If a genre with the same normalized name exists.
            RecordValidationError: If the name or colour is invalid.
        """
        genre_id = self.new_id()
        data: dict[str, Any] = {"id": genre_id, "name": name}
        if color:
            data["color"] = color
        genre = validate_genre(data).unwrap()
        now = now_ms()
        try:
            self._conn.execute(
                "INSERT INTO genres (id, user_id, data, name_key, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    genre_id,
                    self.user_id,
                    dump_document(to_document(genre)),
                    normalize_genre_name(genre.name),
                    now,
                    now,
                ),
            )
            self._conn.commit()
        except sqlite3.IntegrityError as exc:
            if "UNIQUE constraint failed" in str(exc):
                raise DuplicateGenreError(f"Genre '{genre.name}' already exists") from exc
            raise
        return genre_id

    def get_genre(self, genre_id: str) -> GenreRecord | None:
        row = self._fetch_one("genres", genre_id)
        return row_to_genre(row) if row else None

    def find_genre_by_name(self, name: str) -> GenreRecord | None:
        cursor = self._conn.execute(
            "SELECT * FROM genres WHERE user_id = ? AND name_key = ?",
            (self.user_id, normalize_genre_name(name)),
        )
        row = cursor.fetchone()
        return row_to_genre(row) if row else None

    def list_genres(self) -> list[GenreRecord]:
        """All genres, alphabetically by normalized name."""
        cursor = self._conn.execute(
            "SELECT * FROM genres WHERE user_id = ? ORDER BY name_key", (self.user_id,)
        )
        return [row_to_genre(row) for row in cursor.fetchall()]

    def delete_genre(self, genre_id: str) -> int:
        """Delete a genre and remove it from every book that references it.

        Runs as one transaction. Returns the number of books updated.

        Raises:
            RecordNotFoundError: If the genre does not exist.
        """
        self._require("genres", genre_id)
        updated = 0
        now = now_ms()
        with self._conn:
            cursor = self._conn.execute("SELECT * FROM books WHERE user_id = ?", (self.user_id,))
            for row in cursor.fetchall():
                book = row_to_book(row)
                if genre_id not in book.genres:
                    continue
                book.genres = [g for g in book.genres if g != genre_id]
                self._conn.execute(
                    "UPDATE books SET data = ?, updated_at = ? WHERE user_id = ? AND id = ?",
                    (dump_document(to_document(book)), now, self.user_id, book.id),
                )
                updated += 1
            self._conn.execute(
                "DELETE FROM genres WHERE user_id = ? AND id = ?", (self.user_id, genre_id)
            )
        return updated

    def genre_lookup(self) -> dict[str, GenreRecord]:
        return {genre.id: genre for genre in self.list_genres()}

    # --- Wishlist ---

    def add_wishlist_item(self, item: WishlistItem) -> str:
        """Store a wishlist item and return its id.

        Raises:
            RecordValidationError: If the item breaks a field rule.
        """
        item_id = item.id or self.new_id()
        wish = validate_wishlist_item(to_document(item) | {"id": item_id}).unwrap()
        now = now_ms()
        self._conn.execute(
            "INSERT INTO wishlist (id, user_id, data, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (item_id, self.user_id, dump_document(to_document(wish)), now, now),
        )
        self._conn.commit()
        return item_id

    def get_wishlist_item(self, item_id: str) -> WishlistItem | None:
        row = self._fetch_one("wishlist", item_id)
        return row_to_wishlist_item(row) if row else None

    def list_wishlist(self) -> list[WishlistItem]:
        """Wishlist items, most recently added first."""
        cursor = self._conn.execute(
            "SELECT * FROM wishlist WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
            (self.user_id,),
        )
        return [row_to_wishlist_item(row) for row in cursor.fetchall()]

    def delete_wishlist_item(self, item_id: str) -> None:
        cursor = self._conn.execute(
            "DELETE FROM wishlist WHERE user_id = ? AND id = ?", (self.user_id, item_id)
        )
        self._conn.commit()
        if cursor.rowcount == 0:
            raise RecordNotFoundError(f"Wishlist item {item_id} not found")

    def move_to_library(self, item_id: str) -> str:
        """Add a wishlist item to the library as a book, then drop it from the wishlist.

        Both writes happen in one transaction.

        Returns:
            The new book's id.

        Raises:
            RecordNotFoundError: If the item does not exist.
        """
        item = row_to_wishlist_item(self._require("wishlist", item_id))
        book = BookRecord(
            id=self.new_id(),
            title=item.title,
            author=item.author,
            isbn=item.isbn,
            cover_image_url=item.cover_image_url,
            covers=dict(item.covers),
            publisher=item.publisher,
            published_date=item.published_date,
            page_count=item.page_count,
            notes=item.notes,
        )
        book = validate_book(to_document(book) | {"id": book.id}).unwrap()
        with self._conn:
            self._insert_book(book)
            self._conn.execute(
                "DELETE FROM wishlist WHERE user_id = ? AND id = ?", (self.user_id, item_id)
            )
        return book.id
