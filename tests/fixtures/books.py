# ABOUTME: Builders for BookRecord and SeriesRecord test data.
# ABOUTME: Defaults describe a complete book so tests only spell out what they vary.

from typing import Any

from bookassembly.library.types import BookRead, BookRecord, SeriesRecord

COMPLETE_BOOK: dict[str, Any] = {
    "isbn": "9780156001311",
    "cover_image_url": "https://covers.example.com/rose.jpg",
    "publisher": "Harcourt",
    "published_date": "1983",
    "physical_format": "Paperback",
    "page_count": 512,
    "genres": ["g-mystery"],
}


def make_book(book_id: str = "b1", title: str = "The Name of the Rose", **fields: Any) -> BookRecord:
    """A book with every health-relevant field filled in, unless overridden."""
    data = {"author": "Umberto Eco", **COMPLETE_BOOK, **fields}
    return BookRecord(id=book_id, title=title, **data)


def bare_book(book_id: str = "b1", title: str = "Untitled", author: str = "Anon", **fields: Any) -> BookRecord:
    """A book with only the required fields."""
    return BookRecord(id=book_id, title=title, author=author, **fields)


def make_series(series_id: str = "s1", name: str = "Discworld", **fields: Any) -> SeriesRecord:
    return SeriesRecord(id=series_id, name=name, **fields)


def read(started: Any = None, finished: Any = None) -> BookRead:
    return BookRead(started_at=started, finished_at=finished)
