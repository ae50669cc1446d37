# ABOUTME: Core record data structures for the Book Assembly catalogue.
# ABOUTME: BookRecord is the interchange format between the store, the lookup, and the core.

from dataclasses import dataclass, field
from datetime import date, datetime

# Timestamps arrive as ISO strings, epoch milliseconds, or datetime objects.
Timestamp = str | int | float | date | datetime

PHYSICAL_FORMATS = (
    "",
    "Paperback",
    "Hardcover",
    "Mass Market Paperback",
    "Trade Paperback",
    "Library Binding",
    "Spiral-bound",
    "Audio CD",
    "Ebook",
)

WISHLIST_PRIORITIES = ("high", "medium", "low")

EXPECTED_BOOK_SOURCES = ("api", "manual")

DEFAULT_GENRE_COLOR = "#6b7280"


@dataclass
class BookRead:
    """A single reading session. Either end may be missing."""

    started_at: Timestamp | None = None
    finished_at: Timestamp | None = None


@dataclass
class BookImage:
    """Metadata for an uploaded photo of a book."""

    id: str
    url: str
    storage_path: str
    is_primary: bool = False
    caption: str | None = None
    uploaded_at: int = 0
    size_bytes: int | None = None
    width: int | None = None
    height: int | None = None


@dataclass
class BookRecord:
    """A catalogued book owned by one user.

    Only id, title, and author are required. Everything else may be missing,
    and the core treats missing or malformed values as absent rather than
    failing.
    """

    id: str
    title: str
    author: str
    isbn: str | None = None
    cover_image_url: str | None = None
    publisher: str | None = None
    published_date: str | None = None
    physical_format: str | None = None
    page_count: int | None = None
    rating: float | None = None
    genres: list[str] = field(default_factory=list)
    series_id: str | None = None
    series_position: float | None = None
    notes: str | None = None
    reads: list[BookRead] = field(default_factory=list)
    covers: dict[str, str] = field(default_factory=dict)
    images: list[BookImage] = field(default_factory=list)
    deleted_at: Timestamp | None = None
    created_at: Timestamp | None = None
    updated_at: Timestamp | None = None

    @property
    def is_deleted(self) -> bool:
        """Whether the book has been moved to the bin."""
        return self.deleted_at is not None

    @property
    def has_cover(self) -> bool:
        """Whether any cover URL is known for this book."""
        if self.cover_image_url:
            return True
        return any(url for url in self.covers.values())

    @property
    def primary_image(self) -> BookImage | None:
        for image in self.images:
            if image.is_primary:
                return image
        return None


@dataclass
class ExpectedBook:
    """A book known to belong to a series, whether owned or not."""

    title: str
    isbn: str | None = None
    position: float | None = None
    source: str | None = None


@dataclass
class SeriesRecord:
    """A named series that books can point at via series_id."""

    id: str
    name: str
    description: str | None = None
    total_books: int | None = None
    expected_books: list[ExpectedBook] = field(default_factory=list)
    deleted_at: Timestamp | None = None
    created_at: Timestamp | None = None
    updated_at: Timestamp | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass
class GenreRecord:
    """A user-defined genre label."""

    id: str
    name: str
    color: str = DEFAULT_GENRE_COLOR
    created_at: Timestamp | None = None
    updated_at: Timestamp | None = None


@dataclass
class WishlistItem:
    """A book the user wants but does not own yet."""

    id: str
    title: str
    author: str
    isbn: str | None = None
    cover_image_url: str | None = None
    covers: dict[str, str] = field(default_factory=dict)
    publisher: str | None = None
    published_date: str | None = None
    page_count: int | None = None
    priority: str | None = None
    notes: str | None = None
    created_at: Timestamp | None = None
    updated_at: Timestamp | None = None
