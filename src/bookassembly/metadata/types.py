# ABOUTME: Result types returned by the book-metadata lookup.
# ABOUTME: LookupResult carries BookRecord-shaped fields plus series hints for the add flow.

from dataclasses import dataclass, field

from bookassembly.library.types import PHYSICAL_FORMATS, BookRecord


@dataclass
class LookupResult:
    """Book data found online for an ISBN or a search hit.

    Empty strings mean the upstream sources had nothing for that field.
    """

    title: str
    author: str
    isbn: str | None = None
    cover_image_url: str = ""
    publisher: str = ""
    published_date: str = ""
    physical_format: str = ""
    page_count: int | None = None
    genres: list[str] = field(default_factory=list)
    covers: dict[str, str] = field(default_factory=dict)
    series_name: str | None = None
    series_position: int | None = None
    source: str | None = None
    source_id: str | None = None

    def to_record(self, book_id: str = "") -> BookRecord:
        """Convert to a BookRecord for duplicate checks and storage.

        Genre names from the APIs are not genre ids, so they are left for the
        caller to resolve.
        """
        return BookRecord(
            id=book_id,
            title=self.title,
            author=self.author,
            isbn=self.isbn,
            cover_image_url=self.cover_image_url or None,
            publisher=self.publisher or None,
            published_date=self.published_date or None,
            physical_format=(
                self.physical_format if self.physical_format in PHYSICAL_FORMATS else None
            ) or None,
            page_count=self.page_count,
            covers=dict(self.covers),
        )


@dataclass
class SearchPage:
    """One page of free-text search results."""

    books: list[LookupResult] = field(default_factory=list)
    has_more: bool = False
    total_items: int = 0
