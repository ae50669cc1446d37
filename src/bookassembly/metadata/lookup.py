# ABOUTME: ISBN lookup and free-text search against Google Books and Open Library.
# ABOUTME: Merges both sources field by field; upstream failures degrade to partial or no data.

import logging

from bookassembly.library.normalizer import clean_isbn
from bookassembly.metadata.http import HttpClient, MetadataFetchError
from bookassembly.metadata.parsers import (
    parse_google_volume,
    parse_openlibrary_book,
    parse_openlibrary_edition,
)
from bookassembly.metadata.types import LookupResult, SearchPage

logger = logging.getLogger(__name__)

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"
OPEN_LIBRARY_BASE = "https://openlibrary.org"

DEFAULT_PAGE_SIZE = 10


class BookLookup:
    """Book metadata lookup backed by Google Books, supplemented by Open Library.

    Uses a dependency-injected HttpClient for testability.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    def lookup_isbn(self, isbn: str | None) -> LookupResult | None:
        """Look up a book by ISBN.

        Google Books is asked first. Open Library then fills any empty
        fields and contributes genres not already present (compared
        case-insensitively). Finally the Open Library edition record supplies
        physical format, page count, and series when still missing.

        Returns None when neither source knows the ISBN. Never raises for
        upstream failures; they are logged and the lookup carries on.
        """
        isbn = clean_isbn(isbn)
        if not isbn:
            return None

        google = self._google_by_isbn(isbn)
        openlibrary = self._openlibrary_by_isbn(isbn)

        result = google or openlibrary
        if result is None:
            return None
        if google is not None and openlibrary is not None:
            _supplement(google, openlibrary)

        result.isbn = isbn
        result.covers = {}
        if google is not None and google.cover_image_url:
            result.covers["googleBooks"] = google.cover_image_url
        if openlibrary is not None and openlibrary.cover_image_url:
            result.covers["openLibrary"] = openlibrary.cover_image_url

        if not result.physical_format or not result.series_name:
            self._apply_edition(result, isbn)

        return result

    def search_books(
        self, query: str, *, start_index: int = 0, max_results: int = DEFAULT_PAGE_SIZE
    ) -> SearchPage:
        """Search Google Books by free text. Returns an empty page on failure."""
        params = {
            "q": query,
            "startIndex": str(start_index),
            "maxResults": str(max_results),
        }
        try:
            data = self._http.get(GOOGLE_BOOKS_URL, params=params)
        except MetadataFetchError as exc:
            logger.warning("Book search failed for %r: %s", query, exc)
            return SearchPage()

        items = data.get("items") or []
        if not items:
            return SearchPage()

        total = data.get("totalItems") or 0
        return SearchPage(
            books=[parse_google_volume(item) for item in items],
            has_more=start_index + max_results < total,
            total_items=total,
        )

    def _google_by_isbn(self, isbn: str) -> LookupResult | None:
        try:
            data = self._http.get(GOOGLE_BOOKS_URL, params={"q": f"isbn:{isbn}"})
        except MetadataFetchError as exc:
            logger.warning("Google Books lookup failed for %s: %s", isbn, exc)
            return None
        items = data.get("items") or []
        return parse_google_volume(items[0]) if items else None

    def _openlibrary_by_isbn(self, isbn: str) -> LookupResult | None:
        key = f"ISBN:{isbn}"
        try:
            data = self._http.get(
                f"{OPEN_LIBRARY_BASE}/api/books",
                params={"bibkeys": key, "format": "json", "jscmd": "data"},
            )
        except MetadataFetchError as exc:
            logger.warning("Open Library lookup failed for %s: %s", isbn, exc)
            return None
        book = data.get(key)
        return parse_openlibrary_book(book) if book else None

    def _apply_edition(self, result: LookupResult, isbn: str) -> None:
        """Fill format, pages, and series from the edition record. Best effort."""
        try:
            edition = self._http.get(f"{OPEN_LIBRARY_BASE}/isbn/{isbn}.json")
        except MetadataFetchError as exc:
            logger.debug("Edition lookup failed for %s: %s", isbn, exc)
            return

        fields = parse_openlibrary_edition(edition)
        if not result.physical_format and fields.get("physical_format"):
            result.physical_format = fields["physical_format"]
        if not result.page_count and fields.get("page_count"):
            result.page_count = fields["page_count"]
        if "series_name" in fields:
            result.series_name = fields["series_name"]
            result.series_position = fields["series_position"]


def _supplement(primary: LookupResult, extra: LookupResult) -> None:
    """Fill empty fields on primary from extra and merge in new genres.

    MUTATES primary in place.
    """
    for name in ("publisher", "published_date", "cover_image_url"):
        if not getattr(primary, name) and getattr(extra, name):
            setattr(primary, name, getattr(extra, name))
    if not primary.page_count and extra.page_count:
        primary.page_count = extra.page_count

    known = {genre.lower() for genre in primary.genres}
    for genre in extra.genres:
        if genre.lower() not in known:
            primary.genres.append(genre)
            known.add(genre.lower())

