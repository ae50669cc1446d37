# ABOUTME: Integration tests from ISBN lookup through to a stored book.
# ABOUTME: Uses canned API responses and a real catalog to check the converted record.

from typing import Any

from bookassembly.core.duplicates import check_for_duplicate
from bookassembly.db.catalog import LibraryCatalog
from bookassembly.metadata.lookup import BookLookup
from tests.fixtures import google_books_responses as google
from tests.fixtures import openlibrary_responses as openlibrary


class CannedHttpClient:
    def __init__(self, responses: dict[str, Any]) -> None:
        self._responses = responses

    def get(self, url: str, params: dict[str, str] | None = None) -> Any:
        for pattern, response in self._responses.items():
            if pattern in url:
                return response
        return {}


def _lookup() -> BookLookup:
    return BookLookup(
        CannedHttpClient(
            {
                "googleapis.com": google.ISBN_RESPONSE,
                "openlibrary.org/api/books": openlibrary.BOOKS_API_RESPONSE,
                "openlibrary.org/isbn/": openlibrary.EDITION_RESPONSE,
            }
        )
    )


class TestLookupToCatalog:
    def test_looked_up_book_stores_cleanly(self, catalog: LibraryCatalog) -> None:
        result = _lookup().lookup_isbn("0-15-600131-4")
        assert result is not None
        book_id = catalog.add_book(result.to_record())

        stored = catalog.get_book(book_id)
        assert stored is not None
        assert stored.isbn == "0156001314"
        assert stored.physical_format == "Paperback"
        assert stored.publisher == "Harcourt"
        assert set(stored.covers) == {"googleBooks", "openLibrary"}
        assert stored.has_cover

    def test_second_lookup_is_caught_as_duplicate(self, catalog: LibraryCatalog) -> None:
        first = _lookup().lookup_isbn("9780156001311")
        assert first is not None
        catalog.add_book(first.to_record())

        again = _lookup().lookup_isbn("978-0-15-600131-1")
        assert again is not None
        verdict = check_for_duplicate(again.to_record(), catalog.list_all_books())
        assert verdict.is_duplicate
        assert verdict.match_type == "isbn"
