# ABOUTME: Parsing functions for Google Books and Open Library JSON responses.
# ABOUTME: Converts API-specific shapes into LookupResult instances and field fragments.

import re
from typing import Any

from bookassembly.metadata.types import LookupResult

# Trailing series position: "Harry Potter #3", "Discworld (Book 3)", "Dune 2".
_SERIES_POSITION_RE = re.compile(r"[#(]?\s*(?:book\s*)?(\d+)\s*\)?$", re.IGNORECASE)

_IMAGE_LINK_PREFERENCE = ("large", "medium", "small", "thumbnail")


def parse_genres(categories: list[str] | None) -> list[str]:
    """Reduce hierarchical categories to their most specific part.

    "Fiction / Fantasy / Epic" becomes "Epic". Order of first appearance is
    kept and repeats are dropped.
    """
    genres: dict[str, None] = {}
    for category in categories or []:
        parts = [p.strip() for p in category.split(" / ") if p.strip()]
        if parts:
            genres.setdefault(parts[-1], None)
    return list(genres)


def parse_series(series: str | list[str] | None) -> tuple[str, int | None] | None:
    """Split a series string into name and position.

    Only the first entry of a list is used. Returns None for empty input.
    """
    if not series:
        return None
    text = series[0] if isinstance(series, list) else series
    if not text:
        return None
    m = _SERIES_POSITION_RE.search(text)
    position = int(m.group(1)) if m else None
    name = _SERIES_POSITION_RE.sub("", text).strip()
    return name, position


def title_case_format(physical_format: str) -> str:
    """'mass market paperback' -> 'Mass Market Paperback'."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in physical_format.split())


def _google_cover(volume: dict[str, Any]) -> str:
    links = volume.get("imageLinks") or {}
    for size in _IMAGE_LINK_PREFERENCE:
        if links.get(size):
            return links[size].replace("http:", "https:", 1)
    return ""


def _google_isbn(volume: dict[str, Any]) -> str | None:
    for identifier in volume.get("industryIdentifiers") or []:
        value = identifier.get("identifier", "")
        if len(value) in (10, 13):
            return value
    return None


def parse_google_volume(item: dict[str, Any]) -> LookupResult:
    """Parse one Google Books volume (an element of the `items` array)."""
    volume = item.get("volumeInfo") or {}
    return LookupResult(
        title=(volume.get("title") or "").strip(),
        author=", ".join(volume.get("authors") or []).strip(),
        isbn=_google_isbn(volume),
        cover_image_url=_google_cover(volume),
        publisher=(volume.get("publisher") or "").strip(),
        published_date=(volume.get("publishedDate") or "").strip(),
        page_count=volume.get("pageCount") or None,
        genres=parse_genres(volume.get("categories")),
        source="googleBooks",
        source_id=item.get("id"),
    )


def parse_openlibrary_book(book: dict[str, Any]) -> LookupResult:
    """Parse an Open Library `jscmd=data` book entry."""
    subjects = [
        s if isinstance(s, str) else (s.get("name") or "") for s in book.get("subjects") or []
    ]
    publishers = book.get("publishers") or []
    cover = book.get("cover") or {}
    return LookupResult(
        title=(book.get("title") or "").strip(),
        author=", ".join(a.get("name", "") for a in book.get("authors") or []).strip(),
        cover_image_url=cover.get("large") or cover.get("medium") or "",
        publisher=(publishers[0].get("name", "") if publishers else "").strip(),
        published_date=(book.get("publish_date") or "").strip(),
        page_count=book.get("number_of_pages") or None,
        genres=parse_genres([s for s in subjects if s]),
        source="openLibrary",
    )


def parse_openlibrary_edition(edition: dict[str, Any]) -> dict[str, Any]:
    """Pull the supplementary fields out of an Open Library edition record.

    Returns only the keys that were present: physical_format, page_count,
    series_name, and series_position.
    """
    fields: dict[str, Any] = {}
    if edition.get("physical_format"):
        fields["physical_format"] = title_case_format(edition["physical_format"])
    if edition.get("number_of_pages"):
        fields["page_count"] = edition["number_of_pages"]
    series = parse_series(edition.get("series"))
    if series:
        fields["series_name"], fields["series_position"] = series
    return fields
