# ABOUTME: Converts between record dataclasses and stored JSON documents.
# ABOUTME: Every document read back from the store passes through boundary validation.

import json
from dataclasses import asdict
from datetime import date, datetime
from typing import Any

from bookassembly.library.types import BookRecord, GenreRecord, SeriesRecord, WishlistItem
from bookassembly.library.validation import (
    validate_book,
    validate_genre,
    validate_series,
    validate_wishlist_item,
)

# Fields kept in table columns rather than in the JSON document.
_COLUMN_FIELDS = frozenset({"id", "deleted_at", "created_at", "updated_at"})


def _json_default(value: Any) -> str:
    if isinstance(value, datetime | date):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_document(record: BookRecord | SeriesRecord | GenreRecord | WishlistItem) -> dict[str, Any]:
    """Turn a record into a plain dict, leaving out the column-backed fields."""
    return {k: v for k, v in asdict(record).items() if k not in _COLUMN_FIELDS}


def dump_document(document: dict[str, Any]) -> str:
    """Serialize a document for the data column."""
    return json.dumps(document, default=_json_default, sort_keys=True)


def _row_document(row: Any) -> dict[str, Any]:
    """Merge a row's JSON document with its column-backed fields."""
    document = json.loads(row["data"])
    keys = row.keys()
    document["id"] = row["id"]
    for column in ("deleted_at", "created_at", "updated_at"):
        if column in keys:
            document[column] = row[column]
    return document


def row_to_book(row: Any) -> BookRecord:
    """Rebuild a BookRecord from a books row.

    Raises:
        RecordValidationError: If the stored document is malformed.
    """
    return validate_book(_row_document(row)).unwrap()


def row_to_series(row: Any) -> SeriesRecord:
    return validate_series(_row_document(row)).unwrap()


def row_to_genre(row: Any) -> GenreRecord:
    return validate_genre(_row_document(row)).unwrap()


def row_to_wishlist_item(row: Any) -> WishlistItem:
    return validate_wishlist_item(_row_document(row)).unwrap()
