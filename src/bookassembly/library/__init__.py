# ABOUTME: Record types, normalization, and boundary validation for Book Assembly.
# ABOUTME: Exports the dataclasses and helpers every other layer builds on.

from bookassembly.library.normalizer import normalize_isbn, normalize_text
from bookassembly.library.types import (
    BookImage,
    BookRead,
    BookRecord,
    ExpectedBook,
    GenreRecord,
    SeriesRecord,
    WishlistItem,
)
from bookassembly.library.validation import (
    FieldError,
    RecordValidationError,
    ValidationResult,
    validate_book,
    validate_genre,
    validate_series,
    validate_wishlist_item,
)

__all__ = [
    "BookImage",
    "BookRead",
    "BookRecord",
    "ExpectedBook",
    "FieldError",
    "GenreRecord",
    "RecordValidationError",
    "SeriesRecord",
    "ValidationResult",
    "WishlistItem",
    "normalize_isbn",
    "normalize_text",
    "validate_book",
    "validate_genre",
    "validate_series",
    "validate_wishlist_item",
]
