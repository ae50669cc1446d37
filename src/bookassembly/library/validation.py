# ABOUTME: Boundary validation for book, series, genre, and wishlist documents.
# ABOUTME: Pydantic models hold the field rules; validators return a ValidationResult instead of raising.

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Annotated, Any, Generic, TypeVar
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, field_validator

from bookassembly.library.normalizer import normalize_isbn
from bookassembly.library.types import (
    DEFAULT_GENRE_COLOR,
    EXPECTED_BOOK_SOURCES,
    PHYSICAL_FORMATS,
    WISHLIST_PRIORITIES,
    BookImage,
    BookRead,
    BookRecord,
    ExpectedBook,
    GenreRecord,
    SeriesRecord,
    WishlistItem,
)

T = TypeVar("T")

_MAX_TITLE = 500
_MAX_AUTHOR = 200
_MAX_PUBLISHER = 200
_MAX_BOOK_NOTES = 10_000
_MAX_WISHLIST_NOTES = 5_000
_MAX_PAGE_COUNT = 50_000
_MAX_SERIES_NAME = 200
_MAX_SERIES_DESCRIPTION = 2_000
_MAX_SERIES_TOTAL = 1_000
_MAX_GENRE_NAME = 50
_HEX_COLOR_RE = re.compile(r"#[0-9a-fA-F]{6}")

_TIMESTAMP_TYPES = (str, int, float, date, datetime)


class RecordValidationError(ValueError):
    """Raised when a document cannot be turned into a record."""

    def __init__(self, kind: str, errors: list["FieldError"]) -> None:
        self.kind = kind
        self.errors = errors
        details = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"Invalid {kind}: {details}")


@dataclass
class FieldError:
    """A single failed rule, keyed by the offending field name."""

    field: str
    message: str


@dataclass
class ValidationResult(Generic[T]):
    """Outcome of validating one document: either a value or a list of errors."""

    kind: str
    value: T | None = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and self.value is not None

    def unwrap(self) -> T:
        """Return the validated value, or raise RecordValidationError."""
        if not self.ok:
            raise RecordValidationError(self.kind, self.errors)
        return self.value  # type: ignore[return-value]


def _required(value: str) -> str:
    if not value:
        raise ValueError("is required")
    return value


def _timestamp(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, _TIMESTAMP_TYPES):
        raise ValueError("must be a date, ISO string, or epoch milliseconds")
    return value


RequiredText = Annotated[str, AfterValidator(_required)]
# Stored as given; to_datetime() interprets the value when it is needed.
Stamp = Annotated[Any, AfterValidator(_timestamp)]


class _Model(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class _Document(_Model):
    """Fields and rules shared by every top-level document."""

    id: str | None = None
    created_at: Stamp = None
    updated_at: Stamp = None

    @field_validator(
        "publisher", "published_date", "series_id", "notes", "description", check_fields=False
    )
    @classmethod
    def blank_as_missing(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("genres", "reads", "images", "expected_books", mode="before", check_fields=False)
    @classmethod
    def null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("covers", mode="before", check_fields=False)
    @classmethod
    def drop_empty_covers(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return {key: url for key, url in value.items() if url is not None}
        return value

    @field_validator("isbn", check_fields=False)
    @classmethod
    def canonical_isbn(cls, value: str | None) -> str | None:
        if not value:
            return None
        normalized = normalize_isbn(value)
        if not normalized:
            raise ValueError("Invalid ISBN format")
        return normalized

    @field_validator("cover_image_url", check_fields=False)
    @classmethod
    def web_url(cls, value: str | None) -> str | None:
        if not value:
            return None
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("must be a URL")
        return value

    def to_record(self) -> Any:
        raise NotImplementedError


class ReadDocument(_Model):
    started_at: Stamp = None
    finished_at: Stamp = None


class ImageDocument(_Model):
    id: str
    url: str
    storage_path: str = ""
    is_primary: bool = False
    caption: str | None = None
    uploaded_at: int = 0
    size_bytes: int | None = None
    width: int | None = None
    height: int | None = None


class BookDocument(_Document):
    """A stored book. Reading-session date order is left to the health analyzer."""

    title: RequiredText = Field(max_length=_MAX_TITLE)
    author: RequiredText = Field(max_length=_MAX_AUTHOR)
    isbn: str | None = None
    cover_image_url: str | None = None
    publisher: str | None = Field(default=None, max_length=_MAX_PUBLISHER)
    published_date: str | None = None
    physical_format: str | None = None
    page_count: int | None = Field(default=None, ge=1, le=_MAX_PAGE_COUNT, strict=True)
    rating: float | None = Field(default=None, ge=0, le=5, strict=True, allow_inf_nan=False)
    genres: list[str] = Field(default_factory=list)
    series_id: str | None = None
    series_position: float | None = Field(default=None, ge=0, strict=True, allow_inf_nan=False)
    notes: str | None = Field(default=None, max_length=_MAX_BOOK_NOTES)
    reads: list[ReadDocument] = Field(default_factory=list)
    covers: dict[str, str] = Field(default_factory=dict)
    images: list[ImageDocument] = Field(default_factory=list)
    deleted_at: Stamp = None

    @field_validator("physical_format")
    @classmethod
    def known_format(cls, value: str | None) -> str | None:
        if value and value not in PHYSICAL_FORMATS:
            allowed = ", ".join(repr(f) for f in PHYSICAL_FORMATS if f)
            raise ValueError(f"must be one of: {allowed}")
        return value or None

    @field_validator("images")
    @classmethod
    def one_primary(cls, images: list[ImageDocument]) -> list[ImageDocument]:
        if sum(1 for image in images if image.is_primary) > 1:
            raise ValueError("at most one image can be primary")
        return images

    def to_record(self) -> BookRecord:
        return BookRecord(
            **self.model_dump(exclude={"id", "reads", "images"}),
            id=self.id or "",
            reads=[BookRead(**read.model_dump()) for read in self.reads],
            images=[BookImage(**image.model_dump()) for image in self.images],
        )


class ExpectedBookDocument(_Model):
    title: RequiredText
    isbn: str | None = None
    position: float | None = Field(default=None, strict=True, allow_inf_nan=False)
    source: str | None = None

    @field_validator("source")
    @classmethod
    def known_source(cls, value: str | None) -> str | None:
        if value is not None and value not in EXPECTED_BOOK_SOURCES:
            raise ValueError("must be 'api' or 'manual'")
        return value


class SeriesDocument(_Document):
    name: RequiredText = Field(max_length=_MAX_SERIES_NAME)
    description: str | None = Field(default=None, max_length=_MAX_SERIES_DESCRIPTION)
    total_books: int | None = Field(default=None, ge=1, le=_MAX_SERIES_TOTAL, strict=True)
    expected_books: list[ExpectedBookDocument] = Field(default_factory=list)
    deleted_at: Stamp = None

    @field_validator("expected_books")
    @classmethod
    def distinct_positions(cls, books: list[ExpectedBookDocument]) -> list[ExpectedBookDocument]:
        seen: set[float] = set()
        for book in books:
            if book.position is None:
                continue
            if book.position in seen:
                raise ValueError(f"position {book.position:g} is repeated")
            seen.add(book.position)
        return books

    def to_record(self) -> SeriesRecord:
        return SeriesRecord(
            **self.model_dump(exclude={"id", "expected_books"}),
            id=self.id or "",
            expected_books=[ExpectedBook(**book.model_dump()) for book in self.expected_books],
        )


class GenreDocument(_Document):
    name: RequiredText = Field(max_length=_MAX_GENRE_NAME)
    color: str | None = None

    @field_validator("color")
    @classmethod
    def hex_color(cls, value: str | None) -> str | None:
        if value and not _HEX_COLOR_RE.fullmatch(value):
            raise ValueError("Invalid colour format (use #RRGGBB)")
        return value or None

    def to_record(self) -> GenreRecord:
        return GenreRecord(
            id=self.id or "",
            name=self.name,
            color=self.color or DEFAULT_GENRE_COLOR,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class WishlistDocument(_Document):
    title: RequiredText = Field(max_length=_MAX_TITLE)
    author: RequiredText = Field(max_length=_MAX_AUTHOR)
    isbn: str | None = None
    cover_image_url: str | None = None
    covers: dict[str, str] = Field(default_factory=dict)
    publisher: str | None = Field(default=None, max_length=_MAX_PUBLISHER)
    published_date: str | None = None
    page_count: int | None = Field(default=None, ge=1, le=_MAX_PAGE_COUNT, strict=True)
    priority: str | None = None
    notes: str | None = Field(default=None, max_length=_MAX_WISHLIST_NOTES)

    @field_validator("priority")
    @classmethod
    def known_priority(cls, value: str | None) -> str | None:
        if value is not None and value not in WISHLIST_PRIORITIES:
            raise ValueError(f"must be one of: {', '.join(repr(p) for p in WISHLIST_PRIORITIES)}")
        return value

    def to_record(self) -> WishlistItem:
        return WishlistItem(**self.model_dump(exclude={"id"}), id=self.id or "")


def _location(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location as `expected_books[1].title`."""
    name = ""
    for part in loc:
        if isinstance(part, int):
            name += f"[{part}]"
        else:
            name += f".{part}" if name else part
    return name


def _message(error: Mapping[str, Any]) -> str:
    if error["type"] == "missing":
        return "is required"
    ctx = error.get("ctx") or {}
    if error["type"] == "value_error" and "error" in ctx:
        return str(ctx["error"])
    return error["msg"]


def _validate(
    kind: str, model: type[_Document], data: Mapping[str, Any], require_id: bool
) -> ValidationResult[Any]:
    errors: list[FieldError] = []
    if require_id and not str(data.get("id") or "").strip():
        errors.append(FieldError("id", "is required"))
    try:
        document = model.model_validate(dict(data))
    except ValidationError as exc:
        errors.extend(FieldError(_location(e["loc"]), _message(e)) for e in exc.errors())
        return ValidationResult(kind, errors=errors)
    if errors:
        return ValidationResult(kind, errors=errors)
    return ValidationResult(kind, value=document.to_record())


def validate_book(data: Mapping[str, Any], *, require_id: bool = True) -> ValidationResult[BookRecord]:
    """Validate a book document and build a BookRecord from it.

    Reading-session date order is not checked here: inconsistent dates are
    reported by the health analyzer instead of being refused at the door.
    """
    return _validate("book", BookDocument, data, require_id)


def validate_series(data: Mapping[str, Any], *, require_id: bool = True) -> ValidationResult[SeriesRecord]:
    """Validate a series document, including its expected-book list."""
    return _validate("series", SeriesDocument, data, require_id)


def validate_genre(data: Mapping[str, Any], *, require_id: bool = True) -> ValidationResult[GenreRecord]:
    """Validate a genre document. Colour must be #RRGGBB when given."""
    return _validate("genre", GenreDocument, data, require_id)


def validate_wishlist_item(
    data: Mapping[str, Any], *, require_id: bool = True
) -> ValidationResult[WishlistItem]:
    return _validate("wishlist item", WishlistDocument, data, require_id)
