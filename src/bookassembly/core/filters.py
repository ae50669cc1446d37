# ABOUTME: Declarative filtering and sorting of book collections for list views.
# ABOUTME: Filtering always runs before sorting; both return new lists and never mutate input.

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from bookassembly.library.normalizer import fold_text
from bookassembly.library.timestamps import to_datetime
from bookassembly.library.types import BookRecord


class ReadingStatus(str, Enum):
    WANT_TO_READ = "want-to-read"
    READING = "reading"
    FINISHED = "finished"


STATUS_LABELS: dict[ReadingStatus, str] = {
    ReadingStatus.WANT_TO_READ: "Not Read",
    ReadingStatus.READING: "Currently Reading",
    ReadingStatus.FINISHED: "Finished",
}


class SortField(str, Enum):
    TITLE = "title"
    AUTHOR = "author"
    RATING = "rating"
    PAGE_COUNT = "page_count"
    SERIES_POSITION = "series_position"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    PUBLISHED_DATE = "published_date"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class FilterSpec:
    """What a list view should show. Empty criteria match everything.

    Multi-value criteria (genres, series, statuses) match when a book has
    ANY of the selected values.
    """

    search: str | None = None
    genre_ids: set[str] = field(default_factory=set)
    series_ids: set[str] = field(default_factory=set)
    min_rating: float | None = None
    statuses: set[ReadingStatus] = field(default_factory=set)
    author: str | None = None
    include_deleted: bool = False


@dataclass
class SortSpec:
    field: SortField = SortField.CREATED_AT
    direction: SortDirection = SortDirection.DESC


def get_book_status(book: BookRecord) -> ReadingStatus:
    """Reading status derived from the most recent reading session."""
    if not book.reads:
        return ReadingStatus.WANT_TO_READ
    latest = book.reads[-1]
    if latest.finished_at:
        return ReadingStatus.FINISHED
    if latest.started_at:
        return ReadingStatus.READING
    return ReadingStatus.WANT_TO_READ


def _matches(book: BookRecord, spec: FilterSpec, search: str, author: str) -> bool:
    if book.is_deleted and not spec.include_deleted:
        return False

    if search and search not in fold_text(book.title) and search not in fold_text(book.author):
        return False

    if spec.statuses and get_book_status(book) not in spec.statuses:
        return False

    if spec.genre_ids and not spec.genre_ids.intersection(book.genres):
        return False

    if spec.series_ids and book.series_id not in spec.series_ids:
        return False

    if spec.min_rating and (book.rating is None or book.rating < spec.min_rating):
        return False

    return not author or author in fold_text(book.author)


def apply_filters(records: Iterable[BookRecord], spec: FilterSpec) -> list[BookRecord]:
    """Return the records that satisfy every criterion, in input order.

    Idempotent: filtering an already-filtered list with the same spec
    returns an equal list.
    """
    search = fold_text(spec.search)
    author = fold_text(spec.author)
    return [book for book in records if _matches(book, spec, search, author)]


def _text_key(value: str | None) -> str | None:
    return value.casefold() if value else None


def _number_key(value: float | None) -> float | None:
    return value


def _date_key(value: Any) -> float | None:
    resolved = to_datetime(value)
    return resolved.timestamp() if resolved is not None else None


_SORT_KEYS: dict[SortField, tuple[str, Callable[[Any], Any]]] = {
    SortField.TITLE: ("title", _text_key),
    SortField.AUTHOR: ("author", _text_key),
    SortField.RATING: ("rating", _number_key),
    SortField.PAGE_COUNT: ("page_count", _number_key),
    SortField.SERIES_POSITION: ("series_position", _number_key),
    SortField.CREATED_AT: ("created_at", _date_key),
    SortField.UPDATED_AT: ("updated_at", _date_key),
    SortField.PUBLISHED_DATE: ("published_date", _date_key),
}


def apply_sort(records: Iterable[BookRecord], spec: SortSpec) -> list[BookRecord]:
    """Return records ordered by one field.

    Strings compare case-insensitively, dates by resolved instant. Books
    with no usable value sort last in either direction. The sort is stable:
    books with equal keys keep their input order.
    """
    attr, to_key = _SORT_KEYS[SortField(spec.field)]
    present: list[tuple[Any, BookRecord]] = []
    absent: list[BookRecord] = []
    for book in records:
        key = to_key(getattr(book, attr))
        if key is None:
            absent.append(book)
        else:
            present.append((key, book))

    descending = SortDirection(spec.direction) is SortDirection.DESC
    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [book for _, book in present] + absent


def filter_and_sort(
    records: Iterable[BookRecord], filter_spec: FilterSpec, sort_spec: SortSpec
) -> list[BookRecord]:
    """Filter, then sort. The two steps are never fused."""
    return apply_sort(apply_filters(records, filter_spec), sort_spec)
