# ABOUTME: Library health analysis: finds books with missing or inconsistent data.
# ABOUTME: Produces a HealthReport of issue categories plus an overall completeness score.

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from bookassembly.library.normalizer import normalize_isbn
from bookassembly.library.timestamps import to_datetime
from bookassembly.library.types import BookRecord, SeriesRecord


class IssueCategory(str, Enum):
    """Kinds of data-quality problems, in report iteration order."""

    MISSING_COVER = "missing_cover"
    MISSING_ISBN = "missing_isbn"
    MISSING_GENRE = "missing_genre"
    ORPHANED_SERIES = "orphaned_series"
    INCONSISTENT_DATES = "inconsistent_dates"
    DUPLICATE_POSITION = "duplicate_position"
    MISSING_PAGE_COUNT = "missing_page_count"
    MISSING_FORMAT = "missing_format"
    MISSING_PUBLISHER = "missing_publisher"
    MISSING_PUBLISHED_DATE = "missing_published_date"


ISSUE_LABELS: dict[IssueCategory, str] = {
    IssueCategory.MISSING_COVER: "Cover",
    IssueCategory.MISSING_ISBN: "ISBN",
    IssueCategory.MISSING_GENRE: "Genres",
    IssueCategory.ORPHANED_SERIES: "Series link",
    IssueCategory.INCONSISTENT_DATES: "Reading dates",
    IssueCategory.DUPLICATE_POSITION: "Series position",
    IssueCategory.MISSING_PAGE_COUNT: "Pages",
    IssueCategory.MISSING_FORMAT: "Format",
    IssueCategory.MISSING_PUBLISHER: "Publisher",
    IssueCategory.MISSING_PUBLISHED_DATE: "Date",
}

# Completeness weights. Fields not listed here are tracked but not scored.
_COMPLETENESS_WEIGHTS: dict[IssueCategory, int] = {
    IssueCategory.MISSING_COVER: 2,
    IssueCategory.MISSING_GENRE: 2,
    IssueCategory.MISSING_PAGE_COUNT: 1,
    IssueCategory.MISSING_FORMAT: 1,
    IssueCategory.MISSING_PUBLISHER: 1,
    IssueCategory.MISSING_PUBLISHED_DATE: 1,
}

_INCOMPLETE_CAP = 99


@dataclass
class HealthReport:
    """Result of analyzing a library.

    Attributes:
        issues: Category -> ids of affected books, in input order. Every
            category is present, empty or not.
        books: Each affected book once, in first-seen category order.
        total_books: Number of active books analyzed.
        completeness_score: Weighted field completeness, 0-100.
        total_issues: Issue count over the completeness-weighted categories.
        fixable_books: Incomplete books that have an ISBN to look up.
    """

    issues: dict[IssueCategory, list[str]] = field(
        default_factory=lambda: {category: [] for category in IssueCategory}
    )
    books: list[BookRecord] = field(default_factory=list)
    total_books: int = 0
    completeness_score: int = 100
    total_issues: int = 0
    fixable_books: int = 0

    @property
    def is_healthy(self) -> bool:
        return not any(self.issues.values())


@dataclass
class CompletenessRating:
    label: str
    colour: str


def _missing_weighted_fields(book: BookRecord) -> list[IssueCategory]:
    """Completeness-weighted categories this book fails."""
    missing = []
    if not book.has_cover:
        missing.append(IssueCategory.MISSING_COVER)
    if not book.genres:
        missing.append(IssueCategory.MISSING_GENRE)
    if not book.page_count:
        missing.append(IssueCategory.MISSING_PAGE_COUNT)
    if not book.physical_format:
        missing.append(IssueCategory.MISSING_FORMAT)
    if not book.publisher:
        missing.append(IssueCategory.MISSING_PUBLISHER)
    if not book.published_date:
        missing.append(IssueCategory.MISSING_PUBLISHED_DATE)
    return missing


def _has_inconsistent_reads(book: BookRecord) -> bool:
    for read in book.reads:
        finished = to_datetime(read.finished_at)
        if finished is None:
            continue
        started = to_datetime(read.started_at)
        if started is None or finished < started:
            return True
    return False


def _resolve_series(
    series: Mapping[str, SeriesRecord] | Iterable[SeriesRecord] | None,
) -> set[str] | None:
    """Ids of live series, or None when no lookup was supplied."""
    if series is None:
        return None
    records = series.values() if isinstance(series, Mapping) else series
    return {s.id for s in records if not s.is_deleted}


def calculate_book_completeness(book: BookRecord) -> int:
    """Weighted completeness of one book as a whole percentage."""
    total = sum(_COMPLETENESS_WEIGHTS.values())
    missing = sum(_COMPLETENESS_WEIGHTS[c] for c in _missing_weighted_fields(book))
    return round((total - missing) / total * 100)


def calculate_library_completeness(books: list[BookRecord]) -> int:
    """Mean book completeness, capped at 99 while any book is incomplete."""
    if not books:
        return 100
    scores = [calculate_book_completeness(book) for book in books]
    score = round(sum(scores) / len(scores))
    if score == 100 and any(s < 100 for s in scores):
        return _INCOMPLETE_CAP
    return score


def analyze_library(
    records: Iterable[BookRecord],
    series: Mapping[str, SeriesRecord] | Iterable[SeriesRecord] | None = None,
) -> HealthReport:
    """Scan the active books in a library and report data-quality issues.

    A book can appear under several categories. Books in the bin are ignored
    entirely. Series links are only checked when a series lookup is given;
    links to series in the bin count as orphaned.

    The result depends only on the arguments: nothing is cached between calls.
    """
    active = [r for r in records if not r.is_deleted]
    live_series = _resolve_series(series)
    report = HealthReport(total_books=len(active))

    positions: dict[tuple[str, float], list[str]] = {}
    for book in active:
        if book.series_id is not None and book.series_position is not None:
            positions.setdefault((book.series_id, book.series_position), []).append(book.id)
    shared_position = {
        book_id for ids in positions.values() if len(ids) > 1 for book_id in ids
    }

    for book in active:
        flagged: list[IssueCategory] = []
        if not book.has_cover:
            flagged.append(IssueCategory.MISSING_COVER)
        if not normalize_isbn(book.isbn):
            flagged.append(IssueCategory.MISSING_ISBN)
        if not book.genres:
            flagged.append(IssueCategory.MISSING_GENRE)
        if live_series is not None and book.series_id and book.series_id not in live_series:
            flagged.append(IssueCategory.ORPHANED_SERIES)
        if _has_inconsistent_reads(book):
            flagged.append(IssueCategory.INCONSISTENT_DATES)
        if book.id in shared_position:
            flagged.append(IssueCategory.DUPLICATE_POSITION)
        flagged.extend(
            c for c in _missing_weighted_fields(book) if c not in flagged
        )
        for category in flagged:
            report.issues[category].append(book.id)

    by_id = {book.id: book for book in active}
    report.books = [by_id[book_id] for book_id in get_books_with_issues(report)]
    report.completeness_score = calculate_library_completeness(active)
    report.total_issues = sum(len(report.issues[c]) for c in _COMPLETENESS_WEIGHTS)
    report.fixable_books = sum(
        1 for book in active if normalize_isbn(book.isbn) and _missing_weighted_fields(book)
    )
    return report


def get_books_with_issues(report: HealthReport) -> list[str]:
    """Flatten every category into one deduplicated list of book ids.

    Order is first-seen, walking categories in IssueCategory order.
    """
    seen: dict[str, None] = {}
    for category in IssueCategory:
        for book_id in report.issues.get(category, []):
            seen.setdefault(book_id, None)
    return list(seen)


def rank_books_by_issues(report: HealthReport) -> list[tuple[BookRecord, list[IssueCategory]]]:
    """Group issues per book, books with the most issues first."""
    per_book: dict[str, list[IssueCategory]] = {}
    for category in IssueCategory:
        for book_id in report.issues.get(category, []):
            per_book.setdefault(book_id, []).append(category)
    by_id = {book.id: book for book in report.books}
    ranked = [(by_id[book_id], cats) for book_id, cats in per_book.items() if book_id in by_id]
    ranked.sort(key=lambda pair: len(pair[1]), reverse=True)
    return ranked


def completeness_rating(score: int) -> CompletenessRating:
    if score >= 90:
        return CompletenessRating("Excellent", "green")
    if score >= 70:
        return CompletenessRating("Good", "green")
    if score >= 50:
        return CompletenessRating("Fair", "amber")
    return CompletenessRating("Needs Attention", "red")
