# ABOUTME: Unit tests for the library health analyzer.
# ABOUTME: Covers every issue category, completeness scoring, determinism, and bin exclusion.

from bookassembly.core.health import (
    HealthReport,
    IssueCategory,
    analyze_library,
    calculate_book_completeness,
    calculate_library_completeness,
    completeness_rating,
    get_books_with_issues,
    rank_books_by_issues,
)
from tests.fixtures.books import bare_book, make_book, make_series, read


class TestAnalyzeLibrary:
    """Tests for analyze_library()."""

    def test_complete_book_is_healthy(self) -> None:
        report = analyze_library([make_book()])
        assert report.is_healthy
        assert report.completeness_score == 100
        assert report.total_books == 1

    def test_every_category_present_in_report(self) -> None:
        report = analyze_library([])
        assert list(report.issues) == list(IssueCategory)
        assert all(ids == [] for ids in report.issues.values())

    def test_bare_book_flags_missing_fields(self) -> None:
        report = analyze_library([bare_book("b1")])
        for category in (
            IssueCategory.MISSING_COVER,
            IssueCategory.MISSING_ISBN,
            IssueCategory.MISSING_GENRE,
            IssueCategory.MISSING_PAGE_COUNT,
            IssueCategory.MISSING_FORMAT,
            IssueCategory.MISSING_PUBLISHER,
            IssueCategory.MISSING_PUBLISHED_DATE,
        ):
            assert report.issues[category] == ["b1"], category
        assert report.completeness_score == 0

    def test_cover_from_covers_map_counts(self) -> None:
        book = make_book(cover_image_url=None, covers={"openLibrary": "https://x/c.jpg"})
        assert analyze_library([book]).issues[IssueCategory.MISSING_COVER] == []

    def test_invalid_isbn_counts_as_missing(self) -> None:
        report = analyze_library([make_book(isbn="12345")])
        assert report.issues[IssueCategory.MISSING_ISBN] == ["b1"]

    def test_binned_books_never_reported(self) -> None:
        binned = bare_book("gone", deleted_at=1_700_000_000_000)
        report = analyze_library([binned, make_book("ok")])
        assert all("gone" not in ids for ids in report.issues.values())
        assert report.total_books == 1

    def test_shared_series_position_flags_both(self) -> None:
        first = make_book("a", series_id="s1", series_position=1)
        second = make_book("b", title="Another", series_id="s1", series_position=1)
        third = make_book("c", title="Third", series_id="s1", series_position=2)
        report = analyze_library([first, second, third])
        assert report.issues[IssueCategory.DUPLICATE_POSITION] == ["a", "b"]

    def test_same_position_in_different_series_is_fine(self) -> None:
        books = [
            make_book("a", series_id="s1", series_position=1),
            make_book("b", series_id="s2", series_position=1),
        ]
        assert analyze_library(books).issues[IssueCategory.DUPLICATE_POSITION] == []

    def test_finished_before_started_is_inconsistent(self) -> None:
        book = make_book(reads=[read("2024-01-01", "2023-12-01")])
        assert analyze_library([book]).issues[IssueCategory.INCONSISTENT_DATES] == ["b1"]

    def test_finished_without_start_is_inconsistent(self) -> None:
        book = make_book(reads=[read(None, "2023-12-01")])
        assert analyze_library([book]).issues[IssueCategory.INCONSISTENT_DATES] == ["b1"]

    def test_in_progress_read_is_fine(self) -> None:
        book = make_book(reads=[read("2024-01-01", None), read(1_700_000_000_000, "2024-01-01")])
        assert analyze_library([book]).issues[IssueCategory.INCONSISTENT_DATES] == []

    def test_orphaned_series_only_checked_with_lookup(self) -> None:
        book = make_book(series_id="gone")
        assert analyze_library([book]).issues[IssueCategory.ORPHANED_SERIES] == []
        report = analyze_library([book], {"s1": make_series("s1")})
        assert report.issues[IssueCategory.ORPHANED_SERIES] == ["b1"]

    def test_link_to_binned_series_is_orphaned(self) -> None:
        book = make_book(series_id="s1")
        series = [make_series("s1", deleted_at=1_700_000_000_000)]
        assert analyze_library([book], series).issues[IssueCategory.ORPHANED_SERIES] == ["b1"]

    def test_live_series_link_is_fine(self) -> None:
        book = make_book(series_id="s1")
        assert analyze_library([book], [make_series("s1")]).is_healthy

    def test_issue_lists_keep_input_order(self) -> None:
        books = [bare_book("z"), bare_book("a"), bare_book("m")]
        assert analyze_library(books).issues[IssueCategory.MISSING_COVER] == ["z", "a", "m"]

    def test_deterministic(self) -> None:
        books = [
            bare_book("a"),
            make_book("b", series_id="s1", series_position=1),
            make_book("c", series_id="s1", series_position=1, reads=[read("2024-02-01", "2024-01-01")]),
        ]
        series = [make_series("s1")]
        assert analyze_library(books, series) == analyze_library(books, series)

    def test_fixable_books_need_isbn(self) -> None:
        books = [
            bare_book("with-isbn", isbn="9780441013593"),
            bare_book("without-isbn"),
            make_book("complete"),
        ]
        assert analyze_library(books).fixable_books == 1

    def test_total_issues_counts_weighted_categories(self) -> None:
        report = analyze_library([bare_book("a")])
        assert report.total_issues == 6


class TestCompleteness:
    """Tests for completeness scoring."""

    def test_book_score_weights(self) -> None:
        # Cover and genres weigh 2, the other four fields 1, out of 8.
        assert calculate_book_completeness(make_book(genres=[])) == 75
        assert calculate_book_completeness(make_book(publisher=None)) == 88

    def test_empty_library_is_complete(self) -> None:
        assert calculate_library_completeness([]) == 100

    def test_library_capped_below_100_when_anything_missing(self) -> None:
        books = [make_book(str(i)) for i in range(199)] + [make_book("x", publisher=None)]
        assert calculate_library_completeness(books) == 99

    def test_rating_bands(self) -> None:
        assert completeness_rating(95).label == "Excellent"
        assert completeness_rating(70).label == "Good"
        assert completeness_rating(50).label == "Fair"
        assert completeness_rating(49).label == "Needs Attention"


class TestBooksWithIssues:
    """Tests for get_books_with_issues() and rank_books_by_issues()."""

    def test_deduplicated_in_category_order(self) -> None:
        report = HealthReport()
        report.issues[IssueCategory.MISSING_COVER] = ["b", "a"]
        report.issues[IssueCategory.MISSING_ISBN] = ["a", "c"]
        assert get_books_with_issues(report) == ["b", "a", "c"]

    def test_report_books_match_ids(self) -> None:
        report = analyze_library([make_book("ok"), bare_book("bad")])
        assert [b.id for b in report.books] == ["bad"]

    def test_rank_puts_worst_first(self) -> None:
        report = analyze_library([make_book("mostly", publisher=None), bare_book("worst")])
        ranked = rank_books_by_issues(report)
        assert [book.id for book, _ in ranked] == ["worst", "mostly"]
        assert ranked[1][1] == [IssueCategory.MISSING_PUBLISHER]
