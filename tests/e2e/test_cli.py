# ABOUTME: End-to-end tests for the Book Assembly CLI.
# ABOUTME: Drives commands through Click's CliRunner against a temporary library database.

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner, Result

from bookassembly.cli import cli
from bookassembly.db.catalog import LibraryCatalog
from bookassembly.db.connection import open_library
from bookassembly.metadata.types import LookupResult, SearchPage
from tests.fixtures.books import bare_book, make_book


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, db_path: Path, *args: str, user: str = "alice", stdin: str | None = None) -> Result:
    """Run a command against the test database as the given user."""
    return runner.invoke(cli, [*args, "--db", str(db_path), "--user", user], input=stdin)


def _catalog(db_path: Path, user: str = "alice") -> LibraryCatalog:
    return LibraryCatalog(open_library(db_path), user)


class TestRoot:
    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("add", "ls", "health", "dupes", "bin", "wishlist"):
            assert name in result.output


class TestAdd:
    """E2e tests for `bookassembly add`."""

    def test_manual_add(self, runner: CliRunner, db_path: Path) -> None:
        result = _invoke(
            runner, db_path, "add", "--title", "Dune", "--author", "Frank Herbert",
            "--pages", "612", "--genre", "SF", "--series", "Dune Chronicles", "--position", "1",
        )
        assert result.exit_code == 0, result.output
        assert "Added" in result.output

        catalog = _catalog(db_path)
        [book] = catalog.list_books()
        assert book.page_count == 612
        assert book.series_id == catalog.find_series_by_name("dune chronicles").id  # type: ignore[union-attr]
        assert [catalog.get_genre(g).name for g in book.genres] == ["SF"]  # type: ignore[union-attr]

    def test_requires_title_and_author(self, runner: CliRunner, db_path: Path) -> None:
        result = _invoke(runner, db_path, "add", "--title", "Dune")
        assert result.exit_code == 1
        assert "required" in result.output

    def test_invalid_isbn_reported(self, runner: CliRunner, db_path: Path) -> None:
        result = _invoke(
            runner, db_path, "add", "--title", "Dune", "--author", "F", "--isbn", "123", "--no-lookup"
        )
        assert result.exit_code == 1
        assert "Invalid ISBN format" in result.output

    def test_duplicate_blocked_then_forced(self, runner: CliRunner, db_path: Path) -> None:
        args = ("add", "--title", "Dune", "--author", "Frank Herbert")
        assert _invoke(runner, db_path, *args).exit_code == 0

        blocked = _invoke(runner, db_path, *args)
        assert blocked.exit_code == 1
        assert "Already in library" in blocked.output

        forced = _invoke(runner, db_path, *args, "--force")
        assert forced.exit_code == 0
        assert _catalog(db_path).count_books() == 2

    def test_binned_duplicate_offered_for_restore(self, runner: CliRunner, db_path: Path) -> None:
        catalog = _catalog(db_path)
        catalog.add_book(bare_book("old", "Dune", "Frank Herbert"))
        catalog.soft_delete_book("old")

        result = _invoke(
            runner, db_path, "add", "--title", "Dune", "--author", "Frank Herbert", stdin="y\n"
        )
        assert result.exit_code == 0, result.output
        assert "Restored" in result.output
        assert [b.id for b in _catalog(db_path).list_books()] == ["old"]

    def test_isbn_lookup_fills_fields(self, runner: CliRunner, db_path: Path) -> None:
        found = LookupResult(
            title="Small Gods",
            author="Terry Pratchett",
            isbn="9780552152976",
            publisher="Corgi",
            physical_format="Mass Market Paperback",
            genres=["Fantasy"],
            series_name="Discworld",
            series_position=13,
        )
        with patch("bookassembly.cli.commands.add_cmd._create_lookup") as mock_fn:
            mock_lookup = MagicMock()
            mock_lookup.lookup_isbn.return_value = found
            mock_fn.return_value = mock_lookup
            result = _invoke(runner, db_path, "add", "--isbn", "9780552152976")

        assert result.exit_code == 0, result.output
        catalog = _catalog(db_path)
        [book] = catalog.list_books()
        assert (book.title, book.publisher, book.series_position) == ("Small Gods", "Corgi", 13)
        assert catalog.find_series_by_name("Discworld") is not None
        assert catalog.find_genre_by_name("fantasy") is not None

    def test_no_lookup_skips_network(self, runner: CliRunner, db_path: Path) -> None:
        with patch("bookassembly.cli.commands.add_cmd._create_lookup") as mock_fn:
            result = _invoke(
                runner, db_path, "add", "--isbn", "9780552152976", "--no-lookup",
                "--title", "Small Gods", "--author", "Terry Pratchett",
            )
        assert result.exit_code == 0, result.output
        mock_fn.assert_not_called()


class TestLsAndInfo:
    """E2e tests for `bookassembly ls` and `bookassembly info`."""

    def test_ls_empty(self, runner: CliRunner, db_path: Path) -> None:
        result = _invoke(runner, db_path, "ls")
        assert result.exit_code == 0
        assert "No books match" in result.output

    def test_ls_filters_and_sorts(self, runner: CliRunner, db_path: Path) -> None:
        catalog = _catalog(db_path)
        catalog.add_book(bare_book("a", "Dune", "Frank Herbert", rating=4))
        catalog.add_book(bare_book("b", "Emma", "Jane Austen", rating=5))
        catalog.add_book(bare_book("c", "Hyperion", "Dan Simmons", rating=3))

        result = _invoke(runner, db_path, "ls", "--min-rating", "4", "--sort", "rating", "--asc")
        assert result.exit_code == 0, result.output
        assert "Hyperion" not in result.output
        assert result.output.index("Dune") < result.output.index("Emma")
        assert "2 book(s)" in result.output

    def test_ls_unknown_genre(self, runner: CliRunner, db_path: Path) -> None:
        result = _invoke(runner, db_path, "ls", "--genre", "Nope")
        assert result.exit_code == 1

    def test_ls_is_per_user(self, runner: CliRunner, db_path: Path) -> None:
        _catalog(db_path, "bob").add_book(bare_book("a", "Dune", "Frank Herbert"))
        assert "Dune" not in _invoke(runner, db_path, "ls").output
        assert "Dune" in _invoke(runner, db_path, "ls", user="bob").output

    def test_info_by_prefix(self, runner: CliRunner, db_path: Path) -> None:
        _catalog(db_path).add_book(make_book("abcdef123456"))
        result = _invoke(runner, db_path, "info", "abcdef")
        assert result.exit_code == 0, result.output
        assert "Harcourt" in result.output
        assert "100%" in result.output

    def test_info_missing(self, runner: CliRunner, db_path: Path) -> None:
        result = _invoke(runner, db_path, "info", "nope")
        assert result.exit_code == 1
        assert "not found" in result.output


class TestBin:
    """E2e tests for `bookassembly rm` and the `bin` group."""

    def test_rm_restore_cycle(self, runner: CliRunner, db_path: Path) -> None:
        _catalog(db_path).add_book(bare_book("book1", "Dune", "Frank Herbert"))

        assert _invoke(runner, db_path, "rm", "book1").exit_code == 0
        listing = _invoke(runner, db_path, "bin", "ls")
        assert "Dune" in listing.output
        assert "30" in listing.output

        assert _invoke(runner, db_path, "bin", "restore", "book1").exit_code == 0
        assert "empty" in _invoke(runner, db_path, "bin", "ls").output

    def test_restore_active_book_fails(self, runner: CliRunner, db_path: Path) -> None:
        _catalog(db_path).add_book(bare_book("book1"))
        assert _invoke(runner, db_path, "bin", "restore", "book1").exit_code == 1

    def test_purge_zero_days(self, runner: CliRunner, db_path: Path) -> None:
        catalog = _catalog(db_path)
        catalog.add_book(bare_book("book1"))
        catalog.soft_delete_book("book1")
        result = _invoke(runner, db_path, "bin", "purge", "--days", "0")
        assert "Purged 1 book(s)" in result.output
        assert _catalog(db_path).get_book("book1") is None

    def test_empty_asks_first(self, runner: CliRunner, db_path: Path) -> None:
        catalog = _catalog(db_path)
        catalog.add_book(bare_book("book1"))
        catalog.soft_delete_book("book1")

        declined = _invoke(runner, db_path, "bin", "empty", stdin="n\n")
        assert "Cancelled" in declined.output
        assert _catalog(db_path).get_book("book1") is not None

        _invoke(runner, db_path, "bin", "empty", "--yes")
        assert _catalog(db_path).get_book("book1") is None


class TestHealthAndDupes:
    """E2e tests for `bookassembly health` and `bookassembly dupes`."""

    def test_healthy_library(self, runner: CliRunner, db_path: Path) -> None:
        _catalog(db_path).add_book(make_book("a"))
        result = _invoke(runner, db_path, "health", "--strict")
        assert result.exit_code == 0, result.output
        assert "100%" in result.output
        assert "No issues found" in result.output

    def test_issues_reported_and_strict_fails(self, runner: CliRunner, db_path: Path) -> None:
        _catalog(db_path).add_book(bare_book("a", "Dune", "Frank Herbert"))
        relaxed = _invoke(runner, db_path, "health")
        assert relaxed.exit_code == 0
        assert "Cover" in relaxed.output
        assert "Needs Attention" in relaxed.output
        assert _invoke(runner, db_path, "health", "--strict").exit_code == 1

    def test_dupes(self, runner: CliRunner, db_path: Path) -> None:
        catalog = _catalog(db_path)
        catalog.add_book(bare_book("a", "Dune", "Frank Herbert"))
        catalog.add_book(bare_book("b", "Dune", "Frank Herbert"))
        result = _invoke(runner, db_path, "dupes")
        assert result.exit_code == 0
        assert "probable" in result.output
        assert "1 pair(s)" in result.output

    def test_no_dupes(self, runner: CliRunner, db_path: Path) -> None:
        _catalog(db_path).add_book(bare_book("a", "Dune", "Frank Herbert"))
        assert "No duplicates" in _invoke(runner, db_path, "dupes").output


class TestSeriesGenreWishlist:
    """E2e tests for the series, genre, and wishlist groups."""

    def test_series_add_ls_rm(self, runner: CliRunner, db_path: Path) -> None:
        assert _invoke(runner, db_path, "series", "add", "Discworld", "--total", "41").exit_code == 0
        assert _invoke(runner, db_path, "series", "add", "discworld").exit_code == 1
        assert "0/41" in _invoke(runner, db_path, "series", "ls").output
        assert _invoke(runner, db_path, "series", "rm", "Discworld").exit_code == 0
        assert "No series" in _invoke(runner, db_path, "series", "ls").output

    def test_genre_rm_strips_books(self, runner: CliRunner, db_path: Path) -> None:
        assert _invoke(runner, db_path, "genre", "add", "Horror", "--color", "#ff0000").exit_code == 0
        duplicate = _invoke(runner, db_path, "genre", "add", "horror")
        assert duplicate.exit_code == 1
        assert "already exists" in duplicate.output

        catalog = _catalog(db_path)
        genre_id = catalog.find_genre_by_name("Horror").id  # type: ignore[union-attr]
        catalog.add_book(bare_book("a", genres=[genre_id]))

        result = _invoke(runner, db_path, "genre", "rm", "Horror")
        assert "removed it from 1 book(s)" in result.output
        assert _catalog(db_path).get_book("a").genres == []  # type: ignore[union-attr]

    def test_wishlist_add_move(self, runner: CliRunner, db_path: Path) -> None:
        added = _invoke(runner, db_path, "wishlist", "add", "Dune", "Frank Herbert", "--priority", "high")
        assert added.exit_code == 0, added.output
        [item] = _catalog(db_path).list_wishlist()

        moved = _invoke(runner, db_path, "wishlist", "move", item.id[:8])
        assert moved.exit_code == 0, moved.output
        catalog = _catalog(db_path)
        assert catalog.list_wishlist() == []
        assert [b.title for b in catalog.list_books()] == ["Dune"]

    def test_wishlist_rm_missing(self, runner: CliRunner, db_path: Path) -> None:
        assert _invoke(runner, db_path, "wishlist", "rm", "nope").exit_code == 1


class TestSearch:
    def test_search_shows_results(self, runner: CliRunner) -> None:
        page = SearchPage(
            books=[LookupResult(title="Dune", author="Frank Herbert", isbn="9780441013593")],
            has_more=True,
            total_items=40,
        )
        with patch("bookassembly.cli.commands.search_cmd._create_lookup") as mock_fn:
            mock_fn.return_value.search_books.return_value = page
            result = runner.invoke(cli, ["search", "dune"])
        assert result.exit_code == 0, result.output
        assert "Dune" in result.output
        assert "--page 2" in result.output

    def test_search_no_results(self, runner: CliRunner) -> None:
        with patch("bookassembly.cli.commands.search_cmd._create_lookup") as mock_fn:
            mock_fn.return_value.search_books.return_value = SearchPage()
            result = runner.invoke(cli, ["search", "zzz"])
        assert "No results" in result.output
