# ABOUTME: Pure library logic: duplicate detection, health analysis, filtering and sorting.
# ABOUTME: Nothing in this package performs I/O or keeps state between calls.

from bookassembly.core.duplicates import (
    Confidence,
    DuplicateMatch,
    check_for_duplicate,
    find_duplicates,
)
from bookassembly.core.filters import (
    FilterSpec,
    SortSpec,
    apply_filters,
    apply_sort,
    filter_and_sort,
)
from bookassembly.core.health import (
    HealthReport,
    IssueCategory,
    analyze_library,
    get_books_with_issues,
)

__all__ = [
    "Confidence",
    "DuplicateMatch",
    "FilterSpec",
    "HealthReport",
    "IssueCategory",
    "SortSpec",
    "analyze_library",
    "apply_filters",
    "apply_sort",
    "check_for_duplicate",
    "filter_and_sort",
    "find_duplicates",
    "get_books_with_issues",
]
