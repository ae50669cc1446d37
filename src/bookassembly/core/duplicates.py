# ABOUTME: Duplicate detection for books about to be added to a library.
# ABOUTME: Ranks existing records as exact, probable, or possible matches for a candidate.

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from bookassembly.library.normalizer import (
    normalize_isbn,
    normalize_text,
    title_similarity,
    tokens,
)
from bookassembly.library.timestamps import to_datetime
from bookassembly.library.types import BookRecord

# Normalized title ratio at or above which two titles count as a possible match.
POSSIBLE_TITLE_SIMILARITY = 0.8


class Confidence(str, Enum):
    """How strongly an existing record looks like the candidate."""

    EXACT = "exact"
    PROBABLE = "probable"
    POSSIBLE = "possible"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {Confidence.EXACT: 0, Confidence.PROBABLE: 1, Confidence.POSSIBLE: 2}


@dataclass
class DuplicateMatch:
    """An existing record that matched the candidate, with its confidence tier."""

    record: BookRecord
    confidence: Confidence


@dataclass
class DuplicateCheckResult:
    """Insert-time verdict: is the candidate already in the library?"""

    is_duplicate: bool
    match_type: str | None = None
    existing_book: BookRecord | None = None


@dataclass
class _Fingerprint:
    """Normalized comparison keys for one record, computed once per call."""

    isbn: str
    title: str
    author: str
    author_tokens: frozenset[str]

    @classmethod
    def of(cls, record: BookRecord) -> "_Fingerprint":
        return cls(
            isbn=normalize_isbn(record.isbn),
            title=normalize_text(record.title),
            author=normalize_text(record.author),
            author_tokens=frozenset(tokens(record.author)),
        )


def _classify(candidate: _Fingerprint, other: _Fingerprint) -> Confidence | None:
    """Pick the highest tier two fingerprints qualify for, or None."""
    if candidate.isbn and candidate.isbn == other.isbn:
        return Confidence.EXACT

    # Every tier below needs a title on both sides.
    if not candidate.title or not other.title:
        return None

    if candidate.title == other.title:
        if candidate.author and candidate.author == other.author:
            return Confidence.PROBABLE
        if candidate.author_tokens & other.author_tokens:
            return Confidence.POSSIBLE

    if title_similarity(candidate.title, other.title) >= POSSIBLE_TITLE_SIMILARITY:
        return Confidence.POSSIBLE

    return None


def _recency_key(record: BookRecord) -> tuple[int, float]:
    """Sort key that puts the most recently updated record first, unknowns last."""
    updated = to_datetime(record.updated_at)
    if updated is None:
        return (1, 0.0)
    return (0, -updated.timestamp())


def find_duplicates(
    candidate: BookRecord,
    existing: Iterable[BookRecord],
    *,
    include_deleted: bool = False,
) -> list[DuplicateMatch]:
    """Find existing records that look like the candidate.

    Tiers:
        exact:    normalized ISBNs are equal and non-empty.
        probable: normalized title and normalized author are both equal.
        possible: titles are equal and authors share a token, or the titles
                  are at least POSSIBLE_TITLE_SIMILARITY alike.

    The candidate never matches a record with its own id. Records in the bin
    are skipped unless include_deleted is set (for restore-instead-of-add
    flows). Results are ordered by tier, then most recently updated first;
    remaining ties keep input order.
    """
    fingerprint = _Fingerprint.of(candidate)
    if not fingerprint.isbn and not fingerprint.title:
        return []

    matches: list[DuplicateMatch] = []
    for record in existing:
        if candidate.id and record.id == candidate.id:
            continue
        if record.is_deleted and not include_deleted:
            continue
        confidence = _classify(fingerprint, _Fingerprint.of(record))
        if confidence is not None:
            matches.append(DuplicateMatch(record=record, confidence=confidence))

    matches.sort(key=lambda m: (m.confidence.rank, *_recency_key(m.record)))
    return matches


def check_for_duplicate(
    candidate: BookRecord,
    existing: Iterable[BookRecord],
    *,
    include_deleted: bool = False,
) -> DuplicateCheckResult:
    """Answer the insert-time question using only the exact and probable tiers.

    ISBN matches win over title/author matches. Possible matches are left to
    the caller to present as hints; they never block an insert.
    """
    for match in find_duplicates(candidate, existing, include_deleted=include_deleted):
        if match.confidence is Confidence.EXACT:
            return DuplicateCheckResult(True, "isbn", match.record)
        if match.confidence is Confidence.PROBABLE:
            return DuplicateCheckResult(True, "title-author", match.record)
    return DuplicateCheckResult(False)


def find_duplicate_groups(
    records: Iterable[BookRecord],
    *,
    min_confidence: Confidence = Confidence.PROBABLE,
) -> list[tuple[BookRecord, DuplicateMatch]]:
    """Scan a whole library and report each duplicate pair once.

    Only active records are considered. A pair is reported against the
    record that comes first in input order.
    """
    active = [r for r in records if not r.is_deleted]
    pairs: list[tuple[BookRecord, DuplicateMatch]] = []
    for index, record in enumerate(active):
        for match in find_duplicates(record, active[index + 1 :]):
            if match.confidence.rank <= min_confidence.rank:
                pairs.append((record, match))
    return pairs
