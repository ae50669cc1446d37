# ABOUTME: Canonical forms of titles, authors, genre names, and ISBNs for comparison.
# ABOUTME: Shared by duplicate detection, health analysis, and search filtering.

import re
import unicodedata
from difflib import SequenceMatcher

_WHITESPACE_RE = re.compile(r"\s+")

# "ISBN", "ISBN:", "ISBN-13:", "isbn 10 " and similar prefixes. The 10/13 marker
# only counts when a separator follows it, so "ISBN 1338878921" keeps its digits.
_ISBN_PREFIX_RE = re.compile(r"^isbn(?:[-\s]?1[03](?=[:\s]))?[-:\s]*", re.IGNORECASE)
_ISBN_STRIP_RE = re.compile(r"[\s-]")
_ISBN_VALID_RE = re.compile(r"^(\d{10}|\d{9}X|\d{13})$", re.IGNORECASE)


def normalize_text(text: str | None) -> str:
    """Lowercase, trim, and collapse internal whitespace."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text.strip().lower())


def fold_text(text: str | None) -> str:
    """normalize_text plus removal of diacritics, so 'Émile' matches 'emile'."""
    decomposed = unicodedata.normalize("NFD", normalize_text(text))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_genre_name(name: str | None) -> str:
    """Canonical genre name used to keep genre names unique per user."""
    return normalize_text(name)


def tokens(text: str | None) -> list[str]:
    """Whitespace-split tokens of the normalized text."""
    normalized = normalize_text(text)
    return normalized.split(" ") if normalized else []


def clean_isbn(raw: str | None) -> str:
    """Strip an ISBN prefix, dashes, and spaces without validating."""
    if not raw:
        return ""
    return _ISBN_STRIP_RE.sub("", _ISBN_PREFIX_RE.sub("", raw.strip()))


def normalize_isbn(raw: str | None) -> str:
    """Return the canonical ISBN-10/13 for raw input, or "" if it isn't one.

    Invalid input is filtered out rather than rejected: callers use this for
    best-effort matching, not for form submission.
    """
    cleaned = clean_isbn(raw)
    if not _ISBN_VALID_RE.match(cleaned):
        return ""
    return cleaned.upper()


def is_isbn(raw: str | None) -> bool:
    """Whether raw input normalizes to a valid ISBN."""
    return bool(normalize_isbn(raw))


def title_similarity(a: str | None, b: str | None) -> float:
    """Edit-distance style similarity of two titles after normalization.

    Returns a ratio in [0.0, 1.0]. Two empty titles are not considered similar.
    """
    norm_a = normalize_text(a)
    norm_b = normalize_text(b)
    if not norm_a or not norm_b:
        return 0.0
    return SequenceMatcher(None, norm_a, norm_b).ratio()
