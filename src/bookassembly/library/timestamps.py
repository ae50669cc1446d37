# ABOUTME: Resolves the loose timestamp shapes found in stored records to UTC instants.
# ABOUTME: Unparseable values resolve to None so callers can treat them as absent.

import re
import time
from datetime import UTC, date, datetime, timedelta

# Partial ISO dates that datetime.fromisoformat() does not accept.
_YEAR_RE = re.compile(r"^(\d{4})$")
_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


def now_ms() -> int:
    """Current time as epoch milliseconds, the unit deletion markers use."""
    return int(time.time() * 1000)


def _parse_string(value: str) -> datetime | None:
    text = value.strip()
    if not text:
        return None

    m = _YEAR_RE.match(text)
    if m:
        return datetime(int(m.group(1)), 1, 1, tzinfo=UTC)

    m = _YEAR_MONTH_RE.match(text)
    if m:
        month = int(m.group(2))
        if not 1 <= month <= 12:
            return None
        return datetime(int(m.group(1)), month, 1, tzinfo=UTC)

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def to_datetime(value: object) -> datetime | None:
    """Resolve a stored timestamp to an aware UTC datetime.

    Accepts ISO 8601 strings (including bare years and year-months), epoch
    milliseconds, date, and datetime. Naive values are taken to be UTC.
    Booleans, out-of-range numbers, and garbage strings resolve to None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        resolved = value
    elif isinstance(value, date):
        resolved = datetime(value.year, value.month, value.day)
    elif isinstance(value, int | float):
        try:
            resolved = datetime(1970, 1, 1, tzinfo=UTC) + timedelta(milliseconds=value)
        except (OverflowError, ValueError):
            return None
    elif isinstance(value, str):
        resolved = _parse_string(value)
        if resolved is None:
            return None
    else:
        return None

    if resolved.tzinfo is None:
        return resolved.replace(tzinfo=UTC)
    return resolved.astimezone(UTC)
