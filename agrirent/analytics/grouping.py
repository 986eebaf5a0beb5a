"""
Grouping, ranking and key-normalization helpers for the aggregation engine.

Everything here is pure. Dict insertion order is the "first encountered"
order the engine relies on for tie-breaks.
"""

from collections.abc import Callable, Hashable, Iterable, Mapping
from datetime import datetime
from typing import Any, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)

UNKNOWN = "Unknown"
DEFAULT_START_TIME = "00:00"


def normalize_key(value: Any) -> str:
    """Map an absent, null or blank grouping value to "Unknown"."""
    if value is None:
        return UNKNOWN
    text = str(value).strip()
    return text if text else UNKNOWN


def hour_of(start_time: str | None) -> str:
    """
    Hour component of an HH:MM string.

    >>> hour_of("09:30")
    '09'
    >>> hour_of(None)
    '00'
    """
    hour = (start_time or DEFAULT_START_TIME).split(":")[0]
    return normalize_key(hour)


def hour_sort_key(hour: str) -> tuple[int, int]:
    """Numeric hour order; non-numeric buckets sort after all numeric ones."""
    try:
        return (0, int(hour))
    except ValueError:
        return (1, 0)


def month_of(date_value: str | None, now: datetime) -> int | None:
    """
    Calendar month (1-12) of an ISO date or datetime string.

    Absent or blank dates fall back to the month of ``now``. A date that is
    present but unparseable has no month and gives None.
    """
    text = (date_value or "").strip()
    if not text:
        return now.month
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).month
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text[:10]).month
    except ValueError:
        return None


def count_by(records: Iterable[T], key: Callable[[T], K]) -> dict[K, int]:
    """Count records per key, keys in first-encountered order."""
    counts: dict[K, int] = {}
    for record in records:
        k = key(record)
        counts[k] = counts.get(k, 0) + 1
    return counts


def most_frequent(counts: Mapping[K, int]) -> tuple[K, int] | None:
    """
    Key with the highest count.

    Ties go to the first-encountered key: ``max`` returns the first maximal
    element of the mapping's insertion order.
    """
    if not counts:
        return None
    return max(counts.items(), key=lambda kv: kv[1])


def top_n(rows: Iterable[T], key: Callable[[T], Any], n: int, descending: bool = True) -> list[T]:
    """
    Stable sort then truncate.

    ``sorted`` is stable with ``reverse=True`` as well, so rows with equal
    keys keep their input order.
    """
    return sorted(rows, key=key, reverse=descending)[:n]
