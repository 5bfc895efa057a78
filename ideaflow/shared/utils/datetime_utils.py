"""Timezone-aware datetime helpers.

Every timestamp the workflow engine writes (``updated_at``,
``status_changed_at``, event timestamps) is produced here so that stores
and events never mix naive and aware values.
"""

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return current UTC time with tzinfo=timezone.utc."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime.

    Naive values (as returned by some database drivers) are assumed to
    already be UTC; aware values in another zone are converted.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


__all__ = [
    "Clock",
    "ensure_utc",
    "utcnow",
]
