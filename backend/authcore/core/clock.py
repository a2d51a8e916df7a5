"""Time helpers shared by services that reason about token expiry."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """
    Normalize a datetime read back from the database to aware UTC.

    SQLite drops tzinfo on ``DateTime(timezone=True)`` columns, so naive
    values are labelled as UTC rather than converted.

    :param value: Datetime to normalize.
    :type value: datetime
    :returns: Timezone-aware UTC datetime.
    :rtype: datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
