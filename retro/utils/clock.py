from __future__ import annotations

from datetime import datetime, UTC
from typing import Optional, Union

Instant = Union[datetime, int, float]


def utc_now() -> datetime:
    return datetime.now(UTC)


def resolve_instant(value: Optional[Instant]) -> datetime:
    """Return an aware UTC datetime for ``value``.

    Numbers are epoch milliseconds, naive datetimes are taken as UTC and
    ``None`` reads the wall clock.
    """
    if value is None:
        return utc_now()
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Cannot interpret {value!r} as an instant")
    return datetime.fromtimestamp(value / 1000, tz=UTC)


def elapsed_ms(since: datetime, now: datetime) -> float:
    return (now - since).total_seconds() * 1000
