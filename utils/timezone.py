"""Aware-UTC clock and the epoch-second conversions JWT claims need."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Code and session expiry compare against this; tests patch the
    module-level reference in the calling module to travel in time.
    """
    return datetime.now(timezone.utc)


def to_timestamp(dt: datetime) -> int:
    """
    Whole seconds since the epoch (JWT NumericDate).

    Raises ValueError for naive datetimes.
    """
    if dt.tzinfo is None:
        raise ValueError("Cannot build a timestamp from a naive datetime")
    return int(dt.timestamp())


def from_timestamp(value: int | float) -> datetime:
    """NumericDate back to an aware UTC datetime."""
    return datetime.fromtimestamp(value, tz=timezone.utc)
