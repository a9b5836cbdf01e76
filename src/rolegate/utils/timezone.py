"""
Clock utilities.

Session timing is computed from timezone-aware UTC datetimes only. Any
naive datetime handed in by a caller is assumed to already be UTC.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable

# UTC constant
UTC = timezone.utc

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """
    Get current time in UTC (timezone-aware).

    Always use this instead of datetime.utcnow() which returns
    naive datetime.
    """
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC, treating naive values as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_iso8601(dt: datetime) -> str:
    """
    Format as ISO 8601 with Z suffix and millisecond precision.

    Usage:
        iso = to_iso8601(engine.last_activity_at)
        # "2024-01-15T14:30:00.000Z"
    """
    utc_dt = to_utc(dt)
    return utc_dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_dt.microsecond // 1000:03d}Z"


def to_milliseconds(delta: timedelta) -> int:
    """Whole milliseconds in a duration (floor)."""
    return delta // timedelta(milliseconds=1)


class ManualClock:
    """
    Settable clock for deterministic timing.

    Usage:
        clock = ManualClock(datetime(2024, 1, 1, tzinfo=UTC))
        engine = SessionTimeoutEngine(..., clock=clock)
        clock.advance(minutes=2)
    """

    def __init__(self, start: datetime | None = None):
        self._now = to_utc(start) if start is not None else utc_now()

    def __call__(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta | None = None, **kwargs: float) -> datetime:
        """Move forward by a timedelta or timedelta keyword arguments."""
        self._now += delta if delta is not None else timedelta(**kwargs)
        return self._now

    def set(self, value: datetime) -> None:
        self._now = to_utc(value)
