"""
Time utilities shared by the moderation and rate limiting services.

SQLite hands back naive datetimes even though everything is stored as UTC,
so values read from the store are normalized before being compared with
timezone-aware "now" values.
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Make a datetime timezone-aware, assuming UTC for naive values.

    Args:
        dt: Datetime from the store or caller, or None

    Returns:
        Aware datetime in UTC, or None if dt is None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def window_start(now: datetime, window_minutes: int) -> datetime:
    """Start of a trailing window of window_minutes ending at now."""
    return now - timedelta(minutes=window_minutes)


def seconds_until(target: datetime, now: datetime | None = None) -> int:
    """
    Whole seconds from now until target, never negative.

    Args:
        target: Future point in time
        now: Reference time (defaults to current UTC time)

    Returns:
        Seconds remaining, rounded up, or 0 if target has passed
    """
    now = ensure_utc(now) or utc_now()
    target = ensure_utc(target)  # type: ignore[assignment]
    remaining = (target - now).total_seconds()
    if remaining <= 0:
        return 0
    return int(remaining) + (0 if remaining == int(remaining) else 1)
