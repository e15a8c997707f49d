"""General utility functions."""
from datetime import datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def is_within_window(
    start_time: Optional[datetime],
    end_time: Optional[datetime],
    buffer_minutes: int = 15,
    now: Optional[datetime] = None,
) -> bool:
    """
    Check if a time-boxed window is currently open.

    Either bound may be missing, in which case that side is unbounded.

    Args:
        start_time: Window start (timezone-aware or naive, assumed UTC if naive)
        end_time: Window end (timezone-aware or naive, assumed UTC if naive)
        buffer_minutes: Minutes before start the window already counts as open
        now: Reference time, defaults to the current time

    Returns:
        bool: True if now falls inside the window
    """
    now = to_utc(now) if now is not None else utc_now()

    if start_time is not None:
        start_buffer = to_utc(start_time) - timedelta(minutes=buffer_minutes)
        if now < start_buffer:
            return False

    if end_time is not None and now > to_utc(end_time):
        return False

    return True


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC timezone."""
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def isoformat_utc(dt: Optional[datetime]) -> Optional[str]:
    """Render a datetime as an ISO 8601 UTC string, passing None through."""
    if dt is None:
        return None
    return to_utc(dt).isoformat()
