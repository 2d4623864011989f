"""Shared utility functions."""
from datetime import datetime, timedelta, timezone

def to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken as local time."""
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(timezone.utc)

def format_index(value: datetime) -> str:
    """Format a timestamp as an ISO 8601 UTC index, e.g. 2026-01-09T21:13:43.475000Z."""
    return to_utc(value).isoformat().replace("+00:00", "Z")

def format_timespan(interval: timedelta) -> str:
    """Format a timedelta the way the service expects intervals: [d.]hh:mm:ss[.fffffff]."""
    if interval <= timedelta(0):
        raise ValueError(f"Interval must be positive, got {interval}")
    days = interval.days
    hours, remainder = divmod(interval.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    text = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days:
        text = f"{days}.{text}"
    if interval.microseconds:
        text += f".{interval.microseconds * 10:07d}"
    return text

def expected_interpolated_row_count(start: datetime, end: datetime, interval: timedelta) -> int:
    """Number of rows an interpolated request yields per group: boundaries inclusive."""
    if end < start:
        raise ValueError("end must not be before start")
    if interval <= timedelta(0):
        raise ValueError("interval must be positive")
    return int((end - start) // interval) + 1
