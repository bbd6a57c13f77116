"""Helpers for producing canonical ISO-8601 UTC timestamps."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_iso(value: datetime) -> str:
    """
    Serialize a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30))
        '2024-01-15T10:30:00.000Z'
    """
    value = to_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
