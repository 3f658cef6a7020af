"""Date-time parsing and local calendar-day helpers."""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Optional

_FALLBACK_FORMATS = (
    "%Y:%m:%d %H:%M:%S",  # EXIF
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
)


def parse_datetime(value: object) -> Optional[datetime]:
    """Parse *value* into a :class:`datetime`, returning ``None`` when impossible.

    ISO-8601 strings are accepted with or without an offset, including the
    ``Z`` suffix and date-only values.  Naive results represent local wall
    clock time.
    """

    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    normalized = value.strip()
    if not normalized:
        return None
    if normalized.endswith(("Z", "z")):
        normalized = f"{normalized[:-1]}+00:00"
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(normalized, fmt)
        except ValueError:
            continue
    return None


def to_local(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Return *moment* as naive wall-clock time in *tz* (system zone when ``None``)."""

    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz).replace(tzinfo=None)


def local_day(value: object, tz: Optional[tzinfo] = None) -> Optional[date]:
    """Return the calendar day of *value* in the local (or given) time zone."""

    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return to_local(parsed, tz).date()


def sort_timestamp(value: object) -> float:
    """Return a POSIX timestamp for ordering; missing or invalid values sort oldest."""

    parsed = parse_datetime(value)
    if parsed is None:
        return float("-inf")
    try:
        return parsed.timestamp()
    except (OverflowError, OSError, ValueError):
        return float("-inf")


def parse_day(value: object) -> Optional[date]:
    """Parse a filter bound such as ``"2024-01-15"`` into a :class:`date`."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None
