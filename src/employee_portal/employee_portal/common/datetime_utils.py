from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Union

from ..core.exceptions import ValidationError

DateLike = Union[str, date, datetime, None]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}")


def parse_time(value: str) -> time:
    """Parse HH:MM or HH:MM:SS."""
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(value, fmt).time()
        except (TypeError, ValueError):
            continue
    raise ValidationError(f"Invalid time: {value!r}")


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def _coerce(value: DateLike) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value: DateLike) -> str:
    """'Jan 5, 2026' style; '-' for unparseable input."""
    dt = _coerce(value)
    if dt is None:
        return "-"
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}"


def format_time(value: DateLike) -> str:
    """'09:05 AM' style; '-' for unparseable input."""
    dt = _coerce(value)
    if dt is None:
        return "-"
    return dt.strftime("%I:%M %p")


def format_clock(value: str | time) -> str:
    """Format a bare TIME column (e.g. '17:30:00') as '05:30 PM'."""
    if isinstance(value, time):
        return value.strftime("%I:%M %p")
    try:
        return parse_time(value).strftime("%I:%M %p")
    except ValidationError:
        return "-"


def format_datetime(value: DateLike) -> str:
    if _coerce(value) is None:
        return "-"
    return f"{format_date(value)} {format_time(value)}"
