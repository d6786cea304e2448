"""
Due-date parsing and display helpers.

All instants are handled in UTC.  The ``datetime-local`` form control
carries no zone, so its values are read and written as UTC wall-clock
times.
"""

from __future__ import annotations

from datetime import datetime, timezone

NO_DUE_DATE_LABEL = "No due date set"
DATETIME_LOCAL_FORMAT = "%Y-%m-%dT%H:%M"


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_datetime(iso_string: str | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp from the task API into an aware UTC datetime.

    Raises:
        ValueError: The string is not ISO-8601.
    """
    if iso_string is None:
        return None
    return ensure_utc(datetime.fromisoformat(iso_string.replace("Z", "+00:00")))


def to_utc_iso(value: datetime) -> str:
    """Render ``value`` the way the task API expects, e.g. ``2025-03-01T10:00:00Z``."""
    return ensure_utc(value).isoformat().replace("+00:00", "Z")


def _ordinal(day: int) -> str:
    if 10 <= day % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_due_date(value: datetime | None) -> str:
    """
    Human-readable due date, e.g. ``March 1st 2025, 10:00 am``.

    Returns ``"No due date set"`` for ``None``.
    """
    if value is None:
        return NO_DUE_DATE_LABEL
    value = ensure_utc(value)
    hour = value.hour % 12 or 12
    meridiem = "am" if value.hour < 12 else "pm"
    return (
        f"{value.strftime('%B')} {_ordinal(value.day)} {value.year}, "
        f"{hour}:{value.minute:02d} {meridiem}"
    )


def to_datetime_local(value: datetime | None) -> str:
    """Value for an ``<input type="datetime-local">``; empty when there is none."""
    if value is None:
        return ""
    return ensure_utc(value).strftime(DATETIME_LOCAL_FORMAT)


def parse_datetime_local(value: str | None) -> datetime | None:
    """
    Read a submitted ``datetime-local`` value as a UTC instant.

    Blank input means "no value" and yields ``None``.

    Raises:
        ValueError: The value is not a valid date-time.
    """
    if value is None or not value.strip():
        return None
    return ensure_utc(datetime.fromisoformat(value.strip()))
