"""Lenient date parsing and the display formats used in report cells."""

from datetime import date, datetime

DISPLAY_FORMAT = "%b %d, %Y"  # Mar 05, 2025
SHORT_FORMAT = "%b %d"  # Mar 05
WEEKDAY_FORMAT = "%A"  # Wednesday
TIMESTAMP_FORMAT = "%b %d, %Y, %H:%M"  # Mar 05, 2025, 14:30


def parse_date(value) -> date | None:
    """
    Parse an ISO date or datetime (string, date or datetime) into a date.

    Returns None for missing or unparsable input instead of raising: callers
    treat such records as not matching any date range.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    # Postgres/JS timestamps: "2025-03-05T10:00:00Z", "2025-03-05 10:00:00+00"
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def in_range(value: date | None, start: date, end: date) -> bool:
    """Inclusive on both ends; a missing date never matches."""
    if value is None:
        return False
    return start <= value <= end


def format_date(value: date | None, fmt: str = DISPLAY_FORMAT, default: str = "N/A") -> str:
    if value is None:
        return default
    return value.strftime(fmt)


def format_period(start: date, end: date) -> str:
    """Subtitle for range-based reports: 'From Mar 01, 2025 to Mar 31, 2025'."""
    return f"From {format_date(start)} to {format_date(end)}"
