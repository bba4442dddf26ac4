"""Date parsing utilities.

All timestamps in budgetbot are naive datetimes in UTC.
"""

import calendar
from datetime import date, datetime, timedelta, UTC
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# Replies meaning "no date" in the deadline steps.
NO_DATE_WORDS = frozenset({"нет", "no", "none", "-", "skip"})

DATE_FORMAT = "%d.%m.%Y"


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - "25.12.2025" (day first, as typed in chat)
    - "2025-12-25"
    - "today", "tomorrow", "сегодня", "завтра"

    Args:
        date_str: Date string
        today: Reference day for relative words (defaults to the UTC date)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    if not date_str:
        raise ValueError("Empty date string")
    today = today or utcnow().date()

    relative_dates = {
        "today": today,
        "сегодня": today,
        "tomorrow": today + timedelta(days=1),
        "завтра": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return datetime.strptime(date_str, DATE_FORMAT).date()
    except ValueError:
        pass

    try:
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, OverflowError, TypeError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_optional_date(date_str: str, today: Optional[date] = None) -> Optional[date]:
    """Parse a date, returning None for "no date" answers."""
    if date_str.strip().lower() in NO_DATE_WORDS:
        return None
    return parse_date(date_str, today)


def format_date(value: Optional[datetime | date]) -> str:
    """Format a date the way users type it."""
    if value is None:
        return "-"
    return value.strftime(DATE_FORMAT)


def month_start(moment: datetime) -> datetime:
    """Midnight of the first day of the month containing moment."""
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def next_month_start(moment: datetime) -> datetime:
    return month_start(moment) + relativedelta(months=1)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
