"""
Date Utilities Module

The single date-normalisation routine used wherever record dates are
compared, plus calendar-month helpers.
"""

import re
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from .entities import DateRange

# Leading calendar date of an ISO-ish string: 2024-06-03, 2024/6/3, 2024-06-03T09:00Z
_DATE_PREFIX = re.compile(r'^\s*(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})')


def normalize_date(value) -> Optional[date]:
    """
    Normalize a date-like value to a calendar date.

    Time-of-day and timezone parts are dropped without conversion so that
    the written calendar date is what gets compared.

    Args:
        value: date, datetime or string

    Returns:
        The calendar date, or None if the value cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    match = _DATE_PREFIX.match(str(value))
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def month_start(day: date) -> date:
    return day.replace(day=1)


def month_range(year: int, month: int) -> DateRange:
    """Inclusive range covering one calendar month."""
    _, num_days = monthrange(year, month)
    return DateRange(date(year, month, 1), date(year, month, num_days))


def rolling_year(today: date) -> DateRange:
    """Trailing 365-day window ending today."""
    return DateRange(today - timedelta(days=365), today)


def calendar_year(year: int) -> DateRange:
    return DateRange(date(year, 1, 1), date(year, 12, 31))


def iter_months(date_range: DateRange) -> List[Tuple[int, int]]:
    """List (year, month) for every calendar month the range touches."""
    months = []
    year, month = date_range.start.year, date_range.start.month
    while (year, month) <= (date_range.end.year, date_range.end.month):
        months.append((year, month))
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return months


def calendar_months_between(start: date, end: date) -> int:
    """Difference in calendar months (day of month ignored)."""
    return (end.year - start.year) * 12 + (end.month - start.month)
