"""Date parsing and calendar arithmetic utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "this month",
      "next month", "last month"

    Args:
        date_str: Date string in various formats
        today: Reference date for relative expressions (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    if today is None:
        today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "this month": today.replace(day=1),
        "next month": (today + relativedelta(months=1)).replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def month_start(year: int, month: int) -> date:
    """Return the first day of a calendar month."""
    return date(year, month, 1)


def month_end(year: int, month: int) -> date:
    """Return the last day of a calendar month."""
    return date(year, month, 1) + relativedelta(months=1, days=-1)


def shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    """Return the (year, month) pair ``months`` away from the given one."""
    shifted = date(year, month, 1) + relativedelta(months=months)
    return shifted.year, shifted.month


def get_period_bounds(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get full calendar bounds for a named budget period.

    Args:
        period: One of this-week, this-month, next-month, this-year
        today: Reference date (defaults to today)

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    if today is None:
        today = date.today()

    if period == "this-week":
        start_date = today - timedelta(days=today.weekday())
        return (start_date, start_date + timedelta(days=6))

    elif period == "this-month":
        return (month_start(today.year, today.month), month_end(today.year, today.month))

    elif period == "next-month":
        year, month = shift_month(today.year, today.month, 1)
        return (month_start(year, month), month_end(year, month))

    elif period == "this-year":
        return (date(today.year, 1, 1), date(today.year, 12, 31))

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: this-week, this-month, next-month, this-year"
        )
