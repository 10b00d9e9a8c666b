"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "this month", "next year", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # "last/this/next" + month or year, anchored on the first day
    for prefix, offset in (("last ", -1), ("this ", 0), ("next ", 1)):
        if not date_str.startswith(prefix):
            continue
        period = date_str[len(prefix):]
        if period == "month":
            return (today + relativedelta(months=offset)).replace(day=1)
        if period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=offset)

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def year_range(year: int) -> tuple[date, date]:
    """Return the first and last day of a calendar year."""
    start_date = date(year, 1, 1)
    return start_date, start_date + relativedelta(years=1, days=-1)
