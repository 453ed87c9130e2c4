"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and a few
    relative forms:
    - "today", "yesterday", "tomorrow"
    - "last month", "this month", "next month" (first day of that month)
    - "in N months" (same day N months ahead, clamped to month end)

    Args:
        date_str: Date string in various formats
        today: Reference date for relative forms (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    if date_str is None or not str(date_str).strip():
        raise ValueError("Empty date string")

    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this month": today.replace(day=1),
        "next month": (today + relativedelta(months=1)).replace(day=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    words = date_str.split()
    if len(words) == 3 and words[0] == "in" and words[2] in ("month", "months") and words[1].isdigit():
        return today + relativedelta(months=int(words[1]))

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
