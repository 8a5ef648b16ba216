"""Calendar arithmetic for statutory delays."""

from __future__ import annotations

import calendar
from datetime import date, timedelta


def add_days(start: date, days: int) -> date:
    return start + timedelta(days=days)


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month.

    ``add_months(date(2024, 1, 31), 1)`` is ``date(2024, 2, 29)``.
    Negative values move backwards.
    """
    index = start.month - 1 + months
    year = start.year + index // 12
    month = index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_between(start: date, end: date) -> int:
    """Signed number of days from ``start`` to ``end``."""
    return (end - start).days


def format_short(value: date) -> str:
    """Render a date as DD/MM/YYYY."""
    return value.strftime("%d/%m/%Y")
