"""
Calendar Utilities

Month arithmetic with end-of-month clamping. Every recurring date in the
engine (salary, subscriptions, loans, card bills) goes through these
helpers so short months behave the same way everywhere.
"""

from datetime import date

from dateutil.relativedelta import relativedelta


def last_day_of_month(year: int, month: int) -> int:
    """Number of days in the given month (1-based)."""
    return (date(year, month, 1) + relativedelta(day=31)).day


def safe_date(year: int, month: int, day: int) -> date:
    """
    Build a date, clamping `day` to the month's last day.

    `month` is 1-based and may run past 12 or below 1; the year rolls
    accordingly, so `safe_date(2024, 14, 31)` is 2025-02-28.

    >>> safe_date(2024, 2, 31)
    datetime.date(2024, 2, 29)
    """
    return date(year, 1, 1) + relativedelta(months=month - 1, day=max(1, day))


def add_months(d: date, months: int) -> date:
    """
    Advance `d` by whole calendar months.

    The day of month is kept when it exists in the target month and
    clamped to the last day when it does not:

    >>> add_months(date(2024, 1, 31), 1)
    datetime.date(2024, 2, 29)
    >>> add_months(date(2025, 1, 31), 1)
    datetime.date(2025, 2, 28)
    """
    return d + relativedelta(months=months)


def next_occurrence(day: int, on_or_after: date) -> date:
    """
    The first date on/after `on_or_after` that falls on day-of-month `day`.

    Uses this month's (clamped) occurrence unless it has already passed,
    in which case next month's is returned.
    """
    candidate = safe_date(on_or_after.year, on_or_after.month, day)
    if candidate < on_or_after:
        candidate = safe_date(on_or_after.year, on_or_after.month + 1, day)
    return candidate


def same_month(a: date, b: date) -> bool:
    return a.year == b.year and a.month == b.month
