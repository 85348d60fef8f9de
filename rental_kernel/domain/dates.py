"""
Calendar helpers for lease and payment scheduling.

All month arithmetic goes through ``dateutil.relativedelta``, which clamps
to the last day of the target month (Aug 31 + 6 months = Feb 28/29).
Due days beyond the month length are clamped the same way.
"""

import calendar
from datetime import date

from dateutil.relativedelta import relativedelta


def add_months(day: date, months: int) -> date:
    return day + relativedelta(months=months)


def first_of_month(day: date) -> date:
    return day.replace(day=1)


def date_on_day(year: int, month: int, day_of_month: int) -> date:
    """
    Date in (year, month) on ``day_of_month``, clamped to the month's last day.

    >>> date_on_day(2025, 2, 31)
    datetime.date(2025, 2, 28)
    """
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day_of_month, last_day))


def due_date_in_month(reference_month: date, due_day: int) -> date:
    return date_on_day(reference_month.year, reference_month.month, due_day)


def month_starts(start: date, count: int) -> list[date]:
    """First-of-month markers for ``count`` consecutive months from ``start``."""
    first = first_of_month(start)
    return [add_months(first, offset) for offset in range(count)]
