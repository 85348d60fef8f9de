"""
Payment Pure Calculation Functions.

Domain math for schedule generation and due-day changes:
- Painting-fee installment split (exact to the cent)
- Flat 30-day proration
- Last old-schedule due date before an effective date, on the clamped
  due day (a day-31 lease changed on Feb 28 prorates zero days)
"""

from datetime import date
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

from dateutil.relativedelta import relativedelta

from rental_kernel.domain.dates import date_on_day

CENT = Decimal("0.01")
DEFAULT_DAY_BASIS = 30


def split_installments(total: Decimal, installments: int) -> list[Decimal]:
    """
    Split ``total`` into ``installments`` amounts that sum to it exactly.

    Every installment gets total / n rounded down to the cent; the leftover
    cents go on the first installment.

    >>> split_installments(Decimal("100.00"), 3)
    [Decimal('33.34'), Decimal('33.33'), Decimal('33.33')]
    """
    if installments < 1:
        raise ValueError("installments must be >= 1")
    total = total.quantize(CENT, rounding=ROUND_HALF_UP)
    base = (total / installments).quantize(CENT, rounding=ROUND_DOWN)
    remainder = total - base * installments
    amounts = [base] * installments
    amounts[0] = base + remainder
    return amounts


def prorate(
    monthly_rent: Decimal,
    days: int,
    day_basis: int = DEFAULT_DAY_BASIS,
) -> Decimal:
    """
    Rent for ``days`` days on a flat ``day_basis``-day month.

    The flat month is deliberate: a due-day shift of N days always costs
    rent / 30 * N regardless of the calendar month it spans.
    """
    if days <= 0:
        return Decimal("0.00")
    return (monthly_rent * days / day_basis).quantize(CENT, rounding=ROUND_HALF_UP)


def last_due_date_on_or_before(effective_date: date, due_day: int) -> date:
    """
    The latest date on ``due_day`` (clamped) that is not after
    ``effective_date``.

    Same month when ``effective_date.day >= due_day``, else the month before.
    The due day is clamped before the comparison: a lease due on the 31st
    was last due on Feb 28 when the effective date is Feb 28, so that change
    has no gap to prorate.
    """
    candidate = date_on_day(effective_date.year, effective_date.month, due_day)
    if effective_date.day < due_day and candidate > effective_date:
        previous = effective_date + relativedelta(months=-1)
        candidate = date_on_day(previous.year, previous.month, due_day)
    return candidate
