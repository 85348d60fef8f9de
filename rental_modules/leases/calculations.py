"""
Lease Pure Calculation Functions.

Domain math for the lifecycle service:
- Rent adjustment percentage
- Expiry window classification
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def adjustment_percentage(previous_value: Decimal, new_value: Decimal) -> Decimal:
    """
    Percentage change of a rent adjustment, rounded to 2 places.

    (new - previous) / previous * 100.  A non-positive previous value
    yields 0.
    """
    if previous_value <= 0:
        return Decimal("0.00")
    change = (new_value - previous_value) / previous_value * Decimal("100")
    return change.quantize(CENT, rounding=ROUND_HALF_UP)


def days_until(end_date: date, today: date) -> int:
    return (end_date - today).days


def falls_in_expiry_window(end_date: date, today: date, window_days: int) -> bool:
    days = days_until(end_date, today)
    return 0 < days <= window_days
