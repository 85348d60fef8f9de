"""
Pure domain helpers.

No dependencies on ORM, database or I/O (except SystemClock).
"""

from rental_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from rental_kernel.domain.dates import (
    add_months,
    date_on_day,
    due_date_in_month,
    first_of_month,
    month_starts,
)
from rental_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "add_months",
    "date_on_day",
    "due_date_in_month",
    "first_of_month",
    "month_starts",
    "Guard",
    "Transition",
    "Workflow",
]
