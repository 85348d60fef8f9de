"""
rental_batch.tasks -- Sweep protocol and the lease/payment sweep tasks.
"""

from rental_batch.tasks.base import SweepOutcome, SweepTask
from rental_batch.tasks.lease_tasks import (
    AutoRenewTask,
    ExpiredLeaseSweepTask,
    ExpiringSoonSweepTask,
)
from rental_batch.tasks.payment_tasks import OverdueSweepTask
from rental_modules.leases.config import LeaseConfig
from rental_modules.payments.config import PaymentConfig


def default_tasks(
    lease_config: LeaseConfig | None = None,
    payment_config: PaymentConfig | None = None,
) -> tuple[SweepTask, ...]:
    """The standard sweep order: overdue, expiring-soon, auto-renew, expire."""
    return (
        OverdueSweepTask(payment_config),
        ExpiringSoonSweepTask(lease_config, payment_config),
        AutoRenewTask(lease_config, payment_config),
        ExpiredLeaseSweepTask(lease_config, payment_config),
    )


__all__ = [
    "AutoRenewTask",
    "ExpiredLeaseSweepTask",
    "ExpiringSoonSweepTask",
    "OverdueSweepTask",
    "SweepOutcome",
    "SweepTask",
    "default_tasks",
]
