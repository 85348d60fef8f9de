"""
Sweep tasks: lease lifecycle (expiring-soon flagging, auto-renewal, expiry).
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from rental_kernel.domain.clock import Clock
from rental_modules.leases.config import LeaseConfig
from rental_modules.leases.service import LeaseLifecycleService
from rental_modules.payments.config import PaymentConfig


class _LeaseTask:
    def __init__(
        self,
        config: LeaseConfig | None = None,
        payment_config: PaymentConfig | None = None,
    ):
        self._config = config
        self._payment_config = payment_config

    def _service(self, session: Session, clock: Clock) -> LeaseLifecycleService:
        return LeaseLifecycleService(
            session, clock, config=self._config, payment_config=self._payment_config
        )


class ExpiringSoonSweepTask(_LeaseTask):
    """Flag active leases within the expiring-soon window."""

    @property
    def task_name(self) -> str:
        return "leases.expiring_soon_sweep"

    def run(self, session: Session, clock: Clock) -> int:
        return self._service(session, clock).check_expiring_soon_leases()


class AutoRenewTask(_LeaseTask):
    """Renew expiring leases that are not due for a rent review."""

    @property
    def task_name(self) -> str:
        return "leases.auto_renew"

    def run(self, session: Session, clock: Clock) -> int:
        return self._service(session, clock).auto_renew_leases()


class ExpiredLeaseSweepTask(_LeaseTask):
    """Expire live leases whose end date has passed and free their units."""

    @property
    def task_name(self) -> str:
        return "leases.expired_sweep"

    def run(self, session: Session, clock: Clock) -> int:
        return self._service(session, clock).expire_overdue_leases()
