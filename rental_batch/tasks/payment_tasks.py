"""
Sweep tasks: payment ledger (overdue detection).
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from rental_kernel.domain.clock import Clock
from rental_modules.payments.config import PaymentConfig
from rental_modules.payments.service import PaymentLedgerService


class OverdueSweepTask:
    """Promote pending payments due before today to overdue."""

    def __init__(self, config: PaymentConfig | None = None):
        self._config = config

    @property
    def task_name(self) -> str:
        return "payments.overdue_sweep"

    def run(self, session: Session, clock: Clock) -> int:
        result = PaymentLedgerService(session, clock, self._config).check_overdue_payments()
        return result.updated_count
