"""
Payment Ledger Service (``rental_modules.payments.service``).

Responsibility
--------------
Orchestrates settlement, cancellation and the overdue sweep over the
payment ledger, plus per-lease reads and aggregates.

Architecture position
---------------------
**Modules layer**.  Owns the transaction boundary for ledger operations;
``PaymentStore`` and ``LeaseStore`` only flush.

Invariants enforced
-------------------
* Paying a ``painting_fee`` payment adds its amount to the lease's
  ``painting_fee_paid`` in the same unit of work.  A payment that would
  push the paid total above the fee total is rejected and nothing is
  written.
* Paid payments are never cancelled.
* The overdue sweep only moves ``pending`` to ``overdue``.

Failure modes
-------------
* ``PaymentNotFoundError``, ``LeaseNotFoundError``.
* ``PaymentAlreadyPaidError`` / ``PaymentCannotBePaidError``.
* ``InvalidPaymentMethodError``.
* ``PaintingFeePaidExceedsTotalError``.
* ``PaymentCannotBeCancelledError``, ``PaymentLeaseMismatchError``.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from rental_kernel.domain.clock import Clock
from rental_kernel.exceptions import (
    PaymentAlreadyPaidError,
    PaymentCannotBeCancelledError,
    PaymentCannotBePaidError,
    PaymentLeaseMismatchError,
)
from rental_kernel.logging_config import LogContext, get_logger
from rental_kernel.services.unit_of_work import UnitOfWork
from rental_modules.leases.store import LeaseStore
from rental_modules.payments.config import PaymentConfig
from rental_modules.payments.models import (
    OverdueSweepResult,
    Payment,
    PaymentMethod,
    PaymentStats,
    PaymentStatus,
    PaymentType,
)
from rental_modules.payments.store import PaymentStore

logger = get_logger("modules.payments.service")


def cancel_lease_payments(
    payments: PaymentStore, lease_id: UUID, payment_ids: list[UUID]
) -> list[Payment]:
    """
    Cancel the selected payments of one lease.  Flush-only.

    Every id must belong to ``lease_id`` and be pending or overdue; the
    first violation raises before the rest are touched, and the caller's
    unit of work rolls back anything already flushed.
    """
    cancelled = []
    for payment_id in payment_ids:
        payment = payments.require(payment_id)
        if payment.lease_id != lease_id:
            raise PaymentLeaseMismatchError(payment_id, lease_id)
        if not payment.can_be_cancelled():
            raise PaymentCannotBeCancelledError(payment_id, payment.status.value)
        cancelled.append(payments.cancel(payment_id))
    return cancelled


class PaymentLedgerService:
    """
    Settlement, cancellation and overdue detection for payments.

    Contract:
        Every write method commits on success and rolls back on failure.
        Read methods never write.

    Non-goals:
        - Does NOT generate schedules (see ``PaymentScheduleGenerator``).
        - Does NOT change due days (see ``DueDayChangeEngine``).
    """

    def __init__(
        self,
        session: Session,
        clock: Clock,
        config: PaymentConfig | None = None,
    ):
        self._session = session
        self._clock = clock
        self._config = config or PaymentConfig()
        self._payments = PaymentStore(session)
        self._leases = LeaseStore(session)
        self._uow = UnitOfWork(session)

    # =========================================================================
    # Settlement
    # =========================================================================

    def mark_payment_as_paid(
        self,
        payment_id: UUID,
        payment_method: PaymentMethod | str,
        payment_date: date | None = None,
    ) -> Payment:
        """
        Record a payment as paid.

        Painting-fee payments also roll their amount into the lease's
        ``painting_fee_paid``; both writes commit together.
        """
        paid_on = payment_date or self._clock.today()

        def work(session: Session) -> Payment:
            payment = self._payments.require(payment_id)
            if payment.is_paid():
                raise PaymentAlreadyPaidError(payment_id)
            if not payment.can_be_paid():
                raise PaymentCannotBePaidError(payment_id, payment.status.value)
            method = PaymentMethod.parse(payment_method)

            # Cap check before any write
            lease = None
            if payment.payment_type == PaymentType.PAINTING_FEE:
                lease = self._leases.require(payment.lease_id).with_painting_fee_payment(
                    payment.amount
                )

            stored = self._payments.mark_as_paid(payment_id, paid_on, method)
            if lease is not None:
                self._leases.update_painting_fee_paid(lease)
            return stored

        with LogContext.bind(payment_id=str(payment_id)):
            stored = self._uow.run(work, operation="mark_payment_as_paid")
            logger.info(
                "payment_marked_paid",
                extra={
                    "lease_id": str(stored.lease_id),
                    "payment_type": stored.payment_type.value,
                    "amount": str(stored.amount),
                    "payment_method": stored.payment_method.value,
                    "payment_date": paid_on.isoformat(),
                },
            )
        return stored

    def attach_proof(self, payment_id: UUID, proof_url: str) -> Payment:
        """Store a link to the receipt or transfer proof of a payment."""

        def work(session: Session) -> Payment:
            return self._payments.attach_proof(payment_id, proof_url)

        stored = self._uow.run(work, operation="attach_payment_proof")
        logger.info(
            "payment_proof_attached",
            extra={"payment_id": str(payment_id)},
        )
        return stored

    # =========================================================================
    # Cancellation
    # =========================================================================

    def cancel_payment(self, payment_id: UUID) -> Payment:
        def work(session: Session) -> Payment:
            payment = self._payments.require(payment_id)
            if not payment.can_be_cancelled():
                raise PaymentCannotBeCancelledError(payment_id, payment.status.value)
            return self._payments.cancel(payment_id)

        stored = self._uow.run(work, operation="cancel_payment")
        logger.info(
            "payment_cancelled",
            extra={"payment_id": str(payment_id), "lease_id": str(stored.lease_id)},
        )
        return stored

    def cancel_payments(self, lease_id: UUID, payment_ids: list[UUID]) -> list[Payment]:
        """Cancel several payments of one lease atomically."""

        def work(session: Session) -> list[Payment]:
            self._leases.require(lease_id)
            return cancel_lease_payments(self._payments, lease_id, payment_ids)

        cancelled = self._uow.run(work, operation="cancel_payments")
        logger.info(
            "payments_cancelled",
            extra={"lease_id": str(lease_id), "count": len(cancelled)},
        )
        return cancelled

    # =========================================================================
    # Overdue sweep
    # =========================================================================

    def check_overdue_payments(self) -> OverdueSweepResult:
        """
        Move every pending payment due before today to overdue.

        One set-based UPDATE; a second run on the same day updates nothing.
        """
        today = self._clock.today()
        updated = self._uow.run(
            lambda session: self._payments.mark_overdue_bulk(today),
            operation="check_overdue_payments",
        )
        result = OverdueSweepResult(
            updated_count=updated, swept_on=today, swept_at=self._clock.now()
        )
        logger.info(
            "overdue_sweep_completed",
            extra={"updated_count": updated, "swept_on": today.isoformat()},
        )
        return result

    # =========================================================================
    # Reads
    # =========================================================================

    def get_payment(self, payment_id: UUID) -> Payment:
        return self._payments.require(payment_id)

    def get_payments_by_lease(self, lease_id: UUID) -> list[Payment]:
        self._leases.require(lease_id)
        return self._payments.list_by_lease(lease_id)

    def get_overdue_payments(self) -> list[Payment]:
        return self._payments.get_overdue(self._clock.today())

    def get_upcoming_payments(self, days: int | None = None) -> list[Payment]:
        if days is None or days <= 0:
            days = self._config.upcoming_default_days
        return self._payments.get_upcoming(self._clock.today(), days)

    def get_payment_stats_by_lease(self, lease_id: UUID) -> PaymentStats:
        self._leases.require(lease_id)
        return PaymentStats(
            lease_id=lease_id,
            total_paid=self._payments.total_paid_by_lease(lease_id),
            total_pending=self._payments.pending_amount_by_lease(lease_id),
            paid_count=self._payments.count_by_lease_and_status(
                lease_id, PaymentStatus.PAID
            ),
            pending_count=self._payments.count_by_lease_and_status(
                lease_id, PaymentStatus.PENDING
            ),
            overdue_count=self._payments.count_by_lease_and_status(
                lease_id, PaymentStatus.OVERDUE
            ),
            cancelled_count=self._payments.count_by_lease_and_status(
                lease_id, PaymentStatus.CANCELLED
            ),
        )
