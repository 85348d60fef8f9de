"""
Payment Schedule Generator (``rental_modules.payments.schedule``).

Responsibility
--------------
Builds the payment rows a lease owes: the monthly rent series, the
painting-fee installments and ad-hoc adjustment entries.

Architecture position
---------------------
**Modules layer**.  Pure planning functions (``build_rent_schedule``,
``build_painting_fee_schedule``) plus ``PaymentScheduleGenerator``, which
persists what they plan.  Called by the lease lifecycle service (creation
and renewal) and by the due-day change engine.

Invariants enforced
-------------------
* Rent due date = (reference year, reference month, lease due day), clamped
  to the month's last day.
* Painting-fee installments sum to the fee total exactly.
* Adjustment amounts are strictly positive.

Failure modes
-------------
* ``LeaseNotFoundForPaymentError`` -- lease id unknown.
* ``InvalidInstallmentsError`` -- installments outside 1..max.
* ``InvalidPaymentAmountError`` -- non-positive amount.
* ``generate_initial_schedule`` never raises for a single bad row; the row
  is rolled back and reported as a ``GenerationError``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rental_kernel.domain.dates import due_date_in_month, first_of_month, month_starts
from rental_kernel.exceptions import (
    InvalidPaymentAmountError,
    LeaseNotFoundForPaymentError,
    RentalKernelError,
)
from rental_kernel.logging_config import get_logger
from rental_modules.leases.models import Lease, validate_installments
from rental_modules.leases.store import LeaseStore
from rental_modules.payments.calculations import split_installments
from rental_modules.payments.config import PaymentConfig
from rental_modules.payments.models import (
    GenerationError,
    GenerationReport,
    Payment,
    PaymentType,
)
from rental_modules.payments.store import PaymentStore

logger = get_logger("modules.payments.schedule")


# =============================================================================
# Pure planning
# =============================================================================


def build_rent_schedule(lease: Lease, months: int = 6) -> list[Payment]:
    """One rent payment per month from the lease start month."""
    return [
        Payment.new(
            lease_id=lease.id,
            payment_type=PaymentType.RENT,
            reference_month=reference_month,
            amount=lease.monthly_rent_value,
            due_date=due_date_in_month(reference_month, lease.payment_due_day),
        )
        for reference_month in month_starts(lease.start_date, months)
    ]


def build_painting_fee_schedule(lease: Lease, installments: int) -> list[Payment]:
    """
    Painting-fee installments in consecutive months from the start month.

    A zero fee total plans nothing.
    """
    if lease.painting_fee_total <= 0:
        return []
    amounts = split_installments(lease.painting_fee_total, installments)
    payments = []
    for number, (reference_month, amount) in enumerate(
        zip(month_starts(lease.start_date, installments), amounts), start=1
    ):
        payments.append(
            Payment.new(
                lease_id=lease.id,
                payment_type=PaymentType.PAINTING_FEE,
                reference_month=reference_month,
                amount=amount,
                due_date=due_date_in_month(reference_month, lease.payment_due_day),
                notes=f"Painting fee installment {number}/{installments}",
            )
        )
    return payments


# =============================================================================
# Generator
# =============================================================================


class PaymentScheduleGenerator:
    """
    Persists planned payments for a lease.

    Contract
    --------
    * With ``auto_commit=True`` each ``generate_*`` call commits on success
      and rolls back on failure.  With ``auto_commit=False`` it only
      flushes and the caller's unit of work commits.
    * ``generate_initial_schedule`` is best-effort and commits row by row
      regardless of ``auto_commit``.

    Non-goals
    ---------
    * Does NOT check lease status; the lifecycle service decides when a
      lease gets payments.
    """

    def __init__(
        self,
        session: Session,
        config: PaymentConfig | None = None,
        auto_commit: bool = True,
    ):
        self._session = session
        self._config = config or PaymentConfig()
        self._auto_commit = auto_commit
        self._leases = LeaseStore(session)
        self._payments = PaymentStore(session)

    def _lease_for_payment(self, lease_id: UUID) -> Lease:
        lease = self._leases.get(lease_id)
        if lease is None:
            raise LeaseNotFoundForPaymentError(lease_id)
        return lease

    def _persist(self, planned: list[Payment]) -> list[Payment]:
        try:
            stored = [self._payments.create(p) for p in planned]
            if self._auto_commit:
                self._session.commit()
            return stored
        except Exception:
            if self._auto_commit:
                self._session.rollback()
            raise

    # -------------------------------------------------------------------------

    def generate_monthly_rent_payment(
        self, lease_id: UUID, reference_month: date
    ) -> Payment:
        lease = self._lease_for_payment(lease_id)
        month = first_of_month(reference_month)
        payment = Payment.new(
            lease_id=lease.id,
            payment_type=PaymentType.RENT,
            reference_month=month,
            amount=lease.monthly_rent_value,
            due_date=due_date_in_month(month, lease.payment_due_day),
        )
        [stored] = self._persist([payment])
        logger.info(
            "rent_payment_generated",
            extra={
                "lease_id": str(lease_id),
                "reference_month": month.isoformat(),
                "due_date": stored.due_date.isoformat(),
                "amount": str(stored.amount),
            },
        )
        return stored

    def generate_rent_payments(self, lease: Lease) -> list[Payment]:
        """The full rent series for ``lease`` (used by renewal)."""
        planned = build_rent_schedule(lease, self._config.rent_payments_per_contract)
        return self._persist(planned)

    def generate_painting_fee_payments(
        self, lease_id: UUID, installments: int
    ) -> list[Payment]:
        validate_installments(installments, self._config.max_painting_fee_installments)
        lease = self._lease_for_payment(lease_id)
        planned = build_painting_fee_schedule(lease, installments)
        stored = self._persist(planned)
        logger.info(
            "painting_fee_payments_generated",
            extra={
                "lease_id": str(lease_id),
                "installments": installments,
                "total": str(lease.painting_fee_total),
                "generated": len(stored),
            },
        )
        return stored

    def generate_adjustment_payment(
        self,
        lease_id: UUID,
        amount: Decimal,
        reference_month: date,
        due_date: date,
        notes: str | None = None,
    ) -> Payment:
        if amount <= 0:
            raise InvalidPaymentAmountError(amount)
        lease = self._lease_for_payment(lease_id)
        payment = Payment.new(
            lease_id=lease.id,
            payment_type=PaymentType.ADJUSTMENT,
            reference_month=first_of_month(reference_month),
            amount=amount,
            due_date=due_date,
            notes=notes,
        )
        [stored] = self._persist([payment])
        logger.info(
            "adjustment_payment_generated",
            extra={
                "lease_id": str(lease_id),
                "amount": str(amount),
                "due_date": due_date.isoformat(),
            },
        )
        return stored

    def generate_initial_schedule(self, lease: Lease) -> GenerationReport:
        """
        Rent series plus painting-fee installments for a new lease.

        Each row is committed on its own.  A row that fails is rolled back,
        logged and reported; the remaining rows are still attempted.
        """
        planned = build_rent_schedule(lease, self._config.rent_payments_per_contract)
        planned += build_painting_fee_schedule(lease, lease.painting_fee_installments)

        stored: list[Payment] = []
        errors: list[GenerationError] = []
        for payment in planned:
            try:
                created = self._payments.create(payment)
                self._session.commit()
                stored.append(created)
            except (RentalKernelError, SQLAlchemyError) as exc:
                self._session.rollback()
                error = GenerationError(
                    payment_type=payment.payment_type,
                    reference_month=payment.reference_month,
                    amount=payment.amount,
                    code=(
                        exc.code
                        if isinstance(exc, RentalKernelError)
                        else type(exc).__name__
                    ),
                    message=str(exc),
                )
                errors.append(error)
                logger.warning(
                    "payment_generation_failed",
                    extra={
                        "lease_id": str(lease.id),
                        "payment_type": payment.payment_type.value,
                        "reference_month": payment.reference_month.isoformat(),
                        "error_code": error.code,
                    },
                )

        logger.info(
            "initial_schedule_generated",
            extra={
                "lease_id": str(lease.id),
                "generated": len(stored),
                "failed": len(errors),
            },
        )
        return GenerationReport(payments=tuple(stored), errors=tuple(errors))
