"""
Due-Day Change Engine (``rental_modules.payments.due_day``).

Responsibility
--------------
Moves a lease's monthly due day mid-contract.  The gap between the last
due date under the old day and the effective date is billed as one
proportional ``adjustment`` payment; the future schedule is re-dated to the
new day.

Architecture position
---------------------
**Modules layer**.  Drives ``LeaseStore`` and ``PaymentStore`` inside a
single ``UnitOfWork``: the proportional payment, every re-dated or
cancelled payment and the lease's new due day commit together or not at
all.

Algorithm
---------
1. ``last_old_due`` = the latest date on the old due day not after the
   effective date (previous month when ``effective.day < old_due_day``).
2. ``days = effective - last_old_due``.
3. ``amount = monthly_rent / 30 * days`` (flat 30-day month, HALF_UP cents).
4. When days and amount are positive, one adjustment payment falls due on
   the effective date.
5. Unsettled payments due after the effective date, earliest first: the
   earliest is cancelled when a proportional payment was created (it is
   superseded); the rest move to the new due day in their own reference
   month.  Amounts and reference months never change.
6. The lease's ``payment_due_day`` is updated.

Failure modes
-------------
* ``LeaseNotFoundError`` / ``LeaseNotActiveError``.
* ``InvalidDueDayError`` / ``DueDayUnchangedError``.
* ``EffectiveDateInPastError`` / ``EffectiveDateOutOfRangeError``.
* ``EffectiveDateBeforeSettledError`` -- the change would rewrite history
  already paid or cancelled.
* ``EffectiveDateTooFarError`` -- the effective date lies beyond the next
  open rent due date, which would need more than one substituted payment.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from rental_kernel.domain.clock import Clock
from rental_kernel.domain.dates import due_date_in_month, first_of_month
from rental_kernel.exceptions import (
    DueDayUnchangedError,
    EffectiveDateBeforeSettledError,
    EffectiveDateInPastError,
    EffectiveDateOutOfRangeError,
    EffectiveDateTooFarError,
    LeaseNotActiveError,
)
from rental_kernel.logging_config import LogContext, get_logger
from rental_kernel.services.unit_of_work import UnitOfWork
from rental_modules.leases.models import Lease, validate_due_day
from rental_modules.leases.store import LeaseStore
from rental_modules.payments.calculations import last_due_date_on_or_before, prorate
from rental_modules.payments.config import PaymentConfig
from rental_modules.payments.models import (
    ChangePaymentDueDayResponse,
    Payment,
    PaymentType,
    ProportionalPaymentInfo,
    UpdatedPaymentInfo,
)
from rental_modules.payments.store import PaymentStore

logger = get_logger("modules.payments.due_day")


def proportional_note(
    old_due_day: int,
    new_due_day: int,
    period_start: date,
    period_end: date,
    days: int,
    reason: str | None = None,
) -> str:
    note = (
        f"Proportional payment due to due-day change from day {old_due_day} "
        f"to day {new_due_day}, period {period_start.isoformat()} to "
        f"{period_end.isoformat()} ({days} days)"
    )
    if reason:
        note = f"{note}. Reason: {reason}"
    return note


class DueDayChangeEngine:
    """
    Changes the payment due day of a live lease.

    Contract
    --------
    * ``change_payment_due_day`` is all-or-nothing.
    * Validation runs before any write; a rejected request changes nothing.

    Non-goals
    ---------
    * Does NOT handle shifts spanning more than one billing cycle; those are
      rejected with ``EffectiveDateTooFarError``.
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
        self._leases = LeaseStore(session)
        self._payments = PaymentStore(session)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _validate(
        self, lease: Lease, new_due_day: int, effective_date: date, today: date
    ) -> list[Payment]:
        """Check every precondition; returns the lease's unsettled payments."""
        if not lease.is_live():
            raise LeaseNotActiveError(lease.id, lease.status.value)
        validate_due_day(new_due_day)
        if new_due_day == lease.payment_due_day:
            raise DueDayUnchangedError(lease.id, new_due_day)
        if effective_date < today:
            raise EffectiveDateInPastError(effective_date, today)
        if not lease.start_date <= effective_date <= lease.end_date:
            raise EffectiveDateOutOfRangeError(
                effective_date, lease.start_date, lease.end_date
            )

        settled_due = self._payments.latest_settled_due_date(lease.id)
        if settled_due is not None and effective_date < settled_due:
            raise EffectiveDateBeforeSettledError(effective_date, settled_due)

        unsettled = self._payments.list_unsettled_by_lease(lease.id)
        open_rent_dates = [
            p.due_date
            for p in unsettled
            if p.payment_type == PaymentType.RENT and p.due_date >= today
        ]
        if open_rent_dates and effective_date > min(open_rent_dates):
            raise EffectiveDateTooFarError(effective_date, min(open_rent_dates))
        return unsettled

    # -------------------------------------------------------------------------
    # Operation
    # -------------------------------------------------------------------------

    def change_payment_due_day(
        self,
        lease_id: UUID,
        new_due_day: int,
        effective_date: date,
        reason: str | None = None,
    ) -> ChangePaymentDueDayResponse:
        today = self._clock.today()

        def work(session: Session) -> ChangePaymentDueDayResponse:
            lease = self._leases.require(lease_id)
            unsettled = self._validate(lease, new_due_day, effective_date, today)
            old_due_day = lease.payment_due_day

            # 1-3: proration over the gap since the last old-schedule due date
            period_start = last_due_date_on_or_before(effective_date, old_due_day)
            days = (effective_date - period_start).days
            amount = prorate(
                lease.monthly_rent_value, days, self._config.proration_day_basis
            )

            # 4: proportional payment
            proportional = None
            if days > 0 and amount > 0:
                stored = self._payments.create(
                    Payment.new(
                        lease_id=lease.id,
                        payment_type=PaymentType.ADJUSTMENT,
                        reference_month=first_of_month(effective_date),
                        amount=amount,
                        due_date=effective_date,
                        notes=proportional_note(
                            old_due_day,
                            new_due_day,
                            period_start,
                            effective_date,
                            days,
                            reason,
                        ),
                    )
                )
                proportional = ProportionalPaymentInfo(
                    payment_id=stored.id,
                    reference_period=(
                        f"{period_start.isoformat()} to {effective_date.isoformat()}"
                    ),
                    period_start=period_start,
                    period_end=effective_date,
                    days=days,
                    amount=stored.amount,
                    due_date=stored.due_date,
                    status=stored.status,
                )

            # 5: the first future rent payment is superseded, the rest re-dated
            future = sorted(
                (p for p in unsettled if p.due_date > effective_date),
                key=lambda p: (p.due_date, p.payment_type != PaymentType.RENT),
            )
            superseded = None
            if proportional is not None:
                superseded = next(
                    (p for p in future if p.payment_type == PaymentType.RENT), None
                )
            updated: list[UpdatedPaymentInfo] = []
            for payment in future:
                if superseded is not None and payment.id == superseded.id:
                    self._payments.cancel(payment.id)
                    updated.append(
                        UpdatedPaymentInfo(
                            payment_id=payment.id,
                            reference_month=payment.reference_month,
                            old_due_date=payment.due_date,
                            new_due_date=None,
                            cancelled=True,
                        )
                    )
                    continue
                new_due_date = due_date_in_month(payment.reference_month, new_due_day)
                self._payments.reschedule(payment.id, new_due_date)
                updated.append(
                    UpdatedPaymentInfo(
                        payment_id=payment.id,
                        reference_month=payment.reference_month,
                        old_due_date=payment.due_date,
                        new_due_date=new_due_date,
                    )
                )

            # 6: lease
            self._leases.update(lease.with_due_day(new_due_day))

            return ChangePaymentDueDayResponse(
                lease_id=lease.id,
                old_due_day=old_due_day,
                new_due_day=new_due_day,
                effective_date=effective_date,
                proportional_payment=proportional,
                updated_payments=tuple(updated),
                reason=reason,
            )

        with LogContext.bind(lease_id=str(lease_id)):
            response = UnitOfWork(self._session).run(
                work, operation="change_payment_due_day"
            )
            logger.info(
                "payment_due_day_changed",
                extra={
                    "old_due_day": response.old_due_day,
                    "new_due_day": response.new_due_day,
                    "effective_date": effective_date.isoformat(),
                    "proportional_amount": (
                        str(response.proportional_payment.amount)
                        if response.proportional_payment
                        else None
                    ),
                    "cancelled_count": len(response.cancelled_payment_ids),
                    "rescheduled_count": (
                        response.total_payments_updated
                        - len(response.cancelled_payment_ids)
                    ),
                },
            )
        return response


__all__ = ["DueDayChangeEngine", "proportional_note"]
