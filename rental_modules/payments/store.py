"""
Payment ledger persistence (``rental_modules.payments.store``).

Responsibility
--------------
Create, update, list and aggregate payments per lease; global overdue and
upcoming scans; the set-based overdue sweep.

Invariants enforced
-------------------
* Flush-only.  The ledger service, lifecycle service or due-day engine owns
  the commit.
* ``mark_overdue_bulk`` is a single UPDATE statement; rows are never loaded
  one by one.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select, update

from rental_kernel.exceptions import PaymentNotFoundError
from rental_kernel.logging_config import get_logger
from rental_kernel.services.base import BaseStore
from rental_modules.payments.models import (
    SETTLED_STATUSES,
    UNSETTLED_STATUSES,
    Payment,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
)
from rental_modules.payments.orm import PaymentModel

logger = get_logger("modules.payments.store")

_UNSETTLED_VALUES = tuple(s.value for s in UNSETTLED_STATUSES)
_SETTLED_VALUES = tuple(s.value for s in SETTLED_STATUSES)
CENT = Decimal("0.01")


class PaymentStore(BaseStore[PaymentModel]):
    """
    Payment ledger persistence.

    Contract:
        Listing methods order by due date.  Aggregates return ``Decimal``
        zero, never None, for leases with no matching rows.
    """

    model = PaymentModel

    def _require_row(self, payment_id: UUID) -> PaymentModel:
        row = self._get_row(payment_id)
        if row is None:
            raise PaymentNotFoundError(payment_id)
        return row

    def get(self, payment_id: UUID) -> Payment | None:
        row = self._get_row(payment_id)
        return row.to_dto() if row is not None else None

    def require(self, payment_id: UUID) -> Payment:
        return self._require_row(payment_id).to_dto()

    def create(self, payment: Payment, created_by_id: UUID | None = None) -> Payment:
        row = PaymentModel.from_dto(payment, created_by_id=created_by_id)
        self.session.add(row)
        self.session.flush()
        return row.to_dto()

    def update(self, payment: Payment) -> Payment:
        """Persist due date, status, settlement fields and notes of ``payment``."""
        row = self._require_row(payment.id)
        row.due_date = payment.due_date
        row.status = payment.status.value
        row.payment_date = payment.payment_date
        row.payment_method = (
            payment.payment_method.value if payment.payment_method else None
        )
        row.notes = payment.notes
        self.session.flush()
        return row.to_dto()

    def reschedule(self, payment_id: UUID, due_date: date) -> Payment:
        row = self._require_row(payment_id)
        row.due_date = due_date
        self.session.flush()
        return row.to_dto()

    def mark_as_paid(
        self, payment_id: UUID, payment_date: date, method: PaymentMethod
    ) -> Payment:
        row = self._require_row(payment_id)
        row.status = PaymentStatus.PAID.value
        row.payment_date = payment_date
        row.payment_method = method.value
        self.session.flush()
        return row.to_dto()

    def cancel(self, payment_id: UUID) -> Payment:
        row = self._require_row(payment_id)
        row.status = PaymentStatus.CANCELLED.value
        self.session.flush()
        return row.to_dto()

    def attach_proof(self, payment_id: UUID, proof_url: str) -> Payment:
        row = self._require_row(payment_id)
        row.proof_url = proof_url
        self.session.flush()
        return row.to_dto()

    def mark_overdue_bulk(self, today: date) -> int:
        """Move every pending payment due before ``today`` to overdue."""
        result = self.session.execute(
            update(PaymentModel)
            .where(
                PaymentModel.status == PaymentStatus.PENDING.value,
                PaymentModel.due_date < today,
            )
            .values(status=PaymentStatus.OVERDUE.value)
            .execution_options(synchronize_session="evaluate")
        )
        self.session.flush()
        return result.rowcount or 0

    # -- queries ------------------------------------------------------------

    def list_by_lease(self, lease_id: UUID) -> list[Payment]:
        rows = self.session.scalars(
            select(PaymentModel)
            .where(PaymentModel.lease_id == lease_id)
            .order_by(PaymentModel.due_date, PaymentModel.payment_type)
        )
        return [row.to_dto() for row in rows]

    def list_unsettled_by_lease(self, lease_id: UUID) -> list[Payment]:
        rows = self.session.scalars(
            select(PaymentModel)
            .where(
                PaymentModel.lease_id == lease_id,
                PaymentModel.status.in_(_UNSETTLED_VALUES),
            )
            .order_by(PaymentModel.due_date)
        )
        return [row.to_dto() for row in rows]

    def latest_settled_due_date(self, lease_id: UUID) -> date | None:
        """Latest due date among paid or cancelled payments of a lease."""
        return self.session.scalar(
            select(func.max(PaymentModel.due_date)).where(
                PaymentModel.lease_id == lease_id,
                PaymentModel.status.in_(_SETTLED_VALUES),
            )
        )

    def get_overdue(self, today: date) -> list[Payment]:
        """Pending or overdue payments due before ``today``."""
        rows = self.session.scalars(
            select(PaymentModel)
            .where(
                PaymentModel.status.in_(_UNSETTLED_VALUES),
                PaymentModel.due_date < today,
            )
            .order_by(PaymentModel.due_date)
        )
        return [row.to_dto() for row in rows]

    def get_upcoming(self, today: date, days: int) -> list[Payment]:
        """Pending payments due within ``[today, today + days]``."""
        rows = self.session.scalars(
            select(PaymentModel)
            .where(
                PaymentModel.status == PaymentStatus.PENDING.value,
                PaymentModel.due_date >= today,
                PaymentModel.due_date <= today + timedelta(days=days),
            )
            .order_by(PaymentModel.due_date)
        )
        return [row.to_dto() for row in rows]

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(PaymentModel)) or 0

    def count_by_status(self, status: PaymentStatus) -> int:
        return self.session.scalar(
            select(func.count())
            .select_from(PaymentModel)
            .where(PaymentModel.status == status.value)
        ) or 0

    def count_by_lease_and_status(self, lease_id: UUID, status: PaymentStatus) -> int:
        return self.session.scalar(
            select(func.count())
            .select_from(PaymentModel)
            .where(
                PaymentModel.lease_id == lease_id,
                PaymentModel.status == status.value,
            )
        ) or 0

    def count_by_lease_and_type(self, lease_id: UUID, payment_type: PaymentType) -> int:
        return self.session.scalar(
            select(func.count())
            .select_from(PaymentModel)
            .where(
                PaymentModel.lease_id == lease_id,
                PaymentModel.payment_type == payment_type.value,
            )
        ) or 0

    def total_paid_by_lease(self, lease_id: UUID) -> Decimal:
        total = self.session.scalar(
            select(func.sum(PaymentModel.amount)).where(
                PaymentModel.lease_id == lease_id,
                PaymentModel.status == PaymentStatus.PAID.value,
            )
        )
        return Decimal(total).quantize(CENT) if total is not None else Decimal("0.00")

    def pending_amount_by_lease(self, lease_id: UUID) -> Decimal:
        """Sum of pending and overdue amounts for a lease."""
        total = self.session.scalar(
            select(func.sum(PaymentModel.amount)).where(
                PaymentModel.lease_id == lease_id,
                PaymentModel.status.in_(_UNSETTLED_VALUES),
            )
        )
        return Decimal(total).quantize(CENT) if total is not None else Decimal("0.00")
