"""
Payment Ledger Domain Models (``rental_modules.payments.models``).

Responsibility
--------------
Frozen value objects for payment obligations and the result records the
ledger, the schedule generator and the due-day change engine hand back to
callers.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* ``amount > 0``.
* ``payment_date`` and ``payment_method`` are set iff status is ``paid``.
* ``reference_month`` is always the first day of a month.
* All monetary fields use ``Decimal`` -- NEVER ``float``.

Failure modes
-------------
* Construction with a non-positive amount raises ``InvalidPaymentAmountError``.
* Construction with an unknown method string raises ``InvalidPaymentMethodError``
  (via ``PaymentMethod.parse``).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from rental_kernel.exceptions import InvalidPaymentAmountError, InvalidPaymentMethodError
from rental_kernel.logging_config import get_logger

logger = get_logger("modules.payments.models")


class PaymentType(Enum):
    RENT = "rent"
    PAINTING_FEE = "painting_fee"
    ADJUSTMENT = "adjustment"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


UNSETTLED_STATUSES = (PaymentStatus.PENDING, PaymentStatus.OVERDUE)
SETTLED_STATUSES = (PaymentStatus.PAID, PaymentStatus.CANCELLED)


class PaymentMethod(Enum):
    PIX = "pix"
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    CREDIT_CARD = "credit_card"

    @classmethod
    def parse(cls, value: PaymentMethod | str) -> PaymentMethod:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidPaymentMethodError(str(value)) from None


@dataclass(frozen=True)
class Payment:
    """One financial obligation tied to a lease."""

    id: UUID
    lease_id: UUID
    payment_type: PaymentType
    reference_month: date
    amount: Decimal
    due_date: date
    status: PaymentStatus = PaymentStatus.PENDING
    payment_date: date | None = None
    payment_method: PaymentMethod | None = None
    proof_url: str | None = None
    notes: str | None = None

    def __post_init__(self):
        if self.amount <= 0:
            raise InvalidPaymentAmountError(self.amount)
        if self.reference_month.day != 1:
            raise ValueError(
                f"reference_month must be the first of a month, got "
                f"{self.reference_month.isoformat()}"
            )
        is_paid = self.status == PaymentStatus.PAID
        has_settlement = self.payment_date is not None and self.payment_method is not None
        if is_paid != has_settlement:
            raise ValueError(
                "payment_date and payment_method must be set iff status is paid"
            )

    @classmethod
    def new(
        cls,
        lease_id: UUID,
        payment_type: PaymentType,
        reference_month: date,
        amount: Decimal,
        due_date: date,
        notes: str | None = None,
    ) -> Payment:
        return cls(
            id=uuid4(),
            lease_id=lease_id,
            payment_type=payment_type,
            reference_month=reference_month,
            amount=amount,
            due_date=due_date,
            notes=notes,
        )

    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID

    def is_pending(self) -> bool:
        return self.status == PaymentStatus.PENDING

    def is_cancelled(self) -> bool:
        return self.status == PaymentStatus.CANCELLED

    def is_unsettled(self) -> bool:
        return self.status in UNSETTLED_STATUSES

    def can_be_paid(self) -> bool:
        return self.status in UNSETTLED_STATUSES

    def can_be_cancelled(self) -> bool:
        return self.status in UNSETTLED_STATUSES

    def is_overdue(self, today: date) -> bool:
        if self.status in SETTLED_STATUSES:
            return False
        return today > self.due_date

    def days_until_due(self, today: date) -> int:
        return (self.due_date - today).days

    def days_overdue(self, today: date) -> int:
        if not self.is_overdue(today):
            return 0
        return (today - self.due_date).days

    def paid(self, payment_date: date, method: PaymentMethod) -> Payment:
        return replace(
            self,
            status=PaymentStatus.PAID,
            payment_date=payment_date,
            payment_method=method,
        )


@dataclass(frozen=True)
class GenerationError:
    """
    A payment row that failed to persist during best-effort generation.

    Callers use these to backfill gaps after lease creation.
    """

    payment_type: PaymentType
    reference_month: date
    amount: Decimal
    code: str
    message: str


@dataclass(frozen=True)
class GenerationReport:
    """Outcome of a best-effort generation run."""

    payments: tuple[Payment, ...] = ()
    errors: tuple[GenerationError, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class PaymentStats:
    """Per-lease payment aggregates."""

    lease_id: UUID
    total_paid: Decimal = Decimal("0")
    total_pending: Decimal = Decimal("0")
    paid_count: int = 0
    pending_count: int = 0
    overdue_count: int = 0
    cancelled_count: int = 0


@dataclass(frozen=True)
class OverdueSweepResult:
    updated_count: int
    swept_on: date
    swept_at: datetime


@dataclass(frozen=True)
class ProportionalPaymentInfo:
    """The settlement payment created by a due-day change."""

    payment_id: UUID
    reference_period: str
    period_start: date
    period_end: date
    days: int
    amount: Decimal
    due_date: date
    status: PaymentStatus


@dataclass(frozen=True)
class UpdatedPaymentInfo:
    """
    A future payment touched by a due-day change.

    ``new_due_date`` is None when the payment was cancelled (superseded by
    the proportional payment).
    """

    payment_id: UUID
    reference_month: date
    old_due_date: date
    new_due_date: date | None
    cancelled: bool = False


@dataclass(frozen=True)
class ChangePaymentDueDayResponse:
    lease_id: UUID
    old_due_day: int
    new_due_day: int
    effective_date: date
    proportional_payment: ProportionalPaymentInfo | None
    updated_payments: tuple[UpdatedPaymentInfo, ...]
    reason: str | None = None

    @property
    def total_payments_updated(self) -> int:
        return len(self.updated_payments)

    @property
    def cancelled_payment_ids(self) -> tuple[UUID, ...]:
        return tuple(p.payment_id for p in self.updated_payments if p.cancelled)
