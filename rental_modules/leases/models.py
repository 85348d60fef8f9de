"""
Lease Lifecycle Domain Models (``rental_modules.leases.models``).

Responsibility
--------------
Frozen value objects for rental contracts, rent-adjustment audit records and
the result records of the lifecycle service.  Every date-dependent rule
takes ``today`` explicitly; nothing here reads the clock.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``LeaseStore`` and ``LeaseLifecycleService``.

Invariants enforced
-------------------
* ``payment_due_day`` in 1..31, ``painting_fee_installments`` in 1..4.
* ``monthly_rent_value > 0``; ``painting_fee_total >= 0``.
* ``painting_fee_paid <= painting_fee_total`` (checked by
  ``with_painting_fee_payment`` before any mutation).
* ``generation >= 1``; a renewal has a parent, an original contract has none.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from dateutil.relativedelta import relativedelta

from rental_kernel.domain.dates import add_months
from rental_kernel.exceptions import (
    InvalidDueDayError,
    InvalidInstallmentsError,
    InvalidPaintingFeeError,
    InvalidRentValueError,
    PaintingFeePaidExceedsTotalError,
)
from rental_modules.leases.config import DEFAULT_RENEWAL_POLICY, RenewalPolicy
from rental_modules.payments.models import GenerationError, Payment

DEFAULT_CONTRACT_LENGTH_MONTHS = 6
DEFAULT_EXPIRING_SOON_DAYS = 45
MAX_PAINTING_FEE_INSTALLMENTS = 4


class LeaseStatus(Enum):
    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


LIVE_STATUSES = (LeaseStatus.ACTIVE, LeaseStatus.EXPIRING_SOON)


def validate_due_day(due_day: int) -> None:
    if not 1 <= due_day <= 31:
        raise InvalidDueDayError(due_day)


def validate_installments(
    installments: int, maximum: int = MAX_PAINTING_FEE_INSTALLMENTS
) -> None:
    if not 1 <= installments <= maximum:
        raise InvalidInstallmentsError(installments, maximum)


@dataclass(frozen=True)
class Lease:
    """A rental contract over one unit for one tenant."""

    id: UUID
    unit_id: UUID
    tenant_id: UUID
    contract_signed_date: date
    start_date: date
    end_date: date
    payment_due_day: int
    monthly_rent_value: Decimal
    painting_fee_total: Decimal = Decimal("0")
    painting_fee_installments: int = 1
    painting_fee_paid: Decimal = Decimal("0")
    status: LeaseStatus = LeaseStatus.ACTIVE
    parent_lease_id: UUID | None = None
    generation: int = 1

    def __post_init__(self):
        validate_due_day(self.payment_due_day)
        validate_installments(self.painting_fee_installments)
        if self.monthly_rent_value <= 0:
            raise InvalidRentValueError(self.monthly_rent_value)
        if self.painting_fee_total < 0:
            raise InvalidPaintingFeeError(self.painting_fee_total)
        if self.painting_fee_paid < 0:
            raise InvalidPaintingFeeError(self.painting_fee_paid)
        if self.start_date >= self.end_date:
            raise ValueError("start_date must be before end_date")
        if self.generation < 1:
            raise ValueError("generation must be >= 1")

    @classmethod
    def new(
        cls,
        unit_id: UUID,
        tenant_id: UUID,
        contract_signed_date: date,
        start_date: date,
        payment_due_day: int,
        monthly_rent_value: Decimal,
        painting_fee_total: Decimal = Decimal("0"),
        painting_fee_installments: int = 1,
        contract_length_months: int = DEFAULT_CONTRACT_LENGTH_MONTHS,
    ) -> Lease:
        """A generation-1 lease; end_date is derived from the contract length."""
        return cls(
            id=uuid4(),
            unit_id=unit_id,
            tenant_id=tenant_id,
            contract_signed_date=contract_signed_date,
            start_date=start_date,
            end_date=add_months(start_date, contract_length_months),
            payment_due_day=payment_due_day,
            monthly_rent_value=monthly_rent_value,
            painting_fee_total=painting_fee_total,
            painting_fee_installments=painting_fee_installments,
        )

    def renewed(
        self,
        monthly_rent_value: Decimal,
        painting_fee_total: Decimal,
        painting_fee_installments: int,
        signed_on: date,
        contract_length_months: int = DEFAULT_CONTRACT_LENGTH_MONTHS,
    ) -> Lease:
        """The successor contract, starting the day after this one ends."""
        start = self.end_date + relativedelta(days=1)
        return Lease(
            id=uuid4(),
            unit_id=self.unit_id,
            tenant_id=self.tenant_id,
            contract_signed_date=signed_on,
            start_date=start,
            end_date=add_months(start, contract_length_months),
            payment_due_day=self.payment_due_day,
            monthly_rent_value=monthly_rent_value,
            painting_fee_total=painting_fee_total,
            painting_fee_installments=painting_fee_installments,
            parent_lease_id=self.id,
            generation=self.generation + 1,
        )

    # -- status -------------------------------------------------------------

    def is_active(self) -> bool:
        return self.status == LeaseStatus.ACTIVE

    def is_live(self) -> bool:
        return self.status in LIVE_STATUSES

    def is_cancelled(self) -> bool:
        return self.status == LeaseStatus.CANCELLED

    def can_be_renewed(self) -> bool:
        return self.status in LIVE_STATUSES

    def is_expiring_soon(
        self, today: date, window_days: int = DEFAULT_EXPIRING_SOON_DAYS
    ) -> bool:
        days = (self.end_date - today).days
        return 0 < days <= window_days

    def is_expired(self, today: date) -> bool:
        return today > self.end_date

    def days_until_expiry(self, today: date) -> int:
        return max(0, (self.end_date - today).days)

    def with_status(self, status: LeaseStatus) -> Lease:
        return replace(self, status=status)

    def with_due_day(self, due_day: int) -> Lease:
        return replace(self, payment_due_day=due_day)

    # -- painting fee -------------------------------------------------------

    def remaining_painting_fee(self) -> Decimal:
        return max(Decimal("0"), self.painting_fee_total - self.painting_fee_paid)

    def is_painting_fee_fully_paid(self) -> bool:
        return self.painting_fee_paid >= self.painting_fee_total

    def with_painting_fee_payment(self, amount: Decimal) -> Lease:
        new_paid = self.painting_fee_paid + amount
        if new_paid > self.painting_fee_total:
            raise PaintingFeePaidExceedsTotalError(
                self.id, self.painting_fee_paid, amount, self.painting_fee_total
            )
        return replace(self, painting_fee_paid=new_paid)

    # -- renewal chain ------------------------------------------------------

    def duration_in_months(self) -> int:
        delta = relativedelta(self.end_date, self.start_date)
        return delta.years * 12 + delta.months

    def total_months(
        self, contract_length_months: int = DEFAULT_CONTRACT_LENGTH_MONTHS
    ) -> int:
        """Months covered by the whole renewal chain up to this generation."""
        return self.generation * contract_length_months

    def is_original_contract(self) -> bool:
        return self.parent_lease_id is None and self.generation == 1

    def is_renewal(self) -> bool:
        return self.parent_lease_id is not None and self.generation > 1

    def should_apply_annual_adjustment(
        self, policy: RenewalPolicy = DEFAULT_RENEWAL_POLICY
    ) -> bool:
        return policy.requires_adjustment(self.generation)


@dataclass(frozen=True)
class LeaseRentAdjustment:
    """Immutable audit record of a rent change applied at renewal."""

    id: UUID
    lease_id: UUID
    previous_rent_value: Decimal
    new_rent_value: Decimal
    adjustment_percentage: Decimal
    applied_at: datetime
    reason: str | None = None
    applied_by: UUID | None = None

    def __post_init__(self):
        if self.previous_rent_value <= 0:
            raise InvalidRentValueError(self.previous_rent_value)
        if self.new_rent_value <= 0:
            raise InvalidRentValueError(self.new_rent_value)

    def is_increase(self) -> bool:
        return self.new_rent_value > self.previous_rent_value

    def is_decrease(self) -> bool:
        return self.new_rent_value < self.previous_rent_value

    def absolute_difference(self) -> Decimal:
        return abs(self.new_rent_value - self.previous_rent_value)


@dataclass(frozen=True)
class LeaseCreationResult:
    """
    Result of creating a lease.

    The lease and unit occupancy are committed even when some payment rows
    failed; those failures are listed in ``generation_errors``.
    """

    lease: Lease
    payments: tuple[Payment, ...]
    generation_errors: tuple[GenerationError, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.generation_errors


@dataclass(frozen=True)
class LeaseRenewalResult:
    previous_lease: Lease
    lease: Lease
    payments: tuple[Payment, ...]
    adjustment: LeaseRentAdjustment | None = None


@dataclass(frozen=True)
class LeaseStats:
    total: int = 0
    active: int = 0
    expiring_soon: int = 0
    expired: int = 0
    cancelled: int = 0
