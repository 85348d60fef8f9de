"""
Typed Exception Hierarchy for the Rental Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (an HTTP layer, the batch scheduler, an operator script) must be able
to tell a missing lease apart from a lease that cannot be renewed, and both
apart from a database outage. Every error therefore:

  1. Has its own class (catch by type, not by message).
  2. Carries a static ``code`` attribute (machine-readable, API-safe).
  3. Stores its context as attributes (lease_id, due_day, amounts, ...).

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    RentalKernelError (base)
    |
    +-- NotFoundError
    |   +-- UnitNotFoundError
    |   +-- TenantNotFoundError
    |   +-- LeaseNotFoundError
    |   +-- LeaseNotFoundForPaymentError
    |   +-- PaymentNotFoundError
    |
    +-- PreconditionError
    |   +-- UnitNotAvailableError
    |   +-- UnitAlreadyHasActiveLeaseError
    |   +-- TenantAlreadyHasActiveLeaseError
    |   +-- CannotRenewLeaseError
    |   +-- CannotCancelLeaseError
    |   +-- LeaseAlreadyExpiredError
    |   +-- LeaseNotYetExpiredError
    |   +-- LeaseNotActiveError
    |   +-- InvalidLeaseTransitionError
    |   +-- PaymentCannotBePaidError
    |   +-- PaymentAlreadyPaidError
    |   +-- PaymentCannotBeCancelledError
    |   +-- DuplicateUnitNumberError
    |   +-- DuplicateNationalIdError
    |   +-- PaymentLeaseMismatchError
    |   +-- PaintingFeePaidExceedsTotalError
    |   +-- DueDayUnchangedError
    |   +-- EffectiveDateInPastError
    |   +-- EffectiveDateOutOfRangeError
    |   +-- EffectiveDateBeforeSettledError
    |   +-- EffectiveDateTooFarError
    |   +-- ValidationError
    |       +-- InvalidDueDayError
    |       +-- InvalidInstallmentsError
    |       +-- InvalidRentValueError
    |       +-- InvalidPaintingFeeError
    |       +-- InvalidPaymentAmountError
    |       +-- InvalidPaymentMethodError
    |       +-- InvalidUnitError
    |       +-- InvalidTenantError
    |
    +-- StoreError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category      | Code                              | When Raised
--------------|-----------------------------------|------------------------------
Not found     | UNIT_NOT_FOUND                    | Unit ID doesn't exist
              | TENANT_NOT_FOUND                  | Tenant ID doesn't exist
              | LEASE_NOT_FOUND                   | Lease ID doesn't exist
              | LEASE_NOT_FOUND_FOR_PAYMENT       | Generating payments for a missing lease
              | PAYMENT_NOT_FOUND                 | Payment ID doesn't exist
--------------|-----------------------------------|------------------------------
Precondition  | UNIT_NOT_AVAILABLE                | Unit status is not available
              | UNIT_ALREADY_HAS_ACTIVE_LEASE     | Second live lease on a unit
              | TENANT_ALREADY_HAS_ACTIVE_LEASE   | Second live lease for a tenant
              | CANNOT_RENEW_LEASE                | Lease not active/expiring_soon
              | CANNOT_CANCEL_LEASE               | Lease already cancelled
              | LEASE_ALREADY_EXPIRED             | Cancelling an expired lease
              | LEASE_NOT_YET_EXPIRED             | Expiring before end_date passed
              | LEASE_NOT_ACTIVE                  | Due-day change on a closed lease
              | INVALID_LEASE_TRANSITION          | Status move not in the lifecycle
              | PAYMENT_CANNOT_BE_PAID            | Payment cancelled
              | PAYMENT_ALREADY_PAID              | Payment already settled
              | PAYMENT_CANNOT_BE_CANCELLED       | Payment already paid
              | DUPLICATE_UNIT_NUMBER             | Unit number already registered
              | DUPLICATE_NATIONAL_ID             | Tenant national ID already used
              | PAYMENT_LEASE_MISMATCH            | Payment belongs to another lease
              | PAINTING_FEE_PAID_EXCEEDS_TOTAL   | Fee rollup would pass the total
              | DUE_DAY_UNCHANGED                 | New due day equals current one
              | EFFECTIVE_DATE_IN_PAST            | Effective date before today
              | EFFECTIVE_DATE_OUT_OF_RANGE       | Outside [start_date, end_date]
              | EFFECTIVE_DATE_BEFORE_SETTLED     | Before a paid/cancelled due date
              | EFFECTIVE_DATE_TOO_FAR            | Spans more than one billing cycle
--------------|-----------------------------------|------------------------------
Validation    | INVALID_DUE_DAY                   | Due day outside 1..31
              | INVALID_INSTALLMENTS              | Installments outside 1..4
              | INVALID_RENT_VALUE                | Rent not positive
              | INVALID_PAINTING_FEE              | Negative painting fee
              | INVALID_PAYMENT_AMOUNT            | Payment amount not positive
              | INVALID_PAYMENT_METHOD            | Unknown payment method
              | INVALID_UNIT                      | Malformed unit attributes
              | INVALID_TENANT                    | Malformed tenant attributes
--------------|-----------------------------------|------------------------------
Store         | STORE_ERROR                       | Database failure (wrapped)

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        service.renew_lease(lease_id, painting_fee_total=Decimal("0"),
                            painting_fee_installments=1)
    except CannotRenewLeaseError as e:
        respond(409, code=e.code, status=e.status)
    except NotFoundError as e:
        respond(404, code=e.code)
    except StoreError as e:
        respond(500, code=e.code, operation=e.operation)

NotFoundError and PreconditionError are client-correctable and never retried.
StoreError is an internal failure; the unit of work has already rolled back.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID


class RentalKernelError(Exception):
    """
    Base exception for all rental kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "RENTAL_KERNEL_ERROR"


# =============================================================================
# Not-found errors
# =============================================================================


class NotFoundError(RentalKernelError):
    """Base exception for missing entities."""

    code: str = "NOT_FOUND"


class UnitNotFoundError(NotFoundError):
    """Unit with given ID was not found."""

    code: str = "UNIT_NOT_FOUND"

    def __init__(self, unit_id: UUID | str):
        self.unit_id = str(unit_id)
        super().__init__(f"Unit not found: {unit_id}")


class TenantNotFoundError(NotFoundError):
    """Tenant with given ID was not found."""

    code: str = "TENANT_NOT_FOUND"

    def __init__(self, tenant_id: UUID | str):
        self.tenant_id = str(tenant_id)
        super().__init__(f"Tenant not found: {tenant_id}")


class LeaseNotFoundError(NotFoundError):
    """Lease with given ID was not found."""

    code: str = "LEASE_NOT_FOUND"

    def __init__(self, lease_id: UUID | str):
        self.lease_id = str(lease_id)
        super().__init__(f"Lease not found: {lease_id}")


class LeaseNotFoundForPaymentError(NotFoundError):
    """Payment generation was requested for a lease that does not exist."""

    code: str = "LEASE_NOT_FOUND_FOR_PAYMENT"

    def __init__(self, lease_id: UUID | str):
        self.lease_id = str(lease_id)
        super().__init__(f"Lease not found for payment generation: {lease_id}")


class PaymentNotFoundError(NotFoundError):
    """Payment with given ID was not found."""

    code: str = "PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: UUID | str):
        self.payment_id = str(payment_id)
        super().__init__(f"Payment not found: {payment_id}")


# =============================================================================
# Precondition errors
# =============================================================================


class PreconditionError(RentalKernelError):
    """Base exception for operations refused because of current state."""

    code: str = "PRECONDITION_FAILED"


class UnitNotAvailableError(PreconditionError):
    """Unit is not in `available` status and cannot take a new lease."""

    code: str = "UNIT_NOT_AVAILABLE"

    def __init__(self, unit_id: UUID | str, status: str):
        self.unit_id = str(unit_id)
        self.status = status
        super().__init__(f"Unit {unit_id} is not available (status: {status})")


class UnitAlreadyHasActiveLeaseError(PreconditionError):
    """Unit already has an active or expiring_soon lease."""

    code: str = "UNIT_ALREADY_HAS_ACTIVE_LEASE"

    def __init__(self, unit_id: UUID | str, lease_id: UUID | str | None = None):
        self.unit_id = str(unit_id)
        self.lease_id = str(lease_id) if lease_id is not None else None
        super().__init__(f"Unit {unit_id} already has an active lease")


class TenantAlreadyHasActiveLeaseError(PreconditionError):
    """Tenant already holds an active or expiring_soon lease."""

    code: str = "TENANT_ALREADY_HAS_ACTIVE_LEASE"

    def __init__(self, tenant_id: UUID | str, lease_id: UUID | str | None = None):
        self.tenant_id = str(tenant_id)
        self.lease_id = str(lease_id) if lease_id is not None else None
        super().__init__(f"Tenant {tenant_id} already has an active lease")


class CannotRenewLeaseError(PreconditionError):
    """Only active or expiring_soon leases can be renewed."""

    code: str = "CANNOT_RENEW_LEASE"

    def __init__(self, lease_id: UUID | str, status: str):
        self.lease_id = str(lease_id)
        self.status = status
        super().__init__(f"Lease {lease_id} cannot be renewed (status: {status})")


class CannotCancelLeaseError(PreconditionError):
    """Lease is already cancelled."""

    code: str = "CANNOT_CANCEL_LEASE"

    def __init__(self, lease_id: UUID | str, status: str):
        self.lease_id = str(lease_id)
        self.status = status
        super().__init__(f"Lease {lease_id} cannot be cancelled (status: {status})")


class LeaseAlreadyExpiredError(PreconditionError):
    """Expired leases cannot be cancelled."""

    code: str = "LEASE_ALREADY_EXPIRED"

    def __init__(self, lease_id: UUID | str):
        self.lease_id = str(lease_id)
        super().__init__(f"Lease {lease_id} is already expired")


class LeaseNotYetExpiredError(PreconditionError):
    """Lease end date has not passed yet."""

    code: str = "LEASE_NOT_YET_EXPIRED"

    def __init__(self, lease_id: UUID | str, end_date: date):
        self.lease_id = str(lease_id)
        self.end_date = end_date
        super().__init__(
            f"Lease {lease_id} has not expired yet (end date: {end_date.isoformat()})"
        )


class LeaseNotActiveError(PreconditionError):
    """Operation requires an active or expiring_soon lease."""

    code: str = "LEASE_NOT_ACTIVE"

    def __init__(self, lease_id: UUID | str, status: str):
        self.lease_id = str(lease_id)
        self.status = status
        super().__init__(f"Lease {lease_id} is not active (status: {status})")


class InvalidLeaseTransitionError(PreconditionError):
    """Requested status change is not part of the lease lifecycle."""

    code: str = "INVALID_LEASE_TRANSITION"

    def __init__(self, lease_id: UUID | str, from_status: str, to_status: str):
        self.lease_id = str(lease_id)
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Lease {lease_id} cannot move from {from_status} to {to_status}"
        )


class PaymentCannotBePaidError(PreconditionError):
    """Payment is not pending or overdue."""

    code: str = "PAYMENT_CANNOT_BE_PAID"

    def __init__(self, payment_id: UUID | str, status: str):
        self.payment_id = str(payment_id)
        self.status = status
        super().__init__(f"Payment {payment_id} cannot be paid (status: {status})")


class PaymentAlreadyPaidError(PaymentCannotBePaidError):
    """Payment has already been settled."""

    code: str = "PAYMENT_ALREADY_PAID"

    def __init__(self, payment_id: UUID | str):
        super().__init__(payment_id, "paid")


class PaymentCannotBeCancelledError(PreconditionError):
    """Paid payments cannot be cancelled."""

    code: str = "PAYMENT_CANNOT_BE_CANCELLED"

    def __init__(self, payment_id: UUID | str, status: str):
        self.payment_id = str(payment_id)
        self.status = status
        super().__init__(
            f"Payment {payment_id} cannot be cancelled (status: {status})"
        )


class DuplicateUnitNumberError(PreconditionError):
    """Unit number is already registered."""

    code: str = "DUPLICATE_UNIT_NUMBER"

    def __init__(self, number: str):
        self.number = number
        super().__init__(f"Unit number already registered: {number}")


class DuplicateNationalIdError(PreconditionError):
    """Tenant national ID is already registered."""

    code: str = "DUPLICATE_NATIONAL_ID"

    def __init__(self, national_id: str):
        self.national_id = national_id
        super().__init__(f"National ID already registered: {national_id}")


class PaymentLeaseMismatchError(PreconditionError):
    """Payment does not belong to the lease named by the caller."""

    code: str = "PAYMENT_LEASE_MISMATCH"

    def __init__(self, payment_id: UUID | str, lease_id: UUID | str):
        self.payment_id = str(payment_id)
        self.lease_id = str(lease_id)
        super().__init__(f"Payment {payment_id} does not belong to lease {lease_id}")


class PaintingFeePaidExceedsTotalError(PreconditionError):
    """Recording this amount would push painting_fee_paid past the total."""

    code: str = "PAINTING_FEE_PAID_EXCEEDS_TOTAL"

    def __init__(
        self,
        lease_id: UUID | str,
        paid: Decimal,
        amount: Decimal,
        total: Decimal,
    ):
        self.lease_id = str(lease_id)
        self.paid = paid
        self.amount = amount
        self.total = total
        super().__init__(
            f"Painting fee for lease {lease_id} would exceed total: "
            f"{paid} + {amount} > {total}"
        )


class DueDayUnchangedError(PreconditionError):
    """New due day equals the current one."""

    code: str = "DUE_DAY_UNCHANGED"

    def __init__(self, lease_id: UUID | str, due_day: int):
        self.lease_id = str(lease_id)
        self.due_day = due_day
        super().__init__(f"Lease {lease_id} already falls due on day {due_day}")


class EffectiveDateInPastError(PreconditionError):
    """Effective date lies before today."""

    code: str = "EFFECTIVE_DATE_IN_PAST"

    def __init__(self, effective_date: date, today: date):
        self.effective_date = effective_date
        self.today = today
        super().__init__(
            f"Effective date {effective_date.isoformat()} is before "
            f"{today.isoformat()}"
        )


class EffectiveDateOutOfRangeError(PreconditionError):
    """Effective date falls outside the lease period."""

    code: str = "EFFECTIVE_DATE_OUT_OF_RANGE"

    def __init__(self, effective_date: date, start_date: date, end_date: date):
        self.effective_date = effective_date
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Effective date {effective_date.isoformat()} is outside the lease "
            f"period {start_date.isoformat()}..{end_date.isoformat()}"
        )


class EffectiveDateBeforeSettledError(PreconditionError):
    """
    Effective date precedes the due date of a paid or cancelled payment.

    Settled history is never rewritten.
    """

    code: str = "EFFECTIVE_DATE_BEFORE_SETTLED"

    def __init__(self, effective_date: date, settled_due_date: date):
        self.effective_date = effective_date
        self.settled_due_date = settled_due_date
        super().__init__(
            f"Effective date {effective_date.isoformat()} precedes settled "
            f"payment due on {settled_due_date.isoformat()}"
        )


class EffectiveDateTooFarError(PreconditionError):
    """Effective date lies beyond the next unsettled rent due date."""

    code: str = "EFFECTIVE_DATE_TOO_FAR"

    def __init__(self, effective_date: date, next_due_date: date):
        self.effective_date = effective_date
        self.next_due_date = next_due_date
        super().__init__(
            f"Effective date {effective_date.isoformat()} is later than the next "
            f"rent due date {next_due_date.isoformat()}"
        )


# =============================================================================
# Validation errors
# =============================================================================


class ValidationError(PreconditionError):
    """Base exception for malformed input values."""

    code: str = "VALIDATION_ERROR"


class InvalidDueDayError(ValidationError):
    code: str = "INVALID_DUE_DAY"

    def __init__(self, due_day: int):
        self.due_day = due_day
        super().__init__(f"Due day must be between 1 and 31, got {due_day}")


class InvalidInstallmentsError(ValidationError):
    code: str = "INVALID_INSTALLMENTS"

    def __init__(self, installments: int, maximum: int = 4):
        self.installments = installments
        self.maximum = maximum
        super().__init__(
            f"Installments must be between 1 and {maximum}, got {installments}"
        )


class InvalidRentValueError(ValidationError):
    code: str = "INVALID_RENT_VALUE"

    def __init__(self, value: Decimal, reason: str = "must be greater than zero"):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid rent value {value}: {reason}")


class InvalidPaintingFeeError(ValidationError):
    code: str = "INVALID_PAINTING_FEE"

    def __init__(self, value: Decimal):
        self.value = value
        super().__init__(f"Painting fee must not be negative, got {value}")


class InvalidPaymentAmountError(ValidationError):
    code: str = "INVALID_PAYMENT_AMOUNT"

    def __init__(self, amount: Decimal):
        self.amount = amount
        super().__init__(f"Payment amount must be greater than zero, got {amount}")


class InvalidPaymentMethodError(ValidationError):
    code: str = "INVALID_PAYMENT_METHOD"

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Invalid payment method: {method}")


class InvalidUnitError(ValidationError):
    code: str = "INVALID_UNIT"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid unit {field}: {reason}")


class InvalidTenantError(ValidationError):
    code: str = "INVALID_TENANT"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid tenant {field}: {reason}")


# =============================================================================
# Infrastructure errors
# =============================================================================


class StoreError(RentalKernelError):
    """
    A database operation failed.

    Raised by the unit of work after rollback; the original SQLAlchemy
    exception is chained as ``__cause__`` and kept on ``cause``.
    """

    code: str = "STORE_ERROR"

    def __init__(self, operation: str, cause: BaseException | None = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Store operation '{operation}' failed{detail}")
