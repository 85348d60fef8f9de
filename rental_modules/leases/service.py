"""
Lease Lifecycle Service (``rental_modules.leases.service``).

Responsibility
--------------
Creates, renews, cancels and expires leases; keeps unit occupancy in step
with lease status; drives the periodic expiring-soon, auto-renew and
expiry sweeps.

Architecture position
---------------------
**Modules layer**.  Coordinates ``UnitStore``, ``TenantStore``,
``LeaseStore`` and ``PaymentScheduleGenerator``.  Owns every commit: stores
flush, multi-entity writes run inside one ``UnitOfWork``.

Invariants enforced
-------------------
* At most one ``active``/``expiring_soon`` lease per unit and per tenant.
  Read-then-write check here; the partial unique indexes catch races and
  their ``IntegrityError`` is translated back to the same typed errors.
* Every status write is checked against ``LEASE_LIFECYCLE``.
* Renewal (old lease expired, successor inserted, optional rent
  adjustment, six rent payments) is one atomic unit of work.
* Painting fees are billed on the first contract only; renewals never
  generate fee payments.

Failure modes
-------------
* ``UnitNotFoundError`` / ``TenantNotFoundError`` / ``LeaseNotFoundError``.
* ``UnitNotAvailableError``, ``UnitAlreadyHasActiveLeaseError``,
  ``TenantAlreadyHasActiveLeaseError``.
* ``CannotRenewLeaseError``, ``CannotCancelLeaseError``,
  ``LeaseAlreadyExpiredError``, ``LeaseNotYetExpiredError``,
  ``InvalidLeaseTransitionError``.
* ``ValidationError`` subclasses for bad input values.
* Payment rows that fail during creation do NOT fail the lease; they are
  returned in ``LeaseCreationResult.generation_errors``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rental_kernel.domain.clock import Clock
from rental_kernel.exceptions import (
    CannotCancelLeaseError,
    CannotRenewLeaseError,
    InvalidLeaseTransitionError,
    InvalidPaintingFeeError,
    InvalidRentValueError,
    LeaseAlreadyExpiredError,
    LeaseNotYetExpiredError,
    RentalKernelError,
    StoreError,
    TenantAlreadyHasActiveLeaseError,
    UnitAlreadyHasActiveLeaseError,
    UnitNotAvailableError,
)
from rental_kernel.logging_config import LogContext, get_logger
from rental_kernel.services.unit_of_work import UnitOfWork
from rental_modules.leases.calculations import adjustment_percentage
from rental_modules.leases.config import LeaseConfig
from rental_modules.leases.models import (
    Lease,
    LeaseCreationResult,
    LeaseRenewalResult,
    LeaseRentAdjustment,
    LeaseStats,
    LeaseStatus,
    validate_due_day,
    validate_installments,
)
from rental_modules.leases.store import AdjustmentStore, LeaseStore
from rental_modules.leases.workflows import LEASE_LIFECYCLE
from rental_modules.payments.config import PaymentConfig
from rental_modules.payments.models import Payment
from rental_modules.payments.schedule import PaymentScheduleGenerator
from rental_modules.payments.service import cancel_lease_payments
from rental_modules.payments.store import PaymentStore
from rental_modules.tenants.store import TenantStore
from rental_modules.units.models import UnitStatus
from rental_modules.units.store import UnitStore

logger = get_logger("modules.leases.service")


def _live_lease_conflict(
    exc: StoreError, unit_id: UUID, tenant_id: UUID
) -> RentalKernelError | None:
    """Map a partial-unique-index violation to its typed error."""
    if not isinstance(exc.cause, IntegrityError):
        return None
    message = str(exc.cause.orig)
    if "uq_leases_active_unit" in message or "leases.unit_id" in message:
        return UnitAlreadyHasActiveLeaseError(unit_id)
    if "uq_leases_active_tenant" in message or "leases.tenant_id" in message:
        return TenantAlreadyHasActiveLeaseError(tenant_id)
    return None


class LeaseLifecycleService:
    """
    Orchestrates the lease lifecycle.

    Contract:
        Write methods commit on success and roll back on failure.  Sweep
        methods (``check_expiring_soon_leases``, ``auto_renew_leases``,
        ``expire_overdue_leases``) are idempotent and only move leases
        forward along ``LEASE_LIFECYCLE``.

    Non-goals:
        - Does NOT settle or cancel individual payments outside lease
          cancellation (see ``PaymentLedgerService``).
        - Does NOT change due days (see ``DueDayChangeEngine``).
    """

    def __init__(
        self,
        session: Session,
        clock: Clock,
        config: LeaseConfig | None = None,
        payment_config: PaymentConfig | None = None,
        actor_id: UUID | None = None,
    ):
        self._session = session
        self._clock = clock
        self._config = config or LeaseConfig()
        self._actor_id = actor_id
        self._uow = UnitOfWork(session)

        self._units = UnitStore(session)
        self._tenants = TenantStore(session)
        self._leases = LeaseStore(session)
        self._adjustments = AdjustmentStore(session)
        self._payments = PaymentStore(session)
        self._schedule = PaymentScheduleGenerator(
            session, payment_config, auto_commit=False
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _transition(self, lease: Lease, to_status: LeaseStatus) -> Lease:
        if not LEASE_LIFECYCLE.can_transition(lease.status.value, to_status.value):
            raise InvalidLeaseTransitionError(
                lease.id, lease.status.value, to_status.value
            )
        return lease.with_status(to_status)

    def _release(self, lease: Lease, to_status: LeaseStatus) -> Lease:
        """Move a lease to a terminal status and free its unit.  Flush-only."""
        stored = self._leases.update(
            self._transition(lease, to_status), updated_by_id=self._actor_id
        )
        self._units.update_status(lease.unit_id, UnitStatus.AVAILABLE)
        return stored

    # =========================================================================
    # Create
    # =========================================================================

    def create_lease(
        self,
        unit_id: UUID,
        tenant_id: UUID,
        contract_signed_date: date,
        start_date: date,
        payment_due_day: int,
        monthly_rent_value: Decimal,
        painting_fee_total: Decimal = Decimal("0"),
        painting_fee_installments: int = 1,
    ) -> LeaseCreationResult:
        """
        Create a generation-1 lease and mark its unit occupied.

        The lease commits first; its rent and painting-fee payments are then
        generated best-effort, one commit per row.
        """

        def work(session: Session) -> Lease:
            unit = self._units.require(unit_id)
            if not unit.is_available():
                raise UnitNotAvailableError(unit_id, unit.status.value)
            existing = self._leases.get_active_by_unit(unit_id)
            if existing is not None:
                raise UnitAlreadyHasActiveLeaseError(unit_id, existing.id)

            self._tenants.require(tenant_id)
            existing = self._leases.get_active_by_tenant(tenant_id)
            if existing is not None:
                raise TenantAlreadyHasActiveLeaseError(tenant_id, existing.id)

            validate_due_day(payment_due_day)
            validate_installments(
                painting_fee_installments, self._config.max_painting_fee_installments
            )
            if monthly_rent_value <= 0:
                raise InvalidRentValueError(monthly_rent_value)
            if painting_fee_total < 0:
                raise InvalidPaintingFeeError(painting_fee_total)

            lease = Lease.new(
                unit_id=unit_id,
                tenant_id=tenant_id,
                contract_signed_date=contract_signed_date,
                start_date=start_date,
                payment_due_day=payment_due_day,
                monthly_rent_value=monthly_rent_value,
                painting_fee_total=painting_fee_total,
                painting_fee_installments=painting_fee_installments,
                contract_length_months=self._config.contract_length_months,
            )
            stored = self._leases.create(lease, created_by_id=self._actor_id)
            self._units.update_status(unit_id, UnitStatus.OCCUPIED)
            return stored

        try:
            lease = self._uow.run(work, operation="create_lease")
        except StoreError as exc:
            conflict = _live_lease_conflict(exc, unit_id, tenant_id)
            if conflict is None:
                raise
            raise conflict from exc

        with LogContext.bind(lease_id=str(lease.id)):
            logger.info(
                "lease_created",
                extra={
                    "unit_id": str(unit_id),
                    "tenant_id": str(tenant_id),
                    "start_date": lease.start_date.isoformat(),
                    "end_date": lease.end_date.isoformat(),
                    "monthly_rent_value": str(lease.monthly_rent_value),
                    "painting_fee_total": str(lease.painting_fee_total),
                },
            )
            report = self._schedule.generate_initial_schedule(lease)

        return LeaseCreationResult(
            lease=lease,
            payments=report.payments,
            generation_errors=report.errors,
        )

    # =========================================================================
    # Renew
    # =========================================================================

    def renew_lease(
        self,
        old_lease_id: UUID,
        painting_fee_total: Decimal = Decimal("0"),
        painting_fee_installments: int = 1,
        new_rent_value: Decimal | None = None,
        reason: str | None = None,
        actor_id: UUID | None = None,
    ) -> LeaseRenewalResult:
        """
        Expire a live lease and create its successor.

        The successor starts the day after the old end date, keeps unit,
        tenant and due day, and bills ``new_rent_value`` or, when omitted,
        the unit's current rent.  A supplied ``new_rent_value`` is recorded
        as a rent adjustment against the old lease.
        """
        actor = actor_id or self._actor_id
        today = self._clock.today()

        def work(session: Session) -> LeaseRenewalResult:
            old = self._leases.require(old_lease_id)
            if not old.can_be_renewed():
                raise CannotRenewLeaseError(old.id, old.status.value)
            validate_installments(
                painting_fee_installments, self._config.max_painting_fee_installments
            )
            if painting_fee_total < 0:
                raise InvalidPaintingFeeError(painting_fee_total)
            if new_rent_value is not None and new_rent_value <= 0:
                raise InvalidRentValueError(new_rent_value)

            unit = self._units.require(old.unit_id)
            rent = new_rent_value if new_rent_value is not None else unit.current_rent_value

            expired = self._transition(old, LeaseStatus.EXPIRED)
            successor = old.renewed(
                monthly_rent_value=rent,
                painting_fee_total=painting_fee_total,
                painting_fee_installments=painting_fee_installments,
                signed_on=today,
                contract_length_months=self._config.contract_length_months,
            )

            adjustment = None
            if new_rent_value is not None:
                adjustment = LeaseRentAdjustment(
                    id=uuid4(),
                    lease_id=old.id,
                    previous_rent_value=old.monthly_rent_value,
                    new_rent_value=new_rent_value,
                    adjustment_percentage=adjustment_percentage(
                        old.monthly_rent_value, new_rent_value
                    ),
                    applied_at=self._clock.now(),
                    reason=reason,
                    applied_by=actor,
                )

            stored = self._leases.update_and_create(
                expired, successor, adjustment, actor_id=actor
            )
            payments = self._schedule.generate_rent_payments(stored)
            return LeaseRenewalResult(
                previous_lease=expired,
                lease=stored,
                payments=tuple(payments),
                adjustment=adjustment,
            )

        with LogContext.bind(lease_id=str(old_lease_id)):
            result = self._uow.run(work, operation="renew_lease")
            logger.info(
                "lease_renewed",
                extra={
                    "new_lease_id": str(result.lease.id),
                    "generation": result.lease.generation,
                    "monthly_rent_value": str(result.lease.monthly_rent_value),
                    "rent_adjusted": result.adjustment is not None,
                    "payments_generated": len(result.payments),
                },
            )
        return result

    def auto_renew_leases(self) -> int:
        """
        Renew every live lease inside the expiring-soon window at its unit's
        current rent, without painting fee.

        Skipped: leases whose generation is due for rent review (renewed by
        hand with a new rent) and leases whose unit is no longer occupied.
        A lease that fails to renew is logged and skipped.
        """
        today = self._clock.today()
        policy = self._config.renewal_policy
        renewed = 0

        for lease in self._leases.list_expiring_soon(today, self._config.expiring_soon_days):
            if not policy.allows_auto_renewal(lease.generation):
                logger.info(
                    "auto_renew_skipped",
                    extra={"lease_id": str(lease.id), "skip_reason": "rent_review_due"},
                )
                continue
            unit = self._units.get(lease.unit_id)
            if unit is None or not unit.is_occupied():
                logger.info(
                    "auto_renew_skipped",
                    extra={"lease_id": str(lease.id), "skip_reason": "unit_not_occupied"},
                )
                continue
            try:
                self.renew_lease(lease.id, Decimal("0"), 1)
            except RentalKernelError as exc:
                logger.warning(
                    "auto_renew_failed",
                    extra={"lease_id": str(lease.id), "error_code": exc.code},
                )
                continue
            renewed += 1

        logger.info("auto_renew_completed", extra={"renewed_count": renewed})
        return renewed

    # =========================================================================
    # Cancel / expire
    # =========================================================================

    def _check_cancellable(self, lease: Lease) -> None:
        if lease.status == LeaseStatus.EXPIRED:
            raise LeaseAlreadyExpiredError(lease.id)
        if lease.status == LeaseStatus.CANCELLED:
            raise CannotCancelLeaseError(lease.id, lease.status.value)

    def cancel_lease(self, lease_id: UUID) -> Lease:
        """Cancel a live lease and make its unit available."""

        def work(session: Session) -> Lease:
            lease = self._leases.require(lease_id)
            self._check_cancellable(lease)
            return self._release(lease, LeaseStatus.CANCELLED)

        with LogContext.bind(lease_id=str(lease_id)):
            lease = self._uow.run(work, operation="cancel_lease")
            logger.info("lease_cancelled", extra={"unit_id": str(lease.unit_id)})
        return lease

    def cancel_lease_with_payments(
        self, lease_id: UUID, payment_ids: list[UUID]
    ) -> tuple[Lease, list[Payment]]:
        """Cancel a lease and the selected pending/overdue payments atomically."""

        def work(session: Session) -> tuple[Lease, list[Payment]]:
            lease = self._leases.require(lease_id)
            self._check_cancellable(lease)
            cancelled = cancel_lease_payments(self._payments, lease_id, payment_ids)
            return self._release(lease, LeaseStatus.CANCELLED), cancelled

        with LogContext.bind(lease_id=str(lease_id)):
            lease, cancelled = self._uow.run(work, operation="cancel_lease_with_payments")
            logger.info(
                "lease_cancelled",
                extra={
                    "unit_id": str(lease.unit_id),
                    "cancelled_payment_count": len(cancelled),
                },
            )
        return lease, cancelled

    def mark_lease_expired(self, lease_id: UUID) -> Lease:
        """Expire a lease whose end date has passed and free its unit."""
        today = self._clock.today()

        def work(session: Session) -> Lease:
            lease = self._leases.require(lease_id)
            if not lease.is_expired(today):
                raise LeaseNotYetExpiredError(lease.id, lease.end_date)
            return self._release(lease, LeaseStatus.EXPIRED)

        with LogContext.bind(lease_id=str(lease_id)):
            lease = self._uow.run(work, operation="mark_lease_expired")
            logger.info(
                "lease_expired",
                extra={"unit_id": str(lease.unit_id), "end_date": lease.end_date.isoformat()},
            )
        return lease

    def expire_overdue_leases(self) -> int:
        """Expire every live lease past its end date that was not renewed."""
        expired = 0
        for lease in self._leases.list_past_end(self._clock.today()):
            if self._leases.get_child(lease.id) is not None:
                continue
            try:
                self.mark_lease_expired(lease.id)
            except RentalKernelError as exc:
                logger.warning(
                    "lease_expiry_failed",
                    extra={"lease_id": str(lease.id), "error_code": exc.code},
                )
                continue
            expired += 1
        logger.info("expired_lease_sweep_completed", extra={"expired_count": expired})
        return expired

    def check_expiring_soon_leases(self) -> int:
        """Flag active leases inside the expiring-soon window."""
        today = self._clock.today()

        def work(session: Session) -> int:
            flagged = 0
            for lease in self._leases.list_expiring_soon(
                today, self._config.expiring_soon_days
            ):
                if not lease.is_active():
                    continue
                self._transition(lease, LeaseStatus.EXPIRING_SOON)
                self._leases.update_status(lease.id, LeaseStatus.EXPIRING_SOON)
                flagged += 1
            return flagged

        flagged = self._uow.run(work, operation="check_expiring_soon_leases")
        logger.info("expiring_soon_sweep_completed", extra={"flagged_count": flagged})
        return flagged

    # =========================================================================
    # Painting fee
    # =========================================================================

    def update_painting_fee_paid(self, lease_id: UUID, amount: Decimal) -> Lease:
        """Add ``amount`` to the paid painting fee, capped at the fee total."""
        if amount <= 0:
            raise InvalidPaintingFeeError(amount)

        def work(session: Session) -> Lease:
            lease = self._leases.require(lease_id)
            return self._leases.update_painting_fee_paid(
                lease.with_painting_fee_payment(amount)
            )

        lease = self._uow.run(work, operation="update_painting_fee_paid")
        logger.info(
            "painting_fee_paid_updated",
            extra={
                "lease_id": str(lease_id),
                "amount": str(amount),
                "painting_fee_paid": str(lease.painting_fee_paid),
                "painting_fee_total": str(lease.painting_fee_total),
            },
        )
        return lease

    # =========================================================================
    # Reads
    # =========================================================================

    def get_lease(self, lease_id: UUID) -> Lease:
        return self._leases.require(lease_id)

    def list_leases(self, status: LeaseStatus | None = None) -> list[Lease]:
        return self._leases.list(status)

    def list_leases_by_unit(self, unit_id: UUID) -> list[Lease]:
        return self._leases.list_by_unit(unit_id)

    def list_leases_by_tenant(self, tenant_id: UUID) -> list[Lease]:
        return self._leases.list_by_tenant(tenant_id)

    def get_expiring_soon_leases(self) -> list[Lease]:
        return self._leases.list_expiring_soon(
            self._clock.today(), self._config.expiring_soon_days
        )

    def get_lease_stats(self) -> LeaseStats:
        return self._leases.count_by_status()

    def get_rent_adjustments(self, lease_id: UUID) -> list[LeaseRentAdjustment]:
        self._leases.require(lease_id)
        return self._adjustments.list_by_lease(lease_id)

    def get_lease_chain(self, lease_id: UUID) -> list[Lease]:
        """The renewal chain ending at ``lease_id``, generation 1 first."""
        chain = [self._leases.require(lease_id)]
        while chain[-1].parent_lease_id is not None:
            chain.append(self._leases.require(chain[-1].parent_lease_id))
        chain.reverse()
        return chain
