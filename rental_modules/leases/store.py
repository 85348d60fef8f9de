"""
Lease persistence (``rental_modules.leases.store``).

``LeaseStore`` covers point lookups, live-lease lookups per unit/tenant,
expiry-window scans and the atomic renewal write.  ``AdjustmentStore``
holds the insert-only rent-adjustment audit trail.

Both are flush-only: the lifecycle service's unit of work commits.
"""

from __future__ import annotations

from datetime import date, timedelta
from uuid import UUID

from sqlalchemy import func, select

from rental_kernel.exceptions import LeaseNotFoundError
from rental_kernel.logging_config import get_logger
from rental_kernel.services.base import BaseStore
from rental_modules.leases.models import (
    LIVE_STATUSES,
    Lease,
    LeaseRentAdjustment,
    LeaseStats,
    LeaseStatus,
)
from rental_modules.leases.orm import LeaseModel, LeaseRentAdjustmentModel

logger = get_logger("modules.leases.store")

_LIVE_VALUES = tuple(s.value for s in LIVE_STATUSES)


class LeaseStore(BaseStore[LeaseModel]):
    """
    Lease persistence.

    Contract:
        ``get`` returns None for a missing lease; ``require`` raises
        ``LeaseNotFoundError``.  Listing methods return leases ordered by
        start date.
    """

    model = LeaseModel

    def get(self, lease_id: UUID) -> Lease | None:
        row = self._get_row(lease_id)
        return row.to_dto() if row is not None else None

    def require(self, lease_id: UUID) -> Lease:
        row = self._get_row(lease_id)
        if row is None:
            raise LeaseNotFoundError(lease_id)
        return row.to_dto()

    def create(self, lease: Lease, created_by_id: UUID | None = None) -> Lease:
        row = LeaseModel.from_dto(lease, created_by_id=created_by_id)
        self.session.add(row)
        self.session.flush()
        return row.to_dto()

    def update(self, lease: Lease, updated_by_id: UUID | None = None) -> Lease:
        row = self._get_row(lease.id)
        if row is None:
            raise LeaseNotFoundError(lease.id)
        row.apply(lease)
        if updated_by_id is not None:
            row.updated_by_id = updated_by_id
        self.session.flush()
        return row.to_dto()

    def update_status(self, lease_id: UUID, status: LeaseStatus) -> Lease:
        row = self._get_row(lease_id)
        if row is None:
            raise LeaseNotFoundError(lease_id)
        row.status = status.value
        self.session.flush()
        return row.to_dto()

    def update_painting_fee_paid(self, lease: Lease) -> Lease:
        row = self._get_row(lease.id)
        if row is None:
            raise LeaseNotFoundError(lease.id)
        row.painting_fee_paid = lease.painting_fee_paid
        self.session.flush()
        return row.to_dto()

    def update_and_create(
        self,
        previous: Lease,
        successor: Lease,
        adjustment: LeaseRentAdjustment | None = None,
        actor_id: UUID | None = None,
    ) -> Lease:
        """
        Renewal write: update the old lease, insert its successor and the
        optional rent adjustment.

        The old lease is flushed first so its row leaves the live-lease
        partial indexes before the successor enters them.
        """
        self.update(previous, updated_by_id=actor_id)
        stored = self.create(successor, created_by_id=actor_id)
        if adjustment is not None:
            AdjustmentStore(self.session).create(adjustment)
        return stored

    # -- queries ------------------------------------------------------------

    def get_active_by_unit(self, unit_id: UUID) -> Lease | None:
        row = self.session.scalars(
            select(LeaseModel).where(
                LeaseModel.unit_id == unit_id,
                LeaseModel.status.in_(_LIVE_VALUES),
            )
        ).first()
        return row.to_dto() if row is not None else None

    def get_active_by_tenant(self, tenant_id: UUID) -> Lease | None:
        row = self.session.scalars(
            select(LeaseModel).where(
                LeaseModel.tenant_id == tenant_id,
                LeaseModel.status.in_(_LIVE_VALUES),
            )
        ).first()
        return row.to_dto() if row is not None else None

    def get_child(self, lease_id: UUID) -> Lease | None:
        """The lease that renewed ``lease_id``, if any."""
        row = self.session.scalars(
            select(LeaseModel).where(LeaseModel.parent_lease_id == lease_id)
        ).first()
        return row.to_dto() if row is not None else None

    def list(self, status: LeaseStatus | None = None) -> list[Lease]:
        stmt = select(LeaseModel)
        if status is not None:
            stmt = stmt.where(LeaseModel.status == status.value)
        rows = self.session.scalars(stmt.order_by(LeaseModel.start_date))
        return [row.to_dto() for row in rows]

    def list_by_unit(self, unit_id: UUID) -> list[Lease]:
        rows = self.session.scalars(
            select(LeaseModel)
            .where(LeaseModel.unit_id == unit_id)
            .order_by(LeaseModel.start_date)
        )
        return [row.to_dto() for row in rows]

    def list_by_tenant(self, tenant_id: UUID) -> list[Lease]:
        rows = self.session.scalars(
            select(LeaseModel)
            .where(LeaseModel.tenant_id == tenant_id)
            .order_by(LeaseModel.start_date)
        )
        return [row.to_dto() for row in rows]

    def list_expiring_soon(self, today: date, window_days: int) -> list[Lease]:
        """Live leases with 0 < days until end_date <= window_days."""
        rows = self.session.scalars(
            select(LeaseModel)
            .where(
                LeaseModel.status.in_(_LIVE_VALUES),
                LeaseModel.end_date > today,
                LeaseModel.end_date <= today + timedelta(days=window_days),
            )
            .order_by(LeaseModel.end_date)
        )
        return [row.to_dto() for row in rows]

    def list_past_end(self, today: date) -> list[Lease]:
        """Live leases whose end_date has passed."""
        rows = self.session.scalars(
            select(LeaseModel)
            .where(
                LeaseModel.status.in_(_LIVE_VALUES),
                LeaseModel.end_date < today,
            )
            .order_by(LeaseModel.end_date)
        )
        return [row.to_dto() for row in rows]

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(LeaseModel)) or 0

    def count_by_status(self) -> LeaseStats:
        counts = dict(
            self.session.execute(
                select(LeaseModel.status, func.count()).group_by(LeaseModel.status)
            ).all()
        )
        return LeaseStats(
            total=sum(counts.values()),
            active=counts.get(LeaseStatus.ACTIVE.value, 0),
            expiring_soon=counts.get(LeaseStatus.EXPIRING_SOON.value, 0),
            expired=counts.get(LeaseStatus.EXPIRED.value, 0),
            cancelled=counts.get(LeaseStatus.CANCELLED.value, 0),
        )


class AdjustmentStore(BaseStore[LeaseRentAdjustmentModel]):
    """Insert-only store for rent adjustments."""

    model = LeaseRentAdjustmentModel

    def create(self, adjustment: LeaseRentAdjustment) -> LeaseRentAdjustment:
        row = LeaseRentAdjustmentModel.from_dto(adjustment)
        self.session.add(row)
        self.session.flush()
        logger.info(
            "rent_adjustment_recorded",
            extra={
                "lease_id": str(adjustment.lease_id),
                "previous_rent_value": str(adjustment.previous_rent_value),
                "new_rent_value": str(adjustment.new_rent_value),
                "adjustment_percentage": str(adjustment.adjustment_percentage),
            },
        )
        return adjustment

    def list_by_lease(self, lease_id: UUID) -> list[LeaseRentAdjustment]:
        rows = self.session.scalars(
            select(LeaseRentAdjustmentModel)
            .where(LeaseRentAdjustmentModel.lease_id == lease_id)
            .order_by(LeaseRentAdjustmentModel.applied_at)
        )
        return [row.to_dto() for row in rows]

    def get_latest_by_lease(self, lease_id: UUID) -> LeaseRentAdjustment | None:
        row = self.session.scalars(
            select(LeaseRentAdjustmentModel)
            .where(LeaseRentAdjustmentModel.lease_id == lease_id)
            .order_by(LeaseRentAdjustmentModel.applied_at.desc())
        ).first()
        return row.to_dto() if row is not None else None
