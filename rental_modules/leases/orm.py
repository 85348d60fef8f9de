"""
Module: rental_modules.leases.orm
Responsibility:
    SQLAlchemy persistence models for leases and rent-adjustment records.
    Maps the frozen DTOs of ``rental_modules.leases.models`` to relational
    tables.

Invariants enforced:
    - At most one active/expiring_soon lease per unit and per tenant:
      partial unique indexes ``uq_leases_active_unit`` and
      ``uq_leases_active_tenant`` (PostgreSQL and SQLite).  This is the
      backstop for the service's read-then-write check.
    - CHECK constraints on due day, installment count, fee cap, generation.
    - Status stored as String(20).

Failure modes:
    - IntegrityError when a second live lease is flushed for a unit/tenant.
    - ForeignKey violation on unknown unit, tenant or parent lease.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rental_kernel.db.base import Base, TrackedBase, UUIDString

_LIVE_LEASE = text("status IN ('active', 'expiring_soon')")


# =============================================================================
# Lease
# =============================================================================


class LeaseModel(TrackedBase):
    """
    A rental contract.

    Guarantees:
        - ``status`` is one of: active, expiring_soon, expired, cancelled.
        - ``parent_lease_id`` references leases.id for renewals.
        - Monetary fields are Numeric(12, 2).
    """

    __tablename__ = "leases"

    __table_args__ = (
        Index(
            "uq_leases_active_unit",
            "unit_id",
            unique=True,
            postgresql_where=_LIVE_LEASE,
            sqlite_where=_LIVE_LEASE,
        ),
        Index(
            "uq_leases_active_tenant",
            "tenant_id",
            unique=True,
            postgresql_where=_LIVE_LEASE,
            sqlite_where=_LIVE_LEASE,
        ),
        Index("idx_leases_status", "status"),
        Index("idx_leases_end_date", "end_date"),
        Index("idx_leases_parent", "parent_lease_id"),
        CheckConstraint(
            "payment_due_day BETWEEN 1 AND 31", name="ck_leases_due_day"
        ),
        CheckConstraint(
            "painting_fee_installments BETWEEN 1 AND 4",
            name="ck_leases_installments",
        ),
        CheckConstraint(
            "painting_fee_paid <= painting_fee_total",
            name="ck_leases_painting_fee_cap",
        ),
        CheckConstraint("generation >= 1", name="ck_leases_generation"),
    )

    unit_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("units.id"), nullable=False
    )
    tenant_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("tenants.id"), nullable=False
    )
    contract_signed_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_due_day: Mapped[int] = mapped_column(nullable=False)
    monthly_rent_value: Mapped[Decimal] = mapped_column(nullable=False)
    painting_fee_total: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    painting_fee_installments: Mapped[int] = mapped_column(default=1)
    painting_fee_paid: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(20), default="active")
    parent_lease_id: Mapped[UUID | None] = mapped_column(
        UUIDString(), ForeignKey("leases.id"), nullable=True
    )
    generation: Mapped[int] = mapped_column(default=1)

    def to_dto(self):
        from rental_modules.leases.models import Lease, LeaseStatus

        return Lease(
            id=self.id,
            unit_id=self.unit_id,
            tenant_id=self.tenant_id,
            contract_signed_date=self.contract_signed_date,
            start_date=self.start_date,
            end_date=self.end_date,
            payment_due_day=self.payment_due_day,
            monthly_rent_value=self.monthly_rent_value,
            painting_fee_total=self.painting_fee_total,
            painting_fee_installments=self.painting_fee_installments,
            painting_fee_paid=self.painting_fee_paid,
            status=LeaseStatus(self.status),
            parent_lease_id=self.parent_lease_id,
            generation=self.generation,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id=None) -> "LeaseModel":
        return cls(
            id=dto.id,
            unit_id=dto.unit_id,
            tenant_id=dto.tenant_id,
            contract_signed_date=dto.contract_signed_date,
            start_date=dto.start_date,
            end_date=dto.end_date,
            payment_due_day=dto.payment_due_day,
            monthly_rent_value=dto.monthly_rent_value,
            painting_fee_total=dto.painting_fee_total,
            painting_fee_installments=dto.painting_fee_installments,
            painting_fee_paid=dto.painting_fee_paid,
            status=dto.status.value,
            parent_lease_id=dto.parent_lease_id,
            generation=dto.generation,
            created_by_id=created_by_id,
        )

    def apply(self, dto) -> None:
        """Copy the mutable fields of ``dto`` onto this row."""
        self.payment_due_day = dto.payment_due_day
        self.monthly_rent_value = dto.monthly_rent_value
        self.painting_fee_total = dto.painting_fee_total
        self.painting_fee_installments = dto.painting_fee_installments
        self.painting_fee_paid = dto.painting_fee_paid
        self.status = dto.status.value

    def __repr__(self) -> str:
        return f"<LeaseModel {self.id} gen={self.generation} ({self.status})>"


# =============================================================================
# Lease Rent Adjustment
# =============================================================================


class LeaseRentAdjustmentModel(Base):
    """
    Audit record of a rent change applied during renewal.

    Guarantees:
        - ``lease_id`` references the lease that was renewed (the old one).
        - Rows are insert-only.
    """

    __tablename__ = "lease_rent_adjustments"

    __table_args__ = (
        Index("idx_lease_rent_adjustments_lease", "lease_id"),
        CheckConstraint(
            "previous_rent_value > 0", name="ck_rent_adjustments_previous"
        ),
        CheckConstraint("new_rent_value > 0", name="ck_rent_adjustments_new"),
    )

    lease_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("leases.id"), nullable=False
    )
    previous_rent_value: Mapped[Decimal] = mapped_column(nullable=False)
    new_rent_value: Mapped[Decimal] = mapped_column(nullable=False)
    adjustment_percentage: Mapped[Decimal] = mapped_column(
        Numeric(7, 2), nullable=False
    )
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    applied_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    lease: Mapped["LeaseModel"] = relationship("LeaseModel")

    def to_dto(self):
        from rental_modules.leases.models import LeaseRentAdjustment

        return LeaseRentAdjustment(
            id=self.id,
            lease_id=self.lease_id,
            previous_rent_value=self.previous_rent_value,
            new_rent_value=self.new_rent_value,
            adjustment_percentage=self.adjustment_percentage,
            applied_at=self.applied_at,
            reason=self.reason,
            applied_by=self.applied_by,
        )

    @classmethod
    def from_dto(cls, dto) -> "LeaseRentAdjustmentModel":
        return cls(
            id=dto.id,
            lease_id=dto.lease_id,
            previous_rent_value=dto.previous_rent_value,
            new_rent_value=dto.new_rent_value,
            adjustment_percentage=dto.adjustment_percentage,
            reason=dto.reason,
            applied_at=dto.applied_at,
            applied_by=dto.applied_by,
        )

    def __repr__(self) -> str:
        return (
            f"<LeaseRentAdjustmentModel {self.lease_id} "
            f"{self.previous_rent_value}->{self.new_rent_value}>"
        )
