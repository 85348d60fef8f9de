"""
Module: rental_modules.payments.orm
Responsibility:
    SQLAlchemy persistence model for payment obligations.

Invariants enforced:
    - ``amount > 0`` (ck_payments_amount_positive).
    - payment_date/payment_method set iff status = 'paid'
      (ck_payments_settlement_fields).
    - Payments back-reference their lease; the lease row holds no collection.
    - Rows are never deleted; cancellation is a status.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rental_kernel.db.base import TrackedBase, UUIDString
from rental_modules.leases.orm import LeaseModel


class PaymentModel(TrackedBase):
    """
    One financial obligation tied to a lease.

    Guarantees:
        - ``payment_type`` is one of: rent, painting_fee, adjustment.
        - ``status`` is one of: pending, paid, overdue, cancelled.
        - ``payment_method`` is one of: pix, cash, bank_transfer, credit_card.
    """

    __tablename__ = "payments"

    __table_args__ = (
        Index("idx_payments_lease", "lease_id"),
        Index("idx_payments_status_due", "status", "due_date"),
        Index("idx_payments_reference_month", "reference_month"),
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        CheckConstraint(
            "(status = 'paid' AND payment_date IS NOT NULL "
            "AND payment_method IS NOT NULL) OR "
            "(status <> 'paid' AND payment_date IS NULL "
            "AND payment_method IS NULL)",
            name="ck_payments_settlement_fields",
        ),
    )

    lease_id: Mapped[UUID] = mapped_column(
        UUIDString(), ForeignKey("leases.id"), nullable=False
    )
    payment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    reference_month: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending")
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(20), nullable=True)
    proof_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    lease: Mapped[LeaseModel] = relationship(LeaseModel)

    def to_dto(self):
        from rental_modules.payments.models import (
            Payment,
            PaymentMethod,
            PaymentStatus,
            PaymentType,
        )

        return Payment(
            id=self.id,
            lease_id=self.lease_id,
            payment_type=PaymentType(self.payment_type),
            reference_month=self.reference_month,
            amount=self.amount,
            due_date=self.due_date,
            status=PaymentStatus(self.status),
            payment_date=self.payment_date,
            payment_method=(
                PaymentMethod(self.payment_method) if self.payment_method else None
            ),
            proof_url=self.proof_url,
            notes=self.notes,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id=None) -> "PaymentModel":
        return cls(
            id=dto.id,
            lease_id=dto.lease_id,
            payment_type=dto.payment_type.value,
            reference_month=dto.reference_month,
            amount=dto.amount,
            status=dto.status.value,
            due_date=dto.due_date,
            payment_date=dto.payment_date,
            payment_method=dto.payment_method.value if dto.payment_method else None,
            proof_url=dto.proof_url,
            notes=dto.notes,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<PaymentModel {self.payment_type} {self.reference_month} "
            f"{self.amount} ({self.status})>"
        )
