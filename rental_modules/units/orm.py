"""
Module: rental_modules.units.orm
Responsibility:
    SQLAlchemy persistence model for rentable units.  Maps the frozen
    ``Unit`` DTO to the ``units`` table.

Invariants enforced:
    - ``number`` is unique (uq_units_number).
    - ``current_rent_value`` is stored denormalized and recomputed from
      base/renovated rent on every write.
    - Status stored as String(20).
"""

from decimal import Decimal

from sqlalchemy import Boolean, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rental_kernel.db.base import TrackedBase


class UnitModel(TrackedBase):
    """
    A rentable unit.

    Guarantees:
        - ``status`` is one of: available, occupied, maintenance, renovation.
        - Monetary fields are Numeric(12, 2).
    """

    __tablename__ = "units"

    __table_args__ = (
        UniqueConstraint("number", name="uq_units_number"),
        Index("idx_units_status", "status"),
    )

    number: Mapped[str] = mapped_column(String(20), nullable=False)
    floor: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="available")
    is_renovated: Mapped[bool] = mapped_column(Boolean, default=False)
    base_rent_value: Mapped[Decimal] = mapped_column(nullable=False)
    renovated_rent_value: Mapped[Decimal] = mapped_column(nullable=False)
    current_rent_value: Mapped[Decimal] = mapped_column(nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def to_dto(self):
        from rental_modules.units.models import Unit, UnitStatus

        return Unit(
            id=self.id,
            number=self.number,
            floor=self.floor,
            base_rent_value=self.base_rent_value,
            renovated_rent_value=self.renovated_rent_value,
            status=UnitStatus(self.status),
            is_renovated=self.is_renovated,
            notes=self.notes,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id=None) -> "UnitModel":
        return cls(
            id=dto.id,
            number=dto.number,
            floor=dto.floor,
            status=dto.status.value,
            is_renovated=dto.is_renovated,
            base_rent_value=dto.base_rent_value,
            renovated_rent_value=dto.renovated_rent_value,
            current_rent_value=dto.current_rent_value,
            notes=dto.notes,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<UnitModel {self.number} ({self.status})>"
