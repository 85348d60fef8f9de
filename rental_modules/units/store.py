"""
Unit registry store (``rental_modules.units.store``).

Point lookups, filtered listing and status updates over ``UnitModel``.
Flush-only; the calling service owns the transaction.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select

from rental_kernel.exceptions import DuplicateUnitNumberError, UnitNotFoundError
from rental_kernel.logging_config import get_logger
from rental_kernel.services.base import BaseStore
from rental_modules.units.models import Unit, UnitOccupancy, UnitStatus
from rental_modules.units.orm import UnitModel

logger = get_logger("modules.units.store")


class UnitStore(BaseStore[UnitModel]):
    """
    Unit registry persistence.

    Contract:
        ``get`` returns None for a missing unit; ``require`` raises
        ``UnitNotFoundError``.  Writers flush and return the stored DTO.
    """

    model = UnitModel

    def get(self, unit_id: UUID) -> Unit | None:
        row = self._get_row(unit_id)
        return row.to_dto() if row is not None else None

    def require(self, unit_id: UUID) -> Unit:
        row = self._get_row(unit_id)
        if row is None:
            raise UnitNotFoundError(unit_id)
        return row.to_dto()

    def get_by_number(self, number: str) -> Unit | None:
        row = self.session.scalars(
            select(UnitModel).where(UnitModel.number == number)
        ).first()
        return row.to_dto() if row is not None else None

    def create(self, unit: Unit, created_by_id: UUID | None = None) -> Unit:
        if self.get_by_number(unit.number) is not None:
            raise DuplicateUnitNumberError(unit.number)
        row = UnitModel.from_dto(unit, created_by_id=created_by_id)
        self.session.add(row)
        self.session.flush()
        logger.info(
            "unit_created",
            extra={"unit_id": str(unit.id), "number": unit.number},
        )
        return row.to_dto()

    def update_status(self, unit_id: UUID, status: UnitStatus) -> Unit:
        row = self._get_row(unit_id)
        if row is None:
            raise UnitNotFoundError(unit_id)
        previous = row.status
        row.status = status.value
        self.session.flush()
        logger.info(
            "unit_status_changed",
            extra={
                "unit_id": str(unit_id),
                "from_status": previous,
                "to_status": status.value,
            },
        )
        return row.to_dto()

    def mark_renovated(self, unit_id: UUID) -> Unit:
        row = self._get_row(unit_id)
        if row is None:
            raise UnitNotFoundError(unit_id)
        renovated = row.to_dto().mark_renovated()
        row.is_renovated = True
        row.current_rent_value = renovated.current_rent_value
        self.session.flush()
        return row.to_dto()

    def list_all(self) -> list[Unit]:
        rows = self.session.scalars(
            select(UnitModel).order_by(UnitModel.floor, UnitModel.number)
        )
        return [row.to_dto() for row in rows]

    def list_by_status(self, status: UnitStatus) -> list[Unit]:
        rows = self.session.scalars(
            select(UnitModel)
            .where(UnitModel.status == status.value)
            .order_by(UnitModel.floor, UnitModel.number)
        )
        return [row.to_dto() for row in rows]

    def count_by_status(self) -> UnitOccupancy:
        counts = dict(
            self.session.execute(
                select(UnitModel.status, func.count()).group_by(UnitModel.status)
            ).all()
        )
        return UnitOccupancy(
            total=sum(counts.values()),
            available=counts.get(UnitStatus.AVAILABLE.value, 0),
            occupied=counts.get(UnitStatus.OCCUPIED.value, 0),
            maintenance=counts.get(UnitStatus.MAINTENANCE.value, 0),
            renovation=counts.get(UnitStatus.RENOVATION.value, 0),
        )
