"""
Unit Registry Domain Models (``rental_modules.units.models``).

Responsibility
--------------
Frozen value objects for the rentable units of the building and the pure
rules over them (rent resolution, availability).

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``UnitStore`` and by the lease lifecycle service.

Invariants enforced
-------------------
* ``current_rent_value`` equals ``renovated_rent_value`` when the unit is
  renovated, otherwise ``base_rent_value``.
* ``renovated_rent_value >= base_rent_value > 0``; ``floor >= 1``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from rental_kernel.exceptions import InvalidRentValueError, InvalidUnitError
from rental_kernel.logging_config import get_logger

logger = get_logger("modules.units.models")


class UnitStatus(Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    RENOVATION = "renovation"


def resolve_current_rent(
    base_rent_value: Decimal,
    renovated_rent_value: Decimal,
    is_renovated: bool,
) -> Decimal:
    return renovated_rent_value if is_renovated else base_rent_value


@dataclass(frozen=True)
class Unit:
    """A rentable unit (kitnet) of the building."""

    id: UUID
    number: str
    floor: int
    base_rent_value: Decimal
    renovated_rent_value: Decimal
    status: UnitStatus = UnitStatus.AVAILABLE
    is_renovated: bool = False
    notes: str | None = None

    def __post_init__(self):
        if not self.number or not self.number.strip():
            raise InvalidUnitError("number", "cannot be empty")
        if self.floor < 1:
            raise InvalidUnitError("floor", "must be greater than or equal to 1")
        if self.base_rent_value <= 0:
            raise InvalidRentValueError(self.base_rent_value)
        if self.renovated_rent_value <= 0:
            raise InvalidRentValueError(self.renovated_rent_value)
        if self.renovated_rent_value < self.base_rent_value:
            raise InvalidRentValueError(
                self.renovated_rent_value,
                "renovated rent must be greater than or equal to base rent",
            )

    @classmethod
    def new(
        cls,
        number: str,
        floor: int,
        base_rent_value: Decimal,
        renovated_rent_value: Decimal,
        notes: str | None = None,
    ) -> Unit:
        return cls(
            id=uuid4(),
            number=number.strip(),
            floor=floor,
            base_rent_value=base_rent_value,
            renovated_rent_value=renovated_rent_value,
            notes=notes,
        )

    @property
    def current_rent_value(self) -> Decimal:
        return resolve_current_rent(
            self.base_rent_value, self.renovated_rent_value, self.is_renovated
        )

    def is_available(self) -> bool:
        return self.status == UnitStatus.AVAILABLE

    def is_occupied(self) -> bool:
        return self.status == UnitStatus.OCCUPIED

    def can_be_rented(self) -> bool:
        return self.is_available()

    def mark_renovated(self) -> Unit:
        """Return a copy flagged as renovated; current rent follows."""
        return replace(self, is_renovated=True)

    def with_status(self, status: UnitStatus) -> Unit:
        return replace(self, status=status)


@dataclass(frozen=True)
class UnitOccupancy:
    """Unit counts by status."""

    total: int = 0
    available: int = 0
    occupied: int = 0
    maintenance: int = 0
    renovation: int = 0
