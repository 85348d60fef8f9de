"""
Unit registry.

Rentable units, their occupancy status and rent values.
"""

from rental_modules.units.models import Unit, UnitOccupancy, UnitStatus
from rental_modules.units.store import UnitStore

__all__ = ["Unit", "UnitOccupancy", "UnitStatus", "UnitStore"]
