"""Write-side infrastructure shared by module stores and services."""

from rental_kernel.services.base import BaseStore
from rental_kernel.services.unit_of_work import UnitOfWork

__all__ = ["BaseStore", "UnitOfWork"]
