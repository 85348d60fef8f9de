"""Tenant registry."""

from rental_modules.tenants.models import Tenant
from rental_modules.tenants.store import TenantStore

__all__ = ["Tenant", "TenantStore"]
