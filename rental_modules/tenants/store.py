"""Tenant registry store (``rental_modules.tenants.store``)."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from rental_kernel.exceptions import DuplicateNationalIdError, TenantNotFoundError
from rental_kernel.logging_config import get_logger
from rental_kernel.services.base import BaseStore
from rental_modules.tenants.models import Tenant
from rental_modules.tenants.orm import TenantModel

logger = get_logger("modules.tenants.store")


class TenantStore(BaseStore[TenantModel]):
    model = TenantModel

    def get(self, tenant_id: UUID) -> Tenant | None:
        row = self._get_row(tenant_id)
        return row.to_dto() if row is not None else None

    def require(self, tenant_id: UUID) -> Tenant:
        row = self._get_row(tenant_id)
        if row is None:
            raise TenantNotFoundError(tenant_id)
        return row.to_dto()

    def get_by_national_id(self, national_id: str) -> Tenant | None:
        row = self.session.scalars(
            select(TenantModel).where(TenantModel.national_id == national_id)
        ).first()
        return row.to_dto() if row is not None else None

    def create(self, tenant: Tenant, created_by_id: UUID | None = None) -> Tenant:
        if self.get_by_national_id(tenant.national_id) is not None:
            raise DuplicateNationalIdError(tenant.national_id)
        row = TenantModel.from_dto(tenant, created_by_id=created_by_id)
        self.session.add(row)
        self.session.flush()
        logger.info("tenant_created", extra={"tenant_id": str(tenant.id)})
        return row.to_dto()

    def update_contact(
        self,
        tenant_id: UUID,
        full_name: str | None = None,
        phone: str | None = None,
        email: str | None = None,
    ) -> Tenant:
        """Update contact fields.  The national ID never changes."""
        row = self._get_row(tenant_id)
        if row is None:
            raise TenantNotFoundError(tenant_id)
        updated = row.to_dto().with_contact(full_name, phone, email)
        row.full_name = updated.full_name
        row.phone = updated.phone
        row.email = updated.email
        self.session.flush()
        return updated

    def list_all(self) -> list[Tenant]:
        rows = self.session.scalars(select(TenantModel).order_by(TenantModel.full_name))
        return [row.to_dto() for row in rows]
