"""
Module: rental_modules.tenants.orm
Responsibility:
    SQLAlchemy persistence model for tenants.

Invariants enforced:
    - ``national_id`` is unique (uq_tenants_national_id).
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rental_kernel.db.base import TrackedBase


class TenantModel(TrackedBase):
    __tablename__ = "tenants"

    __table_args__ = (
        UniqueConstraint("national_id", name="uq_tenants_national_id"),
    )

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    national_id: Mapped[str] = mapped_column(String(14), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    id_document_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    id_document_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def to_dto(self):
        from rental_modules.tenants.models import Tenant

        return Tenant(
            id=self.id,
            full_name=self.full_name,
            national_id=self.national_id,
            phone=self.phone,
            email=self.email,
            id_document_type=self.id_document_type,
            id_document_number=self.id_document_number,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id=None) -> "TenantModel":
        return cls(
            id=dto.id,
            full_name=dto.full_name,
            national_id=dto.national_id,
            phone=dto.phone,
            email=dto.email,
            id_document_type=dto.id_document_type,
            id_document_number=dto.id_document_number,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<TenantModel {self.full_name} ({self.national_id})>"
