"""
Tenant Registry Domain Models (``rental_modules.tenants.models``).

Frozen value objects for tenants.  The national ID (CPF) is the natural
key: unique across the registry and immutable once registered.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from uuid import UUID, uuid4

from rental_kernel.exceptions import InvalidTenantError

NATIONAL_ID_PATTERN = re.compile(r"^\d{3}\.\d{3}\.\d{3}-\d{2}$")
EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


@dataclass(frozen=True)
class Tenant:
    """A person renting a unit."""

    id: UUID
    full_name: str
    national_id: str
    phone: str
    email: str | None = None
    id_document_type: str | None = None
    id_document_number: str | None = None

    def __post_init__(self):
        if not self.full_name or not self.full_name.strip():
            raise InvalidTenantError("full_name", "cannot be empty")
        if not NATIONAL_ID_PATTERN.match(self.national_id or ""):
            raise InvalidTenantError(
                "national_id", "must use the NNN.NNN.NNN-NN layout"
            )
        if not self.phone or not self.phone.strip():
            raise InvalidTenantError("phone", "cannot be empty")
        if self.email and not EMAIL_PATTERN.match(self.email):
            raise InvalidTenantError("email", "invalid format")

    @classmethod
    def new(
        cls,
        full_name: str,
        national_id: str,
        phone: str,
        email: str | None = None,
        id_document_type: str | None = None,
        id_document_number: str | None = None,
    ) -> Tenant:
        return cls(
            id=uuid4(),
            full_name=(full_name or "").strip(),
            national_id=national_id,
            phone=(phone or "").strip(),
            email=email.strip() if email else None,
            id_document_type=id_document_type,
            id_document_number=id_document_number,
        )

    def with_contact(
        self,
        full_name: str | None = None,
        phone: str | None = None,
        email: str | None = None,
    ) -> Tenant:
        """Copy with the given contact fields replaced; blanks are ignored."""
        changes = {}
        if full_name:
            changes["full_name"] = full_name.strip()
        if phone:
            changes["phone"] = phone.strip()
        if email:
            changes["email"] = email.strip()
        return replace(self, **changes)

    def phone_digits(self) -> str:
        return re.sub(r"\D", "", self.phone)

    def formatted_phone(self) -> str:
        """``(XX) XXXXX-XXXX`` for mobile, ``(XX) XXXX-XXXX`` for landline."""
        digits = self.phone_digits()
        if len(digits) == 11:
            return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
        if len(digits) == 10:
            return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
        return self.phone
