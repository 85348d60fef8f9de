"""Unit and tenant registry stores."""

from decimal import Decimal
from uuid import uuid4

import pytest

from rental_kernel.exceptions import (
    DuplicateNationalIdError,
    DuplicateUnitNumberError,
    TenantNotFoundError,
    UnitNotFoundError,
)
from rental_modules.tenants.models import Tenant
from rental_modules.tenants.store import TenantStore
from rental_modules.units.models import Unit, UnitStatus
from rental_modules.units.store import UnitStore


class TestUnitStore:
    def test_duplicate_number_rejected(self, session, create_unit):
        create_unit(number="301")
        with pytest.raises(DuplicateUnitNumberError):
            UnitStore(session).create(
                Unit.new("301", 3, Decimal("900.00"), Decimal("900.00"))
            )

    def test_require_missing(self, session):
        with pytest.raises(UnitNotFoundError):
            UnitStore(session).require(uuid4())

    def test_mark_renovated_switches_rent(self, session, create_unit):
        unit = create_unit(base_rent=Decimal("900.00"), renovated_rent=Decimal("1200.00"))
        renovated = UnitStore(session).mark_renovated(unit.id)
        assert renovated.is_renovated
        assert renovated.current_rent_value == Decimal("1200.00")

    def test_count_by_status(self, session, create_unit):
        create_unit()
        create_unit()
        create_unit(status=UnitStatus.MAINTENANCE)
        occupancy = UnitStore(session).count_by_status()
        assert occupancy.total == 3
        assert occupancy.available == 2
        assert occupancy.maintenance == 1
        assert occupancy.occupied == 0

    def test_list_by_status(self, session, create_unit):
        create_unit(number="401", floor=4)
        create_unit(number="402", floor=4, status=UnitStatus.RENOVATION)
        listed = UnitStore(session).list_by_status(UnitStatus.AVAILABLE)
        assert [u.number for u in listed] == ["401"]


class TestTenantStore:
    def test_duplicate_national_id_rejected(self, session, create_tenant):
        tenant = create_tenant()
        with pytest.raises(DuplicateNationalIdError):
            TenantStore(session).create(
                Tenant.new("Outra Pessoa", tenant.national_id, "11900000000")
            )

    def test_update_contact_keeps_national_id(self, session, create_tenant):
        tenant = create_tenant()
        updated = TenantStore(session).update_contact(
            tenant.id, phone="11955554444", email="maria@example.com"
        )
        assert updated.phone == "11955554444"
        assert updated.email == "maria@example.com"
        assert updated.national_id == tenant.national_id
        assert TenantStore(session).require(tenant.id).phone == "11955554444"

    def test_update_contact_missing_tenant(self, session):
        with pytest.raises(TenantNotFoundError):
            TenantStore(session).update_contact(uuid4(), phone="11955554444")
