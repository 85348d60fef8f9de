"""
Pytest fixtures for the rental lifecycle engine test suite.

Provides:
- A fresh database per test (in-memory SQLite by default)
- Deterministic clock pinned to 2025-03-15
- Factories for units, tenants and leases
- Service fixtures wired to the shared session
- Structured log capture

Environment Variables:
- DATABASE_URL: run against another database (e.g. PostgreSQL).  Tables are
  created before and dropped after each test.
"""

import itertools
import json
import logging
import os
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from rental_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from rental_kernel.domain.clock import DeterministicClock
from rental_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from rental_modules.leases.config import LeaseConfig
from rental_modules.leases.service import LeaseLifecycleService
from rental_modules.payments.config import PaymentConfig
from rental_modules.payments.due_day import DueDayChangeEngine
from rental_modules.payments.schedule import PaymentScheduleGenerator
from rental_modules.payments.service import PaymentLedgerService
from rental_modules.tenants.models import Tenant
from rental_modules.tenants.store import TenantStore
from rental_modules.units.models import Unit, UnitStatus
from rental_modules.units.store import UnitStore

DEFAULT_DATABASE_URL = "sqlite:///:memory:"

# All date-dependent tests run "today" = 2025-03-15 unless they move the clock
TODAY = date(2025, 3, 15)


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture rental_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, lease_service):
            lease_service.cancel_lease(lease_id)
            logs = captured_logs()
            assert any(r["message"] == "lease_cancelled" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("rental_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """A fresh engine and schema per test."""
    url = get_database_url()
    eng = init_engine_from_url(url)
    create_tables(eng)
    yield eng
    if ":memory:" not in url:
        drop_tables(eng)
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def session_factory(engine):
    return get_session_factory()


# =============================================================================
# Clock and configuration
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock.on(TODAY)


@pytest.fixture
def lease_config() -> LeaseConfig:
    return LeaseConfig.with_defaults()


@pytest.fixture
def payment_config() -> PaymentConfig:
    return PaymentConfig.with_defaults()


# =============================================================================
# Services
# =============================================================================


@pytest.fixture
def lease_service(session, deterministic_clock, lease_config, payment_config):
    return LeaseLifecycleService(
        session, deterministic_clock, config=lease_config, payment_config=payment_config
    )


@pytest.fixture
def payment_service(session, deterministic_clock, payment_config):
    return PaymentLedgerService(session, deterministic_clock, payment_config)


@pytest.fixture
def schedule_generator(session, payment_config):
    return PaymentScheduleGenerator(session, payment_config)


@pytest.fixture
def due_day_engine(session, deterministic_clock, payment_config):
    return DueDayChangeEngine(session, deterministic_clock, payment_config)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def create_unit(session):
    """Factory: persist and commit a unit."""
    counter = itertools.count(101)

    def _create(
        number: str | None = None,
        floor: int = 1,
        base_rent: Decimal = Decimal("1000.00"),
        renovated_rent: Decimal | None = None,
        status: UnitStatus = UnitStatus.AVAILABLE,
        is_renovated: bool = False,
    ) -> Unit:
        unit = Unit.new(
            number=number or str(next(counter)),
            floor=floor,
            base_rent_value=base_rent,
            renovated_rent_value=renovated_rent or base_rent,
        )
        store = UnitStore(session)
        stored = store.create(unit)
        if is_renovated:
            stored = store.mark_renovated(stored.id)
        if status != UnitStatus.AVAILABLE:
            stored = store.update_status(stored.id, status)
        session.commit()
        return stored

    return _create


@pytest.fixture
def create_tenant(session):
    """Factory: persist and commit a tenant with a unique national ID."""
    counter = itertools.count(1)

    def _create(full_name: str = "Maria Souza", phone: str = "11987654321") -> Tenant:
        n = next(counter)
        tenant = Tenant.new(
            full_name=full_name,
            national_id=f"{n:03d}.{n:03d}.{n:03d}-{n % 100:02d}",
            phone=phone,
        )
        stored = TenantStore(session).create(tenant)
        session.commit()
        return stored

    return _create


@pytest.fixture
def create_lease(lease_service, create_unit, create_tenant):
    """Factory: create a lease through the lifecycle service.

    Defaults: starts 2025-03-01, due day 10, rent 1000.00, no painting fee.
    """

    def _create(
        unit: Unit | None = None,
        tenant: Tenant | None = None,
        start_date: date = date(2025, 3, 1),
        due_day: int = 10,
        rent: Decimal = Decimal("1000.00"),
        painting_fee_total: Decimal = Decimal("0"),
        painting_fee_installments: int = 1,
    ):
        unit = unit or create_unit()
        tenant = tenant or create_tenant()
        return lease_service.create_lease(
            unit_id=unit.id,
            tenant_id=tenant.id,
            contract_signed_date=start_date,
            start_date=start_date,
            payment_due_day=due_day,
            monthly_rent_value=rent,
            painting_fee_total=painting_fee_total,
            painting_fee_installments=painting_fee_installments,
        )

    return _create
