"""
Tests for rental_kernel.services.unit_of_work.

Validates commit on success and rollback on every failure kind, with
SQLAlchemy errors surfacing as StoreError.
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from rental_kernel.exceptions import StoreError, UnitNotFoundError
from rental_kernel.services.unit_of_work import UnitOfWork
from rental_modules.units.models import Unit
from rental_modules.units.orm import UnitModel
from rental_modules.units.store import UnitStore


def _unit(number: str) -> Unit:
    return Unit.new(number, 1, Decimal("900.00"), Decimal("1100.00"))


class TestUnitOfWork:
    def test_commits_on_success(self, session):
        created = UnitOfWork(session).run(
            lambda s: UnitStore(s).create(_unit("201")), operation="create_unit"
        )
        session.expunge_all()
        assert UnitStore(session).get(created.id) is not None

    def test_kernel_error_rolls_back_and_propagates(self, session):
        def work(s):
            UnitStore(s).create(_unit("202"))
            raise UnitNotFoundError("missing")

        with pytest.raises(UnitNotFoundError):
            UnitOfWork(session).run(work, operation="create_then_fail")

        assert UnitStore(session).get_by_number("202") is None

    def test_sqlalchemy_error_becomes_store_error(self, session):
        def work(s):
            s.add(UnitModel.from_dto(_unit("203")))
            s.add(UnitModel.from_dto(_unit("203")))
            s.flush()

        with pytest.raises(StoreError) as excinfo:
            UnitOfWork(session).run(work, operation="duplicate_units")

        assert excinfo.value.operation == "duplicate_units"
        assert isinstance(excinfo.value.cause, IntegrityError)
        assert isinstance(excinfo.value.__cause__, IntegrityError)
        assert UnitStore(session).get_by_number("203") is None

    def test_other_errors_roll_back_and_propagate(self, session):
        def work(s):
            UnitStore(s).create(_unit("204"))
            raise RuntimeError("unexpected")

        with pytest.raises(RuntimeError):
            UnitOfWork(session).run(work, operation="create_then_crash")

        assert UnitStore(session).get_by_number("204") is None

    def test_failure_is_logged(self, session, captured_logs):
        def work(s):
            s.add(UnitModel.from_dto(_unit("205")))
            s.add(UnitModel.from_dto(_unit("205")))
            s.flush()

        with pytest.raises(StoreError):
            UnitOfWork(session).run(work, operation="duplicate_units")

        failures = [r for r in captured_logs() if r["message"] == "unit_of_work_failed"]
        assert failures and failures[0]["operation"] == "duplicate_units"
