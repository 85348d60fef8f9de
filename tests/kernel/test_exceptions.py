"""Tests for the rental kernel exception hierarchy."""

from datetime import date
from decimal import Decimal

import pytest

from rental_kernel import exceptions as exc


def _all_error_classes():
    return [
        obj
        for obj in vars(exc).values()
        if isinstance(obj, type) and issubclass(obj, exc.RentalKernelError)
    ]


class TestHierarchy:
    def test_every_class_has_a_distinct_code(self):
        codes = [cls.code for cls in _all_error_classes()]
        assert len(codes) == len(set(codes))

    @pytest.mark.parametrize(
        "cls",
        [
            exc.UnitNotFoundError,
            exc.TenantNotFoundError,
            exc.LeaseNotFoundError,
            exc.LeaseNotFoundForPaymentError,
            exc.PaymentNotFoundError,
        ],
    )
    def test_not_found_family(self, cls):
        assert issubclass(cls, exc.NotFoundError)

    def test_validation_errors_are_preconditions(self):
        assert issubclass(exc.InvalidDueDayError, exc.ValidationError)
        assert issubclass(exc.ValidationError, exc.PreconditionError)

    def test_already_paid_is_cannot_be_paid(self):
        err = exc.PaymentAlreadyPaidError("p-1")
        assert isinstance(err, exc.PaymentCannotBePaidError)
        assert err.code == "PAYMENT_ALREADY_PAID"
        assert err.status == "paid"

    def test_store_error_is_not_a_precondition(self):
        assert not issubclass(exc.StoreError, exc.PreconditionError)


class TestAttributes:
    def test_painting_fee_cap_attributes(self):
        err = exc.PaintingFeePaidExceedsTotalError(
            "lease-1", Decimal("200.00"), Decimal("150.00"), Decimal("300.00")
        )
        assert err.paid == Decimal("200.00")
        assert err.amount == Decimal("150.00")
        assert err.total == Decimal("300.00")
        assert "300.00" in str(err)

    def test_effective_date_too_far_attributes(self):
        err = exc.EffectiveDateTooFarError(date(2025, 5, 20), date(2025, 4, 10))
        assert err.effective_date == date(2025, 5, 20)
        assert err.next_due_date == date(2025, 4, 10)

    def test_store_error_keeps_cause(self):
        cause = RuntimeError("disk full")
        err = exc.StoreError("renew_lease", cause)
        assert err.operation == "renew_lease"
        assert err.cause is cause
        assert "renew_lease" in str(err)

    def test_invalid_installments_message_names_maximum(self):
        err = exc.InvalidInstallmentsError(5)
        assert err.maximum == 4
        assert "4" in str(err)
