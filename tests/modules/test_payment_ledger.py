"""Payment ledger: settlement, fee rollup, cancellation and the overdue sweep."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from rental_kernel.exceptions import (
    InvalidPaymentMethodError,
    LeaseNotFoundError,
    PaintingFeePaidExceedsTotalError,
    PaymentAlreadyPaidError,
    PaymentCannotBeCancelledError,
    PaymentCannotBePaidError,
    PaymentNotFoundError,
)
from rental_modules.payments.models import PaymentMethod, PaymentStatus, PaymentType


def _first(payments, payment_type=PaymentType.RENT):
    return next(p for p in payments if p.payment_type == payment_type)


class TestMarkPaid:
    def test_marks_paid_on_today_by_default(self, payment_service, create_lease):
        payment = _first(create_lease().payments)

        paid = payment_service.mark_payment_as_paid(payment.id, "pix")

        assert paid.status == PaymentStatus.PAID
        assert paid.payment_method == PaymentMethod.PIX
        assert paid.payment_date == date(2025, 3, 15)

    def test_explicit_payment_date(self, payment_service, create_lease):
        payment = _first(create_lease().payments)
        paid = payment_service.mark_payment_as_paid(
            payment.id, PaymentMethod.BANK_TRANSFER, date(2025, 3, 9)
        )
        assert paid.payment_date == date(2025, 3, 9)

    def test_already_paid(self, payment_service, create_lease):
        payment = _first(create_lease().payments)
        payment_service.mark_payment_as_paid(payment.id, "cash")
        with pytest.raises(PaymentAlreadyPaidError):
            payment_service.mark_payment_as_paid(payment.id, "cash")

    def test_cancelled_cannot_be_paid(self, payment_service, create_lease):
        payment = _first(create_lease().payments)
        payment_service.cancel_payment(payment.id)
        with pytest.raises(PaymentCannotBePaidError):
            payment_service.mark_payment_as_paid(payment.id, "pix")

    def test_invalid_method_leaves_payment_pending(self, payment_service, create_lease):
        payment = _first(create_lease().payments)
        with pytest.raises(InvalidPaymentMethodError):
            payment_service.mark_payment_as_paid(payment.id, "cheque")
        assert payment_service.get_payment(payment.id).status == PaymentStatus.PENDING

    def test_overdue_payment_can_be_paid(self, payment_service, create_lease):
        payment = _first(create_lease().payments)
        payment_service.check_overdue_payments()
        assert payment_service.get_payment(payment.id).status == PaymentStatus.OVERDUE
        paid = payment_service.mark_payment_as_paid(payment.id, "pix")
        assert paid.status == PaymentStatus.PAID

    def test_missing_payment(self, payment_service):
        with pytest.raises(PaymentNotFoundError):
            payment_service.mark_payment_as_paid(uuid4(), "pix")


class TestPaintingFeeRollup:
    def test_fee_payment_updates_lease(self, payment_service, lease_service, create_lease):
        result = create_lease(
            painting_fee_total=Decimal("300.00"), painting_fee_installments=3
        )
        fee = _first(result.payments, PaymentType.PAINTING_FEE)

        payment_service.mark_payment_as_paid(fee.id, "pix")

        lease = lease_service.get_lease(result.lease.id)
        assert lease.painting_fee_paid == Decimal("100.00")

    def test_rent_payment_leaves_fee_alone(
        self, payment_service, lease_service, create_lease
    ):
        result = create_lease(
            painting_fee_total=Decimal("300.00"), painting_fee_installments=3
        )
        payment_service.mark_payment_as_paid(_first(result.payments).id, "pix")
        assert lease_service.get_lease(result.lease.id).painting_fee_paid == Decimal("0")

    def test_cap_rejection_writes_nothing(
        self, payment_service, lease_service, create_lease
    ):
        result = create_lease(
            painting_fee_total=Decimal("300.00"), painting_fee_installments=3
        )
        lease_service.update_painting_fee_paid(result.lease.id, Decimal("250.00"))
        fee = _first(result.payments, PaymentType.PAINTING_FEE)

        with pytest.raises(PaintingFeePaidExceedsTotalError):
            payment_service.mark_payment_as_paid(fee.id, "pix")

        assert payment_service.get_payment(fee.id).status == PaymentStatus.PENDING
        assert lease_service.get_lease(result.lease.id).painting_fee_paid == Decimal(
            "250.00"
        )


class TestCancellation:
    def test_cancel_pending(self, payment_service, create_lease):
        payment = _first(create_lease().payments)
        assert payment_service.cancel_payment(payment.id).status == PaymentStatus.CANCELLED

    def test_paid_cannot_be_cancelled(self, payment_service, create_lease):
        payment = _first(create_lease().payments)
        payment_service.mark_payment_as_paid(payment.id, "pix")
        with pytest.raises(PaymentCannotBeCancelledError):
            payment_service.cancel_payment(payment.id)

    def test_cancel_several_is_atomic(self, payment_service, create_lease):
        result = create_lease()
        paid = result.payments[2]
        payment_service.mark_payment_as_paid(paid.id, "pix")

        with pytest.raises(PaymentCannotBeCancelledError):
            payment_service.cancel_payments(
                result.lease.id, [result.payments[1].id, paid.id]
            )
        assert payment_service.get_payment(result.payments[1].id).is_pending()

    def test_cancel_several_requires_lease(self, payment_service):
        with pytest.raises(LeaseNotFoundError):
            payment_service.cancel_payments(uuid4(), [])


class TestOverdueSweep:
    def test_marks_past_due_pending_payments(self, payment_service, create_lease):
        result = create_lease()

        sweep = payment_service.check_overdue_payments()

        assert sweep.updated_count == 1
        assert sweep.swept_on == date(2025, 3, 15)
        overdue = payment_service.get_overdue_payments()
        assert [p.id for p in overdue] == [result.payments[0].id]
        assert overdue[0].status == PaymentStatus.OVERDUE

    def test_idempotent(self, payment_service, create_lease):
        create_lease()
        payment_service.check_overdue_payments()
        assert payment_service.check_overdue_payments().updated_count == 0

    def test_paid_payments_are_not_swept(self, payment_service, create_lease):
        result = create_lease()
        payment_service.mark_payment_as_paid(result.payments[0].id, "pix")
        assert payment_service.check_overdue_payments().updated_count == 0

    def test_due_today_is_not_overdue(
        self, payment_service, create_lease, deterministic_clock
    ):
        create_lease()
        deterministic_clock.set_date(date(2025, 4, 10))
        # Only March is past due; April is due today
        assert payment_service.check_overdue_payments().updated_count == 1


class TestReads:
    def test_upcoming_uses_default_window(self, payment_service, create_lease):
        near = create_lease(due_day=20).payments[0]
        create_lease(due_day=28)

        assert [p.id for p in payment_service.get_upcoming_payments()] == [near.id]
        assert [p.id for p in payment_service.get_upcoming_payments(0)] == [near.id]
        assert len(payment_service.get_upcoming_payments(15)) == 2

    def test_payments_by_lease(self, payment_service, create_lease):
        result = create_lease(
            painting_fee_total=Decimal("100.00"), painting_fee_installments=1
        )
        payments = payment_service.get_payments_by_lease(result.lease.id)
        assert len(payments) == 7
        assert payments == sorted(payments, key=lambda p: p.due_date)

    def test_payments_by_missing_lease(self, payment_service):
        with pytest.raises(LeaseNotFoundError):
            payment_service.get_payments_by_lease(uuid4())

    def test_stats(self, payment_service, create_lease):
        result = create_lease()
        payment_service.mark_payment_as_paid(result.payments[0].id, "pix")
        payment_service.cancel_payment(result.payments[5].id)

        stats = payment_service.get_payment_stats_by_lease(result.lease.id)

        assert stats.total_paid == Decimal("1000.00")
        assert stats.total_pending == Decimal("4000.00")
        assert stats.paid_count == 1
        assert stats.pending_count == 4
        assert stats.overdue_count == 0
        assert stats.cancelled_count == 1

    def test_attach_proof(self, payment_service, create_lease):
        payment = _first(create_lease().payments)
        stored = payment_service.attach_proof(
            payment.id, "https://files.example.com/receipts/0001.pdf"
        )
        assert stored.proof_url == "https://files.example.com/receipts/0001.pdf"
        assert payment_service.get_payment(payment.id).proof_url == stored.proof_url
