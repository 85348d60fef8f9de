"""Payment schedule planning and the schedule generator."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from rental_kernel.exceptions import (
    InvalidInstallmentsError,
    InvalidPaymentAmountError,
    LeaseNotFoundForPaymentError,
)
from rental_modules.leases.models import Lease
from rental_modules.payments.models import PaymentStatus, PaymentType
from rental_modules.payments.schedule import (
    build_painting_fee_schedule,
    build_rent_schedule,
)
from rental_modules.payments.store import PaymentStore


def _lease(start: date, due_day: int, fee: str = "0", installments: int = 1) -> Lease:
    return Lease.new(
        uuid4(),
        uuid4(),
        start,
        start,
        due_day,
        Decimal("1000.00"),
        painting_fee_total=Decimal(fee),
        painting_fee_installments=installments,
    )


class TestPlanning:
    def test_rent_due_dates_clamp_to_month_end(self):
        schedule = build_rent_schedule(_lease(date(2025, 1, 1), 31))
        assert [p.due_date for p in schedule] == [
            date(2025, 1, 31),
            date(2025, 2, 28),
            date(2025, 3, 31),
            date(2025, 4, 30),
            date(2025, 5, 31),
            date(2025, 6, 30),
        ]
        assert [p.reference_month.day for p in schedule] == [1] * 6

    def test_rent_starts_in_start_month(self):
        schedule = build_rent_schedule(_lease(date(2025, 3, 20), 5))
        assert schedule[0].reference_month == date(2025, 3, 1)
        assert schedule[0].due_date == date(2025, 3, 5)

    def test_zero_fee_plans_nothing(self):
        assert build_painting_fee_schedule(_lease(date(2025, 3, 1), 10), 2) == []

    def test_fee_installment_notes(self):
        schedule = build_painting_fee_schedule(
            _lease(date(2025, 3, 1), 10, "100.00", 3), 3
        )
        assert [p.amount for p in schedule] == [
            Decimal("33.34"),
            Decimal("33.33"),
            Decimal("33.33"),
        ]
        assert schedule[2].notes == "Painting fee installment 3/3"


class TestGenerator:
    def test_painting_fee_installments(self, schedule_generator, create_lease):
        lease = create_lease(painting_fee_total=Decimal("300.00")).lease

        payments = schedule_generator.generate_painting_fee_payments(lease.id, 3)

        assert [p.amount for p in payments] == [Decimal("100.00")] * 3
        assert [p.due_date for p in payments] == [
            date(2025, 3, 10),
            date(2025, 4, 10),
            date(2025, 5, 10),
        ]
        assert all(p.payment_type == PaymentType.PAINTING_FEE for p in payments)

    def test_invalid_installments(self, schedule_generator, create_lease):
        lease = create_lease(painting_fee_total=Decimal("300.00")).lease
        with pytest.raises(InvalidInstallmentsError):
            schedule_generator.generate_painting_fee_payments(lease.id, 5)

    def test_monthly_rent_payment(self, session, schedule_generator, create_lease):
        lease = create_lease(due_day=31).lease

        payment = schedule_generator.generate_monthly_rent_payment(
            lease.id, date(2025, 9, 17)
        )

        assert payment.reference_month == date(2025, 9, 1)
        assert payment.due_date == date(2025, 9, 30)
        assert payment.status == PaymentStatus.PENDING
        assert PaymentStore(session).get(payment.id) is not None

    def test_missing_lease(self, schedule_generator):
        with pytest.raises(LeaseNotFoundForPaymentError):
            schedule_generator.generate_monthly_rent_payment(uuid4(), date(2025, 3, 1))

    def test_adjustment_payment(self, schedule_generator, create_lease):
        lease = create_lease().lease
        payment = schedule_generator.generate_adjustment_payment(
            lease.id,
            Decimal("150.00"),
            date(2025, 4, 12),
            date(2025, 4, 12),
            notes="Water bill share",
        )
        assert payment.payment_type == PaymentType.ADJUSTMENT
        assert payment.reference_month == date(2025, 4, 1)
        assert payment.notes == "Water bill share"

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10.00")])
    def test_adjustment_amount_must_be_positive(
        self, schedule_generator, create_lease, amount
    ):
        lease = create_lease().lease
        with pytest.raises(InvalidPaymentAmountError):
            schedule_generator.generate_adjustment_payment(
                lease.id, amount, date(2025, 4, 1), date(2025, 4, 12)
            )

    def test_initial_schedule_omits_rows_whose_commit_failed(
        self, session, schedule_generator, create_lease, monkeypatch
    ):
        lease = create_lease().lease
        original_commit = session.commit
        attempts = []

        def flaky_commit():
            attempts.append(1)
            if len(attempts) == 2:
                raise OperationalError("COMMIT", {}, Exception("database is locked"))
            original_commit()

        monkeypatch.setattr(session, "commit", flaky_commit)
        report = schedule_generator.generate_initial_schedule(lease)

        assert len(report.payments) == 5
        assert len(report.errors) == 1
        assert report.errors[0].reference_month == date(2025, 4, 1)
        assert report.errors[0].code == "OperationalError"
        stored_ids = {p.id for p in PaymentStore(session).list_by_lease(lease.id)}
        assert {p.id for p in report.payments} <= stored_ids
        assert len(stored_ids) == 11
