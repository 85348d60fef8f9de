"""
Lease value-object rules: derived end dates, renewal chain, expiry window
and the painting-fee cap.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from rental_kernel.exceptions import (
    InvalidDueDayError,
    InvalidInstallmentsError,
    InvalidPaintingFeeError,
    InvalidRentValueError,
    PaintingFeePaidExceedsTotalError,
)
from rental_modules.leases.config import RenewalPolicy
from rental_modules.leases.models import Lease, LeaseRentAdjustment, LeaseStatus


def _lease(**overrides) -> Lease:
    fields = dict(
        unit_id=uuid4(),
        tenant_id=uuid4(),
        contract_signed_date=date(2025, 3, 1),
        start_date=date(2025, 3, 1),
        payment_due_day=10,
        monthly_rent_value=Decimal("1000.00"),
    )
    fields.update(overrides)
    return Lease.new(**fields)


class TestLeaseConstruction:
    def test_end_date_is_six_months_after_start(self):
        lease = _lease()
        assert lease.end_date == date(2025, 9, 1)
        assert lease.generation == 1
        assert lease.status == LeaseStatus.ACTIVE
        assert lease.is_original_contract()

    def test_end_date_clamps_month_end(self):
        lease = _lease(start_date=date(2024, 8, 31))
        assert lease.end_date == date(2025, 2, 28)

    @pytest.mark.parametrize("due_day", [0, 32, -1])
    def test_due_day_out_of_range(self, due_day):
        with pytest.raises(InvalidDueDayError):
            _lease(payment_due_day=due_day)

    @pytest.mark.parametrize("installments", [0, 5])
    def test_installments_out_of_range(self, installments):
        with pytest.raises(InvalidInstallmentsError):
            _lease(painting_fee_installments=installments)

    def test_rent_must_be_positive(self):
        with pytest.raises(InvalidRentValueError):
            _lease(monthly_rent_value=Decimal("0"))

    def test_painting_fee_cannot_be_negative(self):
        with pytest.raises(InvalidPaintingFeeError):
            _lease(painting_fee_total=Decimal("-1"))

    def test_duration_in_months(self):
        assert _lease().duration_in_months() == 6


class TestRenewal:
    def test_successor_starts_day_after_end(self):
        original = _lease()
        successor = original.renewed(
            Decimal("1100.00"), Decimal("0"), 1, signed_on=date(2025, 8, 20)
        )
        assert successor.start_date == date(2025, 9, 2)
        assert successor.end_date == date(2026, 3, 2)
        assert successor.parent_lease_id == original.id
        assert successor.generation == 2
        assert successor.payment_due_day == original.payment_due_day
        assert successor.contract_signed_date == date(2025, 8, 20)
        assert successor.is_renewal()
        assert successor.total_months() == 12

    def test_live_leases_can_be_renewed(self):
        lease = _lease()
        assert lease.can_be_renewed()
        assert lease.with_status(LeaseStatus.EXPIRING_SOON).can_be_renewed()
        assert not lease.with_status(LeaseStatus.EXPIRED).can_be_renewed()
        assert not lease.with_status(LeaseStatus.CANCELLED).can_be_renewed()

    def test_annual_adjustment_on_even_generations(self):
        lease = _lease()
        assert not lease.should_apply_annual_adjustment()
        second = lease.renewed(Decimal("1000.00"), Decimal("0"), 1, date(2025, 8, 1))
        assert second.should_apply_annual_adjustment()
        third = second.renewed(Decimal("1000.00"), Decimal("0"), 1, date(2026, 2, 1))
        assert not third.should_apply_annual_adjustment()


class TestExpiry:
    @pytest.mark.parametrize(
        "today,expected",
        [
            (date(2025, 7, 18), True),   # 45 days left
            (date(2025, 7, 17), False),  # 46 days left
            (date(2025, 8, 31), True),   # 1 day left
            (date(2025, 9, 1), False),   # end date itself
        ],
    )
    def test_expiring_soon_window(self, today, expected):
        assert _lease().is_expiring_soon(today) is expected

    def test_is_expired_after_end_date(self):
        lease = _lease()
        assert not lease.is_expired(date(2025, 9, 1))
        assert lease.is_expired(date(2025, 9, 2))

    def test_days_until_expiry_never_negative(self):
        lease = _lease()
        assert lease.days_until_expiry(date(2025, 8, 22)) == 10
        assert lease.days_until_expiry(date(2025, 10, 1)) == 0


class TestPaintingFee:
    def test_payment_accumulates(self):
        lease = _lease(painting_fee_total=Decimal("300.00"), painting_fee_installments=3)
        lease = lease.with_painting_fee_payment(Decimal("100.00"))
        assert lease.painting_fee_paid == Decimal("100.00")
        assert lease.remaining_painting_fee() == Decimal("200.00")
        assert not lease.is_painting_fee_fully_paid()

    def test_exceeding_total_rejected(self):
        lease = _lease(painting_fee_total=Decimal("300.00"), painting_fee_installments=3)
        lease = lease.with_painting_fee_payment(Decimal("250.00"))
        with pytest.raises(PaintingFeePaidExceedsTotalError) as excinfo:
            lease.with_painting_fee_payment(Decimal("100.00"))
        assert excinfo.value.total == Decimal("300.00")
        assert lease.painting_fee_paid == Decimal("250.00")

    def test_exact_total_is_fully_paid(self):
        lease = _lease(painting_fee_total=Decimal("300.00"), painting_fee_installments=3)
        lease = lease.with_painting_fee_payment(Decimal("300.00"))
        assert lease.is_painting_fee_fully_paid()


class TestRentAdjustment:
    def _adjustment(self, previous: str, new: str) -> LeaseRentAdjustment:
        return LeaseRentAdjustment(
            id=uuid4(),
            lease_id=uuid4(),
            previous_rent_value=Decimal(previous),
            new_rent_value=Decimal(new),
            adjustment_percentage=Decimal("0"),
            applied_at=datetime(2025, 3, 15, tzinfo=timezone.utc),
        )

    def test_increase(self):
        adjustment = self._adjustment("1000.00", "1100.00")
        assert adjustment.is_increase()
        assert adjustment.absolute_difference() == Decimal("100.00")

    def test_decrease(self):
        assert self._adjustment("1000.00", "900.00").is_decrease()

    def test_non_positive_rent_rejected(self):
        with pytest.raises(InvalidRentValueError):
            self._adjustment("1000.00", "0")


class TestRenewalPolicy:
    def test_default_cadence(self):
        policy = RenewalPolicy()
        assert policy.renewals_per_adjustment == 2
        assert [policy.requires_adjustment(g) for g in range(1, 7)] == [
            False, True, False, True, False, True,
        ]

    def test_auto_renewal_skips_review_generations(self):
        policy = RenewalPolicy()
        assert policy.allows_auto_renewal(1)
        assert not policy.allows_auto_renewal(2)
        assert policy.allows_auto_renewal(3)

    def test_cadence_must_be_multiple_of_length(self):
        with pytest.raises(ValueError):
            RenewalPolicy(contract_length_months=5, adjustment_cadence_months=12)

    def test_yearly_contracts_review_every_renewal(self):
        policy = RenewalPolicy(contract_length_months=12, adjustment_cadence_months=12)
        assert not policy.requires_adjustment(1)
        assert policy.requires_adjustment(2)
        assert policy.requires_adjustment(3)
