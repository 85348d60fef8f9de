"""Tests for the injectable clock."""

from datetime import date, datetime, timedelta, timezone

from rental_kernel.domain.clock import DeterministicClock, SystemClock


class TestDeterministicClock:
    def test_fixed_until_advanced(self):
        clock = DeterministicClock.on(date(2025, 3, 15))
        assert clock.now() == clock.now()
        assert clock.today() == date(2025, 3, 15)

    def test_advance_days(self):
        clock = DeterministicClock.on(date(2025, 3, 15))
        clock.advance_days(20)
        assert clock.today() == date(2025, 4, 4)

    def test_set_date(self):
        clock = DeterministicClock.on(date(2025, 3, 15))
        clock.set_date(date(2025, 9, 2))
        assert clock.today() == date(2025, 9, 2)

    def test_now_is_timezone_aware(self):
        assert DeterministicClock().now().tzinfo is not None


class TestSystemClock:
    def test_close_to_wall_clock(self):
        delta = SystemClock().now() - datetime.now(timezone.utc)
        assert abs(delta) < timedelta(seconds=5)
