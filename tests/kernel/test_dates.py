"""Tests for rental_kernel.domain.dates calendar helpers."""

from datetime import date

import pytest

from rental_kernel.domain.dates import (
    add_months,
    date_on_day,
    due_date_in_month,
    first_of_month,
    month_starts,
)


class TestAddMonths:
    def test_plain(self):
        assert add_months(date(2025, 3, 1), 6) == date(2025, 9, 1)

    def test_clamps_to_month_end(self):
        assert add_months(date(2024, 8, 31), 6) == date(2025, 2, 28)

    def test_leap_year(self):
        assert add_months(date(2023, 8, 31), 6) == date(2024, 2, 29)

    def test_crosses_year(self):
        assert add_months(date(2025, 10, 15), 6) == date(2026, 4, 15)


class TestDueDates:
    @pytest.mark.parametrize(
        "year,month,day,expected",
        [
            (2025, 2, 31, date(2025, 2, 28)),
            (2024, 2, 30, date(2024, 2, 29)),
            (2025, 4, 31, date(2025, 4, 30)),
            (2025, 5, 31, date(2025, 5, 31)),
            (2025, 5, 1, date(2025, 5, 1)),
        ],
    )
    def test_date_on_day_clamps(self, year, month, day, expected):
        assert date_on_day(year, month, day) == expected

    def test_due_date_in_month(self):
        assert due_date_in_month(date(2025, 6, 1), 10) == date(2025, 6, 10)

    def test_first_of_month(self):
        assert first_of_month(date(2025, 6, 17)) == date(2025, 6, 1)


class TestMonthStarts:
    def test_six_consecutive_months(self):
        assert month_starts(date(2025, 11, 20), 6) == [
            date(2025, 11, 1),
            date(2025, 12, 1),
            date(2026, 1, 1),
            date(2026, 2, 1),
            date(2026, 3, 1),
            date(2026, 4, 1),
        ]

    def test_zero_count(self):
        assert month_starts(date(2025, 1, 1), 0) == []
