"""
Viewing period tests
"""

from datetime import date

import pytest

from expense_tracker.errors import ValidationFailure
from expense_tracker.periods import ALL_TIME, MonthPeriod, is_all_time, status_period


class TestMonthPeriod:
    def test_zero_indexed_month(self):
        march = MonthPeriod(2, 2026)
        assert march.calendar_month == 3
        assert march.day(31) == date(2026, 3, 31)
        assert str(march) == "2026-03"

    def test_containing(self):
        assert MonthPeriod.containing(date(2026, 1, 31)) == MonthPeriod(0, 2026)
        assert MonthPeriod.containing(date(2025, 12, 1)) == MonthPeriod(11, 2025)

    def test_contains(self):
        march = MonthPeriod(2, 2026)
        assert march.contains(date(2026, 3, 1))
        assert march.contains(date(2026, 3, 31))
        assert not march.contains(date(2026, 4, 1))
        assert not march.contains(date(2025, 3, 15))

    @pytest.mark.parametrize("month", [-1, 12, True, "3"])
    def test_rejects_invalid_month(self, month):
        with pytest.raises(ValidationFailure):
            MonthPeriod(month, 2026)

    def test_rejects_invalid_year(self):
        with pytest.raises(ValidationFailure):
            MonthPeriod(0, 0)


def test_status_period_uses_today_for_all_time():
    today = date(2026, 7, 4)
    assert is_all_time(ALL_TIME)
    assert status_period(ALL_TIME, today) == MonthPeriod(6, 2026)
    assert status_period(MonthPeriod(2, 2026), today) == MonthPeriod(2, 2026)
