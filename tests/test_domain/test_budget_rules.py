"""
Tests for budget domain rules (period windows, thresholds)
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from finledger.domain.budget import (
    Budget,
    evaluate,
    month_window,
    period_window,
    window_bounds,
    window_contains,
)
from finledger.domain.errors import InvalidAmount, ValidationError


class TestPeriodWindow:
    def test_monthly_window_is_calendar_month(self):
        assert period_window("monthly", date(2026, 2, 10)) == (date(2026, 2, 1), date(2026, 2, 28))

    def test_monthly_window_leap_year(self):
        assert period_window("monthly", date(2028, 2, 29)) == (date(2028, 2, 1), date(2028, 2, 29))

    def test_yearly_window(self):
        assert period_window("yearly", date(2026, 7, 4)) == (date(2026, 1, 1), date(2026, 12, 31))

    def test_weekly_window_starts_monday(self):
        # 2026-03-15 is a Sunday
        assert period_window("weekly", date(2026, 3, 15)) == (date(2026, 3, 9), date(2026, 3, 15))

    def test_weekly_window_custom_start(self):
        assert period_window("weekly", date(2026, 3, 15), week_starts_on=6) == (date(2026, 3, 15), date(2026, 3, 21))

    def test_unknown_period(self):
        with pytest.raises(ValidationError, match="period"):
            period_window("daily", date(2026, 3, 15))


class TestWindowBounds:
    def test_inclusive_end_becomes_exclusive_next_day(self):
        start, end = window_bounds(date(2026, 3, 1), date(2026, 3, 31))

        assert start == datetime(2026, 3, 1)
        assert end == datetime(2026, 4, 1)

    def test_open_window(self):
        assert window_bounds(date(2026, 3, 1), None) == (datetime(2026, 3, 1), None)

    def test_contains_last_moment_of_end_day(self):
        assert window_contains(date(2026, 3, 1), date(2026, 3, 31), datetime(2026, 3, 31, 23, 59, 59))
        assert not window_contains(date(2026, 3, 1), date(2026, 3, 31), datetime(2026, 4, 1))
        assert not window_contains(date(2026, 3, 1), date(2026, 3, 31), datetime(2026, 2, 28, 23, 59))

    def test_month_window_december(self):
        assert month_window(date(2026, 12, 5)) == (datetime(2026, 12, 1), datetime(2027, 1, 1))


class TestCreateBudget:
    def test_create_monthly_budget(self):
        fields = Budget.create(
            owner_id="o", category_id=3, amount="400", period="monthly",
            today=date(2026, 3, 15), alert_threshold=0.8,
        )

        assert fields["start_date"] == date(2026, 3, 1)
        assert fields["end_date"] == date(2026, 3, 31)
        assert fields["spent_amount"] == Decimal("0")
        assert fields["alert_threshold"] == Decimal("0.8")
        assert fields["is_active"] is True

    def test_create_rejects_non_positive_amount(self):
        with pytest.raises(InvalidAmount):
            Budget.create(owner_id="o", category_id=3, amount="0", period="monthly",
                          today=date(2026, 3, 15), alert_threshold=0.8)

    @pytest.mark.parametrize("threshold", [0, -0.1, 1.5])
    def test_create_rejects_threshold_outside_unit_interval(self, threshold):
        with pytest.raises(ValidationError, match="alert_threshold"):
            Budget.create(owner_id="o", category_id=3, amount="10", period="monthly",
                          today=date(2026, 3, 15), alert_threshold=threshold)

    def test_update_never_touches_spent_amount(self):
        patch = Budget.update(name=" Groceries ", amount="500")

        assert patch == {"name": "Groceries", "amount": Decimal("500")}
        assert "spent_amount" not in patch


class TestEvaluate:
    def test_under_threshold(self):
        status = evaluate(1, Decimal("39.5"), Decimal("100"), Decimal("0.8"))

        assert status.exceeded is False
        assert status.threshold_reached is False
        assert status.usage_pct == pytest.approx(39.5)

    def test_threshold_reached_not_exceeded(self):
        status = evaluate(1, Decimal("80"), Decimal("100"), Decimal("0.8"))

        assert status.threshold_reached is True
        assert status.exceeded is False

    def test_exceeded(self):
        status = evaluate(1, Decimal("100.01"), Decimal("100"), Decimal("0.8"))

        assert status.exceeded is True
        assert status.threshold_reached is True
