"""
Tests for analytics series (pure functions over a transaction snapshot)
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from finledger.application.analytics import (
    build_overview,
    category_breakdown,
    load_window,
    monthly_series,
    running_totals,
    savings_series,
    weekly_expense_series,
    window_start,
)
from finledger.domain.category import Category
from finledger.domain.errors import ValidationError
from finledger.domain.transaction import Transaction

NOW = datetime(2026, 3, 15, 12, 0)  # Sunday


def tx(kind, amount, occurred_at, category_id=None, tx_id=0, description=""):
    return Transaction(
        id=tx_id, owner_id="o", kind=kind, amount=Decimal(amount),
        occurred_at=occurred_at, category_id=category_id, description=description,
    )


class TestMonthlySeries:
    def test_empty_window_is_dense_and_zero(self):
        series = monthly_series([], 6, NOW)

        assert [(b["year"], b["month"]) for b in series] == [
            (2025, 10), (2025, 11), (2025, 12), (2026, 1), (2026, 2), (2026, 3),
        ]
        assert all(b["income"] == 0 and b["expense"] == 0 for b in series)
        assert series[-1]["label"] == "Mar 2026"

    def test_buckets_income_and_expense(self):
        transactions = [
            tx("income", "1000", datetime(2026, 3, 1)),
            tx("expense", "200", datetime(2026, 3, 14)),
            tx("expense", "50", datetime(2026, 1, 31, 23, 59)),
            tx("transfer", "300", datetime(2026, 3, 2)),
            tx("expense", "999", datetime(2025, 9, 30)),  # outside the 6 months
        ]

        series = monthly_series(transactions, 6, NOW)

        assert series[-1]["income"] == Decimal("1000")
        assert series[-1]["expense"] == Decimal("200")
        assert series[3]["expense"] == Decimal("50")
        assert sum(b["expense"] for b in series) == Decimal("250")

    def test_single_month(self):
        assert len(monthly_series([], 1, NOW)) == 1

    def test_months_back_must_be_positive(self):
        with pytest.raises(ValidationError):
            monthly_series([], 0, NOW)

    def test_year_boundary(self):
        series = monthly_series([], 3, datetime(2026, 1, 5))

        assert [(b["year"], b["month"]) for b in series] == [(2025, 11), (2025, 12), (2026, 1)]

    def test_aware_transactions_bucketed_by_utc_month(self):
        tunis = timezone(timedelta(hours=1))
        # 1 March 00:30 in UTC+1 is still 28 February in UTC
        transactions = [tx("expense", "8", datetime(2026, 3, 1, 0, 30, tzinfo=tunis))]

        series = monthly_series(transactions, 2, NOW.replace(tzinfo=timezone.utc))

        assert series[0]["expense"] == Decimal("8")
        assert series[1]["expense"] == Decimal("0")

    def test_labels_follow_language(self):
        series = monthly_series([], 2, NOW, language="fr")

        assert [b["label"] for b in series] == ["Fév 2026", "Mar 2026"]
        assert monthly_series([], 1, NOW, language="xx")[0]["label"] == "Mar 2026"


class TestWeeklyExpenseSeries:
    def test_trailing_seven_days_by_weekday(self):
        transactions = [
            tx("expense", "10", NOW - timedelta(hours=1)),             # Sunday
            tx("expense", "5", datetime(2026, 3, 9, 8, 0)),            # Monday
            tx("expense", "7", NOW - timedelta(days=7)),               # exactly 7 days: excluded
            tx("expense", "3", NOW + timedelta(hours=1)),              # future: excluded
            tx("income", "100", NOW - timedelta(hours=2)),
        ]

        series = weekly_expense_series(transactions, NOW)

        assert len(series) == 7
        assert series[0] == {"weekday": 0, "day": "Mon", "amount": Decimal("5")}
        assert series[6]["amount"] == Decimal("10")
        assert sum(s["amount"] for s in series) == Decimal("15")

    def test_aware_window_against_aware_now(self):
        tunis = timezone(timedelta(hours=1))
        aware_now = NOW.replace(tzinfo=timezone.utc)
        transactions = [
            tx("expense", "4", aware_now - timedelta(days=1)),
            # Sunday 00:30 in UTC+1 is Saturday 23:30 UTC
            tx("expense", "6", datetime(2026, 3, 15, 0, 30, tzinfo=tunis)),
            tx("expense", "9", datetime(2026, 3, 10, 9, 0)),
        ]

        series = weekly_expense_series(transactions, aware_now)

        assert series[5]["amount"] == Decimal("10")
        assert series[1]["amount"] == Decimal("9")

    def test_day_labels_follow_language(self):
        series = weekly_expense_series([], NOW, language="fr")

        assert [s["day"] for s in series][:2] == ["Lun", "Mar"]
        assert series[6]["day"] == "Dim"


class TestCategoryBreakdown:
    def test_top_n_with_share_of_full_total(self):
        transactions = [
            tx("expense", "60", NOW, category_id=1),
            tx("expense", "50", NOW, category_id=2),
            tx("expense", "10", NOW, category_id=3),
            tx("expense", "40", NOW, category_id=1),
            tx("income", "500", NOW, category_id=1),
        ]

        result = category_breakdown(transactions, 2)

        assert [(e["category_id"], e["amount"]) for e in result] == [(1, Decimal("100")), (2, Decimal("50"))]
        assert result[0]["percentage"] == pytest.approx(62.5)
        assert result[1]["percentage"] == pytest.approx(31.25)

    def test_ties_keep_first_occurrence(self):
        transactions = [
            tx("expense", "20", NOW, category_id=7),
            tx("expense", "20", NOW, category_id=3),
            tx("expense", "20", NOW, category_id=5),
        ]

        assert [e["category_id"] for e in category_breakdown(transactions, 3)] == [7, 3, 5]

    def test_percentages_never_exceed_hundred(self):
        transactions = [tx("expense", str(i), NOW, category_id=i) for i in range(1, 9)]

        result = category_breakdown(transactions, 6)

        assert sum(e["percentage"] for e in result) <= 100.0
        assert len(result) == 6

    def test_labels_and_colors(self):
        categories = {1: Category(id=1, kind="expense", labels={"en": "Food", "fr": "Alimentation"}, color="#F59E0B")}
        transactions = [tx("expense", "5", NOW, category_id=1), tx("expense", "1", NOW)]

        result = category_breakdown(transactions, 5, categories, language="fr")

        assert result[0]["label"] == "Alimentation"
        assert result[0]["color"] == "#F59E0B"
        assert result[1]["category_id"] is None
        assert result[1]["label"] == "Other"

    def test_no_expenses(self):
        assert category_breakdown([tx("income", "5", NOW)], 5) == []


class TestSavings:
    def test_savings_derived_from_monthly(self):
        transactions = [
            tx("income", "1000", datetime(2026, 2, 1)),
            tx("expense", "300", datetime(2026, 2, 2)),
            tx("expense", "150", datetime(2026, 3, 2)),
        ]
        monthly = monthly_series(transactions, 3, NOW)

        savings = savings_series(monthly)
        totals = running_totals(savings)

        assert [s["savings"] for s in savings] == [Decimal("0"), Decimal("700"), Decimal("-150")]
        assert [t["running_total"] for t in totals] == [Decimal("0"), Decimal("700"), Decimal("550")]
        for bucket, saving in zip(monthly, savings):
            assert saving["savings"] == bucket["income"] - bucket["expense"]


class TestOverview:
    def test_overview_is_deterministic(self):
        transactions = [
            tx("income", "1000", datetime(2026, 3, 1), tx_id=1),
            tx("expense", "20", datetime(2026, 3, 10), category_id=1, tx_id=2, description="groceries"),
            tx("expense", "35", datetime(2026, 3, 12), category_id=2, tx_id=3),
            tx("expense", "5", datetime(2026, 3, 12), category_id=2, tx_id=4),
            tx("expense", "8", datetime(2026, 3, 13), category_id=1, tx_id=5),
            tx("expense", "2", datetime(2026, 3, 14), category_id=3, tx_id=6),
        ]
        goals = [
            SimpleNamespace(id=i, title=f"Goal {i}", current_amount=Decimal("25"), target_amount=Decimal("100"),
                            currency="TND", is_achieved=False)
            for i in range(1, 5)
        ]

        first = build_overview(transactions, goals, NOW)
        second = build_overview(list(transactions), goals, NOW)

        assert first == second
        assert first["total_income"] == Decimal("1000")
        assert first["total_expense"] == Decimal("70")
        assert first["net"] == Decimal("930")
        assert [t["id"] for t in first["recent_transactions"]] == [6, 5, 4, 3, 2]
        assert len(first["goals"]) == 3
        assert first["goals"][0]["progress"] == pytest.approx(25.0)
        assert len(first["charts"]["monthly"]) == 6
        assert first["charts"]["categories"][0]["category_id"] == 2

    def test_recent_transactions_mix_aware_and_naive(self):
        tunis = timezone(timedelta(hours=1))
        transactions = [
            tx("expense", "1", datetime(2026, 3, 14, 10, 0), tx_id=1),
            tx("expense", "2", datetime(2026, 3, 14, 10, 30, tzinfo=tunis), tx_id=2),  # 09:30 UTC
            tx("expense", "3", datetime(2026, 3, 14, 11, 0, tzinfo=timezone.utc), tx_id=3),
        ]

        overview = build_overview(transactions, [], NOW)

        assert [t["id"] for t in overview["recent_transactions"]] == [3, 1, 2]
        assert overview["recent_transactions"][2]["occurred_at"] == datetime(2026, 3, 14, 9, 30)
        assert overview["charts"]["weekly"][5]["amount"] == Decimal("6")


class TestWindow:
    def test_window_start(self):
        assert window_start(NOW, 6) == datetime(2025, 10, 1)

    def test_load_window_reads_store(self, store, sample_owner_id):
        store.insert_transaction({
            "owner_id": sample_owner_id, "kind": "expense", "amount": Decimal("4"),
            "occurred_at": datetime(2026, 3, 1), "currency": "TND", "description": "",
        })
        store.insert_transaction({
            "owner_id": sample_owner_id, "kind": "expense", "amount": Decimal("9"),
            "occurred_at": datetime(2025, 1, 1), "currency": "TND", "description": "",
        })

        window = load_window(store, sample_owner_id, 6, NOW)

        assert [t.amount for t in window] == [Decimal("4")]
        assert isinstance(window[0], Transaction)
