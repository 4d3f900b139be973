"""
Tests for the transaction ledger: writes trigger budget reconciliation
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from finledger.application.budgets import CreateBudgetUseCase
from finledger.application.transactions import (
    CorrectTransactionUseCase,
    DeleteTransactionUseCase,
    RecordTransactionUseCase,
)
from finledger.domain.errors import InvalidAmount, NotFoundError, ValidationError
from finledger.infrastructure.store.base import DateRange


@pytest.fixture
def food_budget(store, sample_owner_id, food_category, now):
    return CreateBudgetUseCase(store).execute(
        owner_id=sample_owner_id, category_id=food_category.id, amount="100", now=now,
    )


@pytest.fixture
def transport_budget(store, sample_owner_id, transport_category, now):
    return CreateBudgetUseCase(store).execute(
        owner_id=sample_owner_id, category_id=transport_category.id, amount="40", now=now,
    )


class TestRecord:
    def test_expense_reconciles_matching_budget(self, store, sample_owner_id, food_category, food_budget):
        record, statuses = RecordTransactionUseCase(store).execute(
            owner_id=sample_owner_id, kind="expense", amount="30",
            occurred_at=datetime(2026, 3, 10, 9, 30), category_id=food_category.id,
        )

        assert record.amount == Decimal("30")
        assert [s.budget_id for s in statuses] == [food_budget.id]
        assert store.get_budget(food_budget.id).spent_amount == Decimal("30")

    def test_expense_outside_window_touches_nothing(self, store, sample_owner_id, food_category, food_budget):
        _, statuses = RecordTransactionUseCase(store).execute(
            owner_id=sample_owner_id, kind="expense", amount="30",
            occurred_at=datetime(2026, 4, 10), category_id=food_category.id,
        )

        assert statuses == []
        assert store.get_budget(food_budget.id).spent_amount == Decimal("0")

    def test_income_does_not_reconcile(self, store, sample_owner_id, salary_category, food_budget):
        _, statuses = RecordTransactionUseCase(store).execute(
            owner_id=sample_owner_id, kind="income", amount="1000",
            occurred_at=datetime(2026, 3, 1), category_id=salary_category.id,
        )

        assert statuses == []

    def test_invalid_amount_not_stored(self, store, sample_owner_id):
        with pytest.raises(InvalidAmount):
            RecordTransactionUseCase(store).execute(owner_id=sample_owner_id, kind="expense", amount="0")

        assert store.query_transactions(sample_owner_id) == []

    def test_unknown_kind(self, store, sample_owner_id):
        with pytest.raises(ValidationError):
            RecordTransactionUseCase(store).execute(owner_id=sample_owner_id, kind="gift", amount="5")

    def test_foreign_category_is_not_found(self, store, sample_owner_id, foreign_category):
        with pytest.raises(NotFoundError):
            RecordTransactionUseCase(store).execute(
                owner_id=sample_owner_id, kind="expense", amount="5", category_id=foreign_category.id,
            )


class TestCorrectDelete:
    def test_moving_expense_between_categories_heals_both(
        self, store, sample_owner_id, food_category, transport_category, food_budget, transport_budget,
    ):
        record, _ = RecordTransactionUseCase(store).execute(
            owner_id=sample_owner_id, kind="expense", amount="25",
            occurred_at=datetime(2026, 3, 10), category_id=food_category.id,
        )

        _, statuses = CorrectTransactionUseCase(store).execute(
            sample_owner_id, record.id, category_id=transport_category.id,
        )

        assert {s.budget_id for s in statuses} == {food_budget.id, transport_budget.id}
        assert store.get_budget(food_budget.id).spent_amount == Decimal("0")
        assert store.get_budget(transport_budget.id).spent_amount == Decimal("25")

    def test_amount_correction(self, store, sample_owner_id, food_category, food_budget):
        record, _ = RecordTransactionUseCase(store).execute(
            owner_id=sample_owner_id, kind="expense", amount="25",
            occurred_at=datetime(2026, 3, 10), category_id=food_category.id,
        )

        updated, statuses = CorrectTransactionUseCase(store).execute(sample_owner_id, record.id, amount="40")

        assert updated.kind == "expense"
        assert [s.spent_amount for s in statuses] == [Decimal("40")]

    def test_delete_expense_heals_budget(self, store, sample_owner_id, food_category, food_budget):
        record, _ = RecordTransactionUseCase(store).execute(
            owner_id=sample_owner_id, kind="expense", amount="25",
            occurred_at=datetime(2026, 3, 10), category_id=food_category.id,
        )

        statuses = DeleteTransactionUseCase(store).execute(sample_owner_id, record.id)

        assert [s.spent_amount for s in statuses] == [Decimal("0")]
        with pytest.raises(NotFoundError):
            store.get_transaction(record.id)

    def test_foreign_transaction_is_not_found(self, store, sample_owner_id, other_owner_id):
        record, _ = RecordTransactionUseCase(store).execute(owner_id=sample_owner_id, kind="income", amount="5")

        with pytest.raises(NotFoundError):
            DeleteTransactionUseCase(store).execute(other_owner_id, record.id)


class TestQuery:
    def test_aware_date_range_compared_in_utc(self, store, sample_owner_id):
        uc = RecordTransactionUseCase(store)
        uc.execute(owner_id=sample_owner_id, kind="income", amount="1", occurred_at=datetime(2026, 3, 10, 10, 0))
        uc.execute(owner_id=sample_owner_id, kind="income", amount="2", occurred_at=datetime(2026, 3, 10, 12, 0))
        tunis = timezone(timedelta(hours=1))

        found = store.query_transactions(
            sample_owner_id,
            date_range=DateRange(
                datetime(2026, 3, 10, 10, 30, tzinfo=tunis),
                datetime(2026, 3, 10, 12, 30, tzinfo=tunis),
            ),
        )

        assert [t.amount for t in found] == [Decimal("1")]
