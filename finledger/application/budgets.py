"""
Budget use cases and the reconciler.

spent_amount is a cache over the transaction log. It is always rebuilt by a
full recomputation (sum of matching expense transactions), never incremented,
so edits and deletions of past transactions heal it on the next pass and
repeated or concurrent passes converge to the same value.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List

from finledger.application.ownership import ensure_owned, ensure_visible_category
from finledger.config import get_settings
from finledger.domain.budget import (
    Budget, BudgetStatus, evaluate, month_window, window_bounds, window_contains, PERIOD_MONTHLY,
)
from finledger.domain.category import CATEGORY_KIND_INCOME
from finledger.domain.errors import ValidationError
from finledger.domain.transaction import KIND_EXPENSE
from finledger.infrastructure.store.base import DateRange, RecordStore
from finledger.utils.clock import as_naive_utc, utcnow
from finledger.utils.validation import to_decimal

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


class BudgetReconciler:
    """
    Recomputes spent_amount from the transaction log.

    Does not commit: callers decide the unit of work.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def reconcile(self, owner_id: str, budget_id: int) -> BudgetStatus:
        """
        Rebuild spent_amount of one budget for its [start, end] window

        Returns:
            BudgetStatus with the new spent_amount and the exceeded / threshold flags

        Raises:
            NotFoundError: no such budget for this owner
            ConflictError: budget changed between read and write
        """
        budget = ensure_owned(self.store.get_budget(budget_id), owner_id, "Budget")
        return self._reconcile_record(owner_id, budget)

    def reconcile_affected(self, owner_id: str, category_id: int | None, occurred_at: datetime) -> List[BudgetStatus]:
        """Reconcile every active budget of owner+category whose window contains occurred_at."""
        if category_id is None:
            return []

        moment = as_naive_utc(occurred_at)
        statuses = []
        for budget in self.store.list_budgets(owner_id, category_id=category_id, active_only=True):
            if window_contains(budget.start_date, budget.end_date, moment):
                statuses.append(self._reconcile_record(owner_id, budget))
        return statuses

    def total_monthly_spend(self, owner_id: str, now: datetime | None = None) -> Decimal:
        """All expense transactions of the owner in the calendar month containing now."""
        now = as_naive_utc(now) if now else utcnow()
        start, end = month_window(now.date())
        transactions = self.store.query_transactions(
            owner_id, kind=KIND_EXPENSE, date_range=DateRange(start, end),
        )
        return sum((to_decimal(t.amount) for t in transactions), _ZERO)

    def _reconcile_record(self, owner_id: str, budget) -> BudgetStatus:
        start, end = window_bounds(budget.start_date, budget.end_date)
        transactions = self.store.query_transactions(
            owner_id,
            category_id=budget.category_id,
            kind=KIND_EXPENSE,
            date_range=DateRange(start, end),
        )
        spent = sum((to_decimal(t.amount) for t in transactions), _ZERO)

        was_reached = _threshold_reached(budget)
        updated = self.store.update_budget(
            budget.id,
            {"spent_amount": spent, "reconciled_at": utcnow()},
            expected_version=budget.version,
        )
        status = evaluate(updated.id, spent, updated.amount, updated.alert_threshold)

        logger.info(
            "Budget #%d reconciled: spent %s of %s (%d transactions)",
            updated.id, spent, updated.amount, len(transactions),
        )
        if status.threshold_reached and not was_reached:
            logger.info("Budget #%d crossed its alert threshold (%.1f%% used)", updated.id, status.usage_pct)
        if status.exceeded:
            logger.info("Budget #%d exceeded by %s", updated.id, spent - to_decimal(updated.amount))
        return status


def _threshold_reached(budget) -> bool:
    allocated = to_decimal(budget.amount)
    spent = to_decimal(budget.spent_amount)
    return allocated > 0 and spent >= allocated * to_decimal(budget.alert_threshold)


def budget_status(budget) -> BudgetStatus:
    """Status from the cached spent_amount, without touching the store."""
    return evaluate(budget.id, to_decimal(budget.spent_amount), budget.amount, budget.alert_threshold)


class CreateBudgetUseCase:
    """Use case: create a budget for the period containing now"""

    def __init__(self, store: RecordStore):
        self.store = store
        self.reconciler = BudgetReconciler(store)

    def execute(
        self,
        owner_id: str,
        category_id: int,
        amount,
        period: str = PERIOD_MONTHLY,
        name: str = "",
        alert_threshold=None,
        currency: str = "TND",
        now: datetime | None = None,
    ):
        """
        Create an active budget, then reconcile it once so a window that already
        holds expenses starts from the right spent_amount.

        Raises:
            ValidationError: non-positive amount, unknown period, income category
            NotFoundError: unknown category
        """
        settings = get_settings()
        now = as_naive_utc(now) if now else utcnow()

        category = ensure_visible_category(self.store, owner_id, category_id)
        if category.kind == CATEGORY_KIND_INCOME:
            raise ValidationError(f"Category #{category_id} is an income category; budgets track expenses")

        fields = Budget.create(
            owner_id=owner_id,
            category_id=category_id,
            amount=amount,
            period=period,
            today=now.date(),
            alert_threshold=settings.BUDGET_ALERT_THRESHOLD if alert_threshold is None else alert_threshold,
            name=name,
            currency=currency,
            week_starts_on=settings.WEEK_STARTS_ON,
        )
        budget = self.store.insert_budget(fields)
        logger.info(
            "Budget #%d created for owner %s: %s %s %s..%s",
            budget.id, owner_id, fields["amount"], period, fields["start_date"], fields["end_date"],
        )

        self.reconciler.reconcile(owner_id, budget.id)
        self.store.commit()
        return self.store.get_budget(budget.id)


class ReconcileBudgetUseCase:
    """Use case: rebuild one budget's spent_amount and commit"""

    def __init__(self, store: RecordStore):
        self.store = store
        self.reconciler = BudgetReconciler(store)

    def execute(self, owner_id: str, budget_id: int) -> BudgetStatus:
        status = self.reconciler.reconcile(owner_id, budget_id)
        self.store.commit()
        return status


class ReconcileAllBudgetsUseCase:
    """Use case: rebuild every active budget of an owner (optionally one period kind)"""

    def __init__(self, store: RecordStore):
        self.store = store
        self.reconciler = BudgetReconciler(store)

    def execute(self, owner_id: str, period: str | None = None) -> List[BudgetStatus]:
        statuses = [
            self.reconciler.reconcile(owner_id, b.id)
            for b in self.store.list_budgets(owner_id, active_only=True, period=period)
        ]
        self.store.commit()
        return statuses


class UpdateBudgetUseCase:
    """Use case: edit name / allocation / threshold / active flag"""

    def __init__(self, store: RecordStore):
        self.store = store
        self.reconciler = BudgetReconciler(store)

    def execute(
        self,
        owner_id: str,
        budget_id: int,
        name: str | None = None,
        amount=None,
        alert_threshold=None,
        is_active: bool | None = None,
    ):
        """
        A changed allocation or threshold is followed by a reconciliation pass.
        """
        budget = ensure_owned(self.store.get_budget(budget_id), owner_id, "Budget")
        patch = Budget.update(name=name, amount=amount, alert_threshold=alert_threshold, is_active=is_active)
        if not patch:
            return budget

        updated = self.store.update_budget(budget_id, patch, expected_version=budget.version)
        if "amount" in patch or "alert_threshold" in patch or patch.get("is_active"):
            self.reconciler.reconcile(owner_id, budget_id)
        self.store.commit()
        return self.store.get_budget(updated.id)


class DeleteBudgetUseCase:

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(self, owner_id: str, budget_id: int) -> None:
        ensure_owned(self.store.get_budget(budget_id), owner_id, "Budget")
        self.store.delete_budget(budget_id)
        self.store.commit()


def get_total_monthly_spend(store: RecordStore, owner_id: str, now: datetime | None = None) -> Decimal:
    return BudgetReconciler(store).total_monthly_spend(owner_id, now)
