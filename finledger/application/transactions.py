"""
Transaction use cases - the ledger write path

Any change touching an expense (create, correct, delete) is followed by a
reconciliation pass over the budgets whose window and category it falls in,
before and after the change.
"""
import logging
from datetime import datetime
from typing import Dict, List, Tuple

from finledger.application.budgets import BudgetReconciler
from finledger.application.ownership import ensure_owned, ensure_visible_category
from finledger.domain.budget import BudgetStatus
from finledger.domain.transaction import KIND_EXPENSE, Transaction
from finledger.infrastructure.store.base import RecordStore
from finledger.utils.clock import utcnow

logger = logging.getLogger(__name__)


def _reconcile_touched(
    reconciler: BudgetReconciler,
    owner_id: str,
    touched: List[Tuple[int | None, datetime]],
) -> List[BudgetStatus]:
    """Reconcile affected budgets for each (category_id, occurred_at), each budget once."""
    seen: Dict[int, BudgetStatus] = {}
    for category_id, occurred_at in touched:
        if category_id is None:
            continue
        for status in reconciler.reconcile_affected(owner_id, category_id, occurred_at):
            seen[status.budget_id] = status
    return list(seen.values())


class RecordTransactionUseCase:
    """Use case: append an income / expense / transfer to the ledger"""

    def __init__(self, store: RecordStore):
        self.store = store
        self.reconciler = BudgetReconciler(store)

    def execute(
        self,
        owner_id: str,
        kind: str,
        amount,
        occurred_at: datetime | None = None,
        category_id: int | None = None,
        currency: str = "TND",
        description: str = "",
        descriptions: Dict[str, str] | None = None,
    ):
        """
        Record a transaction

        Returns:
            (TransactionRecord, list of BudgetStatus for the budgets it touched)

        Raises:
            InvalidAmount: amount <= 0
            ValidationError: unknown kind
            NotFoundError: unknown category
        """
        fields = Transaction.create(
            owner_id=owner_id,
            kind=kind,
            amount=amount,
            occurred_at=occurred_at or utcnow(),
            category_id=category_id,
            currency=currency,
            description=description,
            descriptions=descriptions,
        )
        if category_id is not None:
            ensure_visible_category(self.store, owner_id, category_id)

        record = self.store.insert_transaction(fields)

        statuses: List[BudgetStatus] = []
        if record.kind == KIND_EXPENSE:
            statuses = _reconcile_touched(self.reconciler, owner_id, [(record.category_id, record.occurred_at)])

        self.store.commit()
        logger.info("Transaction #%d recorded: %s %s %s", record.id, record.kind, record.amount, record.currency)
        return record, statuses


class CorrectTransactionUseCase:
    """Use case: edit amount / category / date / description of a transaction (kind is immutable)"""

    def __init__(self, store: RecordStore):
        self.store = store
        self.reconciler = BudgetReconciler(store)

    def execute(
        self,
        owner_id: str,
        transaction_id: int,
        amount=None,
        category_id: int | None = ...,
        occurred_at: datetime | None = None,
        description: str | None = None,
    ):
        record = ensure_owned(self.store.get_transaction(transaction_id), owner_id, "Transaction")
        patch = Transaction.update(
            amount=amount, category_id=category_id, occurred_at=occurred_at, description=description,
        )
        if not patch:
            return record, []
        if patch.get("category_id") is not None:
            ensure_visible_category(self.store, owner_id, patch["category_id"])

        before = (record.category_id, record.occurred_at)
        updated = self.store.update_transaction(transaction_id, patch)
        after = (updated.category_id, updated.occurred_at)

        statuses: List[BudgetStatus] = []
        if updated.kind == KIND_EXPENSE:
            statuses = _reconcile_touched(self.reconciler, owner_id, [before, after])

        self.store.commit()
        logger.info("Transaction #%d corrected: %s", transaction_id, sorted(patch))
        return updated, statuses


class DeleteTransactionUseCase:

    def __init__(self, store: RecordStore):
        self.store = store
        self.reconciler = BudgetReconciler(store)

    def execute(self, owner_id: str, transaction_id: int) -> List[BudgetStatus]:
        record = ensure_owned(self.store.get_transaction(transaction_id), owner_id, "Transaction")
        kind, touched = record.kind, (record.category_id, record.occurred_at)

        self.store.delete_transaction(transaction_id)

        statuses: List[BudgetStatus] = []
        if kind == KIND_EXPENSE:
            statuses = _reconcile_touched(self.reconciler, owner_id, [touched])

        self.store.commit()
        logger.info("Transaction #%d deleted", transaction_id)
        return statuses
