"""
SQLAlchemy record store

Per-record linearizability: debts, budgets and goals carry a version column.
update_* issues a single UPDATE ... WHERE id = :id AND version = :expected
that also bumps the version, so a read-modify-write that lost a race is
detected instead of silently overwriting the winner.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from finledger.domain.errors import ConflictError, NotFoundError
from finledger.infrastructure.db.models import (
    BudgetRecord, CategoryRecord, DebtRecord, SavingsGoalRecord, TransactionRecord,
)
from finledger.infrastructure.store.base import DateRange, RecordStore
from finledger.utils.clock import as_naive_utc, utcnow


class SqlRecordStore(RecordStore):

    def __init__(self, db: Session):
        self.db = db

    # --- unit of work ---

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    # --- generic helpers ---

    def _get(self, model, kind: str, record_id: int, for_update: bool = False):
        if for_update:
            stmt = select(model).where(model.id == record_id).with_for_update()
            record = self.db.execute(stmt).scalar_one_or_none()
        else:
            record = self.db.get(model, record_id)
        if record is None:
            raise NotFoundError(kind, record_id)
        return record

    def _insert(self, model, fields: Dict[str, Any]):
        record = model(**fields)
        self.db.add(record)
        self.db.flush()  # assign id without commit
        return record

    def _update(self, model, kind: str, record_id: int, patch: Dict[str, Any],
                expected_version: Optional[int] = None):
        # Pending ORM changes must reach the database before the Core UPDATE
        self.db.flush()

        if not patch:
            return self._get(model, kind, record_id)

        values = dict(patch)
        values["updated_at"] = utcnow()
        stmt = update(model).where(model.id == record_id)

        versioned = hasattr(model, "version")
        if versioned:
            if expected_version is not None:
                stmt = stmt.where(model.version == expected_version)
            values["version"] = model.version + 1

        result = self.db.execute(
            stmt.values(**values).execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            if self.db.get(model, record_id) is None:
                raise NotFoundError(kind, record_id)
            raise ConflictError(kind, record_id, expected_version)

        return self.db.get(model, record_id, populate_existing=True)

    def _delete(self, model, kind: str, record_id: int) -> None:
        record = self._get(model, kind, record_id)
        self.db.delete(record)
        self.db.flush()

    # --- transactions ---

    def query_transactions(
        self,
        owner_id: str,
        category_id: Optional[int] = None,
        kind: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> List[TransactionRecord]:
        query = self.db.query(TransactionRecord).filter(TransactionRecord.owner_id == owner_id)

        if category_id is not None:
            query = query.filter(TransactionRecord.category_id == category_id)
        if kind is not None:
            query = query.filter(TransactionRecord.kind == kind)
        if date_range is not None:
            if date_range.start is not None:
                query = query.filter(TransactionRecord.occurred_at >= as_naive_utc(date_range.start))
            if date_range.end is not None:
                query = query.filter(TransactionRecord.occurred_at < as_naive_utc(date_range.end))

        return query.order_by(TransactionRecord.occurred_at.asc(), TransactionRecord.id.asc()).all()

    def get_transaction(self, transaction_id: int) -> TransactionRecord:
        return self._get(TransactionRecord, "Transaction", transaction_id)

    def insert_transaction(self, fields: Dict[str, Any]) -> TransactionRecord:
        return self._insert(TransactionRecord, fields)

    def update_transaction(self, transaction_id: int, patch: Dict[str, Any]) -> TransactionRecord:
        return self._update(TransactionRecord, "Transaction", transaction_id, patch)

    def delete_transaction(self, transaction_id: int) -> None:
        self._delete(TransactionRecord, "Transaction", transaction_id)

    # --- debts ---

    def get_debt(self, debt_id: int, for_update: bool = False) -> DebtRecord:
        return self._get(DebtRecord, "Debt", debt_id, for_update)

    def list_debts(self, owner_id: str) -> List[DebtRecord]:
        return (
            self.db.query(DebtRecord)
            .filter(DebtRecord.owner_id == owner_id)
            .order_by(DebtRecord.created_at.desc(), DebtRecord.id.desc())
            .all()
        )

    def insert_debt(self, fields: Dict[str, Any]) -> DebtRecord:
        return self._insert(DebtRecord, fields)

    def update_debt(self, debt_id: int, patch: Dict[str, Any], expected_version: Optional[int] = None) -> DebtRecord:
        return self._update(DebtRecord, "Debt", debt_id, patch, expected_version)

    def delete_debt(self, debt_id: int) -> None:
        self._delete(DebtRecord, "Debt", debt_id)

    # --- budgets ---

    def get_budget(self, budget_id: int, for_update: bool = False) -> BudgetRecord:
        return self._get(BudgetRecord, "Budget", budget_id, for_update)

    def list_budgets(
        self,
        owner_id: str,
        category_id: Optional[int] = None,
        active_only: bool = False,
        period: Optional[str] = None,
    ) -> List[BudgetRecord]:
        query = self.db.query(BudgetRecord).filter(BudgetRecord.owner_id == owner_id)
        if category_id is not None:
            query = query.filter(BudgetRecord.category_id == category_id)
        if active_only:
            query = query.filter(BudgetRecord.is_active == True)
        if period is not None:
            query = query.filter(BudgetRecord.period == period)
        return query.order_by(BudgetRecord.created_at.desc(), BudgetRecord.id.desc()).all()

    def insert_budget(self, fields: Dict[str, Any]) -> BudgetRecord:
        return self._insert(BudgetRecord, fields)

    def update_budget(self, budget_id: int, patch: Dict[str, Any], expected_version: Optional[int] = None) -> BudgetRecord:
        return self._update(BudgetRecord, "Budget", budget_id, patch, expected_version)

    def delete_budget(self, budget_id: int) -> None:
        self._delete(BudgetRecord, "Budget", budget_id)

    # --- savings goals ---

    def get_goal(self, goal_id: int, for_update: bool = False) -> SavingsGoalRecord:
        return self._get(SavingsGoalRecord, "Goal", goal_id, for_update)

    def list_goals(self, owner_id: str) -> List[SavingsGoalRecord]:
        return (
            self.db.query(SavingsGoalRecord)
            .filter(SavingsGoalRecord.owner_id == owner_id)
            .order_by(SavingsGoalRecord.created_at.desc(), SavingsGoalRecord.id.desc())
            .all()
        )

    def insert_goal(self, fields: Dict[str, Any]) -> SavingsGoalRecord:
        return self._insert(SavingsGoalRecord, fields)

    def update_goal(self, goal_id: int, patch: Dict[str, Any], expected_version: Optional[int] = None) -> SavingsGoalRecord:
        return self._update(SavingsGoalRecord, "Goal", goal_id, patch, expected_version)

    def delete_goal(self, goal_id: int) -> None:
        self._delete(SavingsGoalRecord, "Goal", goal_id)

    # --- categories ---

    def get_category(self, category_id: int) -> CategoryRecord:
        return self._get(CategoryRecord, "Category", category_id)

    def list_categories(self, owner_id: str, kind: Optional[str] = None) -> List[CategoryRecord]:
        query = self.db.query(CategoryRecord).filter(
            or_(
                CategoryRecord.owner_id == owner_id,
                CategoryRecord.owner_id.is_(None),
                CategoryRecord.is_default == True,
            )
        )
        if kind is not None:
            query = query.filter(CategoryRecord.kind == kind)
        return query.order_by(CategoryRecord.is_default.desc(), CategoryRecord.id.asc()).all()
