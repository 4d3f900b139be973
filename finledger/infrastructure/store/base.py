"""
Abstract record store

The ledger core only talks to persistence through this interface: equality
and range filters over transactions, get/insert/update/delete for the
mutable records. Implementations must make update_* linearizable per record:
update_debt / update_budget / update_goal accept expected_version and raise
ConflictError when the stored version differs.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class DateRange:
    """Half-open [start, end); None on either side means unbounded"""
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class RecordStore(ABC):
    """
    Narrow persistence interface consumed by the use cases.

    Records returned are opaque objects exposing the fields of the
    corresponding ORM model (see infrastructure.db.models).
    """

    # --- unit of work ---

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass

    # --- transactions ---

    @abstractmethod
    def query_transactions(
        self,
        owner_id: str,
        category_id: Optional[int] = None,
        kind: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> List[Any]:
        """
        Transactions of an owner, ordered by occurred_at then id.

        Args:
            owner_id: Opaque owner identity
            category_id: Equality filter (optional)
            kind: income / expense / transfer (optional)
            date_range: occurred_at within [start, end) (optional)
        """
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Any:
        """Raises NotFoundError."""
        pass

    @abstractmethod
    def insert_transaction(self, fields: Dict[str, Any]) -> Any:
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, patch: Dict[str, Any]) -> Any:
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        pass

    # --- debts ---

    @abstractmethod
    def get_debt(self, debt_id: int, for_update: bool = False) -> Any:
        """
        Args:
            for_update: lock the row until commit where the backend supports it

        Raises:
            NotFoundError: no such debt
        """
        pass

    @abstractmethod
    def list_debts(self, owner_id: str) -> List[Any]:
        pass

    @abstractmethod
    def insert_debt(self, fields: Dict[str, Any]) -> Any:
        pass

    @abstractmethod
    def update_debt(self, debt_id: int, patch: Dict[str, Any], expected_version: Optional[int] = None) -> Any:
        """
        Raises:
            NotFoundError: no such debt
            ConflictError: stored version != expected_version
        """
        pass

    @abstractmethod
    def delete_debt(self, debt_id: int) -> None:
        pass

    # --- budgets ---

    @abstractmethod
    def get_budget(self, budget_id: int, for_update: bool = False) -> Any:
        pass

    @abstractmethod
    def list_budgets(
        self,
        owner_id: str,
        category_id: Optional[int] = None,
        active_only: bool = False,
        period: Optional[str] = None,
    ) -> List[Any]:
        pass

    @abstractmethod
    def insert_budget(self, fields: Dict[str, Any]) -> Any:
        pass

    @abstractmethod
    def update_budget(self, budget_id: int, patch: Dict[str, Any], expected_version: Optional[int] = None) -> Any:
        pass

    @abstractmethod
    def delete_budget(self, budget_id: int) -> None:
        pass

    # --- savings goals ---

    @abstractmethod
    def get_goal(self, goal_id: int, for_update: bool = False) -> Any:
        pass

    @abstractmethod
    def list_goals(self, owner_id: str) -> List[Any]:
        pass

    @abstractmethod
    def insert_goal(self, fields: Dict[str, Any]) -> Any:
        pass

    @abstractmethod
    def update_goal(self, goal_id: int, patch: Dict[str, Any], expected_version: Optional[int] = None) -> Any:
        pass

    @abstractmethod
    def delete_goal(self, goal_id: int) -> None:
        pass

    # --- categories (read-only here) ---

    @abstractmethod
    def get_category(self, category_id: int) -> Any:
        pass

    @abstractmethod
    def list_categories(self, owner_id: str, kind: Optional[str] = None) -> List[Any]:
        """Owner categories plus shared defaults."""
        pass
