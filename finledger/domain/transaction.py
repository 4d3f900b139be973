"""
Transaction domain entity - the only input to every derived value
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from finledger.domain.errors import ValidationError
from finledger.utils.clock import as_naive_utc
from finledger.utils.validation import require_positive

KIND_INCOME = "income"
KIND_EXPENSE = "expense"
KIND_TRANSFER = "transfer"
KINDS = (KIND_INCOME, KIND_EXPENSE, KIND_TRANSFER)


@dataclass(frozen=True)
class Transaction:
    """
    Immutable snapshot of a ledger entry, used by the aggregation functions.

    Any object exposing the same attributes (e.g. TransactionRecord) works too.
    """
    id: int
    owner_id: str
    kind: str
    amount: Decimal
    occurred_at: datetime
    category_id: Optional[int] = None
    currency: str = "TND"
    description: str = ""
    descriptions: Optional[Dict[str, str]] = field(default=None, compare=False)

    @classmethod
    def from_record(cls, record) -> "Transaction":
        return cls(
            id=record.id,
            owner_id=record.owner_id,
            kind=record.kind,
            amount=Decimal(record.amount),
            occurred_at=record.occurred_at,
            category_id=record.category_id,
            currency=record.currency,
            description=record.description or "",
            descriptions=dict(record.descriptions) if record.descriptions else None,
        )

    @staticmethod
    def create(
        owner_id: str,
        kind: str,
        amount,
        occurred_at: datetime,
        category_id: int | None = None,
        currency: str = "TND",
        description: str = "",
        descriptions: Dict[str, str] | None = None,
    ) -> Dict[str, Any]:
        """
        Validate and build the fields of a new ledger entry

        Raises:
            InvalidAmount: amount <= 0
            ValidationError: unknown kind, missing owner
        """
        if not owner_id:
            raise ValidationError("owner_id is required")
        if kind not in KINDS:
            raise ValidationError(f"Unknown transaction kind: {kind!r}")
        return {
            "owner_id": owner_id,
            "kind": kind,
            "amount": require_positive(amount),
            "occurred_at": as_naive_utc(occurred_at),
            "category_id": category_id,
            "currency": currency,
            "description": description.strip(),
            "descriptions": descriptions,
        }

    @staticmethod
    def update(
        amount=None,
        category_id: int | None = ...,
        occurred_at: datetime | None = None,
        description: str | None = None,
    ) -> Dict[str, Any]:
        """
        Build a correction patch. kind is immutable and cannot be part of it.

        category_id uses ... as "not provided" so that None can clear the category.
        """
        patch: Dict[str, Any] = {}
        if amount is not None:
            patch["amount"] = require_positive(amount)
        if category_id is not ...:
            patch["category_id"] = category_id
        if occurred_at is not None:
            patch["occurred_at"] = as_naive_utc(occurred_at)
        if description is not None:
            patch["description"] = description.strip()
        return patch
