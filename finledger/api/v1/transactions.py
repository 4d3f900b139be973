"""
Transaction API endpoints
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from finledger.api.deps import get_owner_id, get_store
from finledger.api.v1.budgets import BudgetStatusResponse, _status_response
from finledger.application.ownership import ensure_owned
from finledger.application.transactions import (
    CorrectTransactionUseCase,
    DeleteTransactionUseCase,
    RecordTransactionUseCase,
)
from finledger.infrastructure.store.base import DateRange
from finledger.infrastructure.store.retry import retry_on_conflict
from finledger.infrastructure.store.sql import SqlRecordStore
from finledger.utils.validation import validate_and_normalize_amount


router = APIRouter(prefix="/api/v1/transactions", tags=["transactions"])


# === Request/Response models ===

class RecordTransactionRequest(BaseModel):
    kind: str  # income, expense, transfer
    amount: str
    occurred_at: datetime | None = None
    category_id: int | None = None
    currency: str = "TND"
    description: str = ""
    descriptions: dict[str, str] | None = None  # language -> text

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        return validate_and_normalize_amount(v, max_decimal_places=2)


class CorrectTransactionRequest(BaseModel):
    amount: str | None = None
    category_id: int | None = None
    occurred_at: datetime | None = None
    description: str | None = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str | None) -> str | None:
        return None if v is None else validate_and_normalize_amount(v, max_decimal_places=2)


class TransactionResponse(BaseModel):
    id: int
    kind: str
    amount: str  # Decimal as string
    currency: str
    category_id: int | None
    occurred_at: datetime
    description: str
    descriptions: dict[str, str] | None = None


class TransactionWriteResponse(BaseModel):
    transaction: TransactionResponse
    budgets: list[BudgetStatusResponse]


def _to_response(t) -> TransactionResponse:
    return TransactionResponse(
        id=t.id,
        kind=t.kind,
        amount=str(t.amount),
        currency=t.currency,
        category_id=t.category_id,
        occurred_at=t.occurred_at,
        description=t.description or "",
        descriptions=t.descriptions,
    )


# === Endpoints ===

@router.post("/", response_model=TransactionWriteResponse, status_code=201)
def record_transaction(
    req: RecordTransactionRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Record a transaction; expenses reconcile the budgets they fall in"""
    record, statuses = retry_on_conflict(
        store, lambda: RecordTransactionUseCase(store).execute(owner_id=owner_id, **req.model_dump())
    )
    return TransactionWriteResponse(
        transaction=_to_response(record),
        budgets=[_status_response(s) for s in statuses],
    )


@router.get("/", response_model=list[TransactionResponse])
def list_transactions(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
    category_id: int | None = None,
    kind: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
):
    """Filter by category, kind and [date_from, date_to)"""
    records = store.query_transactions(
        owner_id,
        category_id=category_id,
        kind=kind,
        date_range=DateRange(date_from, date_to),
    )
    return [_to_response(t) for t in records]


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    return _to_response(ensure_owned(store.get_transaction(transaction_id), owner_id, "Transaction"))


@router.patch("/{transaction_id}", response_model=TransactionWriteResponse)
def correct_transaction(
    transaction_id: int,
    req: CorrectTransactionRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Correct a transaction; kind cannot be changed"""
    fields = req.model_dump(exclude_unset=True)
    record, statuses = retry_on_conflict(
        store, lambda: CorrectTransactionUseCase(store).execute(owner_id, transaction_id, **fields)
    )
    return TransactionWriteResponse(
        transaction=_to_response(record),
        budgets=[_status_response(s) for s in statuses],
    )


@router.delete("/{transaction_id}", response_model=list[BudgetStatusResponse])
def delete_transaction(
    transaction_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    statuses = retry_on_conflict(
        store, lambda: DeleteTransactionUseCase(store).execute(owner_id, transaction_id)
    )
    return [_status_response(s) for s in statuses]
