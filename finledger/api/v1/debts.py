"""
Debt API endpoints
"""
from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from finledger.api.deps import get_owner_id, get_store
from finledger.application.debts import (
    ApplyDebtPaymentUseCase,
    CancelDebtUseCase,
    CorrectDebtBalanceUseCase,
    CreateDebtUseCase,
    DeleteDebtUseCase,
    QuickCreateDebtUseCase,
    SettleDebtUseCase,
    get_debt_summary,
    list_overdue_debts,
)
from finledger.application.ownership import ensure_owned
from finledger.infrastructure.store.retry import retry_on_conflict
from finledger.infrastructure.store.sql import SqlRecordStore
from finledger.utils.validation import validate_and_normalize_amount


router = APIRouter(prefix="/api/v1/debts", tags=["debts"])


# === Request/Response models ===

class CreateDebtRequest(BaseModel):
    creditor_name: str
    debt_type: str  # owed_to_me, i_owe, loan, credit_card
    original_amount: str
    currency: str = "TND"
    debtor_name: str | None = None
    due_date: date | None = None
    debt_date: date | None = None
    priority: str | None = None
    minimum_payment: str | None = None
    interest_rate: str = "0"
    payment_frequency: str | None = None
    category_id: int | None = None
    description: str = ""

    @field_validator("original_amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        return validate_and_normalize_amount(v, max_decimal_places=2)

    @field_validator("minimum_payment")
    @classmethod
    def validate_minimum_payment(cls, v: str | None) -> str | None:
        return None if v is None else validate_and_normalize_amount(v, max_decimal_places=2)


class QuickDebtRequest(BaseModel):
    description: str
    direction: str  # given (I lent) or received (I borrowed)
    amount: str
    owner_name: str | None = None
    due_date: date | None = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        return validate_and_normalize_amount(v, max_decimal_places=2)


class AmountRequest(BaseModel):
    amount: str

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        return validate_and_normalize_amount(v, max_decimal_places=2)


class CorrectBalanceRequest(BaseModel):
    remaining_amount: str

    @field_validator("remaining_amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        return validate_and_normalize_amount(v, max_decimal_places=2)


class DebtResponse(BaseModel):
    id: int
    creditor_name: str
    debtor_name: str | None
    debt_type: str
    original_amount: str  # Decimal as string
    remaining_amount: str
    currency: str
    minimum_payment: str | None
    priority: str
    status: str
    is_settled: bool
    due_date: date | None
    settlement_date: date | None
    version: int


class DebtSummaryResponse(BaseModel):
    total_owed_to_me: str
    total_i_owe: str
    net_position: str
    total_debts: int
    overdue_debts: int
    settled_debts: int


def _to_response(debt) -> DebtResponse:
    return DebtResponse(
        id=debt.id,
        creditor_name=debt.creditor_name,
        debtor_name=debt.debtor_name,
        debt_type=debt.debt_type,
        original_amount=str(debt.original_amount),
        remaining_amount=str(debt.remaining_amount),
        currency=debt.currency,
        minimum_payment=None if debt.minimum_payment is None else str(debt.minimum_payment),
        priority=debt.priority,
        status=debt.status,
        is_settled=debt.is_settled,
        due_date=debt.due_date,
        settlement_date=debt.settlement_date,
        version=debt.version,
    )


# === Endpoints ===

@router.post("/", response_model=DebtResponse, status_code=201)
def create_debt(
    req: CreateDebtRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Register a new debt"""
    debt = CreateDebtUseCase(store).execute(owner_id=owner_id, **req.model_dump())
    return _to_response(debt)


@router.post("/quick", response_model=DebtResponse, status_code=201)
def quick_create_debt(
    req: QuickDebtRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Register a debt from a short note; the first word names the other party"""
    debt = QuickCreateDebtUseCase(store).execute(owner_id=owner_id, **req.model_dump())
    return _to_response(debt)


@router.get("/", response_model=list[DebtResponse])
def list_debts(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    return [_to_response(d) for d in store.list_debts(owner_id)]


@router.get("/summary", response_model=DebtSummaryResponse)
def debt_summary(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Owed to me / I owe / net position and counters"""
    summary = get_debt_summary(store, owner_id)
    return DebtSummaryResponse(
        total_owed_to_me=str(summary.total_owed_to_me),
        total_i_owe=str(summary.total_i_owe),
        net_position=str(summary.net_position),
        total_debts=summary.total_debts,
        overdue_debts=summary.overdue_debts,
        settled_debts=summary.settled_debts,
    )


@router.get("/overdue", response_model=list[DebtResponse])
def overdue_debts(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    return [_to_response(d) for d in list_overdue_debts(store, owner_id)]


@router.get("/{debt_id}", response_model=DebtResponse)
def get_debt(
    debt_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    return _to_response(ensure_owned(store.get_debt(debt_id), owner_id, "Debt"))


@router.post("/{debt_id}/payments", response_model=DebtResponse)
def pay_debt(
    debt_id: int,
    req: AmountRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Apply a payment; 409 when it exceeds the remaining balance"""
    debt = retry_on_conflict(
        store, lambda: ApplyDebtPaymentUseCase(store).execute(owner_id, debt_id, req.amount)
    )
    return _to_response(debt)


@router.post("/{debt_id}/settle", response_model=DebtResponse)
def settle_debt(
    debt_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Write off the remaining balance"""
    debt = retry_on_conflict(store, lambda: SettleDebtUseCase(store).execute(owner_id, debt_id))
    return _to_response(debt)


@router.post("/{debt_id}/cancel", response_model=DebtResponse)
def cancel_debt(
    debt_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    debt = retry_on_conflict(store, lambda: CancelDebtUseCase(store).execute(owner_id, debt_id))
    return _to_response(debt)


@router.post("/{debt_id}/balance", response_model=DebtResponse)
def correct_balance(
    debt_id: int,
    req: CorrectBalanceRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Administrative correction of the remaining balance"""
    debt = retry_on_conflict(
        store, lambda: CorrectDebtBalanceUseCase(store).execute(owner_id, debt_id, req.remaining_amount)
    )
    return _to_response(debt)


@router.delete("/{debt_id}", status_code=204)
def delete_debt(
    debt_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    DeleteDebtUseCase(store).execute(owner_id, debt_id)
