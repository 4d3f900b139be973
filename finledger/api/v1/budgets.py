"""
Budget API endpoints
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from finledger.api.deps import get_owner_id, get_store
from finledger.application.budgets import (
    CreateBudgetUseCase,
    DeleteBudgetUseCase,
    ReconcileAllBudgetsUseCase,
    ReconcileBudgetUseCase,
    UpdateBudgetUseCase,
    budget_status,
    get_total_monthly_spend,
)
from finledger.application.ownership import ensure_owned
from finledger.domain.budget import BudgetStatus
from finledger.infrastructure.store.retry import retry_on_conflict
from finledger.infrastructure.store.sql import SqlRecordStore
from finledger.utils.validation import validate_and_normalize_amount


router = APIRouter(prefix="/api/v1/budgets", tags=["budgets"])


# === Request/Response models ===

class CreateBudgetRequest(BaseModel):
    category_id: int
    amount: str
    period: str = "monthly"  # weekly, monthly, yearly
    name: str = ""
    alert_threshold: float | None = None  # fraction, e.g. 0.8
    currency: str = "TND"

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        return validate_and_normalize_amount(v, max_decimal_places=2)


class UpdateBudgetRequest(BaseModel):
    name: str | None = None
    amount: str | None = None
    alert_threshold: float | None = None
    is_active: bool | None = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str | None) -> str | None:
        return None if v is None else validate_and_normalize_amount(v, max_decimal_places=2)


class BudgetResponse(BaseModel):
    id: int
    category_id: int
    name: str
    amount: str  # Decimal as string
    spent_amount: str
    currency: str
    period: str
    start_date: date
    end_date: date | None
    alert_threshold: float
    is_active: bool
    exceeded: bool
    threshold_reached: bool
    usage_pct: float
    reconciled_at: datetime | None
    version: int


class BudgetStatusResponse(BaseModel):
    budget_id: int
    spent_amount: str
    allocated: str
    exceeded: bool
    threshold_reached: bool
    usage_pct: float


class MonthlySpendResponse(BaseModel):
    total: str


def _to_response(budget) -> BudgetResponse:
    status = budget_status(budget)
    return BudgetResponse(
        id=budget.id,
        category_id=budget.category_id,
        name=budget.name,
        amount=str(budget.amount),
        spent_amount=str(budget.spent_amount),
        currency=budget.currency,
        period=budget.period,
        start_date=budget.start_date,
        end_date=budget.end_date,
        alert_threshold=float(budget.alert_threshold),
        is_active=budget.is_active,
        exceeded=status.exceeded,
        threshold_reached=status.threshold_reached,
        usage_pct=status.usage_pct,
        reconciled_at=budget.reconciled_at,
        version=budget.version,
    )


def _status_response(status: BudgetStatus) -> BudgetStatusResponse:
    return BudgetStatusResponse(
        budget_id=status.budget_id,
        spent_amount=str(status.spent_amount),
        allocated=str(status.allocated),
        exceeded=status.exceeded,
        threshold_reached=status.threshold_reached,
        usage_pct=status.usage_pct,
    )


# === Endpoints ===

@router.post("/", response_model=BudgetResponse, status_code=201)
def create_budget(
    req: CreateBudgetRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Create a budget for the current week / month / year"""
    budget = retry_on_conflict(
        store, lambda: CreateBudgetUseCase(store).execute(owner_id=owner_id, **req.model_dump())
    )
    return _to_response(budget)


@router.get("/", response_model=list[BudgetResponse])
def list_budgets(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
    active_only: bool = False,
    period: str | None = None,
):
    return [_to_response(b) for b in store.list_budgets(owner_id, active_only=active_only, period=period)]


@router.get("/monthly-spend", response_model=MonthlySpendResponse)
def monthly_spend(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """All expenses of the current calendar month, across budgets"""
    return MonthlySpendResponse(total=str(get_total_monthly_spend(store, owner_id)))


@router.post("/reconcile", response_model=list[BudgetStatusResponse])
def reconcile_all(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
    period: str | None = None,
):
    statuses = retry_on_conflict(store, lambda: ReconcileAllBudgetsUseCase(store).execute(owner_id, period))
    return [_status_response(s) for s in statuses]


@router.get("/{budget_id}", response_model=BudgetResponse)
def get_budget(
    budget_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    return _to_response(ensure_owned(store.get_budget(budget_id), owner_id, "Budget"))


@router.patch("/{budget_id}", response_model=BudgetResponse)
def update_budget(
    budget_id: int,
    req: UpdateBudgetRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    budget = retry_on_conflict(
        store, lambda: UpdateBudgetUseCase(store).execute(owner_id, budget_id, **req.model_dump())
    )
    return _to_response(budget)


@router.post("/{budget_id}/reconcile", response_model=BudgetStatusResponse)
def reconcile_budget(
    budget_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Rebuild spent_amount from the transaction log"""
    status = retry_on_conflict(store, lambda: ReconcileBudgetUseCase(store).execute(owner_id, budget_id))
    return _status_response(status)


@router.delete("/{budget_id}", status_code=204)
def delete_budget(
    budget_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    DeleteBudgetUseCase(store).execute(owner_id, budget_id)
