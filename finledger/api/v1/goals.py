"""
Savings goal API endpoints
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, field_validator

from finledger.api.deps import get_owner_id, get_store
from finledger.application.goals import (
    ContributeToGoalUseCase,
    CreateGoalUseCase,
    DeleteGoalUseCase,
    UpdateGoalUseCase,
)
from finledger.application.ownership import ensure_owned
from finledger.domain.goal import progress_pct
from finledger.infrastructure.store.retry import retry_on_conflict
from finledger.infrastructure.store.sql import SqlRecordStore
from finledger.utils.validation import validate_and_normalize_amount


router = APIRouter(prefix="/api/v1/goals", tags=["goals"])


# === Request/Response models ===

class CreateGoalRequest(BaseModel):
    title: str
    target_amount: str
    current_amount: str = "0"
    currency: str = "TND"
    target_date: date | None = None
    priority: str = "medium"

    @field_validator("target_amount", "current_amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        return validate_and_normalize_amount(v, max_decimal_places=2)


class ContributionRequest(BaseModel):
    amount: str

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        return validate_and_normalize_amount(v, max_decimal_places=2)


class UpdateGoalRequest(BaseModel):
    title: str | None = None
    target_amount: str | None = None
    target_date: date | None = None
    priority: str | None = None

    @field_validator("target_amount")
    @classmethod
    def validate_amount(cls, v: str | None) -> str | None:
        return None if v is None else validate_and_normalize_amount(v, max_decimal_places=2)


class GoalResponse(BaseModel):
    id: int
    title: str
    target_amount: str  # Decimal as string
    current_amount: str
    currency: str
    target_date: date | None
    priority: str
    progress: float
    is_achieved: bool
    achievement_date: datetime | None
    version: int


def _to_response(goal) -> GoalResponse:
    return GoalResponse(
        id=goal.id,
        title=goal.title,
        target_amount=str(goal.target_amount),
        current_amount=str(goal.current_amount),
        currency=goal.currency,
        target_date=goal.target_date,
        priority=goal.priority,
        progress=progress_pct(goal.current_amount, goal.target_amount),
        is_achieved=goal.is_achieved,
        achievement_date=goal.achievement_date,
        version=goal.version,
    )


# === Endpoints ===

@router.post("/", response_model=GoalResponse, status_code=201)
def create_goal(
    req: CreateGoalRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    goal = CreateGoalUseCase(store).execute(owner_id=owner_id, **req.model_dump())
    return _to_response(goal)


@router.get("/", response_model=list[GoalResponse])
def list_goals(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    return [_to_response(g) for g in store.list_goals(owner_id)]


@router.get("/{goal_id}", response_model=GoalResponse)
def get_goal(
    goal_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    return _to_response(ensure_owned(store.get_goal(goal_id), owner_id, "Goal"))


@router.post("/{goal_id}/contributions", response_model=GoalResponse)
def contribute(
    goal_id: int,
    req: ContributionRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    """Add money to a goal; amounts past the target are clamped"""
    goal = retry_on_conflict(
        store, lambda: ContributeToGoalUseCase(store).execute(owner_id, goal_id, req.amount)
    )
    return _to_response(goal)


@router.patch("/{goal_id}", response_model=GoalResponse)
def update_goal(
    goal_id: int,
    req: UpdateGoalRequest,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    goal = retry_on_conflict(
        store, lambda: UpdateGoalUseCase(store).execute(owner_id, goal_id, **req.model_dump())
    )
    return _to_response(goal)


@router.delete("/{goal_id}", status_code=204)
def delete_goal(
    goal_id: int,
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
):
    DeleteGoalUseCase(store).execute(owner_id, goal_id)
