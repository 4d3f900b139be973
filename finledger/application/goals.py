"""
Savings goal use cases
"""
import logging
from datetime import date, datetime

from finledger.application.ownership import ensure_owned
from finledger.domain.debt import PRIORITY_MEDIUM
from finledger.domain.goal import Goal
from finledger.infrastructure.store.base import RecordStore
from finledger.utils.clock import as_naive_utc, utcnow

logger = logging.getLogger(__name__)


class CreateGoalUseCase:
    """Use case: create a savings goal"""

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(
        self,
        owner_id: str,
        title: str,
        target_amount,
        current_amount="0",
        currency: str = "TND",
        target_date: date | None = None,
        priority: str = PRIORITY_MEDIUM,
        now: datetime | None = None,
    ):
        fields = Goal.create(
            owner_id=owner_id,
            title=title,
            target_amount=target_amount,
            now=as_naive_utc(now) if now else utcnow(),
            current_amount=current_amount,
            currency=currency,
            target_date=target_date,
            priority=priority,
        )
        goal = self.store.insert_goal(fields)
        self.store.commit()
        logger.info("Goal #%d created for owner %s: target %s %s", goal.id, owner_id, goal.target_amount, goal.currency)
        return goal


class ContributeToGoalUseCase:
    """Use case: add money to a goal (clamped at the target)"""

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(self, owner_id: str, goal_id: int, amount, now: datetime | None = None):
        """
        Raises:
            InvalidAmount: amount <= 0
            NotFoundError: no such goal for this owner
            ConflictError: goal changed since it was read
        """
        goal = ensure_owned(self.store.get_goal(goal_id, for_update=True), owner_id, "Goal")
        patch = Goal.contribution(goal, amount, as_naive_utc(now) if now else utcnow())

        updated = self.store.update_goal(goal_id, patch, expected_version=goal.version)
        self.store.commit()

        if patch.get("is_achieved"):
            logger.info("Goal #%d achieved (%s %s)", goal_id, updated.current_amount, updated.currency)
        else:
            logger.info("Goal #%d contribution %s, now %s of %s",
                        goal_id, amount, updated.current_amount, updated.target_amount)
        return updated


class UpdateGoalUseCase:
    """Use case: edit title / target / target date / priority"""

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(
        self,
        owner_id: str,
        goal_id: int,
        title: str | None = None,
        target_amount=None,
        target_date: date | None = None,
        priority: str | None = None,
        now: datetime | None = None,
    ):
        goal = ensure_owned(self.store.get_goal(goal_id), owner_id, "Goal")
        patch = Goal.update(
            goal,
            now=as_naive_utc(now) if now else utcnow(),
            title=title,
            target_amount=target_amount,
            target_date=target_date,
            priority=priority,
        )
        if not patch:
            return goal

        updated = self.store.update_goal(goal_id, patch, expected_version=goal.version)
        self.store.commit()
        return updated


class DeleteGoalUseCase:

    def __init__(self, store: RecordStore):
        self.store = store

    def execute(self, owner_id: str, goal_id: int) -> None:
        ensure_owned(self.store.get_goal(goal_id), owner_id, "Goal")
        self.store.delete_goal(goal_id)
        self.store.commit()
