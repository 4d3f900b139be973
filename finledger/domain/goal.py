"""
Savings goal domain rules - clamped contributions and one-shot achievement
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict

from finledger.domain.debt import PRIORITIES, PRIORITY_MEDIUM
from finledger.domain.errors import ValidationError
from finledger.utils.validation import require_positive, to_decimal, to_money

_ZERO = Decimal("0")


def progress_pct(current: Decimal, target: Decimal) -> float:
    """Share of the target already saved, 0..100."""
    target = to_decimal(target)
    if target <= 0:
        return 0.0
    return min(100.0, float(to_decimal(current) / target * 100))


class Goal:

    @staticmethod
    def create(
        owner_id: str,
        title: str,
        target_amount,
        now: datetime,
        current_amount="0",
        currency: str = "TND",
        target_date: date | None = None,
        priority: str = PRIORITY_MEDIUM,
    ) -> Dict[str, Any]:
        """
        Validate and build a new goal. A goal created already at its target is achieved.
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Goal title cannot be empty")
        target = require_positive(target_amount, "target_amount")
        current = to_money(current_amount, "current_amount")
        if current < 0 or current > target:
            raise ValidationError(f"current_amount must be within [0, {target}], got {current}")
        if priority not in PRIORITIES:
            raise ValidationError(f"Unknown priority: {priority!r}")

        achieved = current >= target
        return {
            "owner_id": owner_id,
            "title": title,
            "target_amount": target,
            "current_amount": current,
            "currency": currency,
            "target_date": target_date,
            "priority": priority,
            "is_achieved": achieved,
            "achievement_date": now if achieved else None,
        }

    @staticmethod
    def contribution(goal, amount, now: datetime) -> Dict[str, Any]:
        """
        Add money to a goal.

        Contributions past the target are clamped, not rejected. Achievement is
        recorded the first time current reaches target and never again.

        Raises:
            InvalidAmount: amount <= 0 or finer than one cent
        """
        added = require_positive(amount)
        target = to_decimal(goal.target_amount)
        new_current = min(to_decimal(goal.current_amount) + added, target)

        patch: Dict[str, Any] = {"current_amount": new_current}
        if new_current >= target and not goal.is_achieved:
            patch["is_achieved"] = True
            patch["achievement_date"] = now
        return patch

    @staticmethod
    def update(
        goal,
        now: datetime,
        title: str | None = None,
        target_amount=None,
        target_date: date | None = None,
        priority: str | None = None,
    ) -> Dict[str, Any]:
        """
        Edit descriptive fields. current_amount is not editable here.

        Raises:
            ValidationError: empty title, unknown priority, target below current amount
        """
        patch: Dict[str, Any] = {}
        if title is not None:
            title = title.strip()
            if not title:
                raise ValidationError("Goal title cannot be empty")
            patch["title"] = title
        if target_amount is not None:
            target = require_positive(target_amount, "target_amount")
            if target < to_decimal(goal.current_amount):
                raise ValidationError(
                    f"target_amount {target} is below the saved amount {goal.current_amount}"
                )
            patch["target_amount"] = target
            if target == to_decimal(goal.current_amount) and not goal.is_achieved:
                patch["is_achieved"] = True
                patch["achievement_date"] = now
        if target_date is not None:
            patch["target_date"] = target_date
        if priority is not None:
            if priority not in PRIORITIES:
                raise ValidationError(f"Unknown priority: {priority!r}")
            patch["priority"] = priority
        return patch
