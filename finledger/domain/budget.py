"""
Budget domain rules

Period windows, validation and threshold evaluation. spent_amount is never
computed here incrementally: it is always the full sum handed in by the
reconciler.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from finledger.domain.errors import ValidationError
from finledger.utils.validation import require_positive, to_decimal

PERIOD_WEEKLY = "weekly"
PERIOD_MONTHLY = "monthly"
PERIOD_YEARLY = "yearly"
PERIODS = (PERIOD_WEEKLY, PERIOD_MONTHLY, PERIOD_YEARLY)

_ZERO = Decimal("0")
_ONE = Decimal("1")


def period_window(period: str, today: date, week_starts_on: int = 0) -> Tuple[date, date]:
    """
    Return (start, end) - both inclusive - of the period containing today.

    weekly  -> the 7-day week containing today, starting on week_starts_on (0 = Monday)
    monthly -> calendar month
    yearly  -> calendar year
    """
    if period == PERIOD_WEEKLY:
        if not 0 <= week_starts_on <= 6:
            raise ValidationError(f"week_starts_on must be 0..6, got {week_starts_on}")
        offset = (today.weekday() - week_starts_on) % 7
        start = today - timedelta(days=offset)
        return start, start + timedelta(days=6)
    if period == PERIOD_MONTHLY:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    if period == PERIOD_YEARLY:
        return date(today.year, 1, 1), date(today.year, 12, 31)
    raise ValidationError(f"Unknown budget period: {period!r}")


def month_window(today: date) -> Tuple[datetime, datetime]:
    """Half-open [first day of month, first day of next month) as datetimes."""
    start = datetime(today.year, today.month, 1)
    if today.month == 12:
        return start, datetime(today.year + 1, 1, 1)
    return start, datetime(today.year, today.month + 1, 1)


def window_bounds(start_date: date, end_date: Optional[date]) -> Tuple[datetime, Optional[datetime]]:
    """
    Convert an inclusive date window to a half-open datetime range.

    end_date=None means the window is still open.
    """
    start = datetime.combine(start_date, time.min)
    if end_date is None:
        return start, None
    return start, datetime.combine(end_date + timedelta(days=1), time.min)


def window_contains(start_date: date, end_date: Optional[date], moment: datetime) -> bool:
    start, end = window_bounds(start_date, end_date)
    return moment >= start and (end is None or moment < end)


def validate_threshold(value) -> Decimal:
    threshold = to_decimal(value, "alert_threshold")
    if threshold <= 0 or threshold > _ONE:
        raise ValidationError(f"alert_threshold must be within (0, 1], got {threshold}")
    return threshold


@dataclass(frozen=True)
class BudgetStatus:
    """Outcome of one reconciliation pass"""
    budget_id: int
    spent_amount: Decimal
    allocated: Decimal
    exceeded: bool
    threshold_reached: bool
    usage_pct: float


def evaluate(budget_id: int, spent: Decimal, allocated: Decimal, alert_threshold: Decimal) -> BudgetStatus:
    """
    exceeded:          spent > allocated
    threshold_reached: spent >= allocated * alert_threshold
    """
    allocated = to_decimal(allocated)
    threshold = to_decimal(alert_threshold)
    return BudgetStatus(
        budget_id=budget_id,
        spent_amount=spent,
        allocated=allocated,
        exceeded=spent > allocated,
        threshold_reached=allocated > 0 and spent >= allocated * threshold,
        usage_pct=float(spent / allocated * 100) if allocated else 0.0,
    )


class Budget:

    @staticmethod
    def create(
        owner_id: str,
        category_id: int,
        amount,
        period: str,
        today: date,
        alert_threshold,
        name: str = "",
        currency: str = "TND",
        week_starts_on: int = 0,
    ) -> Dict[str, Any]:
        """
        Validate and build a new active budget for the period containing today.
        """
        if category_id is None:
            raise ValidationError("category_id is required")
        allocated = require_positive(amount)
        start, end = period_window(period, today, week_starts_on)

        return {
            "owner_id": owner_id,
            "category_id": category_id,
            "name": name.strip(),
            "amount": allocated,
            "currency": currency,
            "period": period,
            "start_date": start,
            "end_date": end,
            "spent_amount": _ZERO,
            "alert_threshold": validate_threshold(alert_threshold),
            "is_active": True,
        }

    @staticmethod
    def update(
        name: str | None = None,
        amount=None,
        alert_threshold=None,
        is_active: bool | None = None,
    ) -> Dict[str, Any]:
        """
        Build a patch of user-editable fields. spent_amount is not editable;
        it only changes through reconciliation.
        """
        patch: Dict[str, Any] = {}
        if name is not None:
            patch["name"] = name.strip()
        if amount is not None:
            patch["amount"] = require_positive(amount)
        if alert_threshold is not None:
            patch["alert_threshold"] = validate_threshold(alert_threshold)
        if is_active is not None:
            patch["is_active"] = bool(is_active)
        return patch
