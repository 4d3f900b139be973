"""
Analytics: read-only series derived from a transaction window.

Every function here is pure. Inputs are a pre-fetched snapshot of
transactions (TransactionRecord or domain Transaction, anything with
kind / amount / occurred_at / category_id) and an explicit `now`, so the
same snapshot and the same now always give the same output.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from finledger.domain.category import DEFAULT_COLOR, Category, category_label
from finledger.domain.errors import ValidationError
from finledger.domain.goal import progress_pct
from finledger.domain.transaction import KIND_EXPENSE, KIND_INCOME, Transaction
from finledger.infrastructure.store.base import DateRange, RecordStore
from finledger.utils.clock import as_naive_utc
from finledger.utils.validation import to_decimal

_ZERO = Decimal("0")

# Short month names, January first; unknown languages fall back to "en"
_MONTH_LABELS = {
    "en": ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
    "fr": ("Jan", "Fév", "Mar", "Avr", "Mai", "Jun", "Jul", "Aoû", "Sep", "Oct", "Nov", "Déc"),
    "tn": (
        "جانفي", "فيفري", "مارس", "أفريل", "ماي", "جوان",
        "جويلية", "أوت", "سبتمبر", "أكتوبر", "نوفمبر", "ديسمبر",
    ),
}
# Monday first, matching datetime.weekday()
_WEEKDAY_LABELS = {
    "en": ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
    "fr": ("Lun", "Mar", "Mer", "Jeu", "Ven", "Sam", "Dim"),
    "tn": (
        "الإثنين", "الثلاثاء", "الأربعاء", "الخميس", "الجمعة", "السبت", "الأحد",
    ),
}

RECENT_TRANSACTIONS = 5
OVERVIEW_GOALS = 3


def _shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _trailing_months(now: datetime, months_back: int) -> List[Tuple[int, int]]:
    """(year, month) keys, oldest first, ending with the month of now."""
    return [_shift_month(now.year, now.month, -offset) for offset in range(months_back - 1, -1, -1)]


def _month_label(year: int, month: int, language: str = "en") -> str:
    names = _MONTH_LABELS.get(language, _MONTH_LABELS["en"])
    return f"{names[month - 1]} {year}"


def window_start(now: datetime, months_back: int) -> datetime:
    """First instant of the oldest month covered by a months_back series."""
    if months_back < 1:
        raise ValidationError(f"months_back must be >= 1, got {months_back}")
    year, month = _shift_month(now.year, now.month, -(months_back - 1))
    return datetime(year, month, 1)


def monthly_series(
    transactions: Iterable, months_back: int, now: datetime, language: str = "en"
) -> List[Dict[str, Any]]:
    """
    Income and expense per calendar month

    Args:
        transactions: Transaction window
        months_back: Number of trailing months, current month included
        now: Reference moment
        language: Language of the month labels

    Returns:
        Exactly months_back dicts in chronological order:
        {year, month, label, income, expense}; months without data are zero

    Raises:
        ValidationError: months_back < 1
    """
    if months_back < 1:
        raise ValidationError(f"months_back must be >= 1, got {months_back}")
    now = as_naive_utc(now)

    keys = _trailing_months(now, months_back)
    buckets: Dict[Tuple[int, int], Dict[str, Decimal]] = {
        key: {"income": _ZERO, "expense": _ZERO} for key in keys
    }
    for t in transactions:
        if t.kind not in (KIND_INCOME, KIND_EXPENSE):
            continue
        occurred_at = as_naive_utc(t.occurred_at)
        key = (occurred_at.year, occurred_at.month)
        bucket = buckets.get(key)
        if bucket is None:
            continue
        bucket[t.kind] += to_decimal(t.amount)

    return [
        {
            "year": year,
            "month": month,
            "label": _month_label(year, month, language),
            "income": buckets[(year, month)]["income"],
            "expense": buckets[(year, month)]["expense"],
        }
        for year, month in keys
    ]


def weekly_expense_series(transactions: Iterable, now: datetime, language: str = "en") -> List[Dict[str, Any]]:
    """
    Expenses of the trailing 7 days by day of week

    A transaction counts when 0 <= now - occurred_at < 7 days; older ones are
    dropped, not folded into earlier weeks.

    Returns:
        7 dicts {weekday, day, amount}, Monday (0) first
    """
    now = as_naive_utc(now)
    horizon = timedelta(days=7)
    slots = [_ZERO] * 7
    for t in transactions:
        if t.kind != KIND_EXPENSE:
            continue
        occurred_at = as_naive_utc(t.occurred_at)
        age = now - occurred_at
        if timedelta(0) <= age < horizon:
            slots[occurred_at.weekday()] += to_decimal(t.amount)

    days = _WEEKDAY_LABELS.get(language, _WEEKDAY_LABELS["en"])
    return [
        {"weekday": weekday, "day": days[weekday], "amount": amount}
        for weekday, amount in enumerate(slots)
    ]


def category_breakdown(
    transactions: Iterable,
    top_n: int,
    categories: Optional[Mapping[int, Category]] = None,
    language: str = "en",
) -> List[Dict[str, Any]]:
    """
    Top expense categories with their share of total spending

    Percentages are computed against the sum over all categories, not only
    the returned ones. Equal sums keep the order of first occurrence.
    Uncategorized expenses form their own group (category_id None).

    Args:
        transactions: Transaction window
        top_n: Number of entries to return
        categories: Optional id -> Category map, adds label and color
        language: Preferred label language

    Returns:
        List of {category_id, amount, percentage[, label, color]}, descending by amount
    """
    if top_n < 1:
        raise ValidationError(f"top_n must be >= 1, got {top_n}")

    totals: Dict[Optional[int], Decimal] = {}
    for t in transactions:
        if t.kind != KIND_EXPENSE:
            continue
        totals[t.category_id] = totals.get(t.category_id, _ZERO) + to_decimal(t.amount)

    grand_total = sum(totals.values(), _ZERO)
    # sorted() is stable and dicts keep insertion order
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)[:top_n]

    result = []
    for category_id, amount in ranked:
        entry: Dict[str, Any] = {
            "category_id": category_id,
            "amount": amount,
            "percentage": float(amount / grand_total * 100) if grand_total > 0 else 0.0,
        }
        if categories is not None:
            category = categories.get(category_id) if category_id is not None else None
            entry["label"] = category_label(category, language)
            entry["color"] = (category.color if category and category.color else DEFAULT_COLOR)
        result.append(entry)
    return result


def savings_series(monthly: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """income - expense per bucket of a monthly_series result."""
    return [
        {
            "year": b["year"],
            "month": b["month"],
            "label": b.get("label") or _month_label(b["year"], b["month"]),
            "savings": b["income"] - b["expense"],
        }
        for b in monthly
    ]


def running_totals(savings: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Cumulative savings across a savings_series result."""
    total = _ZERO
    result = []
    for b in savings:
        total += b["savings"]
        result.append({**b, "running_total": total})
    return result


def _recent_item(t, categories: Optional[Mapping[int, Category]], language: str) -> Dict[str, Any]:
    category = categories.get(t.category_id) if categories and t.category_id is not None else None
    description = t.description or ""
    if getattr(t, "descriptions", None):
        description = t.descriptions.get(language) or description
    return {
        "id": t.id,
        "kind": t.kind,
        "amount": to_decimal(t.amount),
        "currency": t.currency,
        "occurred_at": as_naive_utc(t.occurred_at),
        "category_id": t.category_id,
        "category": category_label(category, language),
        "description": description,
    }


def _goal_item(goal) -> Dict[str, Any]:
    return {
        "id": goal.id,
        "title": goal.title,
        "current_amount": to_decimal(goal.current_amount),
        "target_amount": to_decimal(goal.target_amount),
        "currency": goal.currency,
        "progress": progress_pct(goal.current_amount, goal.target_amount),
        "is_achieved": goal.is_achieved,
    }


def build_overview(
    transactions: List,
    goals: List,
    now: datetime,
    months_back: int = 6,
    top_n: int = 5,
    categories: Optional[Mapping[int, Category]] = None,
    language: str = "en",
) -> Dict[str, Any]:
    """
    Dashboard overview over a transaction window

    Returns:
        {
            "total_income", "total_expense", "net",
            "recent_transactions": 5 newest,
            "goals": first 3 goals with progress,
            "charts": {"monthly", "savings", "categories", "weekly"},
        }
    """
    now = as_naive_utc(now)
    total_income = sum((to_decimal(t.amount) for t in transactions if t.kind == KIND_INCOME), _ZERO)
    total_expense = sum((to_decimal(t.amount) for t in transactions if t.kind == KIND_EXPENSE), _ZERO)

    newest_first = sorted(transactions, key=lambda t: (as_naive_utc(t.occurred_at), t.id), reverse=True)
    recent = newest_first[:RECENT_TRANSACTIONS]
    monthly = monthly_series(transactions, months_back, now, language)

    return {
        "total_income": total_income,
        "total_expense": total_expense,
        "net": total_income - total_expense,
        "recent_transactions": [_recent_item(t, categories, language) for t in recent],
        "goals": [_goal_item(g) for g in goals[:OVERVIEW_GOALS]],
        "charts": {
            "monthly": monthly,
            "savings": savings_series(monthly),
            "categories": category_breakdown(transactions, top_n, categories, language),
            "weekly": weekly_expense_series(transactions, now, language),
        },
    }


def load_window(store: RecordStore, owner_id: str, months_back: int, now: datetime) -> List[Transaction]:
    """
    Snapshot of an owner's transactions from the start of the oldest month
    of a months_back series up to now (inclusive).
    """
    now = as_naive_utc(now)
    records = store.query_transactions(
        owner_id, date_range=DateRange(window_start(now, months_back), now + timedelta(microseconds=1)),
    )
    return [Transaction.from_record(r) for r in records]


def load_categories(store: RecordStore, owner_id: str) -> Dict[int, Category]:
    return {c.id: Category.from_record(c) for c in store.list_categories(owner_id)}
