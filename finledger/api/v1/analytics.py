"""
Analytics API endpoints (read-only)
"""
from fastapi import APIRouter, Depends, Query

from finledger.api.deps import get_owner_id, get_store
from finledger.application.analytics import (
    build_overview,
    category_breakdown,
    load_categories,
    load_window,
    monthly_series,
    running_totals,
    savings_series,
    weekly_expense_series,
)
from finledger.config import get_settings
from finledger.infrastructure.store.sql import SqlRecordStore
from finledger.utils.clock import utcnow


router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


@router.get("/overview")
def overview(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
    language: str = "en",
):
    """Dashboard: totals, recent transactions, goals and chart series"""
    settings = get_settings()
    now = utcnow()
    transactions = load_window(store, owner_id, settings.TREND_MONTHS, now)
    return build_overview(
        transactions,
        store.list_goals(owner_id),
        now,
        months_back=settings.TREND_MONTHS,
        top_n=settings.DASHBOARD_TOP_CATEGORIES,
        categories=load_categories(store, owner_id),
        language=language,
    )


@router.get("/monthly")
def monthly(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
    months: int | None = Query(default=None, ge=1, le=120),
    language: str = "en",
):
    """Income / expense / savings / running total per month"""
    months = months or get_settings().TREND_MONTHS
    now = utcnow()
    series = monthly_series(load_window(store, owner_id, months, now), months, now, language)
    return {
        "monthly": series,
        "savings": running_totals(savings_series(series)),
    }


@router.get("/weekly")
def weekly(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
    language: str = "en",
):
    """Expenses of the last 7 days by day of week"""
    now = utcnow()
    # two calendar months always cover the trailing 7 days
    return weekly_expense_series(load_window(store, owner_id, 2, now), now, language)


@router.get("/categories")
def categories(
    owner_id: str = Depends(get_owner_id),
    store: SqlRecordStore = Depends(get_store),
    months: int | None = Query(default=None, ge=1, le=120),
    top: int | None = Query(default=None, ge=1, le=50),
    language: str = "en",
):
    """Top expense categories with their share of all spending"""
    settings = get_settings()
    months = months or settings.TREND_MONTHS
    transactions = load_window(store, owner_id, months, utcnow())
    return category_breakdown(
        transactions,
        top or settings.ANALYTICS_TOP_CATEGORIES,
        categories=load_categories(store, owner_id),
        language=language,
    )
