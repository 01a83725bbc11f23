"""
Analytics Router
Summary totals with period-over-period change, category breakdown and trends.
Every request recomputes from a full snapshot of expenses.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from finance_tracker.core.config import settings
from finance_tracker.db import ExpenseStorage, get_storage
from finance_tracker.routers.auth import get_current_user_id
from finance_tracker.utils.analyzer import SERIES_PERIODS, ExpenseAnalyzer
from finance_tracker.utils.dates import to_local

router = APIRouter(dependencies=[Depends(get_current_user_id)])
logger = logging.getLogger(__name__)


def get_analyzer() -> ExpenseAnalyzer:
    return ExpenseAnalyzer(include_uncategorized_in_total=settings.BREAKDOWN_INCLUDE_UNCATEGORIZED)


def reference_instant(
    at: Optional[datetime] = Query(None, description="Anchor instant, defaults to now"),
) -> datetime:
    if at is None:
        return datetime.now().astimezone()
    # an explicit offset picks the calendar the windows are cut on
    return at if at.tzinfo is not None else to_local(at)


@router.get("/summary")
def expenses_summary(
    reference: datetime = Depends(reference_instant),
    storage: ExpenseStorage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
) -> Dict:
    records = storage.list_expense_records()
    summary = analyzer.compute_summary(records, reference)
    logger.info(f"Summary over {len(records)} expenses: total={summary.total}")
    return summary.to_dict()


@router.get("/categories")
def category_breakdown(
    storage: ExpenseStorage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
) -> List[Dict]:
    breakdown = analyzer.compute_category_breakdown(storage.list_expense_records())
    return [entry.to_dict() for entry in breakdown]


@router.get("/trend")
def monthly_trend(
    months: int = Query(6, ge=1, le=36),
    reference: datetime = Depends(reference_instant),
    storage: ExpenseStorage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
) -> List[Dict]:
    return analyzer.monthly_trend(storage.list_expense_records(), reference, months=months)


@router.get("/weekdays")
def weekday_spending(
    reference: datetime = Depends(reference_instant),
    storage: ExpenseStorage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
) -> List[Dict]:
    return analyzer.weekday_spending(storage.list_expense_records(), reference.tzinfo)


@router.get("/series")
def spending_series(
    period: str = Query("month", alias="range"),
    reference: datetime = Depends(reference_instant),
    storage: ExpenseStorage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
) -> Dict:
    if period not in SERIES_PERIODS:
        raise HTTPException(status_code=400, detail=f"range must be one of {', '.join(SERIES_PERIODS)}")
    return analyzer.spending_series(storage.list_expense_records(), reference, period).to_dict()


@router.get("/overview")
def overview(
    reference: datetime = Depends(reference_instant),
    storage: ExpenseStorage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
) -> Dict:
    return analyzer.overview(storage.list_expense_records(), reference)
