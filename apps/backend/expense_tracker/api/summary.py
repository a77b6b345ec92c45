from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from expense_tracker.core.database import get_db
from expense_tracker.core.deps import get_current_user, get_filter_period
from expense_tracker.periods import FilterPeriod, MonthPeriod
from expense_tracker.schemas import (
    BudgetProgressOut,
    CategoryRef,
    CategoryTotalOut,
    PeriodOut,
    SummaryOut,
    TotalsOut,
)
from expense_tracker.services.aggregation import summarize
from expense_tracker.services.category_service import CategoryService
from expense_tracker.store import LedgerStore


router = APIRouter(prefix="/summary", tags=["summary"])


def _period_out(period: FilterPeriod) -> PeriodOut:
    if isinstance(period, MonthPeriod):
        return PeriodOut(kind="month", month=period.month, year=period.year)
    return PeriodOut(kind="all")


@router.get("", response_model=SummaryOut)
def get_summary(
    period: FilterPeriod = Depends(get_filter_period),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    """Totals, per-category spend and budget progress for the viewing period."""
    store = LedgerStore(db)
    categories = CategoryService(store).list_categories(current_user.id)
    result = summarize(store.list_transactions(current_user.id), categories, period)
    return SummaryOut(
        period=_period_out(period),
        totals=TotalsOut(
            income=result.totals.income,
            expenses=result.totals.expenses,
            balance=result.totals.balance,
        ),
        expenses_by_category=[
            CategoryTotalOut(
                category_id=group.category_id,
                category=CategoryRef.model_validate(group.category) if group.category else None,
                total=group.total,
            )
            for group in result.expenses_by_category
        ],
        budget_progress=[
            BudgetProgressOut(
                category=CategoryRef.model_validate(item.category),
                spent=item.spent,
                budget=item.budget,
                percentage=item.percentage,
                is_over_budget=item.is_over_budget,
                remaining=item.remaining,
            )
            for item in result.budget_progress
        ],
        transaction_count=result.transaction_count,
    )
