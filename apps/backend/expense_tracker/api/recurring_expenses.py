from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from expense_tracker import models
from expense_tracker.core.database import get_db
from expense_tracker.core.deps import get_current_user, get_filter_period
from expense_tracker.periods import FilterPeriod, status_period
from expense_tracker.schemas import (
    RecurringExpenseCreate,
    RecurringExpenseDeleteOut,
    RecurringExpenseListOut,
    RecurringExpenseOut,
    RecurringExpenseStatusOut,
    RecurringExpenseUpdate,
    RecurringMarkPaidIn,
    RecurringMarkPaidOut,
    RecurringMarkUnpaidOut,
    TransactionOut,
)
from expense_tracker.services.recurring_expense_service import (
    RecurringExpenseService,
    RecurringExpenseView,
)
from expense_tracker.store import LedgerStore


router = APIRouter(prefix="/recurring-expenses", tags=["recurring-expenses"])


def _status_out(view: RecurringExpenseView) -> RecurringExpenseStatusOut:
    base = RecurringExpenseOut.model_validate(view.expense)
    return RecurringExpenseStatusOut(
        **base.model_dump(),
        is_paid=view.is_paid,
        period_month=view.period.month,
        period_year=view.period.year,
    )


@router.get("", response_model=RecurringExpenseListOut)
def list_recurring_expenses(
    period: FilterPeriod = Depends(get_filter_period),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = RecurringExpenseService(LedgerStore(db))
    listing = svc.list_recurring_expenses(current_user.id, period)
    return RecurringExpenseListOut(
        period_month=listing.period.month,
        period_year=listing.period.year,
        items=[_status_out(view) for view in listing.items],
        paid_count=listing.paid_count,
        unpaid_count=listing.unpaid_count,
        paid_total=listing.paid_total,
        unpaid_total=listing.unpaid_total,
        healed_ids=listing.healed_ids,
    )


@router.post("", response_model=RecurringExpenseStatusOut, status_code=201)
def create_recurring_expense(
    payload: RecurringExpenseCreate,
    period: FilterPeriod = Depends(get_filter_period),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = RecurringExpenseService(LedgerStore(db))
    row = svc.create_recurring_expense(current_user.id, payload.model_dump())
    return _status_out(svc.status_for(current_user.id, row.id, status_period(period, models.today_local())))


@router.patch("/{expense_id}", response_model=RecurringExpenseStatusOut)
def update_recurring_expense(
    expense_id: int,
    payload: RecurringExpenseUpdate,
    period: FilterPeriod = Depends(get_filter_period),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = RecurringExpenseService(LedgerStore(db))
    svc.update_recurring_expense(current_user.id, expense_id, payload.model_dump(exclude_unset=True))
    return _status_out(svc.status_for(current_user.id, expense_id, status_period(period, models.today_local())))


@router.delete("/{expense_id}", response_model=RecurringExpenseDeleteOut)
def delete_recurring_expense(
    expense_id: int,
    period: FilterPeriod = Depends(get_filter_period),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = RecurringExpenseService(LedgerStore(db))
    result = svc.delete_recurring_expense(current_user.id, expense_id, period)
    return RecurringExpenseDeleteOut(
        deleted_id=result.deleted_id,
        removed_transaction_id=result.removed_transaction_id,
        cleanup_error=result.cleanup_error,
    )


@router.post("/{expense_id}/duplicate", response_model=RecurringExpenseStatusOut, status_code=201)
def duplicate_recurring_expense(
    expense_id: int,
    period: FilterPeriod = Depends(get_filter_period),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = RecurringExpenseService(LedgerStore(db))
    row = svc.duplicate_recurring_expense(current_user.id, expense_id)
    return _status_out(svc.status_for(current_user.id, row.id, status_period(period, models.today_local())))


@router.post("/{expense_id}/mark-paid", response_model=RecurringMarkPaidOut)
def mark_recurring_expense_paid(
    expense_id: int,
    payload: RecurringMarkPaidIn,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = RecurringExpenseService(LedgerStore(db))
    result = svc.mark_as_paid(current_user.id, expense_id, payload.month, payload.year)
    view = RecurringExpenseView(expense=result.expense, period=result.period, is_paid=True)
    return RecurringMarkPaidOut(
        expense=_status_out(view),
        transaction=TransactionOut.model_validate(result.transaction),
    )


@router.post("/{expense_id}/mark-unpaid", response_model=RecurringMarkUnpaidOut)
def mark_recurring_expense_unpaid(
    expense_id: int,
    period: FilterPeriod = Depends(get_filter_period),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = RecurringExpenseService(LedgerStore(db))
    result = svc.mark_as_unpaid(current_user.id, expense_id, period)
    return RecurringMarkUnpaidOut(
        expense=RecurringExpenseOut.model_validate(result.expense),
        removed_transaction_id=result.removed_transaction_id,
        self_healed=result.self_healed,
    )
