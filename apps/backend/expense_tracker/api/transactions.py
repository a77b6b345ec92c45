from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from expense_tracker.core.database import get_db
from expense_tracker.core.deps import get_current_user, get_filter_period
from expense_tracker.periods import FilterPeriod
from expense_tracker.schemas import (
    BalanceAdjustIn,
    BalanceAdjustOut,
    TransactionCreate,
    TransactionOut,
    TransactionUpdate,
)
from expense_tracker.services.transaction_service import TransactionService
from expense_tracker.store import LedgerStore


router = APIRouter(tags=["transactions"])


@router.get("/transactions", response_model=list[TransactionOut])
def list_transactions(
    response: Response,
    period: FilterPeriod = Depends(get_filter_period),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = TransactionService(LedgerStore(db))
    rows = svc.list_transactions(current_user.id, period)
    response.headers["X-Total-Count"] = str(len(rows))
    return rows


@router.post("/transactions", response_model=TransactionOut, status_code=201)
def create_transaction(
    payload: TransactionCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = TransactionService(LedgerStore(db))
    return svc.create_transaction(current_user.id, payload.model_dump())


@router.patch("/transactions/{txn_id}", response_model=TransactionOut)
def update_transaction(
    txn_id: int,
    payload: TransactionUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = TransactionService(LedgerStore(db))
    return svc.update_transaction(current_user.id, txn_id, payload.model_dump(exclude_unset=True))


@router.delete("/transactions/{txn_id}", status_code=204)
def delete_transaction(
    txn_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = TransactionService(LedgerStore(db))
    svc.delete_transaction(current_user.id, txn_id)
    return None


@router.post("/balance/adjust", response_model=BalanceAdjustOut)
def adjust_balance(
    payload: BalanceAdjustIn,
    period: FilterPeriod = Depends(get_filter_period),
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    """Adjust the balance shown for ``period`` by recording the difference."""
    svc = TransactionService(LedgerStore(db))
    current = svc.current_balance(current_user.id, period)
    # payload is already a finite Decimal, so an adjustment is always returned
    result = svc.adjust_balance(current_user.id, payload.new_balance, current)
    return BalanceAdjustOut(
        previous_balance=result.previous_balance,
        new_balance=result.new_balance,
        difference=result.difference,
        transaction=TransactionOut.model_validate(result.transaction) if result.transaction else None,
    )
