from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from expense_tracker.core.database import get_db
from expense_tracker.core.deps import get_current_user
from expense_tracker.schemas import CategoryBudgetUpdate, CategoryOut
from expense_tracker.services.category_service import CategoryService
from expense_tracker.store import LedgerStore


router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db), current_user = Depends(get_current_user)):
    svc = CategoryService(LedgerStore(db))
    return svc.list_categories(current_user.id)


@router.patch("/{category_id}/budget", response_model=CategoryOut)
def update_category_budget(
    category_id: int,
    payload: CategoryBudgetUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_user),
):
    svc = CategoryService(LedgerStore(db))
    return svc.update_budget(current_user.id, category_id, payload.budget)
