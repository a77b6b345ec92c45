from __future__ import annotations

from typing import Literal, Optional

from fastapi import Depends, HTTPException, Query
from sqlalchemy.orm import Session

from expense_tracker.core.config import settings
from expense_tracker.core.database import get_db
from expense_tracker import models
from expense_tracker.periods import ALL_TIME, FilterPeriod, MonthPeriod


def get_current_user(db: Session = Depends(get_db)) -> models.User:
    """Very lightweight current user resolver.

    Returns the configured demo account (created on first use). Tests may
    override this dependency to simulate different users.
    """
    user = db.query(models.User).filter(models.User.email == settings.DEMO_EMAIL).first()
    if not user:
        user = models.User(email=settings.DEMO_EMAIL, is_active=True)
        db.add(user)
        db.commit()
        db.refresh(user)
    return user


def get_filter_period(
    period: Optional[Literal["all"]] = Query(None, description="'all' for all time"),
    month: Optional[int] = Query(None, ge=0, le=11, description="0-indexed month"),
    year: Optional[int] = Query(None, ge=1, le=9999),
) -> FilterPeriod:
    """Resolve the viewing period; defaults to the current local month."""
    if period == ALL_TIME:
        if month is not None or year is not None:
            raise HTTPException(status_code=400, detail="period=all cannot be combined with month/year")
        return ALL_TIME
    if month is None and year is None:
        return MonthPeriod.containing(models.today_local())
    if month is None or year is None:
        raise HTTPException(status_code=400, detail="month and year must be provided together")
    return MonthPeriod(month, year)
