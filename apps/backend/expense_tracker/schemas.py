from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .models import CategoryKind, RecurrenceType, RecurringFrequency, TxnType


# Category Schemas
class CategoryOut(BaseModel):
    id: int
    name: str
    icon: str
    color: str
    kind: CategoryKind
    budget: Optional[float]

    model_config = ConfigDict(from_attributes=True)


class CategoryRef(BaseModel):
    id: int
    name: str
    icon: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class CategoryBudgetUpdate(BaseModel):
    # null or 0 clears the budget
    budget: Optional[Decimal] = None


# Transaction Schemas
class TransactionCreate(BaseModel):
    type: TxnType
    amount: Decimal
    category_id: int
    description: str
    occurred_at: date
    recurrence: RecurrenceType = RecurrenceType.ONE_TIME

    model_config = ConfigDict(extra="forbid")


class TransactionUpdate(BaseModel):
    type: Optional[TxnType] = None
    amount: Optional[Decimal] = None
    category_id: Optional[int] = None
    description: Optional[str] = None
    occurred_at: Optional[date] = None
    recurrence: Optional[RecurrenceType] = None

    model_config = ConfigDict(extra="forbid")


class TransactionOut(BaseModel):
    id: int
    type: TxnType
    amount: float
    category_id: int
    category: CategoryRef
    description: str
    occurred_at: date
    recurrence: RecurrenceType
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BalanceAdjustIn(BaseModel):
    new_balance: Decimal


class BalanceAdjustOut(BaseModel):
    previous_balance: float
    new_balance: float
    difference: float
    transaction: Optional[TransactionOut] = None


# Summary Schemas
class PeriodOut(BaseModel):
    kind: Literal["all", "month"]
    month: Optional[int] = None
    year: Optional[int] = None


class TotalsOut(BaseModel):
    income: float
    expenses: float
    balance: float


class CategoryTotalOut(BaseModel):
    category_id: int
    category: Optional[CategoryRef] = None
    total: float


class BudgetProgressOut(BaseModel):
    category: CategoryRef
    spent: float
    budget: float
    percentage: float
    is_over_budget: bool
    remaining: float


class SummaryOut(BaseModel):
    period: PeriodOut
    totals: TotalsOut
    expenses_by_category: list[CategoryTotalOut]
    budget_progress: list[BudgetProgressOut]
    transaction_count: int


# RecurringExpense Schemas
class RecurringExpenseCreate(BaseModel):
    description: str
    amount: Decimal
    category_id: int
    due_day: int = Field(ge=1, le=31)
    recurrence: RecurringFrequency = RecurringFrequency.MONTHLY

    model_config = ConfigDict(extra="forbid")


class RecurringExpenseUpdate(BaseModel):
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    category_id: Optional[int] = None
    due_day: Optional[int] = Field(default=None, ge=1, le=31)
    recurrence: Optional[RecurringFrequency] = None

    model_config = ConfigDict(extra="forbid")


class RecurringExpenseOut(BaseModel):
    id: int
    description: str
    amount: float
    category_id: int
    category: CategoryRef
    due_day: int
    recurrence: RecurringFrequency
    linked_transaction_id: Optional[int]
    paid_for_month: Optional[int]
    paid_for_year: Optional[int]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RecurringExpenseStatusOut(RecurringExpenseOut):
    is_paid: bool
    # 0-indexed month the status was evaluated for
    period_month: int
    period_year: int

    @computed_field(return_type=Optional[int])
    def paid_transaction_id(self) -> Optional[int]:
        return self.linked_transaction_id if self.is_paid else None


class RecurringExpenseListOut(BaseModel):
    period_month: int
    period_year: int
    items: list[RecurringExpenseStatusOut]
    paid_count: int
    unpaid_count: int
    paid_total: float
    unpaid_total: float
    healed_ids: list[int] = Field(default_factory=list)


class RecurringMarkPaidIn(BaseModel):
    month: int = Field(ge=0, le=11)
    year: int = Field(ge=1, le=9999)


class RecurringMarkPaidOut(BaseModel):
    expense: RecurringExpenseStatusOut
    transaction: TransactionOut


class RecurringMarkUnpaidOut(BaseModel):
    expense: RecurringExpenseOut
    removed_transaction_id: Optional[int]
    self_healed: bool


class RecurringExpenseDeleteOut(BaseModel):
    deleted_id: int
    removed_transaction_id: Optional[int]
    cleanup_error: Optional[str] = None
