from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .core.config import settings
from .core.database import Base


try:
    LOCAL_ZONE = ZoneInfo(getattr(settings, "TIMEZONE", "Asia/Kolkata"))
except Exception:
    LOCAL_ZONE = ZoneInfo("UTC")


def now_local_naive() -> datetime:
    """Return naive datetime normalized to configured local timezone."""
    return datetime.now(LOCAL_ZONE).replace(tzinfo=None)


def today_local() -> date:
    return datetime.now(LOCAL_ZONE).date()


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_local_naive, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_local_naive, onupdate=now_local_naive, nullable=False)


class User(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)


class TxnType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class RecurrenceType(str, Enum):
    """Recurrence tag carried by a transaction."""

    ONE_TIME = "one-time"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurringFrequency(str, Enum):
    """Cadence of a recurring expense; a bill is never one-time."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    def as_recurrence(self) -> RecurrenceType:
        return RecurrenceType(self.value)


class CategoryKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    BOTH = "both"


_KIND_ADMITS: dict[CategoryKind, frozenset[TxnType]] = {
    CategoryKind.INCOME: frozenset({TxnType.INCOME}),
    CategoryKind.EXPENSE: frozenset({TxnType.EXPENSE}),
    CategoryKind.BOTH: frozenset({TxnType.INCOME, TxnType.EXPENSE}),
}


class Category(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str] = mapped_column(String(16), nullable=False)
    color: Mapped[str] = mapped_column(String(32), nullable=False)
    kind: Mapped[CategoryKind] = mapped_column(SAEnum(CategoryKind, name="category_kind"), nullable=False)
    # monthly ceiling; expense-capable categories only
    budget: Mapped[Decimal | None] = mapped_column(Numeric(18, 2))
    sort_order: Mapped[int | None] = mapped_column(Integer)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_category_name"),
        CheckConstraint("budget IS NULL OR budget > 0", name="ck_category_budget_positive"),
    )

    def admits(self, txn_type: TxnType | str) -> bool:
        return TxnType(txn_type) in _KIND_ADMITS[CategoryKind(self.kind)]


class Transaction(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[TxnType] = mapped_column(SAEnum(TxnType, name="txn_type"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    occurred_at: Mapped[date] = mapped_column(Date, nullable=False)
    recurrence: Mapped[RecurrenceType] = mapped_column(
        SAEnum(RecurrenceType, name="recurrence_type"),
        nullable=False,
        default=RecurrenceType.ONE_TIME,
    )

    category: Mapped["Category"] = relationship("Category", lazy="joined")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        Index("ix_transaction_user_date", "user_id", "occurred_at"),
    )


class RecurringExpense(Base, TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("category.id"), nullable=False)
    due_day: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-31
    recurrence: Mapped[RecurringFrequency] = mapped_column(
        SAEnum(RecurringFrequency, name="recurring_frequency"),
        nullable=False,
        default=RecurringFrequency.MONTHLY,
    )
    # payment generated by the last mark-paid; paid_for_month is 1-indexed
    linked_transaction_id: Mapped[int | None] = mapped_column(
        ForeignKey("transaction.id", ondelete="SET NULL"),
        nullable=True,
    )
    paid_for_month: Mapped[int | None] = mapped_column(Integer)
    paid_for_year: Mapped[int | None] = mapped_column(Integer)

    category: Mapped["Category"] = relationship("Category", lazy="joined")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_recurring_amount_positive"),
        CheckConstraint("due_day BETWEEN 1 AND 31", name="ck_recurring_due_day"),
        CheckConstraint(
            "paid_for_month IS NULL OR paid_for_month BETWEEN 1 AND 12",
            name="ck_recurring_paid_month",
        ),
        Index("ix_recurring_expense_user_due", "user_id", "due_day"),
    )

    @property
    def has_paid_marker(self) -> bool:
        return (
            self.linked_transaction_id is not None
            or self.paid_for_month is not None
            or self.paid_for_year is not None
        )
