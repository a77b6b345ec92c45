"""Period-scoped aggregation over a transaction list.

All functions are pure: they read ``type``, ``amount``, ``category_id`` and
``occurred_at`` from the given rows and never touch the store. Results are
recomputed per request; a single account's history is small enough for
linear scans.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Sequence

from expense_tracker import models
from expense_tracker.models import TxnType
from expense_tracker.periods import FilterPeriod, MonthPeriod, is_all_time

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Totals:
    income: Decimal
    expenses: Decimal
    balance: Decimal


@dataclass(frozen=True)
class CategoryTotal:
    category_id: int
    total: Decimal
    category: models.Category | None = None


@dataclass(frozen=True)
class BudgetProgressItem:
    category: models.Category
    spent: Decimal
    budget: Decimal
    percentage: Decimal
    is_over_budget: bool

    @property
    def remaining(self) -> Decimal:
        return self.budget - self.spent


@dataclass(frozen=True)
class PeriodSummary:
    period: FilterPeriod
    totals: Totals
    expenses_by_category: list[CategoryTotal] = field(default_factory=list)
    budget_progress: list[BudgetProgressItem] = field(default_factory=list)
    transaction_count: int = 0


def filter_by_period(
    transactions: Iterable[models.Transaction], period: FilterPeriod
) -> list[models.Transaction]:
    if is_all_time(period):
        return list(transactions)
    if not isinstance(period, MonthPeriod):
        raise TypeError(f"Unsupported period: {period!r}")
    return [t for t in transactions if period.contains(t.occurred_at)]


def totals(filtered: Iterable[models.Transaction]) -> Totals:
    income = ZERO
    expenses = ZERO
    for t in filtered:
        if t.type == TxnType.INCOME:
            income += Decimal(t.amount)
        elif t.type == TxnType.EXPENSE:
            expenses += Decimal(t.amount)
    return Totals(income=income, expenses=expenses, balance=income - expenses)


def expenses_by_category(
    filtered: Iterable[models.Transaction],
    categories: Iterable[models.Category] = (),
) -> list[CategoryTotal]:
    """Sum expenses per category, largest first; ties keep first-seen order."""
    by_id = {c.id: c for c in categories}
    sums: dict[int, Decimal] = {}
    for t in filtered:
        if t.type != TxnType.EXPENSE:
            continue
        sums[t.category_id] = sums.get(t.category_id, ZERO) + Decimal(t.amount)
    groups = [
        CategoryTotal(category_id=cid, total=total, category=by_id.get(cid))
        for cid, total in sums.items()
    ]
    # sorted() is stable with reverse=True
    return sorted(groups, key=lambda g: g.total, reverse=True)


def budget_progress(
    filtered: Sequence[models.Transaction],
    categories: Iterable[models.Category],
) -> list[BudgetProgressItem]:
    spent_by_category: dict[int, Decimal] = {}
    for t in filtered:
        if t.type == TxnType.EXPENSE:
            spent_by_category[t.category_id] = spent_by_category.get(t.category_id, ZERO) + Decimal(t.amount)

    items: list[BudgetProgressItem] = []
    for category in categories:
        if category.budget is None or category.budget <= 0:
            continue
        budget = Decimal(category.budget)
        spent = spent_by_category.get(category.id, ZERO)
        items.append(
            BudgetProgressItem(
                category=category,
                spent=spent,
                budget=budget,
                percentage=min(spent / budget * HUNDRED, HUNDRED),
                is_over_budget=spent > budget,
            )
        )
    return sorted(items, key=lambda i: i.percentage, reverse=True)


def summarize(
    transactions: Iterable[models.Transaction],
    categories: Iterable[models.Category],
    period: FilterPeriod,
) -> PeriodSummary:
    category_list = list(categories)
    filtered = filter_by_period(transactions, period)
    return PeriodSummary(
        period=period,
        totals=totals(filtered),
        expenses_by_category=expenses_by_category(filtered, category_list),
        budget_progress=budget_progress(filtered, category_list),
        transaction_count=len(filtered),
    )
