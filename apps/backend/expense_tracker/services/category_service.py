from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from expense_tracker import models
from expense_tracker.errors import RecordNotFound, ValidationFailure
from expense_tracker.models import CategoryKind, TxnType
from expense_tracker.store import LedgerStore
from expense_tracker.utils.normalization import normalize_label
from .validation import to_decimal

logger = logging.getLogger(__name__)

FALLBACK_CATEGORY_NAME = "Other"

# Seeded once per account, in display order.
DEFAULT_CATEGORIES: tuple[dict[str, Any], ...] = (
    {"name": "Salary", "icon": "💰", "color": "hsl(160 84% 39%)", "kind": CategoryKind.INCOME, "budget": None},
    {"name": "Food", "icon": "🍔", "color": "hsl(30 90% 55%)", "kind": CategoryKind.EXPENSE, "budget": Decimal("5000")},
    {"name": "Transport", "icon": "🚗", "color": "hsl(200 80% 50%)", "kind": CategoryKind.EXPENSE, "budget": Decimal("3000")},
    {"name": "Shopping", "icon": "🛍️", "color": "hsl(330 80% 55%)", "kind": CategoryKind.EXPENSE, "budget": Decimal("4000")},
    {"name": "Entertainment", "icon": "🎬", "color": "hsl(280 70% 55%)", "kind": CategoryKind.EXPENSE, "budget": Decimal("2000")},
    {"name": "Bills", "icon": "📄", "color": "hsl(220 70% 50%)", "kind": CategoryKind.EXPENSE, "budget": Decimal("5000")},
    {"name": "Health", "icon": "💊", "color": "hsl(0 70% 55%)", "kind": CategoryKind.EXPENSE, "budget": Decimal("2000")},
    {"name": "Freelance", "icon": "💻", "color": "hsl(170 70% 45%)", "kind": CategoryKind.INCOME, "budget": None},
    {"name": "Gift", "icon": "🎁", "color": "hsl(350 80% 60%)", "kind": CategoryKind.BOTH, "budget": Decimal("1000")},
    {"name": "Investment", "icon": "📈", "color": "hsl(140 60% 45%)", "kind": CategoryKind.INCOME, "budget": None},
    {"name": "Groceries", "icon": "🛒", "color": "hsl(100 60% 45%)", "kind": CategoryKind.EXPENSE, "budget": Decimal("8000")},
    {"name": FALLBACK_CATEGORY_NAME, "icon": "📦", "color": "hsl(220 10% 50%)", "kind": CategoryKind.BOTH, "budget": Decimal("2000")},
)


class CategoryService:
    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def list_categories(self, account_id: int) -> list[models.Category]:
        """Return the account's categories, seeding the default set on first use."""
        rows = self.store.list_categories(account_id)
        if rows:
            return rows
        logger.info("Seeding default categories for account %s", account_id)
        return self.store.insert_default_categories(account_id, DEFAULT_CATEGORIES)

    def get_category(self, account_id: int, category_id: int) -> models.Category:
        row = self.store.get_category(account_id, category_id)
        if row is None:
            raise RecordNotFound("Category not found")
        return row

    def require_category_for(self, account_id: int, category_id: Any, txn_type: TxnType) -> models.Category:
        """Resolve a category and check that its kind admits ``txn_type``."""
        if isinstance(category_id, bool) or not isinstance(category_id, int):
            raise ValidationFailure("category_id must be an integer")
        row = self.store.get_category(account_id, category_id)
        if row is None:
            raise ValidationFailure("Invalid category_id")
        if not row.admits(txn_type):
            raise ValidationFailure(f"Category '{row.name}' cannot be used for {TxnType(txn_type).value} entries")
        return row

    def find_by_name(self, account_id: int, name: str) -> models.Category | None:
        key = normalize_label(name)
        for row in self.list_categories(account_id):
            if normalize_label(row.name) == key:
                return row
        return None

    def fallback_category(self, account_id: int) -> models.Category:
        row = self.find_by_name(account_id, FALLBACK_CATEGORY_NAME)
        if row is None:
            raise RecordNotFound(f"Fallback category '{FALLBACK_CATEGORY_NAME}' not found")
        return row

    def update_budget(self, account_id: int, category_id: int, budget: Any) -> models.Category:
        """Set or clear a category's monthly budget.

        ``None`` or zero clears it. Negative or non-numeric values and any
        budget on an income-only category are rejected.
        """
        category = self.get_category(account_id, category_id)
        if budget is None:
            value = None
        else:
            value = to_decimal(budget)
            if value is None:
                raise ValidationFailure("budget must be a finite number")
            if value < 0:
                raise ValidationFailure("budget must not be negative")
            if value == 0:
                value = None
        if value is not None and category.kind == CategoryKind.INCOME:
            raise ValidationFailure(f"Income category '{category.name}' cannot carry a budget")
        return self.store.update_category_budget(account_id, category_id, value)
