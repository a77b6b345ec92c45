from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import RecordNotFound, StoreWriteFailure

logger = logging.getLogger(__name__)


class LedgerStore:
    """CRUD access to categories, transactions and recurring expenses.

    Every write commits on its own, so callers observe one request/response
    round trip per call. A failed commit is rolled back and re-raised as
    ``StoreWriteFailure``; a missing row for update/delete raises
    ``RecordNotFound``. All calls are scoped by ``account_id``.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---- Categories ------------------------------------------------------
    def list_categories(self, account_id: int) -> list[models.Category]:
        return (
            self.db.query(models.Category)
            .filter(models.Category.user_id == account_id)
            .order_by(models.Category.sort_order, models.Category.id)
            .all()
        )

    def get_category(self, account_id: int, category_id: int) -> models.Category | None:
        return (
            self.db.query(models.Category)
            .filter(models.Category.user_id == account_id, models.Category.id == category_id)
            .first()
        )

    def insert_default_categories(
        self, account_id: int, defaults: Iterable[dict[str, Any]]
    ) -> list[models.Category]:
        for position, spec in enumerate(defaults):
            self.db.add(models.Category(user_id=account_id, sort_order=position, **spec))
        self._commit("insert default categories")
        return self.list_categories(account_id)

    def update_category_budget(
        self, account_id: int, category_id: int, budget: Decimal | None
    ) -> models.Category:
        row = self.get_category(account_id, category_id)
        if row is None:
            raise RecordNotFound("Category not found")
        row.budget = budget
        self._commit("update category budget")
        self.db.refresh(row)
        return row

    # ---- Transactions ----------------------------------------------------
    def list_transactions(self, account_id: int) -> list[models.Transaction]:
        return (
            self.db.query(models.Transaction)
            .filter(models.Transaction.user_id == account_id)
            .order_by(models.Transaction.occurred_at.desc(), models.Transaction.id.desc())
            .all()
        )

    def get_transaction(self, account_id: int, txn_id: int) -> models.Transaction | None:
        return (
            self.db.query(models.Transaction)
            .filter(models.Transaction.user_id == account_id, models.Transaction.id == txn_id)
            .first()
        )

    def insert_transaction(self, account_id: int, fields: dict[str, Any]) -> models.Transaction:
        row = models.Transaction(user_id=account_id, **fields)
        self.db.add(row)
        self._commit("insert transaction")
        self.db.refresh(row)
        return row

    def update_transaction(self, account_id: int, txn_id: int, changes: dict[str, Any]) -> models.Transaction:
        row = self.get_transaction(account_id, txn_id)
        if row is None:
            raise RecordNotFound("Transaction not found")
        for key, value in changes.items():
            setattr(row, key, value)
        self._commit("update transaction")
        self.db.refresh(row)
        return row

    def delete_transaction(self, account_id: int, txn_id: int) -> None:
        row = self.get_transaction(account_id, txn_id)
        if row is None:
            raise RecordNotFound("Transaction not found")
        self.db.delete(row)
        self._commit("delete transaction")

    # ---- Recurring expenses ----------------------------------------------
    def list_recurring_expenses(self, account_id: int) -> list[models.RecurringExpense]:
        return (
            self.db.query(models.RecurringExpense)
            .filter(models.RecurringExpense.user_id == account_id)
            .order_by(models.RecurringExpense.due_day, models.RecurringExpense.id)
            .all()
        )

    def get_recurring_expense(self, account_id: int, expense_id: int) -> models.RecurringExpense | None:
        return (
            self.db.query(models.RecurringExpense)
            .filter(models.RecurringExpense.user_id == account_id, models.RecurringExpense.id == expense_id)
            .first()
        )

    def insert_recurring_expense(self, account_id: int, fields: dict[str, Any]) -> models.RecurringExpense:
        row = models.RecurringExpense(user_id=account_id, **fields)
        self.db.add(row)
        self._commit("insert recurring expense")
        self.db.refresh(row)
        return row

    def update_recurring_expense(
        self, account_id: int, expense_id: int, changes: dict[str, Any]
    ) -> models.RecurringExpense:
        row = self.get_recurring_expense(account_id, expense_id)
        if row is None:
            raise RecordNotFound("Recurring expense not found")
        for key, value in changes.items():
            setattr(row, key, value)
        self._commit("update recurring expense")
        self.db.refresh(row)
        return row

    def delete_recurring_expense(self, account_id: int, expense_id: int) -> None:
        row = self.get_recurring_expense(account_id, expense_id)
        if row is None:
            raise RecordNotFound("Recurring expense not found")
        self.db.delete(row)
        self._commit("delete recurring expense")

    # ---- Helpers ---------------------------------------------------------
    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Store write failed (%s): %s", action, exc)
            raise StoreWriteFailure(f"Failed to {action}") from exc
