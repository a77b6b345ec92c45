from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from expense_tracker import models
from expense_tracker.errors import RecordNotFound, ValidationFailure
from expense_tracker.models import RecurrenceType, TxnType
from expense_tracker.periods import FilterPeriod
from expense_tracker.store import LedgerStore
from .aggregation import filter_by_period, totals
from .category_service import CategoryService
from .validation import (
    require_date,
    require_description,
    require_enum,
    require_positive_amount,
    to_decimal,
)

logger = logging.getLogger(__name__)

BALANCE_ADJUSTMENT_DESCRIPTION = "Balance Adjustment"

_EDITABLE_FIELDS = ("type", "amount", "category_id", "description", "occurred_at", "recurrence")


@dataclass(frozen=True)
class BalanceAdjustment:
    previous_balance: Decimal
    new_balance: Decimal
    difference: Decimal
    transaction: models.Transaction | None


class TransactionService:
    """Validated create/update/delete of transactions plus balance adjustment."""

    def __init__(self, store: LedgerStore) -> None:
        self.store = store
        self.categories = CategoryService(store)

    def list_transactions(self, account_id: int, period: FilterPeriod) -> list[models.Transaction]:
        return filter_by_period(self.store.list_transactions(account_id), period)

    def get_transaction(self, account_id: int, txn_id: int) -> models.Transaction:
        row = self.store.get_transaction(account_id, txn_id)
        if row is None:
            raise RecordNotFound("Transaction not found")
        return row

    def create_transaction(self, account_id: int, fields: dict[str, Any]) -> models.Transaction:
        data = self._validate(account_id, fields)
        row = self.store.insert_transaction(account_id, data)
        logger.info("Created %s transaction %s for account %s", row.type.value, row.id, account_id)
        return row

    def update_transaction(self, account_id: int, txn_id: int, changes: dict[str, Any]) -> models.Transaction:
        """Apply a partial edit; the merged record is validated as a whole."""
        row = self.get_transaction(account_id, txn_id)
        unknown = set(changes) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailure(f"Unsupported transaction fields: {', '.join(sorted(unknown))}")
        if not changes:
            return row
        merged = {key: getattr(row, key) for key in _EDITABLE_FIELDS}
        merged.update(changes)
        data = self._validate(account_id, merged)
        patch = {key: value for key, value in data.items() if key in changes}
        return self.store.update_transaction(account_id, txn_id, patch)

    def delete_transaction(self, account_id: int, txn_id: int) -> None:
        self.store.delete_transaction(account_id, txn_id)
        logger.info("Deleted transaction %s for account %s", txn_id, account_id)

    def current_balance(self, account_id: int, period: FilterPeriod) -> Decimal:
        return totals(self.list_transactions(account_id, period)).balance

    def adjust_balance(
        self,
        account_id: int,
        new_balance: Any,
        current_balance: Any,
        *,
        today: date | None = None,
    ) -> BalanceAdjustment | None:
        """Record the gap between the displayed and the desired balance.

        Returns ``None`` when either value is not a finite number. A zero
        difference yields an adjustment without a transaction.
        """
        target = to_decimal(new_balance)
        current = to_decimal(current_balance)
        if target is None or current is None:
            return None
        difference = target - current
        if difference == 0:
            return BalanceAdjustment(current, target, difference, None)

        other = self.categories.fallback_category(account_id)
        row = self.create_transaction(
            account_id,
            {
                "type": TxnType.INCOME if difference > 0 else TxnType.EXPENSE,
                "amount": abs(difference),
                "category_id": other.id,
                "description": BALANCE_ADJUSTMENT_DESCRIPTION,
                "occurred_at": today or models.today_local(),
                "recurrence": RecurrenceType.ONE_TIME,
            },
        )
        return BalanceAdjustment(current, target, difference, row)

    # ---- Helpers ---------------------------------------------------------
    def _validate(self, account_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        # field checks run before the category lookup (the only store read)
        amount = require_positive_amount(fields.get("amount"))
        description = require_description(fields.get("description"))
        occurred_at = require_date(fields.get("occurred_at"))
        txn_type = require_enum(TxnType, fields.get("type"), label="type")
        recurrence = require_enum(
            RecurrenceType, fields.get("recurrence") or RecurrenceType.ONE_TIME, label="recurrence"
        )
        category = self.categories.require_category_for(account_id, fields.get("category_id"), txn_type)
        return {
            "type": txn_type,
            "amount": amount,
            "category_id": category.id,
            "description": description,
            "occurred_at": occurred_at,
            "recurrence": recurrence,
        }
