from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from expense_tracker import models
from expense_tracker.errors import (
    InvalidTransition,
    RecordNotFound,
    StoreWriteFailure,
    ValidationFailure,
)
from expense_tracker.models import RecurringFrequency, TxnType
from expense_tracker.periods import FilterPeriod, MonthPeriod, status_period
from expense_tracker.store import LedgerStore
from .category_service import CategoryService
from .validation import (
    require_description,
    require_due_day,
    require_enum,
    require_positive_amount,
)

logger = logging.getLogger(__name__)

# Latest day that exists in every month.
PAYMENT_DAY_CEILING = 28
COPY_SUFFIX = " (Copy)"

_EDITABLE_FIELDS = ("description", "amount", "category_id", "due_day", "recurrence")
_CLEARED_PAID_MARKERS = {"linked_transaction_id": None, "paid_for_month": None, "paid_for_year": None}


@dataclass(frozen=True)
class RecurringExpenseView:
    """A recurring expense as seen from one viewing month."""

    expense: models.RecurringExpense
    period: MonthPeriod
    is_paid: bool


@dataclass(frozen=True)
class RecurringExpenseListing:
    period: MonthPeriod
    items: list[RecurringExpenseView] = field(default_factory=list)
    healed_ids: list[int] = field(default_factory=list)

    @property
    def paid_count(self) -> int:
        return sum(1 for item in self.items if item.is_paid)

    @property
    def unpaid_count(self) -> int:
        return len(self.items) - self.paid_count

    @property
    def paid_total(self) -> Decimal:
        return sum((Decimal(i.expense.amount) for i in self.items if i.is_paid), Decimal("0"))

    @property
    def unpaid_total(self) -> Decimal:
        return sum((Decimal(i.expense.amount) for i in self.items if not i.is_paid), Decimal("0"))


@dataclass(frozen=True)
class LinkReconciliation:
    expenses: list[models.RecurringExpense]
    healed_ids: list[int]
    failed_ids: frozenset[int] = frozenset()


@dataclass(frozen=True)
class MarkPaidResult:
    expense: models.RecurringExpense
    transaction: models.Transaction
    period: MonthPeriod


@dataclass(frozen=True)
class MarkUnpaidResult:
    expense: models.RecurringExpense
    removed_transaction_id: int | None
    self_healed: bool


@dataclass(frozen=True)
class RecurringExpenseDeleteResult:
    deleted_id: int
    removed_transaction_id: int | None
    cleanup_error: str | None = None


def payment_date(expense: models.RecurringExpense, period: MonthPeriod) -> date:
    return period.day(min(max(int(expense.due_day), 1), PAYMENT_DAY_CEILING))


def is_paid_for(expense: models.RecurringExpense, period: MonthPeriod) -> bool:
    """Stored paid markers point at ``period``; link liveness is checked by the caller."""
    return (
        expense.linked_transaction_id is not None
        and expense.paid_for_month == period.calendar_month
        and expense.paid_for_year == period.year
    )


class RecurringExpenseService:
    """Paid/unpaid reconciliation of recurring expenses per viewing month.

    A recurring expense is *paid* for month ``(M, Y)`` when its stored
    ``paid_for_month``/``paid_for_year`` equal ``(M + 1, Y)`` and its
    ``linked_transaction_id`` names a live expense transaction. Each
    transition is two sequential store writes (transaction, then the
    recurring record); the second is attempted only after the first
    returned, and a failed second write triggers a compensating delete of
    the transaction created by the first.
    """

    def __init__(self, store: LedgerStore) -> None:
        self.store = store
        self.categories = CategoryService(store)

    # ---- Reads -----------------------------------------------------------
    def list_recurring_expenses(
        self,
        account_id: int,
        period: FilterPeriod,
        *,
        today: date | None = None,
    ) -> RecurringExpenseListing:
        """Load, self-heal stale links, and evaluate paid status for ``period``.

        Switching periods writes nothing: only records whose link is stale
        are touched, regardless of the period asked for.
        """
        month = status_period(period, today or models.today_local())
        reconciled = self.reconcile_links(account_id)
        expenses = sorted(reconciled.expenses, key=lambda e: e.due_day)
        items = [
            RecurringExpenseView(
                expense=e,
                period=month,
                is_paid=e.id not in reconciled.failed_ids and is_paid_for(e, month),
            )
            for e in expenses
        ]
        return RecurringExpenseListing(period=month, items=items, healed_ids=reconciled.healed_ids)

    def reconcile_links(self, account_id: int) -> LinkReconciliation:
        """Clear paid markers whose linked transaction is gone.

        A record whose markers could not be cleared is reported in
        ``failed_ids`` and must be treated as unpaid by the caller.
        """
        refreshed: list[models.RecurringExpense] = []
        healed: list[int] = []
        failed: set[int] = set()
        for expense in self.store.list_recurring_expenses(account_id):
            if self._link_is_stale(account_id, expense):
                try:
                    expense = self._clear_paid_markers(account_id, expense.id)
                except StoreWriteFailure as exc:
                    logger.warning("Could not clear stale link on recurring expense %s: %s", expense.id, exc)
                    failed.add(expense.id)
                else:
                    logger.warning("Cleared stale paid markers on recurring expense %s", expense.id)
                    healed.append(expense.id)
            refreshed.append(expense)
        return LinkReconciliation(expenses=refreshed, healed_ids=healed, failed_ids=frozenset(failed))

    def get_recurring_expense(self, account_id: int, expense_id: int) -> models.RecurringExpense:
        row = self.store.get_recurring_expense(account_id, expense_id)
        if row is None:
            raise RecordNotFound("Recurring expense not found")
        return row

    def status_for(self, account_id: int, expense_id: int, period: MonthPeriod) -> RecurringExpenseView:
        expense = self.get_recurring_expense(account_id, expense_id)
        paid = is_paid_for(expense, period) and not self._link_is_stale(account_id, expense)
        return RecurringExpenseView(expense=expense, period=period, is_paid=paid)

    # ---- Definition edits ------------------------------------------------
    def create_recurring_expense(self, account_id: int, fields: dict[str, Any]) -> models.RecurringExpense:
        data = self._validate(account_id, fields)
        row = self.store.insert_recurring_expense(account_id, data)
        logger.info("Created recurring expense %s (%s) for account %s", row.id, row.description, account_id)
        return row

    def update_recurring_expense(
        self, account_id: int, expense_id: int, changes: dict[str, Any]
    ) -> models.RecurringExpense:
        """Edit the definition; paid markers and the link are left as they are."""
        row = self.get_recurring_expense(account_id, expense_id)
        unknown = set(changes) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailure(f"Unsupported recurring expense fields: {', '.join(sorted(unknown))}")
        if not changes:
            return row
        merged = {key: getattr(row, key) for key in _EDITABLE_FIELDS}
        merged.update(changes)
        data = self._validate(account_id, merged)
        patch = {key: value for key, value in data.items() if key in changes}
        return self.store.update_recurring_expense(account_id, expense_id, patch)

    def duplicate_recurring_expense(self, account_id: int, expense_id: int) -> models.RecurringExpense:
        source = self.get_recurring_expense(account_id, expense_id)
        return self.create_recurring_expense(
            account_id,
            {
                "description": f"{source.description}{COPY_SUFFIX}",
                "amount": source.amount,
                "category_id": source.category_id,
                "due_day": source.due_day,
                "recurrence": source.recurrence,
            },
        )

    def delete_recurring_expense(
        self,
        account_id: int,
        expense_id: int,
        period: FilterPeriod,
        *,
        today: date | None = None,
    ) -> RecurringExpenseDeleteResult:
        """Delete the record; when it is paid for ``period``, remove that payment first.

        Payments recorded for other months stay in the ledger. A failed
        payment delete is reported in ``cleanup_error`` and never blocks the
        record delete.
        """
        month = status_period(period, today or models.today_local())
        expense = self.get_recurring_expense(account_id, expense_id)
        linked_id = expense.linked_transaction_id if is_paid_for(expense, month) else None
        removed_id: int | None = None
        cleanup_error: str | None = None
        if linked_id is not None:
            try:
                self.store.delete_transaction(account_id, linked_id)
                removed_id = linked_id
            except RecordNotFound:
                logger.info("Linked transaction %s of recurring expense %s already gone", linked_id, expense_id)
            except StoreWriteFailure as exc:
                cleanup_error = exc.message
                logger.warning(
                    "Orphan cleanup failed: transaction %s of recurring expense %s was not deleted: %s",
                    linked_id,
                    expense_id,
                    exc,
                )
        self.store.delete_recurring_expense(account_id, expense_id)
        logger.info("Deleted recurring expense %s for account %s", expense_id, account_id)
        return RecurringExpenseDeleteResult(expense_id, removed_id, cleanup_error)

    # ---- Transitions -----------------------------------------------------
    def mark_as_paid(self, account_id: int, expense_id: int, month: int, year: int) -> MarkPaidResult:
        period = MonthPeriod(month, year)
        expense = self.get_recurring_expense(account_id, expense_id)
        if is_paid_for(expense, period):
            if not self._link_is_stale(account_id, expense):
                raise InvalidTransition(f"Recurring expense already paid for {period}")
            expense = self._clear_paid_markers(account_id, expense_id)

        txn = self.store.insert_transaction(
            account_id,
            {
                "type": TxnType.EXPENSE,
                "amount": expense.amount,
                "category_id": expense.category_id,
                "description": expense.description,
                "occurred_at": payment_date(expense, period),
                "recurrence": RecurringFrequency(expense.recurrence).as_recurrence(),
            },
        )
        txn_id = txn.id
        try:
            expense = self.store.update_recurring_expense(
                account_id,
                expense_id,
                {
                    "linked_transaction_id": txn_id,
                    "paid_for_month": period.calendar_month,
                    "paid_for_year": period.year,
                },
            )
        except (StoreWriteFailure, RecordNotFound):
            self._discard_payment(account_id, txn_id, expense_id)
            raise
        logger.info("Recurring expense %s marked paid for %s (transaction %s)", expense_id, period, txn_id)
        return MarkPaidResult(expense=expense, transaction=txn, period=period)

    def mark_as_unpaid(
        self,
        account_id: int,
        expense_id: int,
        period: FilterPeriod,
        *,
        today: date | None = None,
    ) -> MarkUnpaidResult:
        """Undo the payment shown for ``period``.

        Stale markers (link missing or half written) are cleared from any
        period. A live payment for another month is left alone.
        """
        month = status_period(period, today or models.today_local())
        expense = self.get_recurring_expense(account_id, expense_id)
        if not expense.has_paid_marker:
            raise InvalidTransition("Recurring expense is not marked as paid")

        linked_id = expense.linked_transaction_id
        removed_id: int | None = None
        self_healed = self._link_is_stale(account_id, expense)
        if not self_healed:
            if not is_paid_for(expense, month):
                raise InvalidTransition(f"Recurring expense is not paid for {month}")
            try:
                self.store.delete_transaction(account_id, linked_id)
                removed_id = linked_id
            except RecordNotFound:
                self_healed = True
        if self_healed:
            logger.warning(
                "Recurring expense %s had no live linked transaction; clearing paid markers",
                expense_id,
            )

        expense = self._clear_paid_markers(account_id, expense_id)
        logger.info("Recurring expense %s marked unpaid", expense_id)
        return MarkUnpaidResult(expense=expense, removed_transaction_id=removed_id, self_healed=self_healed)

    # ---- Helpers ---------------------------------------------------------
    def _link_is_stale(self, account_id: int, expense: models.RecurringExpense) -> bool:
        has_period = expense.paid_for_month is not None and expense.paid_for_year is not None
        if expense.linked_transaction_id is None:
            return expense.paid_for_month is not None or expense.paid_for_year is not None
        if not has_period:
            return True
        return self.store.get_transaction(account_id, expense.linked_transaction_id) is None

    def _clear_paid_markers(self, account_id: int, expense_id: int) -> models.RecurringExpense:
        return self.store.update_recurring_expense(account_id, expense_id, dict(_CLEARED_PAID_MARKERS))

    def _discard_payment(self, account_id: int, txn_id: int, expense_id: int) -> None:
        try:
            self.store.delete_transaction(account_id, txn_id)
        except (StoreWriteFailure, RecordNotFound) as exc:
            logger.error(
                "Rollback of transaction %s failed after status write error on recurring expense %s: %s",
                txn_id,
                expense_id,
                exc,
            )
        else:
            logger.warning(
                "Status write failed for recurring expense %s; transaction %s rolled back",
                expense_id,
                txn_id,
            )

    def _validate(self, account_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        amount = require_positive_amount(fields.get("amount"))
        description = require_description(fields.get("description"))
        due_day = require_due_day(fields.get("due_day"))
        recurrence = require_enum(
            RecurringFrequency, fields.get("recurrence") or RecurringFrequency.MONTHLY, label="recurrence"
        )
        category = self.categories.require_category_for(account_id, fields.get("category_id"), TxnType.EXPENSE)
        return {
            "description": description,
            "amount": amount,
            "category_id": category.id,
            "due_day": due_day,
            "recurrence": recurrence,
        }
