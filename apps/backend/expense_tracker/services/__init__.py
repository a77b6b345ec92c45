"""
Services package

Business logic for categories, transactions and recurring expenses.
"""

from .category_service import CategoryService
from .transaction_service import TransactionService
from .recurring_expense_service import RecurringExpenseService

__all__ = [
    "CategoryService",
    "TransactionService",
    "RecurringExpenseService",
]
