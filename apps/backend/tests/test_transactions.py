from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from expense_tracker.errors import RecordNotFound, ValidationFailure
from expense_tracker.models import RecurrenceType, TxnType
from expense_tracker.periods import ALL_TIME, MonthPeriod
from expense_tracker.services.transaction_service import TransactionService
from expense_tracker.store import LedgerStore


class TestValidationBeforeStore:
    """Invalid input never reaches the store"""

    @pytest.fixture
    def mock_store(self):
        return MagicMock(spec=LedgerStore)

    @pytest.fixture
    def service(self, mock_store):
        return TransactionService(mock_store)

    @pytest.mark.parametrize(
        "fields",
        [
            {"amount": 0},
            {"amount": -5},
            {"amount": "abc"},
            {"amount": float("inf")},
            {"description": "   "},
            {"occurred_at": "2026-02-30"},
            {"type": "transfer"},
            {"recurrence": "hourly"},
        ],
    )
    def test_rejected(self, service, mock_store, fields):
        payload = {
            "type": "expense",
            "amount": 100,
            "category_id": 1,
            "description": "Lunch",
            "occurred_at": "2026-03-01",
        }
        payload.update(fields)
        with pytest.raises(ValidationFailure):
            service.create_transaction(1, payload)
        assert mock_store.method_calls == []


class TestTransactionService:
    def test_create_normalizes(self, store, account_id, categories):
        svc = TransactionService(store)
        row = svc.create_transaction(
            account_id,
            {
                "type": "expense",
                "amount": "249.50",
                "category_id": categories["Food"].id,
                "description": "  Lunch   with team ",
                "occurred_at": "2026-03-04",
            },
        )
        assert row.id is not None
        assert row.type == TxnType.EXPENSE
        assert row.amount == Decimal("249.50")
        assert row.description == "Lunch with team"
        assert row.occurred_at == date(2026, 3, 4)
        assert row.recurrence == RecurrenceType.ONE_TIME

    def test_category_kind_must_admit_type(self, store, account_id, categories):
        svc = TransactionService(store)
        with pytest.raises(ValidationFailure):
            svc.create_transaction(
                account_id,
                {
                    "type": "income",
                    "amount": 100,
                    "category_id": categories["Food"].id,
                    "description": "Refund",
                    "occurred_at": date(2026, 3, 4),
                },
            )

    def test_partial_update_revalidates(self, store, account_id, categories):
        svc = TransactionService(store)
        row = svc.create_transaction(
            account_id,
            {
                "type": TxnType.INCOME,
                "amount": 1000,
                "category_id": categories["Salary"].id,
                "description": "Salary",
                "occurred_at": date(2026, 3, 1),
            },
        )
        updated = svc.update_transaction(account_id, row.id, {"amount": 1200})
        assert updated.amount == Decimal("1200")
        # switching to expense keeps the income-only category, which is invalid
        with pytest.raises(ValidationFailure):
            svc.update_transaction(account_id, row.id, {"type": "expense"})
        with pytest.raises(ValidationFailure):
            svc.update_transaction(account_id, row.id, {"user_id": 5})

    def test_list_by_period_and_delete(self, store, account_id, categories):
        svc = TransactionService(store)
        for day in (date(2026, 2, 28), date(2026, 3, 1), date(2026, 3, 15)):
            svc.create_transaction(
                account_id,
                {
                    "type": "expense",
                    "amount": 10,
                    "category_id": categories["Transport"].id,
                    "description": "Bus",
                    "occurred_at": day,
                },
            )
        march = svc.list_transactions(account_id, MonthPeriod(2, 2026))
        assert [t.occurred_at for t in march] == [date(2026, 3, 15), date(2026, 3, 1)]
        assert len(svc.list_transactions(account_id, ALL_TIME)) == 3

        svc.delete_transaction(account_id, march[0].id)
        assert len(svc.list_transactions(account_id, ALL_TIME)) == 2
        with pytest.raises(RecordNotFound):
            svc.delete_transaction(account_id, march[0].id)


def test_transactions_api_crud(client):
    cats = client.get("/api/categories").json()
    food = next(c for c in cats if c["name"] == "Food")

    r = client.post(
        "/api/transactions",
        json={
            "type": "expense",
            "amount": 320.5,
            "category_id": food["id"],
            "description": "Dinner",
            "occurred_at": "2026-03-10",
        },
    )
    assert r.status_code == 201, r.text
    txn = r.json()
    assert txn["amount"] == 320.5
    assert txn["category"]["name"] == "Food"
    assert txn["recurrence"] == "one-time"

    r = client.get("/api/transactions", params={"month": 2, "year": 2026})
    assert r.status_code == 200
    assert r.headers["X-Total-Count"] == "1"
    assert [t["id"] for t in r.json()] == [txn["id"]]

    r = client.get("/api/transactions", params={"month": 3, "year": 2026})
    assert r.json() == []

    r = client.patch(f"/api/transactions/{txn['id']}", json={"description": "Dinner out"})
    assert r.status_code == 200, r.text
    assert r.json()["description"] == "Dinner out"

    r = client.delete(f"/api/transactions/{txn['id']}")
    assert r.status_code == 204

    r = client.delete(f"/api/transactions/{txn['id']}")
    assert r.status_code == 404


def test_transactions_api_errors(client):
    cats = client.get("/api/categories").json()
    food = next(c for c in cats if c["name"] == "Food")
    base = {
        "type": "expense",
        "amount": 100,
        "category_id": food["id"],
        "description": "Snack",
        "occurred_at": "2026-03-10",
    }

    # schema shape errors stay 422
    assert client.post("/api/transactions", json={**base, "extra": 1}).status_code == 422
    assert client.post("/api/transactions", json={**base, "occurred_at": "not-a-date"}).status_code == 422

    # domain rules are 400
    assert client.post("/api/transactions", json={**base, "amount": -1}).status_code == 400
    assert client.post("/api/transactions", json={**base, "description": "  "}).status_code == 400
    assert client.post("/api/transactions", json={**base, "type": "income"}).status_code == 400


def test_period_query_validation(client):
    assert client.get("/api/transactions", params={"period": "all"}).status_code == 200
    assert client.get("/api/transactions", params={"period": "all", "month": 1}).status_code == 400
    assert client.get("/api/transactions", params={"month": 1}).status_code == 400
    assert client.get("/api/transactions", params={"month": 12, "year": 2026}).status_code == 422
