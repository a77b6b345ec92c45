from __future__ import annotations


def _category_id(client, name):
    return next(c["id"] for c in client.get("/api/categories").json() if c["name"] == name)


def _create_netflix(client):
    r = client.post(
        "/api/recurring-expenses",
        params={"month": 2, "year": 2026},
        json={
            "description": "Netflix",
            "amount": 500,
            "category_id": _category_id(client, "Entertainment"),
            "due_day": 15,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_recurring_expense_paid_cycle(client):
    netflix = _create_netflix(client)
    assert netflix["is_paid"] is False
    assert netflix["recurrence"] == "monthly"
    assert netflix["paid_transaction_id"] is None

    r = client.post(f"/api/recurring-expenses/{netflix['id']}/mark-paid", json={"month": 2, "year": 2026})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["transaction"]["occurred_at"] == "2026-03-15"
    assert body["transaction"]["amount"] == 500.0
    assert body["expense"]["is_paid"] is True
    assert body["expense"]["paid_for_month"] == 3
    assert body["expense"]["paid_transaction_id"] == body["transaction"]["id"]

    march = client.get("/api/recurring-expenses", params={"month": 2, "year": 2026}).json()
    assert march["items"][0]["is_paid"] is True
    assert march["paid_total"] == 500.0
    april = client.get("/api/recurring-expenses", params={"month": 3, "year": 2026}).json()
    assert april["items"][0]["is_paid"] is False
    assert april["unpaid_count"] == 1

    # the payment shows up as a regular expense in March
    txns = client.get("/api/transactions", params={"month": 2, "year": 2026}).json()
    assert [t["description"] for t in txns] == ["Netflix"]

    r = client.post(f"/api/recurring-expenses/{netflix['id']}/mark-paid", json={"month": 2, "year": 2026})
    assert r.status_code == 409

    r = client.post(f"/api/recurring-expenses/{netflix['id']}/mark-unpaid", params={"month": 2, "year": 2026})
    assert r.status_code == 200, r.text
    assert r.json()["removed_transaction_id"] == body["transaction"]["id"]
    assert r.json()["self_healed"] is False
    assert client.get("/api/transactions", params={"month": 2, "year": 2026}).json() == []

    r = client.post(f"/api/recurring-expenses/{netflix['id']}/mark-unpaid", params={"month": 2, "year": 2026})
    assert r.status_code == 409


def test_recurring_expense_edit_duplicate_delete(client):
    netflix = _create_netflix(client)

    r = client.patch(f"/api/recurring-expenses/{netflix['id']}", json={"amount": 650, "due_day": 31})
    assert r.status_code == 200, r.text
    assert r.json()["amount"] == 650.0
    assert r.json()["due_day"] == 31

    r = client.post(f"/api/recurring-expenses/{netflix['id']}/duplicate")
    assert r.status_code == 201, r.text
    copy = r.json()
    assert copy["description"] == "Netflix (Copy)"

    r = client.post(f"/api/recurring-expenses/{netflix['id']}/mark-paid", json={"month": 1, "year": 2026})
    assert r.json()["transaction"]["occurred_at"] == "2026-02-28"

    r = client.delete(f"/api/recurring-expenses/{netflix['id']}", params={"month": 1, "year": 2026})
    assert r.status_code == 200, r.text
    assert r.json()["removed_transaction_id"] is not None
    assert r.json()["cleanup_error"] is None

    rows = client.get("/api/recurring-expenses", params={"period": "all"}).json()["items"]
    assert [row["id"] for row in rows] == [copy["id"]]
    assert client.delete(f"/api/recurring-expenses/{netflix['id']}").status_code == 404


def test_recurring_expense_validation(client):
    netflix = _create_netflix(client)
    base = {
        "description": "Gym",
        "amount": 900,
        "category_id": _category_id(client, "Health"),
        "due_day": 5,
    }
    assert client.post("/api/recurring-expenses", json={**base, "due_day": 0}).status_code == 422
    assert client.post("/api/recurring-expenses", json={**base, "amount": 0}).status_code == 400
    assert client.post(
        "/api/recurring-expenses", json={**base, "category_id": _category_id(client, "Salary")}
    ).status_code == 400
    r = client.post(f"/api/recurring-expenses/{netflix['id']}/mark-paid", json={"month": 12, "year": 2026})
    assert r.status_code == 422
    assert client.post("/api/recurring-expenses/999999/mark-paid", json={"month": 0, "year": 2026}).status_code == 404


def test_later_month_cannot_undo_or_delete_earlier_payment(client):
    netflix = _create_netflix(client)
    paid = client.post(
        f"/api/recurring-expenses/{netflix['id']}/mark-paid", json={"month": 2, "year": 2026}
    ).json()
    april = {"month": 3, "year": 2026}

    r = client.post(f"/api/recurring-expenses/{netflix['id']}/mark-unpaid", params=april)
    assert r.status_code == 409

    r = client.delete(f"/api/recurring-expenses/{netflix['id']}", params=april)
    assert r.status_code == 200, r.text
    assert r.json()["removed_transaction_id"] is None

    march = client.get("/api/transactions", params={"month": 2, "year": 2026}).json()
    assert [t["id"] for t in march] == [paid["transaction"]["id"]]
    summary = client.get("/api/summary", params={"month": 2, "year": 2026}).json()
    assert summary["totals"]["expenses"] == 500.0


def test_deleting_the_payment_heals_the_listing(client):
    netflix = _create_netflix(client)
    paid = client.post(
        f"/api/recurring-expenses/{netflix['id']}/mark-paid", json={"month": 2, "year": 2026}
    ).json()

    r = client.delete(f"/api/transactions/{paid['transaction']['id']}")
    assert r.status_code == 204

    listing = client.get("/api/recurring-expenses", params={"month": 2, "year": 2026}).json()
    assert listing["healed_ids"] == [netflix["id"]]
    item = listing["items"][0]
    assert item["is_paid"] is False
    assert item["linked_transaction_id"] is None
    assert item["paid_for_month"] is None

    # the next load finds nothing to heal
    listing = client.get("/api/recurring-expenses", params={"month": 2, "year": 2026}).json()
    assert listing["healed_ids"] == []
