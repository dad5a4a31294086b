from sqlmodel import select

from budget_app.models.plan import Plan
from budget_app.models.transaction import Transaction


def test_list_filters_by_type(client, owner, budget_id):
    resp = client.get("/categories", params={"budget_id": budget_id, "type": "DEBT"}, headers=owner[1])
    assert resp.status_code == 200
    names = [c["name"] for c in resp.json()]
    assert names == sorted(names)
    assert "Mortgage" in names
    assert {c["type"] for c in resp.json()} == {"DEBT"}


def test_visitor_can_list_but_not_create(client, budget_id, add_member):
    _, visitor_headers, _ = add_member("visitor@example.com", "VISITOR")
    assert client.get("/categories", params={"budget_id": budget_id}, headers=visitor_headers).status_code == 200

    resp = client.post(
        "/categories",
        json={"budget_id": budget_id, "name": "Pets", "type": "EXPENSE"},
        headers=visitor_headers,
    )
    assert resp.status_code == 403


def test_admin_creates_and_updates_category(client, budget_id, add_member):
    _, admin_headers, _ = add_member("admin@example.com", "ADMIN")
    resp = client.post(
        "/categories",
        json={"budget_id": budget_id, "name": " Pets ", "emoji": "🐶", "type": "EXPENSE"},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    created = resp.json()
    assert (created["name"], created["emoji"]) == ("Pets", "🐶")

    resp = client.patch(f"/categories/{created['id']}", json={"name": "Pet care", "emoji": None}, headers=admin_headers)
    assert resp.status_code == 200
    assert (resp.json()["name"], resp.json()["emoji"]) == ("Pet care", None)


def test_create_requires_name(client, owner, budget_id):
    resp = client.post("/categories", json={"budget_id": budget_id, "name": " ", "type": "INCOME"}, headers=owner[1])
    assert resp.status_code == 400
    assert resp.json() == {"error": "Category name is required"}


def test_type_change_blocked_while_plans_exist(client, owner, budget_id, category_id):
    rent = category_id("Rent")
    client.post(
        "/plans",
        json={"budget_id": budget_id, "type": "EXPENSE", "category_id": rent, "year": 2026, "amount": 900},
        headers=owner[1],
    )
    resp = client.patch(f"/categories/{rent}", json={"type": "DEBT"}, headers=owner[1])
    assert resp.status_code == 400

    gas = category_id("Gas")
    resp = client.patch(f"/categories/{gas}", json={"type": "DEBT"}, headers=owner[1])
    assert resp.status_code == 200
    assert resp.json()["type"] == "DEBT"


def test_type_change_blocked_while_transactions_use_category(client, owner, budget_id, category_id):
    groceries = category_id("Groceries")
    client.post(
        "/transactions",
        json={"budget_id": budget_id, "type": "EXPENSE", "amount": 30, "transaction_date": "2026-02-01",
              "category_id": groceries},
        headers=owner[1],
    )
    resp = client.patch(f"/categories/{groceries}", json={"type": "INCOME"}, headers=owner[1])
    assert resp.status_code == 400
    assert resp.json() == {"error": "Cannot change the type of a category that has transactions"}

    listed = client.get("/categories", params={"budget_id": budget_id, "type": "EXPENSE"}, headers=owner[1]).json()
    assert "Groceries" in [c["name"] for c in listed]

    resp = client.patch(f"/categories/{groceries}", json={"name": "Food"}, headers=owner[1])
    assert resp.status_code == 200

def test_delete_uncategorises_transactions_and_drops_plans(client, owner, budget_id, category_id, session):
    rent = category_id("Rent")
    tx = client.post(
        "/transactions",
        json={"budget_id": budget_id, "type": "EXPENSE", "amount": 900, "transaction_date": "2026-02-01",
              "category_id": rent},
        headers=owner[1],
    ).json()
    client.post(
        "/plans",
        json={"budget_id": budget_id, "type": "EXPENSE", "category_id": rent, "year": 2026, "amount": 900},
        headers=owner[1],
    )

    assert client.delete(f"/categories/{rent}", headers=owner[1]).status_code == 204

    session.expire_all()
    assert session.exec(select(Plan)).all() == []
    assert session.exec(select(Transaction)).one().category_id is None
    assert client.get(f"/transactions/{tx['id']}", headers=owner[1]).json()["category"] is None


def test_unknown_category_is_404(client, owner):
    resp = client.delete("/categories/00000000-0000-0000-0000-000000000000", headers=owner[1])
    assert resp.status_code == 404
