from sqlmodel import select

from budget_app.models.category import Category
from budget_app.models.membership import BudgetUser
from budget_app.models.plan import Plan
from budget_app.models.transaction import Transaction
from budget_app.services.default_categories import DEFAULT_CATEGORIES


def test_create_budget_seeds_owner_and_categories(client, owner, session):
    user, headers = owner
    resp = client.post("/budgets", json={"name": "  Trip  ", "currency": "HUF"}, headers=headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["name"] == "Trip"
    assert body["currency"] == "HUF"
    assert body["owner_id"] == str(user.id)

    members = session.exec(select(BudgetUser)).all()
    assert [(m.user_id, m.role.value) for m in members] == [(user.id, "OWNER")]
    categories = session.exec(select(Category)).all()
    assert len(categories) == len(DEFAULT_CATEGORIES) == 31


def test_create_budget_defaults_to_usd(client, owner):
    resp = client.post("/budgets", json={"name": "Plain"}, headers=owner[1])
    assert resp.json()["currency"] == "USD"


def test_create_budget_requires_name(client, owner):
    resp = client.post("/budgets", json={"name": "   "}, headers=owner[1])
    assert resp.status_code == 400
    assert resp.json() == {"error": "Budget name is required"}


def test_create_budget_rejects_unknown_currency(client, owner):
    resp = client.post("/budgets", json={"name": "X", "currency": "GBP"}, headers=owner[1])
    assert resp.status_code == 400


def test_list_budgets_includes_owned_and_shared(client, owner, budget_id, add_member, make_user):
    _, visitor_headers, _ = add_member("visitor@example.com", "VISITOR")
    _, stranger_headers = make_user("stranger@example.com")

    owned = client.get("/budgets", headers=owner[1]).json()
    assert [(b["id"], b["role"], b["member_count"]) for b in owned] == [(budget_id, "OWNER", 2)]

    shared = client.get("/budgets", headers=visitor_headers).json()
    assert [(b["id"], b["role"]) for b in shared] == [(budget_id, "VISITOR")]

    assert client.get("/budgets", headers=stranger_headers).json() == []


def test_get_budget_returns_owner_and_role(client, owner, budget_id, add_member):
    _, admin_headers, _ = add_member("admin@example.com", "ADMIN")
    body = client.get(f"/budgets/{budget_id}", headers=admin_headers).json()
    assert body["role"] == "ADMIN"
    assert body["owner"]["email"] == "owner@example.com"
    assert body["owner"]["name"] == "Olivia Owner"


def test_non_member_gets_403_and_missing_budget_404(client, budget_id, make_user):
    _, headers = make_user("stranger@example.com")
    assert client.get(f"/budgets/{budget_id}", headers=headers).status_code == 403
    missing = client.get("/budgets/00000000-0000-0000-0000-000000000000", headers=headers)
    assert missing.status_code == 404
    assert missing.json() == {"error": "Budget not found"}


def test_only_owner_updates_budget(client, owner, budget_id, add_member):
    _, admin_headers, _ = add_member("admin@example.com", "ADMIN")
    assert client.patch(f"/budgets/{budget_id}", json={"name": "Mine"}, headers=admin_headers).status_code == 403

    resp = client.patch(f"/budgets/{budget_id}", json={"name": "Family", "currency": "USD"}, headers=owner[1])
    assert resp.status_code == 200
    assert (resp.json()["name"], resp.json()["currency"]) == ("Family", "USD")


def test_update_budget_without_fields(client, owner, budget_id):
    resp = client.patch(f"/budgets/{budget_id}", json={}, headers=owner[1])
    assert resp.status_code == 400


def test_delete_budget_cascades(client, owner, budget_id, add_member, category_id, session):
    add_member("admin@example.com", "ADMIN")
    groceries = category_id("Groceries")
    client.post(
        "/transactions",
        json={"budget_id": budget_id, "type": "EXPENSE", "amount": 12.5, "transaction_date": "2026-03-01",
              "category_id": groceries},
        headers=owner[1],
    )
    client.post(
        "/plans",
        json={"budget_id": budget_id, "type": "EXPENSE", "category_id": groceries, "year": 2026, "amount": 100},
        headers=owner[1],
    )

    assert client.delete(f"/budgets/{budget_id}", headers=owner[1]).status_code == 204

    for model in (Transaction, Plan, Category, BudgetUser):
        assert session.exec(select(model)).all() == []
    assert client.get("/budgets", headers=owner[1]).json() == []


def test_admin_cannot_delete_budget(client, budget_id, add_member):
    _, admin_headers, _ = add_member("admin@example.com", "ADMIN")
    assert client.delete(f"/budgets/{budget_id}", headers=admin_headers).status_code == 403
