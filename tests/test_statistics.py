import uuid
from datetime import date

import pytest

from budget_app.core.currency import Currency
from budget_app.models.category import Category
from budget_app.models.enums import TransactionType
from budget_app.models.exchange_rate import ExchangeRate
from budget_app.models.plan import Plan
from budget_app.models.transaction import Transaction
from budget_app.services.statistics import compute_statistics, progress_message


BUDGET = uuid.uuid4()
USER = uuid.uuid4()


def make_category(name, type_):
    return Category(id=uuid.uuid4(), budget_id=BUDGET, name=name, emoji=None, type=type_)


def make_tx(type_, amount, day, category=None):
    return (
        Transaction(
            budget_id=BUDGET,
            user_id=USER,
            type=type_,
            amount=amount,
            currency=Currency.EUR,
            transaction_date=day,
            category_id=category.id if category else None,
        ),
        amount,
    )


def make_plan(type_, amount, month=None, year=2026):
    return (
        Plan(
            budget_id=BUDGET,
            category_id=uuid.uuid4(),
            type=type_,
            year=year,
            month=month,
            amount=amount,
            currency=Currency.EUR,
        ),
        amount,
    )


@pytest.fixture
def stats():
    groceries = make_category("Groceries", TransactionType.EXPENSE)
    rent = make_category("Rent", TransactionType.EXPENSE)
    transactions = [
        make_tx(TransactionType.INCOME, 1500, date(2026, 1, 25)),
        make_tx(TransactionType.EXPENSE, 300, date(2026, 1, 10), groceries),
        make_tx(TransactionType.EXPENSE, 200, date(2026, 2, 1), rent),
        make_tx(TransactionType.EXPENSE, 999, date(2025, 12, 31), groceries),
    ]
    plans = [
        make_plan(TransactionType.INCOME, 1000, month=1),
        make_plan(TransactionType.INCOME, 1000, month=2),
        make_plan(TransactionType.EXPENSE, 1200),
        make_plan(TransactionType.EXPENSE, 50, year=2025),
    ]
    categories = {groceries.id: groceries, rent.id: rent}
    return compute_statistics(2026, Currency.EUR, transactions, plans, categories)


def test_totals_against_plan(stats):
    income = stats["totals"]["income"]
    assert (income["actual"], income["planned"]) == (1500, 2000)
    assert income["progress"] == {"message": "You are €500.00 away from your plan", "value": "75%"}

    expense = stats["totals"]["expense"]
    assert (expense["actual"], expense["planned"]) == (500, 1200)
    assert expense["progress"] == {"message": "You are €700.00 under your plan", "value": "42%"}

    debt = stats["totals"]["debt"]
    assert debt["progress"] == {"message": "You paid your yearly debts", "value": "+€0.00"}


def test_monthly_breakdown(stats):
    months = stats["monthly_data"]
    assert len(months) == 12
    assert months[0]["month_name"] == "Jan"
    assert months[0]["income"] == {"actual": 1500, "planned": 1000}
    assert months[1]["expense"] == {"actual": 200, "planned": 0}
    assert months[11]["expense"]["actual"] == 0


def test_category_breakdown_sorted_by_amount(stats):
    assert [(c["name"], c["amount"]) for c in stats["category_data"]] == [("Groceries", 300), ("Rent", 200)]


def test_monthly_stats(stats):
    expense = stats["monthly_stats"]["expense"]
    assert expense["actual_avg"] == pytest.approx(500 / 12)
    assert (expense["highest"], expense["lowest"], expense["planned_avg"]) == (300, 200, 0)
    assert stats["monthly_stats"]["savings"] == {"planned_avg": 0, "actual_avg": 0, "highest": 0, "lowest": 0}


def test_progress_messages():
    over = progress_message(TransactionType.EXPENSE, 150, 100, Currency.USD)
    assert over == {"message": "You've exceeded your expenses by $50.00", "value": "150%"}

    reached = progress_message(TransactionType.SAVINGS, 120, 100, Currency.HUF)
    assert reached == {"message": "You've reached your goal", "value": "+20 Ft"}

    debt = progress_message(TransactionType.DEBT, 25, 100, Currency.USD)
    assert debt == {"message": "You are $75.00 away from paying debts", "value": "25%"}

    unplanned = progress_message(TransactionType.INCOME, 0, 0, Currency.USD)
    assert unplanned["value"] == "+$0.00"


def test_progress_percent_rounds_halves_up():
    assert progress_message(TransactionType.SAVINGS, 12.5, 100, Currency.USD)["value"] == "13%"
    assert progress_message(TransactionType.EXPENSE, 1, 8, Currency.USD)["value"] == "13%"
    assert progress_message(TransactionType.DEBT, 2.5, 100, Currency.HUF) == {
        "message": "You are 98 Ft away from paying debts",
        "value": "3%",
    }


def test_statistics_endpoint_converts_to_budget_currency(client, owner, budget_id, category_id, session):
    session.add(ExchangeRate(from_currency=Currency.HUF, to_currency=Currency.EUR, rate=0.0025, rate_date=date.today()))
    session.commit()
    groceries = category_id("Groceries")
    for amount, currency in ((40, "EUR"), (4000, "HUF")):
        client.post(
            "/transactions",
            json={"budget_id": budget_id, "type": "EXPENSE", "amount": amount, "currency": currency,
                  "transaction_date": "2026-03-15", "category_id": groceries},
            headers=owner[1],
        )
    client.post(
        "/plans",
        json={"budget_id": budget_id, "type": "EXPENSE", "category_id": groceries, "year": 2026, "amount": 100},
        headers=owner[1],
    )

    resp = client.get("/statistics", params={"budget_id": budget_id, "year": 2026}, headers=owner[1])
    assert resp.status_code == 200
    body = resp.json()
    assert body["currency"] == "EUR"
    assert body["totals"]["expense"]["actual"] == pytest.approx(50)
    assert body["totals"]["expense"]["planned"] == 100
    assert body["monthly_data"][2]["expense"]["actual"] == pytest.approx(50)
    assert body["category_data"][0]["name"] == "Groceries"


def test_statistics_requires_membership(client, budget_id, make_user):
    _, headers = make_user("stranger@example.com")
    resp = client.get("/statistics", params={"budget_id": budget_id}, headers=headers)
    assert resp.status_code == 403
