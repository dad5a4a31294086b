"""
Yearly statistics for a budget: totals per transaction type against plan,
a month-by-month breakdown, spending per category and monthly averages.

All amounts handed in must already be expressed in the budget's currency.
"""
import calendar
import math
import uuid
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.currency import Currency, format_currency
from ..models.category import Category
from ..models.enums import TransactionType
from ..models.plan import Plan
from ..models.transaction import Transaction


TYPE_KEYS = {
    TransactionType.INCOME: "income",
    TransactionType.EXPENSE: "expense",
    TransactionType.DEBT: "debt",
    TransactionType.SAVINGS: "savings",
}


def progress_message(type_: TransactionType, actual: float, planned: float, currency: Currency) -> Dict[str, str]:
    diff = actual - planned
    percent = math.floor(actual / planned * 100 + 0.5) if planned > 0 else 0

    if type_ in (TransactionType.INCOME, TransactionType.SAVINGS):
        if diff >= 0:
            return {"message": "You've reached your goal", "value": f"+{format_currency(abs(diff), currency)}"}
        return {
            "message": f"You are {format_currency(abs(diff), currency)} away from your plan",
            "value": f"{percent}%",
        }

    if type_ == TransactionType.DEBT:
        if diff >= 0:
            return {"message": "You paid your yearly debts", "value": f"+{format_currency(abs(diff), currency)}"}
        return {
            "message": f"You are {format_currency(abs(diff), currency)} away from paying debts",
            "value": f"{percent}%",
        }

    # Expenses are good when they stay under plan
    if diff > 0:
        return {"message": f"You've exceeded your expenses by {format_currency(diff, currency)}", "value": f"{percent}%"}
    return {"message": f"You are {format_currency(abs(diff), currency)} under your plan", "value": f"{percent}%"}


def _monthly_stats(actuals: List[float], planned: List[float]) -> Dict[str, float]:
    positive = [value for value in actuals if value > 0]
    return {
        "planned_avg": sum(planned) / len(planned) if planned else 0,
        "actual_avg": sum(actuals) / len(actuals) if actuals else 0,
        "highest": max(actuals + [0]),
        "lowest": min(positive) if positive else 0,
    }


def compute_statistics(
    year: int,
    currency: Currency,
    transactions: Sequence[Tuple[Transaction, float]],
    plans: Sequence[Tuple[Plan, float]],
    categories: Mapping[uuid.UUID, Category],
) -> dict:
    """Aggregate ``(transaction, amount)`` and ``(plan, amount)`` pairs for ``year``.

    Only transactions dated in ``year`` and plans for ``year`` are counted.
    """
    year_transactions = [(t, amount) for t, amount in transactions if t.transaction_date.year == year]
    year_plans = [(p, amount) for p, amount in plans if p.year == year]

    totals = {}
    for type_, key in TYPE_KEYS.items():
        actual = sum(amount for t, amount in year_transactions if t.type == type_)
        yearly_planned = sum(amount for p, amount in year_plans if p.type == type_ and p.month is None)
        monthly_planned = sum(amount for p, amount in year_plans if p.type == type_ and p.month is not None)
        planned = yearly_planned or monthly_planned
        totals[key] = {
            "actual": actual,
            "planned": planned,
            "progress": progress_message(type_, actual, planned, currency),
        }

    monthly_data = []
    for month in range(1, 13):
        entry = {"month": month, "month_name": calendar.month_abbr[month]}
        for type_, key in TYPE_KEYS.items():
            entry[key] = {
                "actual": sum(
                    amount
                    for t, amount in year_transactions
                    if t.type == type_ and t.transaction_date.month == month
                ),
                "planned": sum(amount for p, amount in year_plans if p.type == type_ and p.month == month),
            }
        monthly_data.append(entry)

    breakdown: Dict[uuid.UUID, dict] = {}
    for t, amount in year_transactions:
        category: Optional[Category] = categories.get(t.category_id) if t.category_id else None
        if category is None:
            continue
        if category.id not in breakdown:
            breakdown[category.id] = {
                "id": category.id,
                "name": category.name,
                "emoji": category.emoji,
                "type": category.type,
                "amount": 0.0,
            }
        breakdown[category.id]["amount"] += amount
    category_data = sorted(breakdown.values(), key=lambda c: c["amount"], reverse=True)

    monthly_stats = {
        key: _monthly_stats(
            [m[key]["actual"] for m in monthly_data],
            [m[key]["planned"] for m in monthly_data],
        )
        for key in TYPE_KEYS.values()
    }

    return {
        "year": year,
        "currency": Currency(currency),
        "totals": totals,
        "monthly_data": monthly_data,
        "category_data": category_data,
        "monthly_stats": monthly_stats,
    }
