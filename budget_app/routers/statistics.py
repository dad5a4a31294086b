import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, select

from ..core.access import get_budget_or_404, require_budget_access
from ..core.security import get_current_user
from ..database import get_session
from ..models.category import Category
from ..models.plan import Plan
from ..models.transaction import Transaction
from ..models.user import User
from ..services.currency_converter import convert_amounts_to_base_currency
from ..services.statistics import compute_statistics


router = APIRouter(
    prefix="/statistics",
    tags=["statistics"],
)


@router.get("")
def get_statistics(
    budget_id: uuid.UUID,
    year: Optional[int] = Query(default=None, ge=1970, le=2100),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Yearly totals, monthly breakdown and category spending in the budget's currency."""
    require_budget_access(session, budget_id, current_user)
    budget = get_budget_or_404(session, budget_id)
    year = year or date.today().year

    transactions = session.exec(
        select(Transaction).where(
            Transaction.budget_id == budget_id,
            Transaction.transaction_date >= date(year, 1, 1),
            Transaction.transaction_date <= date(year, 12, 31),
        )
    ).all()
    plans = session.exec(select(Plan).where(Plan.budget_id == budget_id, Plan.year == year)).all()
    categories = {c.id: c for c in session.exec(select(Category).where(Category.budget_id == budget_id)).all()}

    transaction_amounts = convert_amounts_to_base_currency(session, transactions, budget.currency)
    plan_amounts = convert_amounts_to_base_currency(session, plans, budget.currency)

    return compute_statistics(
        year,
        budget.currency,
        list(zip(transactions, transaction_amounts)),
        list(zip(plans, plan_amounts)),
        categories,
    )
