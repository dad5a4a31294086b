import logging
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, or_
from sqlmodel import Field, Session, SQLModel, select

from ..core.access import get_budget_or_404, require_budget_access
from ..core.currency import Currency
from ..core.permissions import can_delete_budget, can_update_budget
from ..core.security import get_current_user
from ..database import get_session
from ..models.budget import Budget
from ..models.category import Category
from ..models.enums import Role
from ..models.membership import BudgetUser
from ..models.plan import Plan
from ..models.transaction import Transaction
from ..models.user import User
from ..schemas import UserPublic, user_public
from ..services.default_categories import seed_default_categories


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)


class BudgetCreate(SQLModel):
    name: str = Field(max_length=100)
    currency: Currency = Currency.USD


class BudgetUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=100)
    currency: Optional[Currency] = None


class BudgetRead(SQLModel):
    id: uuid.UUID
    name: str
    currency: Currency
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class BudgetSummary(BudgetRead):
    role: Role
    transaction_count: int
    member_count: int


class BudgetDetail(BudgetRead):
    role: Role
    owner: UserPublic


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Budget name is required")
    return cleaned


def _count(session: Session, model, budget_id: uuid.UUID) -> int:
    return session.exec(select(func.count()).select_from(model).where(model.budget_id == budget_id)).one()


@router.get(
    "",
    response_model=List[BudgetSummary],
    status_code=status.HTTP_200_OK,
)
def list_budgets(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Budgets the caller owns or belongs to, newest first."""
    memberships = session.exec(select(BudgetUser).where(BudgetUser.user_id == current_user.id)).all()
    roles = {m.budget_id: m.role for m in memberships}

    stmt = (
        select(Budget)
        .where(or_(Budget.owner_id == current_user.id, Budget.id.in_(list(roles))))
        .order_by(Budget.created_at.desc())
    )
    summaries = []
    for budget in session.exec(stmt).all():
        role = Role.OWNER if budget.owner_id == current_user.id else roles[budget.id]
        summaries.append(
            BudgetSummary(
                **budget.model_dump(),
                role=role,
                transaction_count=_count(session, Transaction, budget.id),
                member_count=_count(session, BudgetUser, budget.id),
            )
        )
    return summaries


@router.post(
    "",
    response_model=BudgetRead,
    status_code=status.HTTP_201_CREATED,
)
def create_budget(
    payload: BudgetCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    now = datetime.utcnow()
    budget = Budget(
        id=uuid.uuid4(),
        name=_clean_name(payload.name),
        currency=payload.currency,
        owner_id=current_user.id,
        created_at=now,
        updated_at=now,
    )
    session.add(budget)
    session.flush()
    session.add(BudgetUser(budget_id=budget.id, user_id=current_user.id, role=Role.OWNER, created_at=now))
    seed_default_categories(session, budget.id)
    session.commit()
    session.refresh(budget)
    logger.info(f"Created budget {budget.id} for user {current_user.id}")
    return budget


@router.get(
    "/{budget_id}",
    response_model=BudgetDetail,
)
def get_budget(
    budget_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    role = require_budget_access(session, budget_id, current_user)
    budget = get_budget_or_404(session, budget_id)
    owner = session.get(User, budget.owner_id)
    return BudgetDetail(**budget.model_dump(), role=role, owner=user_public(owner))


@router.patch(
    "/{budget_id}",
    response_model=BudgetRead,
)
def update_budget(
    budget_id: uuid.UUID,
    payload: BudgetUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Rename the budget or change its currency; owners only."""
    role = require_budget_access(session, budget_id, current_user)
    if not can_update_budget(role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    budget = get_budget_or_404(session, budget_id)
    if payload.name is None and payload.currency is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    if payload.name is not None:
        budget.name = _clean_name(payload.name)
    if payload.currency is not None:
        budget.currency = payload.currency

    budget.updated_at = datetime.utcnow()
    session.add(budget)
    session.commit()
    session.refresh(budget)
    return budget


@router.delete(
    "/{budget_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_budget(
    budget_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    role = require_budget_access(session, budget_id, current_user)
    if not can_delete_budget(role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    # Children first so foreign keys hold on every backend
    for model in (Transaction, Plan, Category, BudgetUser):
        for row in session.exec(select(model).where(model.budget_id == budget_id)).all():
            session.delete(row)
        session.flush()
    session.delete(get_budget_or_404(session, budget_id))
    session.commit()
    logger.info(f"Deleted budget {budget_id}")
    return None
