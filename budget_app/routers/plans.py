import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Field, Session, SQLModel, select

from ..core.access import get_budget_or_404, require_budget_access
from ..core.currency import Currency
from ..core.permissions import can_edit_plans
from ..core.security import get_current_user
from ..database import get_session
from ..models.category import Category
from ..models.enums import TransactionType
from ..models.plan import Plan
from ..models.user import User
from ..schemas import CategoryRead, category_read


router = APIRouter(
    prefix="/plans",
    tags=["plans"],
)


class PlanCreate(SQLModel):
    budget_id: uuid.UUID
    type: TransactionType
    category_id: uuid.UUID
    year: int = Field(ge=1970, le=2100)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    amount: float = Field(ge=0)
    currency: Optional[Currency] = None


class PlanUpdate(SQLModel):
    amount: Optional[float] = Field(default=None, ge=0)
    currency: Optional[Currency] = None
    category_id: Optional[uuid.UUID] = None
    month: Optional[int] = Field(default=None, ge=1, le=12)


class PlanRead(SQLModel):
    id: uuid.UUID
    budget_id: uuid.UUID
    type: TransactionType
    category_id: uuid.UUID
    year: int
    month: Optional[int] = None
    amount: float
    currency: Currency
    created_at: datetime
    updated_at: datetime
    category: Optional[CategoryRead] = None


class BulkDeleteOut(SQLModel):
    message: str
    count: int


def _plan_read(session: Session, plan: Plan) -> PlanRead:
    category = session.get(Category, plan.category_id)
    return PlanRead(**plan.model_dump(), category=category_read(category) if category else None)


def _require_plan_editor(session: Session, budget_id: uuid.UUID, current_user: User) -> None:
    role = require_budget_access(session, budget_id, current_user)
    if not can_edit_plans(role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def _validate_category(session: Session, category_id: uuid.UUID, budget_id: uuid.UUID, type_: TransactionType) -> None:
    category = session.get(Category, category_id)
    if not category or category.budget_id != budget_id or category.type != type_:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid category")


def _find_plan(
    session: Session,
    budget_id: uuid.UUID,
    type_: TransactionType,
    year: int,
    month: Optional[int],
    category_id: uuid.UUID,
) -> Optional[Plan]:
    # month == None compiles to IS NULL for yearly plans
    return session.exec(
        select(Plan).where(
            Plan.budget_id == budget_id,
            Plan.type == type_,
            Plan.year == year,
            Plan.month == month,
            Plan.category_id == category_id,
        )
    ).first()


@router.get(
    "",
    response_model=List[PlanRead],
)
def list_plans(
    budget_id: uuid.UUID,
    year: int = Query(ge=1970, le=2100),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_budget_access(session, budget_id, current_user)
    plans = session.exec(
        select(Plan)
        .where(Plan.budget_id == budget_id, Plan.year == year)
        .order_by(Plan.type.asc(), Plan.month.asc())
    ).all()
    return [_plan_read(session, p) for p in plans]


@router.post(
    "",
    response_model=PlanRead,
    status_code=status.HTTP_201_CREATED,
)
def upsert_plan(
    payload: PlanCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Create the plan for (budget, type, year, month, category) or overwrite its amount."""
    _require_plan_editor(session, payload.budget_id, current_user)
    _validate_category(session, payload.category_id, payload.budget_id, payload.type)

    budget = get_budget_or_404(session, payload.budget_id)
    currency = payload.currency or budget.currency
    now = datetime.utcnow()

    existing = _find_plan(
        session, payload.budget_id, payload.type, payload.year, payload.month, payload.category_id
    )
    if existing is None:
        plan = Plan(
            id=uuid.uuid4(),
            budget_id=payload.budget_id,
            type=payload.type,
            category_id=payload.category_id,
            year=payload.year,
            month=payload.month,
            amount=payload.amount,
            currency=currency,
            created_at=now,
            updated_at=now,
        )
    else:
        plan = existing
        plan.amount = payload.amount
        plan.currency = currency
        plan.updated_at = now

    session.add(plan)
    session.commit()
    session.refresh(plan)
    return _plan_read(session, plan)


@router.delete(
    "/bulk",
    response_model=BulkDeleteOut,
)
def delete_plans_bulk(
    budget_id: uuid.UUID,
    type: TransactionType,
    year: int = Query(ge=1970, le=2100),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Delete every plan of one type for a year."""
    _require_plan_editor(session, budget_id, current_user)

    plans = session.exec(
        select(Plan).where(Plan.budget_id == budget_id, Plan.type == type, Plan.year == year)
    ).all()
    for plan in plans:
        session.delete(plan)
    session.commit()
    return BulkDeleteOut(message=f"Deleted {len(plans)} plan(s)", count=len(plans))


@router.patch(
    "/{plan_id}",
    response_model=PlanRead,
)
def update_plan(
    plan_id: uuid.UUID,
    payload: PlanUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    plan = session.get(Plan, plan_id)
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    _require_plan_editor(session, plan.budget_id, current_user)

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    if "amount" in changes and payload.amount is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="amount cannot be null")

    category_id = plan.category_id
    if payload.category_id is not None:
        _validate_category(session, payload.category_id, plan.budget_id, plan.type)
        category_id = payload.category_id
    # An explicit null month turns the plan into a yearly one
    month = payload.month if "month" in changes else plan.month

    if (category_id, month) != (plan.category_id, plan.month):
        clash = _find_plan(session, plan.budget_id, plan.type, plan.year, month, category_id)
        if clash is not None and clash.id != plan.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="A plan already exists for this category and period",
            )

    if payload.amount is not None:
        plan.amount = payload.amount
    if payload.currency is not None:
        plan.currency = payload.currency
    plan.category_id = category_id
    plan.month = month
    plan.updated_at = datetime.utcnow()

    session.add(plan)
    session.commit()
    session.refresh(plan)
    return _plan_read(session, plan)


@router.delete(
    "/{plan_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_plan(
    plan_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    plan = session.get(Plan, plan_id)
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    _require_plan_editor(session, plan.budget_id, current_user)

    session.delete(plan)
    session.commit()
    return None
