import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Field, Session, SQLModel, select

from ..core.access import require_budget_access
from ..core.permissions import can_edit_categories
from ..core.security import get_current_user
from ..database import get_session
from ..models.category import Category
from ..models.enums import TransactionType
from ..models.plan import Plan
from ..models.transaction import Transaction
from ..models.user import User
from ..schemas import CategoryRead


router = APIRouter(
    prefix="/categories",
    tags=["categories"],
)


class CategoryCreate(SQLModel):
    budget_id: uuid.UUID
    name: str = Field(max_length=50)
    emoji: Optional[str] = Field(default=None, max_length=16)
    type: TransactionType


class CategoryUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=50)
    emoji: Optional[str] = Field(default=None, max_length=16)
    type: Optional[TransactionType] = None


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category name is required")
    return cleaned


def _clean_emoji(emoji: Optional[str]) -> Optional[str]:
    return (emoji or "").strip() or None


def _get_editable_category(session: Session, category_id: uuid.UUID, current_user: User) -> Category:
    category = session.get(Category, category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    role = require_budget_access(session, category.budget_id, current_user)
    if not can_edit_categories(role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return category


@router.get(
    "",
    response_model=List[CategoryRead],
)
def list_categories(
    budget_id: uuid.UUID,
    type: Optional[TransactionType] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_budget_access(session, budget_id, current_user)
    stmt = select(Category).where(Category.budget_id == budget_id)
    if type is not None:
        stmt = stmt.where(Category.type == type)
    stmt = stmt.order_by(Category.type.asc(), Category.name.asc())
    return list(session.exec(stmt).all())


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    role = require_budget_access(session, payload.budget_id, current_user)
    if not can_edit_categories(role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    now = datetime.utcnow()
    category = Category(
        id=uuid.uuid4(),
        budget_id=payload.budget_id,
        name=_clean_name(payload.name),
        emoji=_clean_emoji(payload.emoji),
        type=payload.type,
        created_at=now,
        updated_at=now,
    )
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@router.patch(
    "/{category_id}",
    response_model=CategoryRead,
)
def update_category(
    category_id: uuid.UUID,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    category = _get_editable_category(session, category_id, current_user)
    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    if "name" in changes:
        category.name = _clean_name(payload.name)
    if "emoji" in changes:
        category.emoji = _clean_emoji(payload.emoji)
    if payload.type is not None and payload.type != category.type:
        # Plans and transactions must keep the type of their category
        planned = session.exec(select(Plan).where(Plan.category_id == category.id)).first()
        if planned is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot change the type of a category that has plans",
            )
        used = session.exec(select(Transaction).where(Transaction.category_id == category.id)).first()
        if used is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot change the type of a category that has transactions",
            )
        category.type = payload.type

    category.updated_at = datetime.utcnow()
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_category(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Delete a category; its transactions become uncategorised and its plans are removed."""
    category = _get_editable_category(session, category_id, current_user)

    for transaction in session.exec(select(Transaction).where(Transaction.category_id == category.id)).all():
        transaction.category_id = None
        session.add(transaction)
    for plan in session.exec(select(Plan).where(Plan.category_id == category.id)).all():
        session.delete(plan)
    session.flush()

    session.delete(category)
    session.commit()
    return None
