import logging
import uuid
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import EmailStr
from sqlmodel import Session, SQLModel, select

from ..core.access import require_budget_access
from ..core.permissions import can_manage_users
from ..core.security import get_current_user
from ..database import get_session
from ..models.enums import Role
from ..models.membership import BudgetUser
from ..models.user import User
from ..schemas import UserPublic, user_public


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/budgets/{budget_id}/members",
    tags=["members"],
)


class MemberInvite(SQLModel):
    email: EmailStr
    role: Role


class MemberUpdate(SQLModel):
    role: Role


class MemberRead(SQLModel):
    id: uuid.UUID
    budget_id: uuid.UUID
    user_id: uuid.UUID
    role: Role
    created_at: datetime
    user: UserPublic


def _member_read(session: Session, member: BudgetUser) -> MemberRead:
    user = session.get(User, member.user_id)
    return MemberRead(**member.model_dump(), user=user_public(user))


def _require_manager(session: Session, budget_id: uuid.UUID, current_user: User) -> None:
    role = require_budget_access(session, budget_id, current_user)
    if not can_manage_users(role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def _reject_owner_role(role: Role) -> None:
    if role == Role.OWNER:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot assign OWNER role")


def _get_member_or_404(session: Session, budget_id: uuid.UUID, member_id: uuid.UUID) -> BudgetUser:
    member = session.get(BudgetUser, member_id)
    if not member or member.budget_id != budget_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return member


@router.get(
    "",
    response_model=List[MemberRead],
)
def list_members(
    budget_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    require_budget_access(session, budget_id, current_user)
    members = session.exec(
        select(BudgetUser).where(BudgetUser.budget_id == budget_id).order_by(BudgetUser.created_at.asc())
    ).all()
    return [_member_read(session, m) for m in members]


@router.post(
    "",
    response_model=MemberRead,
    status_code=status.HTTP_201_CREATED,
)
def add_member(
    budget_id: uuid.UUID,
    payload: MemberInvite,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Invite an existing user by email as ADMIN or VISITOR; owners only."""
    _require_manager(session, budget_id, current_user)
    _reject_owner_role(payload.role)

    email_norm = payload.email.strip().lower()
    user = session.exec(select(User).where(User.email == email_norm)).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    existing = session.exec(
        select(BudgetUser).where(
            BudgetUser.budget_id == budget_id,
            BudgetUser.user_id == user.id,
        )
    ).first()
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is already a member")

    member = BudgetUser(budget_id=budget_id, user_id=user.id, role=payload.role)
    session.add(member)
    session.commit()
    session.refresh(member)
    logger.info(f"Added user {user.id} to budget {budget_id} as {payload.role.value}")
    return _member_read(session, member)


@router.patch(
    "/{member_id}",
    response_model=MemberRead,
)
def update_member(
    budget_id: uuid.UUID,
    member_id: uuid.UUID,
    payload: MemberUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    _require_manager(session, budget_id, current_user)
    _reject_owner_role(payload.role)

    member = _get_member_or_404(session, budget_id, member_id)
    if member.role == Role.OWNER:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot change owner role")

    member.role = payload.role
    session.add(member)
    session.commit()
    session.refresh(member)
    return _member_read(session, member)


@router.delete(
    "/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def remove_member(
    budget_id: uuid.UUID,
    member_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    _require_manager(session, budget_id, current_user)

    member = _get_member_or_404(session, budget_id, member_id)
    if member.role == Role.OWNER:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot remove owner")

    session.delete(member)
    session.commit()
    logger.info(f"Removed member {member_id} from budget {budget_id}")
    return None
