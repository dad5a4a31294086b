import uuid
from typing import Optional

from fastapi import HTTPException, status
from sqlmodel import Session, select

from ..models.budget import Budget
from ..models.enums import Role
from ..models.membership import BudgetUser
from ..models.user import User
from .permissions import has_role_at_least


def get_user_budget_role(session: Session, budget_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Role]:
    budget = session.get(Budget, budget_id)
    if budget is None:
        return None

    if budget.owner_id == user_id:
        return Role.OWNER

    membership = session.exec(
        select(BudgetUser).where(
            BudgetUser.budget_id == budget_id,
            BudgetUser.user_id == user_id,
        )
    ).first()
    return membership.role if membership else None


def require_budget_access(
    session: Session,
    budget_id: uuid.UUID,
    user: User,
    required_role: Optional[Role] = None,
) -> Role:
    """Return the user's role in the budget or raise 404/403.

    404 when the budget does not exist, 403 when the user is not a member
    or ranks below ``required_role``.
    """
    if session.get(Budget, budget_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")

    role = get_user_budget_role(session, budget_id, user.id)
    if role is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    if required_role is not None and not has_role_at_least(role, required_role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    return role


def get_budget_or_404(session: Session, budget_id: uuid.UUID) -> Budget:
    budget = session.get(Budget, budget_id)
    if budget is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return budget
