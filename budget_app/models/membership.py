import uuid
from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

from .enums import Role


class BudgetUser(SQLModel, table=True):
    """Membership of a user in a budget, carrying the user's role there."""

    __tablename__ = "budget_users"
    __table_args__ = (UniqueConstraint("budget_id", "user_id", name="uq_budget_users_budget_user"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    budget_id: uuid.UUID = Field(foreign_key="budgets.id", index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    role: Role = Field(default=Role.VISITOR)

    created_at: datetime = Field(default_factory=datetime.utcnow)
