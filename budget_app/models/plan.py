import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

from ..core.currency import Currency
from .enums import TransactionType


class Plan(SQLModel, table=True):
    """Planned amount for a category in a given year, or a single month of it.

    ``month`` is 1..12 for monthly plans and ``None`` for yearly plans.
    """

    __tablename__ = "plans"
    __table_args__ = (
        UniqueConstraint(
            "budget_id", "type", "year", "month", "category_id",
            name="uq_plans_budget_type_period_category",
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    budget_id: uuid.UUID = Field(foreign_key="budgets.id", index=True)
    category_id: uuid.UUID = Field(foreign_key="categories.id", index=True)

    type: TransactionType = Field(index=True)
    year: int = Field(index=True)
    month: Optional[int] = Field(default=None)

    amount: float = Field(ge=0)
    currency: Currency = Field(default=Currency.USD)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
