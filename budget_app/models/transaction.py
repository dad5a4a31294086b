import uuid
from datetime import datetime, date
from typing import Optional
from sqlmodel import SQLModel, Field

from ..core.currency import Currency
from .enums import TransactionType


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    budget_id: uuid.UUID = Field(foreign_key="budgets.id", index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    category_id: Optional[uuid.UUID] = Field(default=None, foreign_key="categories.id", index=True)

    type: TransactionType = Field(index=True)
    amount: float
    currency: Currency = Field(default=Currency.USD)
    description: Optional[str] = Field(default=None, max_length=255)
    transaction_date: date = Field(default_factory=date.today, index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
