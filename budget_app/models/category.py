import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from .enums import TransactionType


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    budget_id: uuid.UUID = Field(foreign_key="budgets.id", index=True)

    name: str = Field(max_length=50)
    emoji: Optional[str] = Field(default=None, max_length=16)
    type: TransactionType = Field(index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
