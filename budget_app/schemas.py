import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel

from .models.category import Category
from .models.enums import TransactionType
from .models.user import User


class UserPublic(SQLModel):
    id: uuid.UUID
    name: Optional[str] = None
    email: str


class CategoryRead(SQLModel):
    id: uuid.UUID
    budget_id: uuid.UUID
    name: str
    emoji: Optional[str] = None
    type: TransactionType
    created_at: datetime
    updated_at: datetime


class MessageOut(SQLModel):
    message: str


def user_public(user: User) -> UserPublic:
    return UserPublic(id=user.id, name=user.name, email=user.email)


def category_read(category: Category) -> CategoryRead:
    return CategoryRead.model_validate(category, from_attributes=True)
