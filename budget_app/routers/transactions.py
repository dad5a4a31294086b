import logging
import uuid
from datetime import datetime, date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import SQLModel, Field, Session, select

from ..core.access import get_budget_or_404, require_budget_access
from ..core.currency import Currency
from ..core.permissions import can_create_transaction, can_delete_transaction, can_edit_transaction
from ..core.security import get_current_user
from ..database import get_session
from ..models.category import Category
from ..models.enums import TransactionType
from ..models.transaction import Transaction
from ..models.user import User
from ..schemas import CategoryRead, UserPublic, category_read, user_public
from ..services.currency_converter import convert_amounts_to_base_currency


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)


class TransactionCreate(SQLModel):
    budget_id: uuid.UUID
    type: TransactionType
    amount: float = Field(gt=0)
    transaction_date: date
    category_id: Optional[uuid.UUID] = None
    currency: Optional[Currency] = None
    description: Optional[str] = Field(default=None, max_length=255)


class TransactionUpdate(SQLModel):
    type: Optional[TransactionType] = None
    amount: Optional[float] = Field(default=None, gt=0)
    transaction_date: Optional[date] = None
    category_id: Optional[uuid.UUID] = None
    currency: Optional[Currency] = None
    description: Optional[str] = Field(default=None, max_length=255)


class TransactionRead(SQLModel):
    id: uuid.UUID
    budget_id: uuid.UUID
    user_id: uuid.UUID
    category_id: Optional[uuid.UUID] = None
    type: TransactionType
    amount: float
    currency: Currency
    description: Optional[str] = None
    transaction_date: date
    created_at: datetime
    updated_at: datetime
    category: Optional[CategoryRead] = None
    user: Optional[UserPublic] = None
    converted_amount: Optional[float] = None


def _transaction_read(
    session: Session, transaction: Transaction, converted_amount: Optional[float] = None
) -> TransactionRead:
    category = session.get(Category, transaction.category_id) if transaction.category_id else None
    user = session.get(User, transaction.user_id)
    return TransactionRead(
        **transaction.model_dump(),
        category=category_read(category) if category else None,
        user=user_public(user) if user else None,
        converted_amount=converted_amount,
    )


def _validate_category(
    session: Session, category_id: uuid.UUID, budget_id: uuid.UUID, type_: TransactionType
) -> None:
    category = session.get(Category, category_id)
    if not category or category.budget_id != budget_id or category.type != type_:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid category")


def _clean_description(description: Optional[str]) -> Optional[str]:
    return (description or "").strip() or None


def _get_transaction_or_404(session: Session, transaction_id: uuid.UUID) -> Transaction:
    transaction = session.get(Transaction, transaction_id)
    if not transaction:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return transaction


@router.get(
    "",
    response_model=List[TransactionRead],
)
def list_transactions(
    budget_id: uuid.UUID,
    type: Optional[TransactionType] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    List a budget's transactions, newest first.

    - Each item carries ``converted_amount`` in the budget's currency.
    """
    require_budget_access(session, budget_id, current_user)
    budget = get_budget_or_404(session, budget_id)

    stmt = select(Transaction).where(Transaction.budget_id == budget_id)
    if type is not None:
        stmt = stmt.where(Transaction.type == type)
    stmt = stmt.order_by(Transaction.transaction_date.desc(), Transaction.created_at.desc())
    transactions = session.exec(stmt).all()

    converted = convert_amounts_to_base_currency(session, transactions, budget.currency)
    return [_transaction_read(session, t, amount) for t, amount in zip(transactions, converted)]


@router.post(
    "",
    response_model=TransactionRead,
    status_code=status.HTTP_201_CREATED,
)
def create_transaction(
    payload: TransactionCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Record a transaction under the caller; owners and admins only."""
    role = require_budget_access(session, payload.budget_id, current_user)
    if not can_create_transaction(role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    if payload.category_id is not None:
        _validate_category(session, payload.category_id, payload.budget_id, payload.type)

    budget = get_budget_or_404(session, payload.budget_id)
    now = datetime.utcnow()
    transaction = Transaction(
        id=uuid.uuid4(),
        budget_id=payload.budget_id,
        user_id=current_user.id,
        category_id=payload.category_id,
        type=payload.type,
        amount=payload.amount,
        currency=payload.currency or budget.currency,
        description=_clean_description(payload.description),
        transaction_date=payload.transaction_date,
        created_at=now,
        updated_at=now,
    )

    session.add(transaction)
    session.commit()
    session.refresh(transaction)
    return _transaction_read(session, transaction)


@router.get(
    "/{transaction_id}",
    response_model=TransactionRead,
)
def get_transaction(
    transaction_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    transaction = _get_transaction_or_404(session, transaction_id)
    require_budget_access(session, transaction.budget_id, current_user)
    return _transaction_read(session, transaction)


@router.patch(
    "/{transaction_id}",
    response_model=TransactionRead,
)
def update_transaction(
    transaction_id: uuid.UUID,
    payload: TransactionUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Partially update a transaction. Admins may only touch their own."""
    transaction = _get_transaction_or_404(session, transaction_id)
    role = require_budget_access(session, transaction.budget_id, current_user)
    if not can_edit_transaction(role, transaction.user_id, current_user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    for field in ("type", "amount", "transaction_date", "currency"):
        if field in changes and changes[field] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} cannot be null")

    new_type = payload.type or transaction.type
    category_id = payload.category_id if "category_id" in changes else transaction.category_id
    if category_id is not None:
        _validate_category(session, category_id, transaction.budget_id, new_type)

    transaction.type = new_type
    transaction.category_id = category_id
    if payload.amount is not None:
        transaction.amount = payload.amount
    if payload.currency is not None:
        transaction.currency = payload.currency
    if payload.transaction_date is not None:
        transaction.transaction_date = payload.transaction_date
    if "description" in changes:
        transaction.description = _clean_description(payload.description)

    transaction.updated_at = datetime.utcnow()
    session.add(transaction)
    session.commit()
    session.refresh(transaction)
    return _transaction_read(session, transaction)


@router.delete(
    "/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_transaction(
    transaction_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    transaction = _get_transaction_or_404(session, transaction_id)
    role = require_budget_access(session, transaction.budget_id, current_user)
    if not can_delete_transaction(role, transaction.user_id, current_user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    budget_id = transaction.budget_id
    session.delete(transaction)
    session.commit()
    logger.info(f"Deleted transaction {transaction_id} from budget {budget_id}")
    return None
