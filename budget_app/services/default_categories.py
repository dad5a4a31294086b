import uuid
from typing import List, Tuple

from sqlmodel import Session

from ..models.category import Category
from ..models.enums import TransactionType


# (name, emoji, type) seeded into every new budget
DEFAULT_CATEGORIES: List[Tuple[str, str, TransactionType]] = [
    ("Salary", "💼", TransactionType.INCOME),
    ("Freelance", "💻", TransactionType.INCOME),
    ("Investment", "📈", TransactionType.INCOME),
    ("Rental Income", "🏠", TransactionType.INCOME),
    ("Bonus", "🎁", TransactionType.INCOME),
    ("Other Income", "💰", TransactionType.INCOME),
    ("Groceries", "🛒", TransactionType.EXPENSE),
    ("Rent", "🏘️", TransactionType.EXPENSE),
    ("Utilities", "💡", TransactionType.EXPENSE),
    ("Transportation", "🚗", TransactionType.EXPENSE),
    ("Gas", "⛽", TransactionType.EXPENSE),
    ("Dining Out", "🍽️", TransactionType.EXPENSE),
    ("Entertainment", "🎬", TransactionType.EXPENSE),
    ("Shopping", "🛍️", TransactionType.EXPENSE),
    ("Healthcare", "🏥", TransactionType.EXPENSE),
    ("Insurance", "🛡️", TransactionType.EXPENSE),
    ("Phone", "📱", TransactionType.EXPENSE),
    ("Internet", "🌐", TransactionType.EXPENSE),
    ("Other Expenses", "📝", TransactionType.EXPENSE),
    ("Credit Card", "💳", TransactionType.DEBT),
    ("Student Loan", "🎓", TransactionType.DEBT),
    ("Car Loan", "🚙", TransactionType.DEBT),
    ("Personal Loan", "📋", TransactionType.DEBT),
    ("Mortgage", "🏡", TransactionType.DEBT),
    ("Other Debt", "📊", TransactionType.DEBT),
    ("Emergency Fund", "🚨", TransactionType.SAVINGS),
    ("Retirement", "👴", TransactionType.SAVINGS),
    ("Vacation", "✈️", TransactionType.SAVINGS),
    ("House Down Payment", "🏘️", TransactionType.SAVINGS),
    ("Education", "📚", TransactionType.SAVINGS),
    ("Other Savings", "💵", TransactionType.SAVINGS),
]


def seed_default_categories(session: Session, budget_id: uuid.UUID) -> List[Category]:
    """Add the default categories to the session; the caller commits."""
    categories = [
        Category(budget_id=budget_id, name=name, emoji=emoji, type=type_)
        for name, emoji, type_ in DEFAULT_CATEGORIES
    ]
    session.add_all(categories)
    return categories
