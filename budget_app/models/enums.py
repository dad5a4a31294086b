import enum


class Role(str, enum.Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    VISITOR = "VISITOR"


class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    DEBT = "DEBT"
    SAVINGS = "SAVINGS"
