"""initial budget planner schema

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


currency = sa.Enum("USD", "EUR", "HUF", name="currency")
role = sa.Enum("OWNER", "ADMIN", "VISITOR", name="role")
transaction_type = sa.Enum("INCOME", "EXPENSE", "DEBT", "SAVINGS", name="transactiontype")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("hashed_password", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "budgets",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("currency", currency, nullable=False, server_default="USD"),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_budgets_owner_id", "budgets", ["owner_id"])

    op.create_table(
        "budget_users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("budget_id", sa.Uuid(), sa.ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("role", role, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("budget_id", "user_id", name="uq_budget_users_budget_user"),
    )
    op.create_index("ix_budget_users_budget_id", "budget_users", ["budget_id"])
    op.create_index("ix_budget_users_user_id", "budget_users", ["user_id"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("budget_id", sa.Uuid(), sa.ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("emoji", sa.String(length=16), nullable=True),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_categories_budget_id", "categories", ["budget_id"])
    op.create_index("ix_categories_type", "categories", ["type"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("budget_id", sa.Uuid(), sa.ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", currency, nullable=False, server_default="USD"),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_transactions_budget_id", "transactions", ["budget_id"])
    op.create_index("ix_transactions_user_id", "transactions", ["user_id"])
    op.create_index("ix_transactions_category_id", "transactions", ["category_id"])
    op.create_index("ix_transactions_type", "transactions", ["type"])
    op.create_index("ix_transactions_transaction_date", "transactions", ["transaction_date"])

    op.create_table(
        "plans",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("budget_id", sa.Uuid(), sa.ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("categories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=True),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", currency, nullable=False, server_default="USD"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "budget_id", "type", "year", "month", "category_id",
            name="uq_plans_budget_type_period_category",
        ),
        sa.CheckConstraint("month IS NULL OR (month BETWEEN 1 AND 12)", name="plans_month_check"),
    )
    op.create_index("ix_plans_budget_id", "plans", ["budget_id"])
    op.create_index("ix_plans_category_id", "plans", ["category_id"])
    op.create_index("ix_plans_type", "plans", ["type"])
    op.create_index("ix_plans_year", "plans", ["year"])

    op.create_table(
        "exchange_rates",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("from_currency", currency, nullable=False),
        sa.Column("to_currency", currency, nullable=False),
        sa.Column("rate", sa.Float(), nullable=False),
        sa.Column("rate_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("from_currency", "to_currency", "rate_date", name="uq_exchange_rates_pair_date"),
    )
    op.create_index("ix_exchange_rates_from_currency", "exchange_rates", ["from_currency"])
    op.create_index("ix_exchange_rates_to_currency", "exchange_rates", ["to_currency"])
    op.create_index("ix_exchange_rates_rate_date", "exchange_rates", ["rate_date"])


def downgrade() -> None:
    op.drop_table("exchange_rates")
    op.drop_table("plans")
    op.drop_table("transactions")
    op.drop_table("categories")
    op.drop_table("budget_users")
    op.drop_table("budgets")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    transaction_type.drop(bind, checkfirst=True)
    role.drop(bind, checkfirst=True)
    currency.drop(bind, checkfirst=True)
