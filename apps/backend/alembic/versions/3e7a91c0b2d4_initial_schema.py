"""initial schema: users, categories, transactions, recurring expenses

Revision ID: 3e7a91c0b2d4
Revises:
Create Date: 2026-01-12 10:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3e7a91c0b2d4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("icon", sa.String(length=16), nullable=False),
        sa.Column("color", sa.String(length=32), nullable=False),
        sa.Column("kind", sa.Enum("INCOME", "EXPENSE", "BOTH", name="category_kind"), nullable=False),
        sa.Column("budget", sa.Numeric(18, 2), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "name", name="uq_category_name"),
        sa.CheckConstraint("budget IS NULL OR budget > 0", name="ck_category_budget_positive"),
    )

    op.create_table(
        "transaction",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("type", sa.Enum("INCOME", "EXPENSE", name="txn_type"), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("occurred_at", sa.Date(), nullable=False),
        sa.Column(
            "recurrence",
            sa.Enum("ONE_TIME", "DAILY", "WEEKLY", "MONTHLY", "YEARLY", name="recurrence_type"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"], ),
        sa.CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
    )
    op.create_index("ix_transaction_user_date", "transaction", ["user_id", "occurred_at"], unique=False)

    op.create_table(
        "recurringexpense",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("due_day", sa.Integer(), nullable=False),
        sa.Column(
            "recurrence",
            sa.Enum("DAILY", "WEEKLY", "MONTHLY", "YEARLY", name="recurring_frequency"),
            nullable=False,
        ),
        sa.Column("linked_transaction_id", sa.Integer(), nullable=True),
        sa.Column("paid_for_month", sa.Integer(), nullable=True),
        sa.Column("paid_for_year", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"], ),
        sa.ForeignKeyConstraint(["linked_transaction_id"], ["transaction.id"], ondelete="SET NULL"),
        sa.CheckConstraint("amount > 0", name="ck_recurring_amount_positive"),
        sa.CheckConstraint("due_day BETWEEN 1 AND 31", name="ck_recurring_due_day"),
        sa.CheckConstraint(
            "paid_for_month IS NULL OR paid_for_month BETWEEN 1 AND 12",
            name="ck_recurring_paid_month",
        ),
    )
    op.create_index("ix_recurring_expense_user_due", "recurringexpense", ["user_id", "due_day"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_recurring_expense_user_due", table_name="recurringexpense")
    op.drop_table("recurringexpense")
    op.drop_index("ix_transaction_user_date", table_name="transaction")
    op.drop_table("transaction")
    op.drop_table("category")
    op.drop_table("user")
    sa.Enum(name="recurring_frequency").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="recurrence_type").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="txn_type").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="category_kind").drop(op.get_bind(), checkfirst=True)
