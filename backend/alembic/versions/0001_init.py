from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]

def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "budgets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("month", sa.SmallInteger(), nullable=False),
        sa.Column("year", sa.SmallInteger(), nullable=False),
        sa.Column("total_income", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("savings_rate", sa.Numeric(5, 2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("owner_id", "month", "year", name="uq_budgets_owner_month_year"),
        sa.CheckConstraint("month >= 0 AND month <= 11", name="chk_budgets_month"),
        sa.CheckConstraint("year >= 2000 AND year <= 2100", name="chk_budgets_year"),
        sa.CheckConstraint("total_income >= 0", name="chk_budgets_income"),
        sa.CheckConstraint("savings_rate >= 0 AND savings_rate <= 100", name="chk_budgets_savings_rate"),
    )
    op.create_index("ix_budgets_owner_id", "budgets", ["owner_id"], unique=False)

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("budget_id", sa.Integer(), sa.ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("allocated_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("color_hex", sa.String(length=7), nullable=False, server_default="#64748b"),
        *_timestamps(),
        sa.CheckConstraint("allocated_amount >= 0", name="chk_categories_allocated"),
    )
    op.create_index("ix_categories_budget_id", "categories", ["budget_id"], unique=False)

    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("account_type", sa.String(length=10), nullable=False),
        sa.Column("balance", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("color_hex", sa.String(length=7), nullable=False, server_default="#64748b"),
        *_timestamps(),
        sa.CheckConstraint("account_type IN ('checking', 'savings', 'credit')", name="chk_accounts_type"),
    )
    op.create_index("ix_accounts_owner_id", "accounts", ["owner_id"], unique=False)
    op.create_index("ix_accounts_owner_type", "accounts", ["owner_id", "account_type"], unique=False)

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id", ondelete="CASCADE"), nullable=False),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("kind", sa.String(length=10), nullable=False, server_default="expense"),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.String(length=200), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="chk_transactions_amount"),
        sa.CheckConstraint("kind IN ('expense', 'income', 'transfer')", name="chk_transactions_kind"),
    )
    op.create_index("ix_transactions_category_id", "transactions", ["category_id"], unique=False)
    op.create_index("ix_transactions_account_id", "transactions", ["account_id"], unique=False)
    op.create_index("ix_transactions_occurred_at", "transactions", ["occurred_at"], unique=False)
    op.create_index("ix_transactions_category_kind", "transactions", ["category_id", "kind"], unique=False)
    op.create_index("ix_transactions_category_occurred", "transactions", ["category_id", "occurred_at"], unique=False)

def downgrade():
    op.drop_index("ix_transactions_category_occurred", table_name="transactions")
    op.drop_index("ix_transactions_category_kind", table_name="transactions")
    op.drop_index("ix_transactions_occurred_at", table_name="transactions")
    op.drop_index("ix_transactions_account_id", table_name="transactions")
    op.drop_index("ix_transactions_category_id", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_accounts_owner_type", table_name="accounts")
    op.drop_index("ix_accounts_owner_id", table_name="accounts")
    op.drop_table("accounts")

    op.drop_index("ix_categories_budget_id", table_name="categories")
    op.drop_table("categories")

    op.drop_index("ix_budgets_owner_id", table_name="budgets")
    op.drop_table("budgets")

    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
