from datetime import datetime
from decimal import Decimal

from sqlalchemy import Integer, DateTime, func, ForeignKey, Numeric, String, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from fintrack.db.base import Base

DESCRIPTION_MAX_LEN = 200

class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="CASCADE"), index=True)
    account_id: Mapped[int | None] = mapped_column(
        ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Always positive; direction comes from kind.
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    kind: Mapped[str] = mapped_column(String(10), default="expense", server_default="expense")
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    description: Mapped[str | None] = mapped_column(String(DESCRIPTION_MAX_LEN), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("amount > 0", name="chk_transactions_amount"),
        CheckConstraint("kind IN ('expense', 'income', 'transfer')", name="chk_transactions_kind"),
    )


Index("ix_transactions_category_kind", Transaction.category_id, Transaction.kind)
Index("ix_transactions_category_occurred", Transaction.category_id, Transaction.occurred_at)
