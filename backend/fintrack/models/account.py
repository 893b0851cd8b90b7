from datetime import datetime
from decimal import Decimal

from sqlalchemy import Integer, String, DateTime, func, ForeignKey, Numeric, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from fintrack.db.base import Base

ACCOUNT_TYPES = ("checking", "savings", "credit")

class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    name: Mapped[str] = mapped_column(String(50))
    account_type: Mapped[str] = mapped_column(String(10))

    # May go negative (credit cards, overdrafts). Only the ledger service writes it.
    balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, server_default="0")
    color_hex: Mapped[str] = mapped_column(String(7), default="#64748b", server_default="#64748b")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "account_type IN (%s)" % ", ".join(f"'{t}'" for t in ACCOUNT_TYPES),
            name="chk_accounts_type",
        ),
    )


Index("ix_accounts_owner_type", Account.owner_id, Account.account_type)
