from datetime import datetime
from decimal import Decimal

from sqlalchemy import Integer, SmallInteger, DateTime, func, ForeignKey, Numeric, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from fintrack.db.base import Base

class Budget(Base):
    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    # 0 = January
    month: Mapped[int] = mapped_column(SmallInteger)
    year: Mapped[int] = mapped_column(SmallInteger)

    total_income: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, server_default="0")
    savings_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("owner_id", "month", "year", name="uq_budgets_owner_month_year"),
        CheckConstraint("month >= 0 AND month <= 11", name="chk_budgets_month"),
        CheckConstraint("year >= 2000 AND year <= 2100", name="chk_budgets_year"),
        CheckConstraint("total_income >= 0", name="chk_budgets_income"),
        CheckConstraint("savings_rate >= 0 AND savings_rate <= 100", name="chk_budgets_savings_rate"),
    )
