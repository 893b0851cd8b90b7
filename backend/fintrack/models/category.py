from datetime import datetime
from decimal import Decimal

from sqlalchemy import Integer, String, DateTime, func, ForeignKey, Numeric, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from fintrack.db.base import Base

class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    budget_id: Mapped[int] = mapped_column(ForeignKey("budgets.id", ondelete="CASCADE"), index=True)

    name: Mapped[str] = mapped_column(String(50))
    allocated_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, server_default="0")
    color_hex: Mapped[str] = mapped_column(String(7), default="#64748b", server_default="#64748b")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("allocated_amount >= 0", name="chk_categories_allocated"),
    )
