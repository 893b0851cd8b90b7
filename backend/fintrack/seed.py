import logging
import os
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from fintrack.core.logging import setup_logging
from fintrack.core.security import create_access_token
from fintrack.db.session import SessionLocal
from fintrack.models.account import Account
from fintrack.models.budget import Budget
from fintrack.models.category import Category
from fintrack.models.user import User

log = logging.getLogger("fintrack.seed")

def main():
    setup_logging()
    username = os.environ.get("SEED_USER", "demo")

    db = SessionLocal()
    try:
        user = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
        if user is None:
            today = date.today()
            user = User(username=username)
            db.add(user)
            db.flush()
            budget = Budget(owner_id=user.id, month=today.month - 1, year=today.year, total_income=Decimal("0.00"))
            db.add(budget)
            db.flush()
            db.add(Category(budget_id=budget.id, name="Groceries", allocated_amount=Decimal("400.00")))
            db.add(Account(owner_id=user.id, name="Checking", account_type="checking", balance=Decimal("1000.00")))
            db.commit()
            log.info("seeded user %s (id=%s)", username, user.id)
        print(create_access_token(sub=str(user.id), expires_min=60 * 24 * 7))
    finally:
        db.close()

if __name__ == "__main__":
    main()
