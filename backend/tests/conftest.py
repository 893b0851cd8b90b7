import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import select, func

from fintrack.db.base import Base
from fintrack.db.session import make_engine, make_sessionmaker
from fintrack.models.account import Account
from fintrack.models.audit_log import AuditLog
from fintrack.models.budget import Budget
from fintrack.models.category import Category
from fintrack.models.transaction import Transaction
from fintrack.models.user import User


@pytest.fixture()
def engine(tmp_path):
    eng = make_engine(f"sqlite+pysqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def Session(engine):
    return make_sessionmaker(engine)


@pytest.fixture()
def session(Session):
    s = Session()
    try:
        yield s
    finally:
        s.close()


class Seeder:
    """Writes fixtures and reads back committed state through short-lived sessions."""

    def __init__(self, Session):
        self.Session = Session
        self._budgets: dict[int, int] = {}

    def _add(self, obj):
        s = self.Session()
        try:
            s.add(obj)
            s.commit()
            return obj
        finally:
            s.close()

    def user(self) -> int:
        return self._add(User(username=f"user-{uuid4().hex[:10]}")).id

    def budget(self, owner_id: int) -> int:
        if owner_id not in self._budgets:
            self._budgets[owner_id] = self._add(Budget(owner_id=owner_id, month=0, year=2026)).id
        return self._budgets[owner_id]

    def category(self, owner_id: int, name: str = "Groceries") -> int:
        return self._add(Category(budget_id=self.budget(owner_id), name=name)).id

    def account(self, owner_id: int, balance: str = "0.00", name: str = "Checking") -> int:
        return self._add(
            Account(owner_id=owner_id, name=name, account_type="checking", balance=Decimal(balance))
        ).id

    def balance(self, account_id: int) -> Decimal:
        s = self.Session()
        try:
            return s.execute(select(Account.balance).where(Account.id == account_id)).scalar_one()
        finally:
            s.close()

    def tx_count(self) -> int:
        s = self.Session()
        try:
            return s.execute(select(func.count(Transaction.id))).scalar_one()
        finally:
            s.close()

    def audit_actions(self) -> list[str]:
        s = self.Session()
        try:
            return list(s.execute(select(AuditLog.action).order_by(AuditLog.id.asc())).scalars().all())
        finally:
            s.close()


@pytest.fixture()
def seed(Session):
    return Seeder(Session)


@pytest.fixture()
def when():
    return datetime(2026, 1, 15, 12, 0, 0)
