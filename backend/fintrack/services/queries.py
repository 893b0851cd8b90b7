from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from fintrack.core.config import settings
from fintrack.core.errors import NotFound, ValidationFailed
from fintrack.models.account import Account
from fintrack.models.budget import Budget
from fintrack.models.category import Category
from fintrack.models.transaction import Transaction
from fintrack.services.effects import TxKind, ZERO, d2, to_dec, normalize_kind
from fintrack.services.ledger import owned_transactions
from fintrack.services.ownership import require_account, require_category, require_categories

_NEWEST_FIRST = (
    Transaction.occurred_at.desc(),
    Transaction.created_at.desc(),
    Transaction.id.desc(),
)


@dataclass
class TxFilters:
    start: datetime | None = None
    end: datetime | None = None
    category_id: int | None = None
    account_id: int | None = None
    kind: str | None = None
    limit: int | None = None
    offset: int = 0


@dataclass
class TxDetail:
    id: int
    amount: Decimal
    kind: str
    occurred_at: datetime
    description: str | None
    created_at: datetime
    updated_at: datetime
    category_id: int
    category_name: str
    category_color_hex: str
    account_id: int | None
    account_name: str | None
    account_type: str | None
    account_color_hex: str | None


@dataclass
class CategorySpend:
    category_id: int
    category_name: str
    color_hex: str
    total_amount: Decimal
    transaction_count: int


@dataclass
class LedgerSummary:
    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    transaction_count: int = 0
    by_category: list[CategorySpend] = field(default_factory=list)

    @property
    def net(self) -> Decimal:
        return d2(self.total_income - self.total_expenses)


def _date_range(start: datetime | None, end: datetime | None) -> list:
    if start is not None and end is not None and start > end:
        raise ValidationFailed("invalid_date_range")
    conds = []
    if start is not None:
        conds.append(Transaction.occurred_at >= start)
    if end is not None:
        conds.append(Transaction.occurred_at <= end)
    return conds


def _conditions(user_id: int, f: TxFilters) -> list:
    conds = [Budget.owner_id == user_id, *_date_range(f.start, f.end)]
    if f.category_id is not None:
        conds.append(Transaction.category_id == f.category_id)
    if f.account_id is not None:
        conds.append(Transaction.account_id == f.account_id)
    if f.kind is not None:
        conds.append(Transaction.kind == normalize_kind(f.kind).value)
    return conds


def _page(f: TxFilters) -> tuple[int, int]:
    limit = settings.tx_list_default_limit if f.limit is None else int(f.limit)
    if limit < 1:
        raise ValidationFailed("limit_invalid")
    offset = int(f.offset or 0)
    if offset < 0:
        raise ValidationFailed("offset_invalid")
    return min(limit, settings.tx_list_max_limit), offset


def _count(s: Session, conds: list) -> int:
    return int(
        s.execute(
            select(func.count(Transaction.id))
            .select_from(Transaction)
            .join(Category, Category.id == Transaction.category_id)
            .join(Budget, Budget.id == Category.budget_id)
            .where(*conds)
        ).scalar_one()
    )


def get_transaction(s: Session, user_id: int, tx_id: int) -> Transaction:
    t = s.execute(
        owned_transactions().where(Transaction.id == tx_id, Budget.owner_id == user_id)
    ).scalar_one_or_none()
    if t is None:
        raise NotFound("transaction_not_found")
    return t


def list_transactions(s: Session, user_id: int, filters: TxFilters) -> tuple[list[Transaction], int]:
    """One page of the caller's transactions plus the total matching count."""
    limit, offset = _page(filters)
    conds = _conditions(user_id, filters)

    rows = (
        s.execute(owned_transactions().where(*conds).order_by(*_NEWEST_FIRST).limit(limit).offset(offset))
        .scalars()
        .all()
    )
    return list(rows), _count(s, conds)


def list_detailed(s: Session, user_id: int, filters: TxFilters) -> tuple[list[TxDetail], int]:
    """Like ``list_transactions``, with category and account display fields joined in."""
    limit, offset = _page(filters)
    conds = _conditions(user_id, filters)

    q = (
        select(
            Transaction,
            Category.name,
            Category.color_hex,
            Account.name,
            Account.account_type,
            Account.color_hex,
        )
        .join(Category, Category.id == Transaction.category_id)
        .join(Budget, Budget.id == Category.budget_id)
        .outerjoin(Account, Account.id == Transaction.account_id)
        .where(*conds)
        .order_by(*_NEWEST_FIRST)
        .limit(limit)
        .offset(offset)
    )
    rows = [
        TxDetail(
            id=t.id,
            amount=t.amount,
            kind=t.kind,
            occurred_at=t.occurred_at,
            description=t.description,
            created_at=t.created_at,
            updated_at=t.updated_at,
            category_id=t.category_id,
            category_name=cat_name,
            category_color_hex=cat_color,
            account_id=t.account_id,
            account_name=acct_name,
            account_type=acct_type,
            account_color_hex=acct_color,
        )
        for (t, cat_name, cat_color, acct_name, acct_type, acct_color) in s.execute(q).all()
    ]
    return rows, _count(s, conds)


def list_by_account(
    s: Session, user_id: int, account_id: int, filters: TxFilters | None = None
) -> tuple[list[Transaction], int]:
    require_account(s, user_id, account_id)
    f = replace(filters or TxFilters(), account_id=account_id)
    return list_transactions(s, user_id, f)


def list_by_category(s: Session, user_id: int, category_id: int) -> list[Transaction]:
    require_category(s, user_id, category_id)
    return list(
        s.execute(select(Transaction).where(Transaction.category_id == category_id).order_by(*_NEWEST_FIRST))
        .scalars()
        .all()
    )


def list_by_categories(s: Session, user_id: int, category_ids: Iterable[int]) -> list[Transaction]:
    ids = require_categories(s, user_id, category_ids)
    if not ids:
        return []
    return list(
        s.execute(select(Transaction).where(Transaction.category_id.in_(ids)).order_by(*_NEWEST_FIRST))
        .scalars()
        .all()
    )


def summarize(
    s: Session,
    user_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    account_id: int | None = None,
) -> LedgerSummary:
    """Income and expense totals plus per-category expense spend."""
    conds = [Budget.owner_id == user_id, *_date_range(start, end)]
    if account_id is not None:
        conds.append(Transaction.account_id == account_id)

    out = LedgerSummary()
    by_kind = s.execute(
        select(Transaction.kind, func.coalesce(func.sum(Transaction.amount), 0), func.count(Transaction.id))
        .join(Category, Category.id == Transaction.category_id)
        .join(Budget, Budget.id == Category.budget_id)
        .where(*conds)
        .group_by(Transaction.kind)
    ).all()
    for kind, total, count in by_kind:
        out.transaction_count += int(count)
        if kind == TxKind.INCOME.value:
            out.total_income = d2(to_dec(total))
        elif kind == TxKind.EXPENSE.value:
            out.total_expenses = d2(to_dec(total))

    spent = func.coalesce(func.sum(Transaction.amount), 0)
    rows = s.execute(
        select(Category.id, Category.name, Category.color_hex, spent, func.count(Transaction.id))
        .select_from(Transaction)
        .join(Category, Category.id == Transaction.category_id)
        .join(Budget, Budget.id == Category.budget_id)
        .where(*conds, Transaction.kind == TxKind.EXPENSE.value)
        .group_by(Category.id, Category.name, Category.color_hex)
        .order_by(spent.desc(), Category.id.asc())
    ).all()
    out.by_category = [
        CategorySpend(
            category_id=cid,
            category_name=name,
            color_hex=color,
            total_amount=d2(to_dec(total)),
            transaction_count=int(count),
        )
        for (cid, name, color, total, count) in rows
    ]
    return out
