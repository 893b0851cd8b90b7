"""Transaction mutations that keep account balances consistent.

An account's stored balance must always equal its opening balance plus the
effect of every transaction currently attached to it. Every mutation therefore
runs as one unit of work that touches the transaction row and the affected
account rows together.

Lock order is fixed on every path: the transaction row first, then account
rows in ascending id order. Balances are only read and written after the
account row is locked.
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from fintrack.core.errors import NotFound, ValidationFailed
from fintrack.db.session import unit_of_work
from fintrack.models.account import Account
from fintrack.models.budget import Budget
from fintrack.models.category import Category
from fintrack.models.transaction import Transaction
from fintrack.services.audit import log_event
from fintrack.services.changes import CLEAR, KEEP, SetTo, TxChanges, resolve, supplied
from fintrack.services.effects import (
    d2,
    to_dec,
    effect,
    normalize_amount,
    normalize_description,
    normalize_kind,
)
from fintrack.services.ownership import require_account, require_category

log = logging.getLogger(__name__)


def owned_transactions():
    return (
        select(Transaction)
        .join(Category, Category.id == Transaction.category_id)
        .join(Budget, Budget.id == Category.budget_id)
    )


def lock_order(*account_ids: int | None) -> list[int]:
    return sorted({a for a in account_ids if a is not None})


def _lock_transaction(s: Session, user_id: int, tx_id: int) -> Transaction:
    t = s.execute(
        owned_transactions()
        .where(Transaction.id == tx_id, Budget.owner_id == user_id)
        .with_for_update(of=Transaction)
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if t is None:
        raise NotFound("transaction_not_found")
    return t


def account_lock(account_id: int):
    # FOR NO KEY UPDATE on PostgreSQL, which does not conflict with the KEY SHARE
    # lock a concurrent transaction insert holds through the foreign key.
    return (
        select(Account)
        .where(Account.id == account_id)
        .with_for_update(key_share=True)
        .execution_options(populate_existing=True)
    )


def _lock_account(s: Session, account_id: int) -> Account | None:
    return s.execute(account_lock(account_id)).scalar_one_or_none()


def _lock_accounts(s: Session, *account_ids: int | None) -> dict[int, Account]:
    locked: dict[int, Account] = {}
    for acct_id in lock_order(*account_ids):
        acct = _lock_account(s, acct_id)
        if acct is not None:
            locked[acct_id] = acct
    return locked


def _apply(acct: Account, delta: Decimal) -> None:
    acct.balance = d2(to_dec(acct.balance) + delta)


def _rebalance(
    s: Session,
    old_account: int | None,
    old_effect: Decimal,
    new_account: int | None,
    new_effect: Decimal,
) -> dict[int, Decimal]:
    if old_account == new_account:
        net = new_effect - old_effect
        if old_account is None or net == 0:
            return {}
        acct = _lock_accounts(s, old_account).get(old_account)
        if acct is None:
            raise NotFound("account_not_found")
        _apply(acct, net)
        return {old_account: net}

    locked = _lock_accounts(s, old_account, new_account)
    deltas: dict[int, Decimal] = {}
    if old_account is not None and old_effect != 0:
        if old_account in locked:
            deltas[old_account] = -old_effect
        else:
            log.warning("account %s vanished before its balance could be restored", old_account)
    if new_account is not None:
        if new_account not in locked:
            raise NotFound("account_not_found")
        if new_effect != 0:
            deltas[new_account] = new_effect
    for acct_id, delta in deltas.items():
        _apply(locked[acct_id], delta)
    return deltas


def _snapshot(t: Transaction) -> dict:
    return {
        "category_id": t.category_id,
        "account_id": t.account_id,
        "amount": str(t.amount),
        "kind": t.kind,
        "occurred_at": t.occurred_at.isoformat() if t.occurred_at else None,
        "description": t.description,
    }


def _fmt_deltas(deltas: dict[int, Decimal]) -> dict[str, str]:
    return {str(k): str(v) for k, v in deltas.items()}


def create_transaction(
    s: Session,
    user_id: int,
    *,
    category_id: int,
    amount,
    kind,
    occurred_at: datetime,
    account_id: int | None = None,
    description: str | None = None,
) -> Transaction:
    with unit_of_work(s):
        amt = normalize_amount(amount)
        k = normalize_kind(kind)
        desc = normalize_description(description)
        if occurred_at is None:
            raise ValidationFailed("occurred_at_required")

        require_category(s, user_id, category_id)
        require_account(s, user_id, account_id)

        # Lock the account before the insert takes its foreign-key lock on the same row.
        deltas = _rebalance(s, None, Decimal("0"), account_id, effect(amt, k))

        t = Transaction(
            category_id=category_id,
            account_id=account_id,
            amount=amt,
            kind=k.value,
            occurred_at=occurred_at,
            description=desc,
        )
        s.add(t)
        s.flush()
        s.refresh(t)
        log_event(
            s,
            user_id=user_id,
            action="tx.create",
            entity_type="transaction",
            entity_id=t.id,
            details={**_snapshot(t), "deltas": _fmt_deltas(deltas)},
        )

    log.info("tx.create id=%s user=%s deltas=%s", t.id, user_id, _fmt_deltas(deltas))
    return t


def delete_transaction(s: Session, user_id: int, tx_id: int) -> None:
    with unit_of_work(s):
        t = _lock_transaction(s, user_id, tx_id)
        details = _snapshot(t)

        deltas = _rebalance(s, t.account_id, effect(t.amount, t.kind), None, Decimal("0"))

        s.delete(t)
        s.flush()
        log_event(
            s,
            user_id=user_id,
            action="tx.delete",
            entity_type="transaction",
            entity_id=tx_id,
            details={**details, "deltas": _fmt_deltas(deltas)},
        )

    log.info("tx.delete id=%s user=%s deltas=%s", tx_id, user_id, _fmt_deltas(deltas))


_REQUIRED_FIELDS = ("category_id", "amount", "kind", "occurred_at")


def update_transaction(s: Session, user_id: int, tx_id: int, changes: TxChanges) -> Transaction:
    with unit_of_work(s):
        t = _lock_transaction(s, user_id, tx_id)
        if changes.is_empty():
            return t

        for name in _REQUIRED_FIELDS:
            if getattr(changes, name) is CLEAR:
                raise ValidationFailed(f"{name}_required")

        if supplied(changes.category_id):
            require_category(s, user_id, changes.category_id.value)
        if isinstance(changes.account_id, SetTo):
            require_account(s, user_id, changes.account_id.value)

        before = _snapshot(t)
        old_account = t.account_id
        old_effect = effect(t.amount, t.kind)

        new_amount = t.amount if changes.amount is KEEP else normalize_amount(changes.amount.value)
        new_kind = normalize_kind(resolve(changes.kind, t.kind))
        new_account = resolve(changes.account_id, t.account_id)

        deltas = _rebalance(s, old_account, old_effect, new_account, effect(new_amount, new_kind))

        t.category_id = resolve(changes.category_id, t.category_id)
        t.account_id = new_account
        t.amount = new_amount
        t.kind = new_kind.value
        t.occurred_at = resolve(changes.occurred_at, t.occurred_at)
        if supplied(changes.description):
            t.description = normalize_description(resolve(changes.description, t.description))

        s.flush()
        s.refresh(t)
        log_event(
            s,
            user_id=user_id,
            action="tx.update",
            entity_type="transaction",
            entity_id=t.id,
            details={"before": before, "after": _snapshot(t), "deltas": _fmt_deltas(deltas)},
        )

    log.info("tx.update id=%s user=%s deltas=%s", t.id, user_id, _fmt_deltas(deltas))
    return t
