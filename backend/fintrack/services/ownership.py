"""Ownership checks for everything a transaction can reference.

Each check is a single owner-filtered query, so a resource that does not exist
and one that belongs to somebody else fail identically. Callers must pass the
session of the unit of work they are guarding.
"""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from fintrack.core.errors import Forbidden, NotFound
from fintrack.models.account import Account
from fintrack.models.budget import Budget
from fintrack.models.category import Category


def owned_categories():
    """``categories`` joined to their budget; filter on ``Budget.owner_id``."""
    return select(Category.id).join(Budget, Budget.id == Category.budget_id)


def require_category(s: Session, user_id: int, category_id: int) -> None:
    found = s.execute(
        owned_categories().where(Category.id == category_id, Budget.owner_id == user_id)
    ).scalar_one_or_none()
    if found is None:
        raise NotFound("category_not_found")


def require_account(s: Session, user_id: int, account_id: int | None) -> None:
    if account_id is None:
        return
    found = s.execute(
        select(Account.id).where(Account.id == account_id, Account.owner_id == user_id)
    ).scalar_one_or_none()
    if found is None:
        raise NotFound("account_not_found")


def require_categories(s: Session, user_id: int, category_ids: Iterable[int]) -> list[int]:
    ids = sorted(set(category_ids))
    if not ids:
        return []
    owned = s.execute(
        select(func.count(func.distinct(Category.id)))
        .select_from(Category)
        .join(Budget, Budget.id == Category.budget_id)
        .where(Category.id.in_(ids), Budget.owner_id == user_id)
    ).scalar_one()
    if owned != len(ids):
        raise Forbidden("categories_forbidden")
    return ids
