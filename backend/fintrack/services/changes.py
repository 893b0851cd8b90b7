"""Per-field instructions for partial transaction updates.

A PATCH body distinguishes three things for every field: it was left out
(keep the stored value), it was sent as null (clear it), or it was sent with a
value (set it). A plain ``Optional`` collapses the first two, so each field of
``TxChanges`` holds one of ``KEEP``, ``CLEAR`` or ``SetTo(value)``.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class _Keep:
    def __repr__(self) -> str:
        return "KEEP"


class _Clear:
    def __repr__(self) -> str:
        return "CLEAR"


KEEP = _Keep()
CLEAR = _Clear()


@dataclass(frozen=True)
class SetTo(Generic[T]):
    value: T


FieldChange = Union[_Keep, _Clear, SetTo[T]]


def resolve(change: FieldChange, current: Any) -> Any:
    if change is KEEP:
        return current
    if change is CLEAR:
        return None
    return change.value


def supplied(change: FieldChange) -> bool:
    return change is not KEEP


@dataclass(frozen=True)
class TxChanges:
    category_id: FieldChange[int] = KEEP
    account_id: FieldChange[int] = KEEP
    amount: FieldChange[Decimal] = KEEP
    kind: FieldChange[str] = KEEP
    occurred_at: FieldChange[datetime] = KEEP
    description: FieldChange[str] = KEEP

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is KEEP for f in fields(self))
