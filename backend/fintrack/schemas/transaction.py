from pydantic import BaseModel, field_validator, model_validator
from datetime import datetime
from decimal import Decimal
from typing import Literal

from fintrack.core.errors import ValidationFailed
from fintrack.services.changes import CLEAR, KEEP, SetTo, TxChanges
from fintrack.services.effects import normalize_amount, normalize_description

TxKindName = Literal["expense", "income", "transfer"]


def _check_amount(v: Decimal | None):
    if v is None:
        return None
    try:
        return normalize_amount(v)
    except ValidationFailed as e:
        raise ValueError(e.code)


def _check_description(v: str | None):
    try:
        return normalize_description(v)
    except ValidationFailed as e:
        raise ValueError(e.code)


class TxCreate(BaseModel):
    category_id: int
    account_id: int | None = None
    amount: Decimal
    kind: TxKindName = "expense"
    occurred_at: datetime
    description: str | None = None

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: Decimal):
        return _check_amount(v)

    @field_validator("description")
    @classmethod
    def description_trim(cls, v: str | None):
        return _check_description(v)


class TxUpdate(BaseModel):
    """PATCH body. Omitted fields are kept, ``null`` clears ``account_id``/``description``."""

    category_id: int | None = None
    account_id: int | None = None
    amount: Decimal | None = None
    kind: TxKindName | None = None
    occurred_at: datetime | None = None
    description: str | None = None

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: Decimal | None):
        return _check_amount(v)

    @field_validator("description")
    @classmethod
    def description_trim(cls, v: str | None):
        return _check_description(v)

    @model_validator(mode="after")
    def required_fields_not_null(self):
        for name in ("category_id", "amount", "kind", "occurred_at"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def to_changes(self) -> TxChanges:
        sent = self.model_fields_set

        def pick(name: str):
            if name not in sent:
                return KEEP
            v = getattr(self, name)
            return CLEAR if v is None else SetTo(v)

        return TxChanges(
            category_id=pick("category_id"),
            account_id=pick("account_id"),
            amount=pick("amount"),
            kind=pick("kind"),
            occurred_at=pick("occurred_at"),
            description=pick("description"),
        )


class CategoriesQuery(BaseModel):
    category_ids: list[int]


class TxOut(BaseModel):
    id: int
    category_id: int
    account_id: int | None
    amount: Decimal
    kind: TxKindName
    occurred_at: datetime
    description: str | None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TxPage(BaseModel):
    data: list[TxOut]
    total: int
    limit: int
    offset: int


class TxDetailOut(BaseModel):
    id: int
    amount: Decimal
    kind: TxKindName
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

    class Config:
        from_attributes = True


class TxDetailPage(BaseModel):
    data: list[TxDetailOut]
    total: int
    limit: int
    offset: int


class CategorySpendOut(BaseModel):
    category_id: int
    category_name: str
    color_hex: str
    total_amount: Decimal
    transaction_count: int

    class Config:
        from_attributes = True


class TxSummaryOut(BaseModel):
    total_income: Decimal
    total_expenses: Decimal
    net: Decimal
    transaction_count: int
    by_category: list[CategorySpendOut]

    class Config:
        from_attributes = True
