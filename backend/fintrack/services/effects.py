from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum

from fintrack.core.errors import ValidationFailed
from fintrack.models.transaction import DESCRIPTION_MAX_LEN

Q2 = Decimal("0.01")
ZERO = Decimal("0.00")

# Numeric(12, 2) leaves ten integer digits.
MAX_AMOUNT = Decimal("9999999999.99")


class TxKind(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"
    # Modelled, but moves no money: there is no destination account yet.
    TRANSFER = "transfer"


def d2(x: Decimal) -> Decimal:
    return x.quantize(Q2, rounding=ROUND_HALF_UP)


def to_dec(v) -> Decimal:
    if isinstance(v, Decimal):
        return v
    return Decimal(str(v))


def effect(amount, kind) -> Decimal:
    """Signed change a transaction applies to its account's balance."""
    amt = to_dec(amount)
    k = TxKind(kind)
    if k is TxKind.EXPENSE:
        return -amt
    if k is TxKind.INCOME:
        return amt
    if k is TxKind.TRANSFER:
        return ZERO
    raise ValueError(f"no balance effect defined for kind {k!r}")


def normalize_amount(value) -> Decimal:
    try:
        amt = to_dec(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationFailed("amount_invalid")
    if not amt.is_finite():
        raise ValidationFailed("amount_invalid")
    if amt <= 0:
        raise ValidationFailed("amount_must_be_positive")
    # Bound before quantizing: quantize() overflows the context on huge exponents.
    if amt > MAX_AMOUNT:
        raise ValidationFailed("amount_too_large")
    if amt.as_tuple().exponent < -2 and amt != amt.quantize(Q2, rounding=ROUND_HALF_UP):
        raise ValidationFailed("amount_too_precise")
    return d2(amt)


def normalize_kind(value) -> TxKind:
    try:
        return TxKind(value)
    except ValueError:
        raise ValidationFailed("kind_invalid")


def normalize_description(value: str | None) -> str | None:
    if value is None:
        return None
    v = str(value).strip()
    if not v:
        return None
    if len(v) > DESCRIPTION_MAX_LEN:
        raise ValidationFailed("description_too_long")
    return v
