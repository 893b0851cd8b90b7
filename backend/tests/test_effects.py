from decimal import Decimal

import pytest

from fintrack.core.errors import ValidationFailed
from fintrack.services.effects import (
    TxKind,
    effect,
    normalize_amount,
    normalize_description,
    normalize_kind,
)


def test_expense_debits_income_credits_transfer_is_neutral():
    assert effect(Decimal("250.00"), TxKind.EXPENSE) == Decimal("-250.00")
    assert effect(Decimal("250.00"), TxKind.INCOME) == Decimal("250.00")
    assert effect(Decimal("250.00"), TxKind.TRANSFER) == Decimal("0")


def test_effect_accepts_stored_kind_strings():
    assert effect(Decimal("10.50"), "expense") == Decimal("-10.50")
    assert effect("10.50", "income") == Decimal("10.50")


def test_effect_rejects_unknown_kind():
    with pytest.raises(ValueError):
        effect(Decimal("1.00"), "refund")


@pytest.mark.parametrize(
    "raw, code",
    [
        ("0", "amount_must_be_positive"),
        ("-5.00", "amount_must_be_positive"),
        ("1.005", "amount_too_precise"),
        ("10000000000.00", "amount_too_large"),
        ("1E+30", "amount_too_large"),
        (Decimal("1E+30"), "amount_too_large"),
        ("1E-9", "amount_too_precise"),
        ("NaN", "amount_invalid"),
        ("abc", "amount_invalid"),
    ],
)
def test_normalize_amount_rejects(raw, code):
    with pytest.raises(ValidationFailed) as exc:
        normalize_amount(raw)
    assert exc.value.code == code


def test_normalize_amount_quantizes():
    assert str(normalize_amount("12.5")) == "12.50"
    assert normalize_amount(Decimal("9999999999.99")) == Decimal("9999999999.99")
    assert str(normalize_amount("7.000")) == "7.00"


def test_normalize_kind():
    assert normalize_kind("income") is TxKind.INCOME
    with pytest.raises(ValidationFailed) as exc:
        normalize_kind("bogus")
    assert exc.value.code == "kind_invalid"


def test_normalize_description():
    assert normalize_description(None) is None
    assert normalize_description("   ") is None
    assert normalize_description("  coffee ") == "coffee"
    assert normalize_description("x" * 200) == "x" * 200
    with pytest.raises(ValidationFailed):
        normalize_description("x" * 201)
