from datetime import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from fintrack.schemas.transaction import TxUpdate
from fintrack.services.changes import CLEAR, KEEP, SetTo, TxChanges, resolve


def test_resolve_three_states():
    assert resolve(KEEP, 7) == 7
    assert resolve(CLEAR, 7) is None
    assert resolve(SetTo(9), 7) == 9


def test_omitted_null_and_value_map_to_keep_clear_set():
    body = TxUpdate.model_validate({"account_id": None, "amount": "12.00"})
    ch = body.to_changes()
    assert ch.account_id is CLEAR
    assert ch.amount == SetTo(Decimal("12.00"))
    assert ch.category_id is KEEP
    assert ch.description is KEEP


def test_empty_patch_is_empty():
    assert TxUpdate.model_validate({}).to_changes().is_empty()
    assert TxChanges().is_empty()
    assert not TxChanges(account_id=CLEAR).is_empty()


@pytest.mark.parametrize("field", ["category_id", "amount", "kind", "occurred_at"])
def test_required_fields_cannot_be_nulled(field):
    with pytest.raises(ValidationError):
        TxUpdate.model_validate({field: None})


def test_patch_validates_amount_and_description():
    with pytest.raises(ValidationError):
        TxUpdate.model_validate({"amount": "0"})
    with pytest.raises(ValidationError):
        TxUpdate.model_validate({"amount": "1.234"})
    with pytest.raises(ValidationError):
        TxUpdate.model_validate({"amount": 1e30})
    with pytest.raises(ValidationError):
        TxUpdate.model_validate({"description": "x" * 201})
    body = TxUpdate.model_validate({"occurred_at": "2026-02-01T10:00:00Z", "description": "  "})
    ch = body.to_changes()
    assert isinstance(ch.occurred_at.value, datetime)
    assert ch.description is CLEAR
