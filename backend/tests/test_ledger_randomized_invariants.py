from datetime import datetime, timedelta
from decimal import Decimal
from random import Random

from sqlalchemy import select

from fintrack.models.transaction import Transaction
from fintrack.services.changes import CLEAR, KEEP, SetTo, TxChanges
from fintrack.services.effects import effect
from fintrack.services.ledger import create_transaction, delete_transaction, update_transaction

KINDS = ["expense", "income", "transfer"]


def _expected_balances(Session, initial: dict[int, Decimal]) -> dict[int, Decimal]:
    out = dict(initial)
    s = Session()
    try:
        for t in s.execute(select(Transaction)).scalars().all():
            if t.account_id is not None:
                out[t.account_id] += effect(t.amount, t.kind)
    finally:
        s.close()
    return out


def test_randomized_operations_keep_balances_consistent(Session, session, seed):
    rng = Random(1337)
    owner = seed.user()
    cats = [seed.category(owner, name=f"cat-{i}") for i in range(3)]
    initial = {
        seed.account(owner, "1000.00", name="A"): Decimal("1000.00"),
        seed.account(owner, "250.50", name="B"): Decimal("250.50"),
        seed.account(owner, "-40.00", name="C"): Decimal("-40.00"),
    }
    accounts = list(initial) + [None]
    start = datetime(2026, 1, 1, 8, 0)
    live: list[int] = []

    for step in range(200):
        roll = rng.random()
        amount = Decimal(rng.randint(1, 50000)) / Decimal(100)
        if roll < 0.45 or not live:
            t = create_transaction(
                session,
                owner,
                category_id=rng.choice(cats),
                account_id=rng.choice(accounts),
                amount=amount,
                kind=rng.choice(KINDS),
                occurred_at=start + timedelta(hours=step),
            )
            live.append(t.id)
        elif roll < 0.80:
            target = rng.choice(accounts)
            changes = TxChanges(
                account_id=CLEAR if target is None else SetTo(target),
                amount=SetTo(amount) if rng.random() < 0.5 else KEEP,
                kind=SetTo(rng.choice(KINDS)) if rng.random() < 0.5 else KEEP,
            )
            update_transaction(session, owner, rng.choice(live), changes)
        else:
            tx_id = live.pop(rng.randrange(len(live)))
            delete_transaction(session, owner, tx_id)

        if step % 25 == 0:
            expected = _expected_balances(Session, initial)
            for acct, bal in expected.items():
                assert seed.balance(acct) == bal

    expected = _expected_balances(Session, initial)
    for acct, bal in expected.items():
        assert seed.balance(acct) == bal
    assert seed.tx_count() == len(live)
