from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from fintrack.services.changes import SetTo, TxChanges
from fintrack.services.ledger import create_transaction, update_transaction


def test_concurrent_creates_converge(Session, seed, when):
    owner = seed.user()
    cat = seed.category(owner)
    acct = seed.account(owner, "1000.00")
    n = 20

    def worker(_):
        s = Session()
        try:
            return create_transaction(
                s, owner, category_id=cat, account_id=acct, amount=Decimal("5.00"), kind="expense", occurred_at=when
            ).id
        finally:
            s.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(worker, range(n)))

    assert len(set(ids)) == n
    assert seed.tx_count() == n
    assert seed.balance(acct) == Decimal("1000.00") - n * Decimal("5.00")


def test_concurrent_moves_in_opposite_directions(Session, seed, when):
    owner = seed.user()
    cat = seed.category(owner)
    a = seed.account(owner, "500.00", name="A")
    b = seed.account(owner, "500.00", name="B")

    s = Session()
    try:
        from_a = [
            create_transaction(s, owner, category_id=cat, account_id=a, amount=Decimal("10.00"), kind="expense", occurred_at=when).id
            for _ in range(5)
        ]
        from_b = [
            create_transaction(s, owner, category_id=cat, account_id=b, amount=Decimal("10.00"), kind="expense", occurred_at=when).id
            for _ in range(5)
        ]
    finally:
        s.close()

    jobs = [(tx_id, b) for tx_id in from_a] + [(tx_id, a) for tx_id in from_b]

    def worker(job):
        tx_id, target = job
        s = Session()
        try:
            update_transaction(s, owner, tx_id, TxChanges(account_id=SetTo(target)))
        finally:
            s.close()

    with ThreadPoolExecutor(max_workers=6) as pool:
        list(pool.map(worker, jobs))

    assert seed.balance(a) == Decimal("450.00")
    assert seed.balance(b) == Decimal("450.00")
