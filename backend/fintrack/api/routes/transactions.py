from fastapi import APIRouter, Depends, Query
from dataclasses import replace
from datetime import datetime
from sqlalchemy.orm import Session

from fintrack.api.deps import db, current_user
from fintrack.schemas.transaction import (
    CategoriesQuery,
    TxCreate,
    TxDetailOut,
    TxDetailPage,
    TxKindName,
    TxOut,
    TxPage,
    TxSummaryOut,
    TxUpdate,
)
from fintrack.services import ledger, queries
from fintrack.services.queries import TxFilters

router = APIRouter(prefix="/transactions", tags=["transactions"])


def _page_filters(
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    category_id: int | None = Query(None),
    kind: TxKindName | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> TxFilters:
    return TxFilters(start=start, end=end, category_id=category_id, kind=kind, limit=limit, offset=offset)


def _filters(
    account_id: int | None = Query(None),
    f: TxFilters = Depends(_page_filters),
) -> TxFilters:
    return replace(f, account_id=account_id)


def _page(rows, total: int, f: TxFilters) -> TxPage:
    return TxPage(
        data=[TxOut.model_validate(t) for t in rows],
        total=total,
        limit=f.limit,
        offset=f.offset,
    )


@router.get("", response_model=TxPage)
def list_transactions(f: TxFilters = Depends(_filters), s: Session = Depends(db), user_id: int = Depends(current_user)):
    rows, total = queries.list_transactions(s, user_id, f)
    return _page(rows, total, f)


@router.get("/detailed", response_model=TxDetailPage)
def list_detailed(f: TxFilters = Depends(_filters), s: Session = Depends(db), user_id: int = Depends(current_user)):
    rows, total = queries.list_detailed(s, user_id, f)
    return TxDetailPage(
        data=[TxDetailOut.model_validate(r) for r in rows],
        total=total,
        limit=f.limit,
        offset=f.offset,
    )


@router.get("/summary", response_model=TxSummaryOut)
def summary(
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    account_id: int | None = Query(None),
    s: Session = Depends(db),
    user_id: int = Depends(current_user),
):
    return TxSummaryOut.model_validate(queries.summarize(s, user_id, start=start, end=end, account_id=account_id))


@router.get("/category/{category_id}", response_model=list[TxOut])
def by_category(category_id: int, s: Session = Depends(db), user_id: int = Depends(current_user)):
    return queries.list_by_category(s, user_id, category_id)


@router.post("/categories", response_model=list[TxOut])
def by_categories(body: CategoriesQuery, s: Session = Depends(db), user_id: int = Depends(current_user)):
    return queries.list_by_categories(s, user_id, body.category_ids)


@router.get("/account/{account_id}", response_model=TxPage)
def by_account(
    account_id: int,
    f: TxFilters = Depends(_page_filters),
    s: Session = Depends(db),
    user_id: int = Depends(current_user),
):
    rows, total = queries.list_by_account(s, user_id, account_id, f)
    return _page(rows, total, f)


@router.get("/{tx_id}", response_model=TxOut)
def get_tx(tx_id: int, s: Session = Depends(db), user_id: int = Depends(current_user)):
    return queries.get_transaction(s, user_id, tx_id)


@router.post("", response_model=TxOut, status_code=201)
def add_tx(body: TxCreate, s: Session = Depends(db), user_id: int = Depends(current_user)):
    return ledger.create_transaction(
        s,
        user_id,
        category_id=body.category_id,
        account_id=body.account_id,
        amount=body.amount,
        kind=body.kind,
        occurred_at=body.occurred_at,
        description=body.description,
    )


@router.patch("/{tx_id}", response_model=TxOut)
def update_tx(tx_id: int, body: TxUpdate, s: Session = Depends(db), user_id: int = Depends(current_user)):
    return ledger.update_transaction(s, user_id, tx_id, body.to_changes())


@router.delete("/{tx_id}")
def delete_tx(tx_id: int, s: Session = Depends(db), user_id: int = Depends(current_user)):
    ledger.delete_transaction(s, user_id, tx_id)
    return {"ok": True}
