from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fintrack.api.deps import db, current_user
from fintrack.schemas.audit import AuditOut
from fintrack.services.audit import list_events

router = APIRouter(prefix="/audit", tags=["audit"])


@router.get("", response_model=list[AuditOut])
def my_events(
    entity_type: str | None = Query(default=None),
    action: str | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=1000),
    s: Session = Depends(db),
    user_id: int = Depends(current_user),
):
    return list_events(s, user_id, entity_type=entity_type, action=action, limit=limit)
