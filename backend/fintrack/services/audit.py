from sqlalchemy import select
from sqlalchemy.orm import Session

from fintrack.models.audit_log import AuditLog


def log_event(
    s: Session,
    user_id: int,
    action: str,
    entity_type: str,
    entity_id: int | None = None,
    details: dict | None = None,
) -> AuditLog:
    # Flushed, not committed: the row lives or dies with the caller's unit of work.
    row = AuditLog(user_id=user_id, action=action, entity_type=entity_type, entity_id=entity_id, details=details)
    s.add(row)
    s.flush()
    return row


def list_events(
    s: Session,
    user_id: int,
    *,
    entity_type: str | None = None,
    action: str | None = None,
    limit: int = 200,
) -> list[AuditLog]:
    q = select(AuditLog).where(AuditLog.user_id == user_id)
    if entity_type:
        q = q.where(AuditLog.entity_type == entity_type)
    if action:
        q = q.where(AuditLog.action == action)
    q = q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    return list(s.execute(q).scalars().all())
