from pydantic import BaseModel
from datetime import datetime


class AuditOut(BaseModel):
    """An audit row as returned to its owner; ``details`` is passed through unchanged."""

    id: int
    created_at: datetime
    user_id: int
    action: str
    entity_type: str
    entity_id: int | None
    details: dict | None

    class Config:
        from_attributes = True
