from __future__ import annotations
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from acquisition.models.audit_log import AuditLog

def audit(
    db: AsyncSession,
    *,
    actor_id: uuid.UUID | None,
    action: str,
    target_type: str | None = None,
    target_id: uuid.UUID | str | None = None,
    detail: dict | None = None,
) -> None:
    # Joins the caller's transaction; committed or rolled back with it.
    db.add(AuditLog(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        detail=detail or {},
    ))
