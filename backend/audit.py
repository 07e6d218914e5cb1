"""Audit log helper. Call after mutations."""
from __future__ import annotations

import uuid
from sqlalchemy.orm import Session

from db.models import AuditLog

SYSTEM_ACTOR = "system"


def log(
    db: Session,
    action: str,
    resource_type: str,
    resource_id: str | None = None,
    details: dict | None = None,
    actor_id: str = SYSTEM_ACTOR,
    commit: bool = True,
) -> None:
    entry = AuditLog(
        id=str(uuid.uuid4()),
        actor_id=actor_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details or {},
    )
    db.add(entry)
    if commit:
        db.commit()
