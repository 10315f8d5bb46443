"""Audit logging utilities for write operations"""
import logging
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from fleetquote.models.audit import Audit
from fleetquote.core.enums import AuditAction
from fleetquote.core.metrics import audit_logs_created
from fleetquote.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


def _payload_dict(payload: Any) -> dict:
    if payload is None:
        return {}
    if hasattr(payload, "model_dump"):
        return payload.model_dump(exclude_unset=True)
    if isinstance(payload, dict):
        return payload
    return {}


async def log_audit(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    payload: Optional[Any] = None,
    tenant_id: Optional[int] = None,
) -> None:

    try:
        audit_record = Audit(
            user_id=int(user_id),
            tenant_id=tenant_id,
            endpoint=str(action),
            payload_hash=payload_hash(_payload_dict(payload)),
        )
        db.add(audit_record)
        await db.commit()
        audit_logs_created.labels(action=str(action), user_id=str(user_id)).inc()

    except Exception as e:
        logger.error(f"Audit logging failed for action {action}: {e}", exc_info=True)
        await db.rollback()
