import logging
from functools import wraps
from typing import Callable
from fleetquote.core.audit_log import log_audit
from fleetquote.core.enums import AuditAction

logger = logging.getLogger(__name__)


def audit_log(action: AuditAction) -> Callable:

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            result = await func(*args, **kwargs)
            
            db = kwargs.get("db")
            current_user = kwargs.get("current_user")
            
            if not db or not current_user:
                return result
            
            payload = None
            for key in ["payload", "data", "body"]:
                if key in kwargs:
                    payload = kwargs[key]
                    break
            if payload is None:
                payload = {k: v for k, v in kwargs.items() if k.endswith("_id")}
            
            await log_audit(
                db,
                int(current_user.id),
                action,
                payload,
                tenant_id=current_user.tenant_id,
            )
            return result
        
        return wrapper
    return decorator
