import json
import logging
from typing import Optional
from fleetquote.core.redis import get_redis
from fleetquote.core.config import settings

logger = logging.getLogger(__name__)


def _key(key: str, user_id: int) -> str:
    # keys are per user so two clients reusing the same header value never collide
    return f"idemp:{user_id}:{key}"


async def get_idempotent(key: Optional[str], user_id: int) -> Optional[dict]:
    redis = get_redis()
    if not key or redis is None:
        return None
    v = await redis.get(_key(key, user_id))
    if v:
        logger.info(f"Replaying stored response for idempotency key {key}")
    return json.loads(v) if v else None


async def set_idempotent(key: Optional[str], user_id: int, value: dict) -> None:
    redis = get_redis()
    if not key or redis is None:
        return
    await redis.set(_key(key, user_id), json.dumps(value, default=str), ex=settings.IDEMPOTENCY_TTL)
