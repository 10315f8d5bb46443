import logging
from fastapi import HTTPException
from fleetquote.core.redis import get_redis
from fleetquote.core.config import settings
from fleetquote.core.metrics import rate_limit_exceeded

logger = logging.getLogger(__name__)


async def check_rate_limit(user_id: int) -> None:
    """Fixed-window limit of RATE_LIMIT calls per RATE_LIMIT_WINDOW seconds per user"""
    redis = get_redis()
    if redis is None:
        logger.warning("Rate limit skipped: Redis not available")
        return

    key = f"rl:{user_id}"
    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, settings.RATE_LIMIT_WINDOW)

    if count > settings.RATE_LIMIT:
        rate_limit_exceeded.labels(user_id=str(user_id)).inc()
        retry_after = await redis.ttl(key)
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(max(retry_after, 1))},
        )
