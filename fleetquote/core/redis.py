import logging
from typing import Optional
from redis.asyncio import Redis
from fleetquote.core.config import settings

logger = logging.getLogger(__name__)

redis: Optional[Redis] = None

async def init_redis() -> Redis:
    global redis
    try:
        redis = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        await redis.ping()
        logger.info("Connected to Redis")
        return redis
    except Exception as e:
        redis = None
        logger.error(f"Failed to connect to Redis: {e}")
        raise

async def close_redis():
    global redis
    if redis:
        await redis.close()
        redis = None

def get_redis() -> Optional[Redis]:
    """Shared client, or None when Redis was never initialised.

    Callers treat None as "no cache": pricing, rate limiting and idempotency
    keep working without Redis, only slower and unprotected.
    """
    return redis
