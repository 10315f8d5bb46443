"""Stateless cost and pricing endpoint with Redis caching"""
import logging
import time
from fastapi import APIRouter, Depends

from fleetquote.schemas.quote import QuoteRequest, QuoteResponse
from fleetquote.services.pricing import calculate_quote
from fleetquote.core.redis import get_redis
from fleetquote.core.config import settings
from fleetquote.core.metrics import cache_hits, cache_misses, quote_calculations, quote_calculation_duration
from fleetquote.core.rate_limit import check_rate_limit
from fleetquote.core.security import get_current_user
from fleetquote.utils.hashing import cache_key as request_cache_key

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("/calc", response_model=QuoteResponse)
async def calc_quote(req: QuoteRequest, current_user=Depends(get_current_user)):

    await check_rate_limit(int(current_user.id))

    cache_key = request_cache_key("price", req.model_dump(mode="json"))
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(cache_key)
            if cached:
                cache_hits.labels(cache_key="price").inc()
                return QuoteResponse.model_validate_json(cached)
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")
    cache_misses.labels(cache_key="price").inc()

    start_time = time.time()
    try:
        result = await calculate_quote(req)
    except Exception:
        quote_calculations.labels(source="calc", status="error").inc()
        raise
    quote_calculations.labels(source="calc", status="success").inc()
    quote_calculation_duration.labels(source="calc").observe(time.time() - start_time)

    if redis is not None:
        try:
            await redis.set(
                cache_key,
                result.model_dump_json(),
                ex=settings.PRICE_CACHE_TTL
            )
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    return result
