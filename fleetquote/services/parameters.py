"""Tenant system parameters: onboarding defaults, activation and cached lookup"""
import json
import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from fleetquote.core.config import settings
from fleetquote.core.metrics import cache_hits, cache_misses
from fleetquote.core.redis import get_redis
from fleetquote.models.parameters import SystemParameters
from fleetquote.schemas.parameters import CostParameters, DEFAULT_PRICING_LEVELS, ParametersCreate
from fleetquote.services.tolls import DEFAULT_TOLL_FEES

logger = logging.getLogger(__name__)


def _cache_key(tenant_id: int) -> str:
    return f"params:active:{tenant_id}"


def official_exchange_rate(currency: str, fallback: float) -> float:
    rate = settings.OFFICIAL_EXCHANGE_RATES.get(currency.upper())
    if rate is None:
        logger.warning(f"No official exchange rate for {currency}, keeping {fallback}")
        return fallback
    return rate


def effective_parameters(row: SystemParameters) -> CostParameters:
    """Engine view of a stored set; the official rate wins unless the tenant overrides it"""
    params = CostParameters.model_validate(row)
    if not row.use_custom_exchange_rate:
        rate = official_exchange_rate(params.preferred_currency, params.exchange_rate)
        params = params.model_copy(update={"exchange_rate": rate})
    return params


def default_parameters(year: Optional[int] = None) -> ParametersCreate:
    return ParametersCreate(
        year=year or datetime.now(timezone.utc).year,
        fuel_price=settings.DEFAULT_FUEL_PRICE,
        meal_cost_per_day=settings.DEFAULT_MEAL_COST_PER_DAY,
        hotel_cost_per_night=settings.DEFAULT_HOTEL_COST_PER_NIGHT,
        driver_incentive_per_day=settings.DEFAULT_DRIVER_INCENTIVE_PER_DAY,
        exchange_rate=settings.DEFAULT_EXCHANGE_RATE,
        preferred_distance_unit=settings.DEFAULT_DISTANCE_UNIT,
        preferred_currency=settings.DEFAULT_CURRENCY,
        rounding_local=settings.DEFAULT_ROUNDING_LOCAL,
        rounding_usd=settings.DEFAULT_ROUNDING_USD,
        markup_options=list(settings.MARKUP_OPTIONS),
        recommended_markup=settings.RECOMMENDED_MARKUP,
        toll_fees=dict(DEFAULT_TOLL_FEES),
        pricing_levels=list(DEFAULT_PRICING_LEVELS),
        is_active=True,
    )


async def invalidate_active_parameters(tenant_id: int) -> None:
    redis = get_redis()
    if redis is None:
        return
    try:
        await redis.delete(_cache_key(tenant_id))
    except Exception as e:
        logger.warning(f"Parameters cache invalidation failed for tenant {tenant_id}: {e}")


async def deactivate_siblings(db: AsyncSession, tenant_id: int, keep_id: Optional[int] = None) -> None:
    stmt = (
        update(SystemParameters)
        .where(SystemParameters.tenant_id == tenant_id, SystemParameters.is_active.is_(True))
        .values(is_active=False, updated_at=datetime.now(timezone.utc))
    )
    if keep_id is not None:
        stmt = stmt.where(SystemParameters.id != keep_id)
    await db.execute(stmt)


async def create_parameters(db: AsyncSession, tenant_id: int, payload: ParametersCreate) -> SystemParameters:
    """Insert a parameter set; an active one deactivates every sibling first."""
    if payload.is_active:
        await deactivate_siblings(db, tenant_id)

    data = payload.model_dump()
    params = SystemParameters(tenant_id=tenant_id, **data)
    db.add(params)
    await db.commit()
    await db.refresh(params)

    if params.is_active:
        await invalidate_active_parameters(tenant_id)
    return params


async def activate_parameters(db: AsyncSession, params: SystemParameters) -> SystemParameters:
    await deactivate_siblings(db, params.tenant_id, keep_id=params.id)
    params.is_active = True
    db.add(params)
    await db.commit()
    await db.refresh(params)
    await invalidate_active_parameters(params.tenant_id)
    logger.info(f"Activated parameters {params.id} ({params.year}) for tenant {params.tenant_id}")
    return params


async def create_default_parameters(db: AsyncSession, tenant_id: int) -> SystemParameters:
    return await create_parameters(db, tenant_id, default_parameters())


async def get_active_parameters(db: AsyncSession, tenant_id: int) -> Optional[CostParameters]:
    """Active parameters for a tenant, read through the Redis cache."""
    cache_key = _cache_key(tenant_id)
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(cache_key)
            if cached:
                cache_hits.labels(cache_key="parameters").inc()
                return CostParameters.model_validate(json.loads(cached))
        except Exception as e:
            logger.warning(f"Parameters cache retrieval failed: {e}")
    cache_misses.labels(cache_key="parameters").inc()

    res = await db.execute(
        select(SystemParameters).where(
            SystemParameters.tenant_id == tenant_id,
            SystemParameters.is_active.is_(True),
        )
    )
    row = res.scalars().first()
    if row is None:
        return None
    params = effective_parameters(row)

    if redis is not None:
        try:
            await redis.set(cache_key, params.model_dump_json(), ex=settings.PARAMETERS_CACHE_TTL)
        except Exception as e:
            logger.warning(f"Parameters cache write failed: {e}")
    return params
