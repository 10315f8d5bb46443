"""Quotation assembly: prices a stored vehicle against the tenant's active parameters"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from fleetquote.core.config import settings
from fleetquote.core.errors import ValidationError
from fleetquote.models.quotation import Quotation
from fleetquote.models.vehicle import Vehicle
from fleetquote.schemas.costs import CostCalculationRequest, PricingOption, RouteResult
from fleetquote.schemas.parameters import CostParameters
from fleetquote.schemas.quote import QuoteRequest, QuoteResponse
from fleetquote.schemas.vehicle import VehicleProfile
from fleetquote.services.pricing import calculate_quote

logger = logging.getLogger(__name__)


async def next_quotation_number(db: AsyncSession, tenant_id: int, year: Optional[int] = None) -> str:
    """QT-<year>-<seq>, sequence restarting each year per tenant.

    Continues from the highest issued sequence so numbers freed by a delete
    are never handed out again.
    """
    year = year or datetime.now(timezone.utc).year
    prefix = f"QT-{year}-"
    res = await db.execute(
        select(Quotation.quotation_number).where(
            Quotation.tenant_id == tenant_id,
            Quotation.quotation_number.like(f"{prefix}%"),
        )
    )
    last = 0
    for number in res.scalars().all():
        suffix = number[len(prefix):]
        if suffix.isdigit():
            last = max(last, int(suffix))
    return f"{prefix}{last + 1:04d}"


def resolve_discount(params: CostParameters, pricing_level: Optional[str]) -> float:
    """Discount for a pricing level key; without one the tenant default level applies"""
    if not pricing_level:
        for level in params.pricing_levels:
            if level.is_default:
                return level.discount_percentage
        return 0.0
    for level in params.pricing_levels:
        if level.key == pricing_level:
            return level.discount_percentage
    raise ValidationError(f"Unknown pricing level: {pricing_level}", field="pricing_level")


def select_option(options, markup: Optional[float]) -> PricingOption:
    if markup is None:
        for option in options:
            if option.recommended:
                return option
        return options[0]
    for option in options:
        if option.markup == markup:
            return option
    raise ValidationError(f"Markup {markup} is not one of the configured options", field="markup")


def build_request(vehicle: Vehicle, payload) -> CostCalculationRequest:
    return CostCalculationRequest(
        route=payload.route,
        vehicle=VehicleProfile.model_validate(vehicle),
        include_fuel=payload.include_fuel,
        include_meals=payload.include_meals,
        include_tolls=payload.include_tolls,
        include_driver_incentive=payload.include_driver_incentive,
        extra_mileage=payload.extra_mileage,
        estimated_days=payload.estimated_days,
        group_size=payload.group_size,
    )


async def price_quotation(
    request: CostCalculationRequest,
    params: CostParameters,
    discount_percentage: float = 0.0,
) -> QuoteResponse:
    req = QuoteRequest(
        **request.model_dump(),
        parameters=params,
        discount_percentage=discount_percentage,
    )
    return await calculate_quote(req)


def apply_quote(quotation: Quotation, quote: QuoteResponse, markup: Optional[float], discount: float) -> None:
    selected = select_option(quote.pricing_options, markup)
    quotation.costs = quote.costs.model_dump()
    quotation.pricing_options = [o.model_dump() for o in quote.pricing_options]
    quotation.total_cost = quote.costs.total
    quotation.selected_markup = selected.markup
    quotation.discount_percentage = discount
    quotation.sale_price_hnl = selected.sale_price_hnl
    quotation.sale_price_usd = selected.sale_price_usd
    quotation.exchange_rate_used = quote.exchange_rate


def stored_request(quotation: Quotation) -> CostCalculationRequest:
    """Rebuild the engine request a quotation was priced from"""
    vehicle = quotation.vehicle
    return CostCalculationRequest(
        route=RouteResult(
            total_distance=quotation.total_distance,
            total_time=quotation.total_time,
            base_location=quotation.base_location,
            origin=quotation.origin,
            destination=quotation.destination,
            segments=quotation.route_segments or [],
        ),
        vehicle=VehicleProfile.model_validate(vehicle),
        include_fuel=quotation.include_fuel,
        include_meals=quotation.include_meals,
        include_tolls=quotation.include_tolls,
        include_driver_incentive=quotation.include_driver_incentive,
        extra_mileage=quotation.extra_mileage,
        estimated_days=quotation.estimated_days,
        group_size=quotation.group_size,
    )


def default_valid_until() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=settings.QUOTATION_VALIDITY_DAYS)
