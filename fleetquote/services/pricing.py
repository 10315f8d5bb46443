from typing import Dict, List, Optional, Sequence
from fleetquote.core.config import settings
from fleetquote.core.errors import ValidationError
from fleetquote.schemas.costs import PricingOption
from fleetquote.schemas.quote import QuoteRequest, QuoteResponse
from fleetquote.services.costs import calculate_total_costs
from fleetquote.utils.rounding import round_money, round_to_unit


def _check_markups(markups: Sequence[float]) -> None:
    if not markups:
        raise ValidationError("at least one markup option is required", field="markup_options")
    if any(m < 0 for m in markups):
        raise ValidationError("markup options must not be negative", field="markup_options")
    if len(set(markups)) != len(markups):
        raise ValidationError("markup options must be unique", field="markup_options")


def generate_pricing_options(
    cost: float,
    exchange_rate: float,
    markups: Optional[Sequence[float]] = None,
    recommended_markup: Optional[float] = None,
    rounding_local: float = 0,
    rounding_foreign: float = 0,
) -> List[PricingOption]:
    """Sale price ladder, one tier per markup percentage.

    Local prices round to the nearest `rounding_local` unit. Foreign prices
    are converted from the rounded local price and then rounded to the
    nearest `rounding_foreign` unit, so printed quotes show clean figures
    in both currencies.
    """
    if markups is None:
        markups = settings.MARKUP_OPTIONS
    if recommended_markup is None:
        recommended_markup = settings.RECOMMENDED_MARKUP
    _check_markups(markups)
    if exchange_rate <= 0:
        raise ValidationError("exchange rate must be positive", field="exchange_rate")

    options = []
    for markup in markups:
        sale_price = cost * (1 + markup / 100)
        price_local = round_to_unit(sale_price, rounding_local)
        price_foreign = round_to_unit(price_local / exchange_rate, rounding_foreign)
        options.append(PricingOption(
            markup=markup,
            cost=cost,
            sale_price=round_money(sale_price),
            sale_price_hnl=price_local,
            sale_price_usd=price_foreign,
            recommended=markup == recommended_markup,
        ))
    return options


def apply_client_discount(options: List[PricingOption], discount_percentage: float) -> List[PricingOption]:
    if discount_percentage <= 0:
        return options
    multiplier = 1 - discount_percentage / 100
    return [
        option.model_copy(update={
            "sale_price": round_money(option.sale_price * multiplier),
            "sale_price_hnl": round_money(option.sale_price_hnl * multiplier),
            "sale_price_usd": round_money(option.sale_price_usd * multiplier),
        })
        for option in options
    ]


def calculate_profit(cost: float, sale_price: float) -> Dict[str, float]:
    amount = round_money(sale_price - cost)
    percentage = round_money((sale_price - cost) / cost * 100) if cost > 0 else 0.0
    return {"amount": amount, "percentage": percentage}


async def calculate_quote(req: QuoteRequest) -> QuoteResponse:

    params = req.parameters
    costs = calculate_total_costs(req, params)
    options = generate_pricing_options(
        costs.total,
        params.exchange_rate,
        markups=params.markup_options,
        recommended_markup=params.recommended_markup,
        rounding_local=params.rounding_local,
        rounding_foreign=params.rounding_usd,
    )
    options = apply_client_discount(options, req.discount_percentage)
    return QuoteResponse(
        costs=costs,
        pricing_options=options,
        exchange_rate=params.exchange_rate,
        currency=params.preferred_currency,
    )
