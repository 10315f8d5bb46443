import pytest

from fleetquote.core.config import settings
from fleetquote.core.errors import ValidationError
from fleetquote.schemas.costs import RouteResult
from fleetquote.schemas.quote import QuoteRequest
from fleetquote.services.pricing import (
    apply_client_discount,
    calculate_profit,
    calculate_quote,
    generate_pricing_options,
)


class TestPricingLadder:

    def test_reference_ladder(self):
        options = generate_pricing_options(1950.0, 24.75, [10, 15, 20, 25, 30], 15)

        assert [o.markup for o in options] == [10, 15, 20, 25, 30]
        fifteen = options[1]
        assert fifteen.sale_price == 2242.50
        assert fifteen.recommended is True
        assert fifteen.cost == 1950.0

    def test_exactly_one_recommended(self):
        options = generate_pricing_options(1950.0, 24.75, [10, 15, 20, 25, 30], 15)
        assert sum(o.recommended for o in options) == 1

    def test_sale_price_formula(self):
        for option in generate_pricing_options(1000.0, 25.0, [0, 12.5, 40]):
            assert option.sale_price == pytest.approx(1000.0 * (1 + option.markup / 100))

    def test_local_and_foreign_rounding(self):
        options = generate_pricing_options(
            1950.0, 24.75, [10, 15, 20, 25, 30], 15, rounding_local=100, rounding_foreign=5,
        )
        fifteen = options[1]
        assert fifteen.sale_price_hnl == 2200.0
        # 2200 / 24.75 = 88.89, nearest 5
        assert fifteen.sale_price_usd == 90.0
        for option in options:
            assert option.sale_price_hnl % 100 == 0
            assert option.sale_price_usd % 5 == 0

    def test_no_rounding_keeps_cents(self):
        options = generate_pricing_options(1950.0, 24.75, [15], 15)
        assert options[0].sale_price_hnl == 2242.50
        assert options[0].sale_price_usd == 90.61

    def test_monotonic_in_markup(self):
        options = generate_pricing_options(
            3226.47, 24.8, [10, 15, 20, 25, 30], rounding_local=100, rounding_foreign=5,
        )
        for lower, higher in zip(options, options[1:]):
            assert higher.sale_price > lower.sale_price
            assert higher.sale_price_hnl >= lower.sale_price_hnl
            assert higher.sale_price_usd >= lower.sale_price_usd

    def test_defaults_come_from_settings(self):
        options = generate_pricing_options(100.0, 24.8)
        assert [o.markup for o in options] == list(settings.MARKUP_OPTIONS)
        assert [o.markup for o in options if o.recommended] == [settings.RECOMMENDED_MARKUP]

    def test_recommended_markup_not_in_ladder(self):
        options = generate_pricing_options(100.0, 24.8, [10, 20], 15)
        assert not any(o.recommended for o in options)

    def test_zero_cost(self):
        options = generate_pricing_options(0.0, 24.8, [10, 20], rounding_local=100, rounding_foreign=5)
        assert all(o.sale_price == 0.0 and o.sale_price_usd == 0.0 for o in options)

    @pytest.mark.parametrize("markups", [[10, 10, 20], [-5, 10], []])
    def test_invalid_markups(self, markups):
        with pytest.raises(ValidationError) as exc:
            generate_pricing_options(100.0, 24.8, markups)
        assert exc.value.field == "markup_options"

    def test_invalid_exchange_rate(self):
        with pytest.raises(ValidationError):
            generate_pricing_options(100.0, 0.0, [10])


class TestDiscountAndProfit:

    def test_discount_applies_to_every_currency(self):
        options = generate_pricing_options(1000.0, 25.0, [20], rounding_local=100, rounding_foreign=5)
        discounted = apply_client_discount(options, 10)
        assert discounted[0].sale_price == 1080.0
        assert discounted[0].sale_price_hnl == 1080.0
        # 1200 / 25 = 48 rounds to 50 before the discount
        assert discounted[0].sale_price_usd == 45.0
        assert discounted[0].markup == 20

    def test_no_discount_is_identity(self):
        options = generate_pricing_options(1000.0, 25.0, [20])
        assert apply_client_discount(options, 0) == options

    def test_profit(self):
        assert calculate_profit(1950.0, 2242.5) == {"amount": 292.5, "percentage": 15.0}

    def test_profit_on_zero_cost(self):
        assert calculate_profit(0.0, 100.0) == {"amount": 100.0, "percentage": 0.0}


class TestCalculateQuote:

    @pytest.mark.asyncio
    async def test_quote_uses_tenant_ladder(self, vehicle_profile, cost_parameters):
        req = QuoteRequest(
            route=RouteResult(total_distance=300.0, total_time=480.0),
            vehicle=vehicle_profile,
            parameters=cost_parameters,
        )
        res = await calculate_quote(req)

        assert res.exchange_rate == 24.75
        assert res.currency == "HNL"
        assert res.costs.vehicle.total == 1950.0
        assert [o.markup for o in res.pricing_options] == [10, 15, 20, 25, 30]
        recommended = [o for o in res.pricing_options if o.recommended]
        assert len(recommended) == 1
        assert recommended[0].cost == res.costs.total
        assert recommended[0].sale_price == pytest.approx(res.costs.total * 1.15, abs=0.01)
        assert recommended[0].sale_price_hnl % 100 == 0

    @pytest.mark.asyncio
    async def test_quote_with_client_discount(self, vehicle_profile, cost_parameters):
        base = dict(
            route=RouteResult(total_distance=300.0, total_time=480.0),
            vehicle=vehicle_profile,
            parameters=cost_parameters,
        )
        full = await calculate_quote(QuoteRequest(**base))
        discounted = await calculate_quote(QuoteRequest(discount_percentage=10, **base))

        for a, b in zip(full.pricing_options, discounted.pricing_options):
            assert b.sale_price == pytest.approx(a.sale_price * 0.9, abs=0.01)
        assert discounted.costs == full.costs

    @pytest.mark.asyncio
    async def test_quote_rejects_duplicate_tenant_markups(self, vehicle_profile, cost_parameters):
        params = cost_parameters.model_copy(update={"markup_options": [15, 15]})
        req = QuoteRequest(
            route=RouteResult(total_distance=10.0, total_time=30.0),
            vehicle=vehicle_profile,
            parameters=params,
        )
        with pytest.raises(ValidationError):
            await calculate_quote(req)
