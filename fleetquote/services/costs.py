"""Cost aggregation: runs every calculator and sums the included components"""
import logging
from fleetquote.core.enums import FuelPriceUnit, VehicleStatus
from fleetquote.core.errors import CalculationError, PricingEngineError, ValidationError
from fleetquote.schemas.costs import CostCalculationRequest, DetailedCosts
from fleetquote.schemas.parameters import CostParameters
from fleetquote.services.driver_expenses import calculate_driver_expenses, trip_days
from fleetquote.services.fuel import calculate_fuel_costs, calculate_refueling_costs
from fleetquote.services.tolls import calculate_toll_costs, route_legs
from fleetquote.services.units import normalize_fuel_price
from fleetquote.services.vehicle_costs import calculate_vehicle_costs
from fleetquote.utils.rounding import round_money

logger = logging.getLogger(__name__)


def validate_request(request: CostCalculationRequest, params: CostParameters) -> None:
    route = request.route
    vehicle = request.vehicle

    if route.total_distance < 0:
        raise ValidationError("total distance must not be negative", field="route.total_distance")
    if route.total_time < 0:
        raise ValidationError("total time must not be negative", field="route.total_time")
    if request.extra_mileage < 0:
        raise ValidationError("extra mileage must not be negative", field="extra_mileage")
    if request.estimated_days is not None and request.estimated_days < 1:
        raise ValidationError("estimated days must be at least 1", field="estimated_days")

    if vehicle.fuel_efficiency <= 0:
        raise ValidationError("fuel efficiency must be positive", field="vehicle.fuel_efficiency")
    if vehicle.fuel_capacity <= 0:
        raise ValidationError("fuel capacity must be positive", field="vehicle.fuel_capacity")
    if vehicle.cost_per_distance < 0 or vehicle.cost_per_day < 0:
        raise ValidationError("vehicle rates must not be negative", field="vehicle")
    if vehicle.status != VehicleStatus.ACTIVE:
        raise ValidationError(f"vehicle is {vehicle.status}, not available for quotation", field="vehicle.status")
    capacity = vehicle.passenger_capacity
    if request.group_size is not None and capacity is not None and request.group_size > capacity:
        raise ValidationError(
            f"group of {request.group_size} exceeds vehicle capacity of {capacity}",
            field="group_size",
        )

    if params.fuel_price < 0:
        raise ValidationError("fuel price must not be negative", field="parameters.fuel_price")
    if params.exchange_rate <= 0:
        raise ValidationError("exchange rate must be positive", field="parameters.exchange_rate")


def _run_stage(stage: str, func, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except PricingEngineError:
        raise
    except (ArithmeticError, TypeError, ValueError) as e:
        raise CalculationError(str(e) or e.__class__.__name__, stage=stage) from e


def calculate_total_costs(request: CostCalculationRequest, params: CostParameters) -> DetailedCosts:
    """Full cost breakdown for a trip.

    Every component is computed and returned; the total only includes the
    ones selected by the request flags. With include_fuel off (rent-a-car
    mode) the client returns the vehicle with a full tank, so neither fuel
    nor refueling is charged. Vehicle operating cost is always charged.
    """
    validate_request(request, params)

    route = request.route
    vehicle = request.vehicle
    distance = route.total_distance + request.extra_mileage
    fuel_price = normalize_fuel_price(params.fuel_price, params.fuel_price_unit, FuelPriceUnit.GALLON)

    days = request.estimated_days or _run_stage("days", trip_days, route.total_time)

    fuel = _run_stage("fuel", calculate_fuel_costs, distance, vehicle, fuel_price)
    refueling = _run_stage("refueling", calculate_refueling_costs, distance, vehicle, fuel_price)
    driver = _run_stage(
        "driver", calculate_driver_expenses,
        route.total_time, params, request.include_driver_incentive, days=days,
    )
    vehicle_costs = _run_stage("vehicle", calculate_vehicle_costs, distance, route.total_time, vehicle, days=days)
    tolls = _run_stage("tolls", calculate_toll_costs, route_legs(route), params.toll_fees)

    total = (
        (fuel.cost + refueling.total if request.include_fuel else 0.0)
        + (driver.total if request.include_meals else 0.0)
        + (tolls.total if request.include_tolls else 0.0)
        + vehicle_costs.total
    )

    logger.debug(
        f"Costed {distance:.1f} km over {days} day(s) for {vehicle.name or 'vehicle'}: total {total:.2f}"
    )

    return DetailedCosts(
        fuel=fuel,
        driver=driver,
        vehicle=vehicle_costs,
        refueling=refueling,
        tolls=tolls,
        total_distance=round_money(distance),
        days=days,
        total=round_money(total),
    )
