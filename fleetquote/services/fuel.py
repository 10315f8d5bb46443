import math
from fleetquote.core.enums import DistanceUnit
from fleetquote.core.errors import CalculationError
from fleetquote.schemas.costs import FuelCosts, RefuelingCosts
from fleetquote.schemas.vehicle import VehicleProfile
from fleetquote.services.units import convert_distance, convert_fuel_efficiency, per_gallon_unit
from fleetquote.utils.rounding import round_money


def _efficiency_per_gallon(vehicle: VehicleProfile) -> float:
    if vehicle.fuel_efficiency <= 0:
        raise CalculationError("invalid fuel efficiency", stage="fuel")
    return convert_fuel_efficiency(
        vehicle.fuel_efficiency,
        vehicle.fuel_efficiency_unit,
        per_gallon_unit(vehicle.distance_unit),
    )


def vehicle_autonomy(vehicle: VehicleProfile) -> float:
    """Range on a full tank, in the vehicle's distance unit"""
    return vehicle.fuel_capacity * _efficiency_per_gallon(vehicle)


def calculate_fuel_costs(distance: float, vehicle: VehicleProfile, fuel_price: float) -> FuelCosts:
    """Gallons burned and their cost for a distance given in km."""
    efficiency = _efficiency_per_gallon(vehicle)
    distance_in_unit = convert_distance(distance, DistanceUnit.KM, vehicle.distance_unit)

    consumption = distance_in_unit / efficiency
    cost = consumption * fuel_price

    return FuelCosts(
        consumption=round_money(consumption),
        cost=round_money(cost),
        price_per_unit=fuel_price,
    )


def calculate_refueling_costs(distance: float, vehicle: VehicleProfile, fuel_price: float) -> RefuelingCosts:
    """Full-tank refills needed beyond the first tank for a distance given in km."""
    autonomy = vehicle_autonomy(vehicle)
    if autonomy <= 0:
        raise CalculationError("vehicle autonomy is zero", stage="refueling")
    distance_in_unit = convert_distance(distance, DistanceUnit.KM, vehicle.distance_unit)

    # the first tank covers one autonomy; every started tank after it is a stop
    stops = max(0, math.ceil(distance_in_unit / autonomy) - 1)
    cost_per_stop = vehicle.fuel_capacity * fuel_price

    return RefuelingCosts(
        stops=stops,
        cost_per_stop=round_money(cost_per_stop),
        total=round_money(stops * cost_per_stop),
    )
