from typing import Optional
from fleetquote.core.enums import DistanceUnit
from fleetquote.schemas.costs import VehicleCosts
from fleetquote.schemas.vehicle import VehicleProfile
from fleetquote.services.driver_expenses import trip_days
from fleetquote.services.units import convert_distance
from fleetquote.utils.rounding import round_money


def calculate_vehicle_costs(
    distance: float,
    duration_minutes: float,
    vehicle: VehicleProfile,
    days: Optional[int] = None,
) -> VehicleCosts:
    """Operating cost of the vehicle: per-distance wear plus per-day rate."""
    if days is None:
        days = trip_days(duration_minutes)
    distance_in_unit = convert_distance(distance, DistanceUnit.KM, vehicle.distance_unit)

    distance_cost = distance_in_unit * vehicle.cost_per_distance
    daily_cost = days * vehicle.cost_per_day

    return VehicleCosts(
        distance_cost=round_money(distance_cost),
        daily_cost=round_money(daily_cost),
        total=round_money(distance_cost + daily_cost),
    )
