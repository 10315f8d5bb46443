"""Driver per-diem (viáticos): meals, lodging and incentive pay"""
import math
from typing import Optional
from fleetquote.core.config import settings
from fleetquote.core.errors import ValidationError
from fleetquote.schemas.costs import DriverExpenses
from fleetquote.schemas.parameters import CostParameters
from fleetquote.utils.rounding import round_money


def trip_days(duration_minutes: float, hours_per_day: Optional[int] = None) -> int:
    """Billable days for a trip. One working day is WORKING_DAY_HOURS of driving."""
    if duration_minutes < 0:
        raise ValidationError("duration must not be negative", field="total_time")
    hours = hours_per_day or settings.WORKING_DAY_HOURS
    return math.ceil(duration_minutes / (hours * 60))


def calculate_driver_expenses(
    duration_minutes: float,
    params: CostParameters,
    include_incentive: bool = False,
    days: Optional[int] = None,
) -> DriverExpenses:
    if days is None:
        days = trip_days(duration_minutes)

    meals = days * params.meal_cost_per_day
    lodging = (days - 1) * params.hotel_cost_per_night if days > 1 else 0.0
    incentive = days * params.driver_incentive_per_day if include_incentive else 0.0

    return DriverExpenses(
        meals=round_money(meals),
        lodging=round_money(lodging),
        incentive=round_money(incentive),
        days=days,
        total=round_money(meals + lodging + incentive),
    )
