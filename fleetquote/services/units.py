"""Distance, fuel efficiency and fuel volume conversions"""
from fleetquote.core.enums import DistanceUnit, FuelEfficiencyUnit, FuelPriceUnit
from fleetquote.core.errors import CalculationError, ValidationError

KM_TO_MILES = 0.621371
MILES_TO_KM = 1.60934
MPG_TO_KPL = 0.425144
KPL_TO_MPG = 2.35215
LITERS_PER_GALLON = 3.78541


def _coerce(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unsupported {field}: {value!r}", field=field)


def convert_distance(value: float, from_unit, to_unit) -> float:
    from_unit = _coerce(DistanceUnit, from_unit, "distance_unit")
    to_unit = _coerce(DistanceUnit, to_unit, "distance_unit")
    if from_unit == to_unit:
        return value
    if from_unit == DistanceUnit.KM:
        return value * KM_TO_MILES
    return value * MILES_TO_KM


def convert_fuel_efficiency(value: float, from_unit, to_unit) -> float:
    """Convert efficiency through km-per-liter as the common base."""
    from_unit = _coerce(FuelEfficiencyUnit, from_unit, "fuel_efficiency_unit")
    to_unit = _coerce(FuelEfficiencyUnit, to_unit, "fuel_efficiency_unit")
    if value <= 0:
        raise CalculationError("invalid fuel efficiency", stage="unit_conversion")
    if from_unit == to_unit:
        return value

    if from_unit == FuelEfficiencyUnit.MPG:
        kpl = value * MPG_TO_KPL
    elif from_unit == FuelEfficiencyUnit.MPL:
        kpl = value * MILES_TO_KM
    elif from_unit == FuelEfficiencyUnit.KPG:
        kpl = value / LITERS_PER_GALLON
    else:
        kpl = value

    if to_unit == FuelEfficiencyUnit.MPG:
        return kpl * KPL_TO_MPG
    if to_unit == FuelEfficiencyUnit.MPL:
        return kpl * KM_TO_MILES
    if to_unit == FuelEfficiencyUnit.KPG:
        return kpl * LITERS_PER_GALLON
    return kpl


def per_gallon_unit(distance_unit) -> FuelEfficiencyUnit:
    """Distance-per-gallon efficiency unit matching a vehicle's distance unit"""
    distance_unit = _coerce(DistanceUnit, distance_unit, "distance_unit")
    return FuelEfficiencyUnit.KPG if distance_unit == DistanceUnit.KM else FuelEfficiencyUnit.MPG


def normalize_fuel_price(price: float, from_unit, to_unit) -> float:
    from_unit = _coerce(FuelPriceUnit, from_unit, "fuel_price_unit")
    to_unit = _coerce(FuelPriceUnit, to_unit, "fuel_price_unit")
    if from_unit == to_unit:
        return price
    if from_unit == FuelPriceUnit.LITER:
        return price * LITERS_PER_GALLON
    return price / LITERS_PER_GALLON


def convert_fuel_volume(value: float, from_unit, to_unit) -> float:
    from_unit = _coerce(FuelPriceUnit, from_unit, "fuel_volume_unit")
    to_unit = _coerce(FuelPriceUnit, to_unit, "fuel_volume_unit")
    if from_unit == to_unit:
        return value
    if from_unit == FuelPriceUnit.GALLON:
        return value * LITERS_PER_GALLON
    return value / LITERS_PER_GALLON
