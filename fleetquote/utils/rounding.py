import math


def round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def round_money(value: float, digits: int = 2) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_to_unit(value: float, unit: float) -> float:
    """Round to the nearest multiple of `unit`; a unit of 0 rounds to cents."""
    if not unit:
        return round_money(value)
    return round_half_up(value / unit) * unit
