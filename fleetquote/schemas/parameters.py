from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from datetime import datetime
from fleetquote.core.config import settings
from fleetquote.core.enums import DistanceUnit, FuelPriceUnit


class PricingLevel(BaseModel):
    key: str
    name: str
    discount_percentage: float = Field(default=0.0, ge=0, lt=100)
    is_default: bool = False


DEFAULT_PRICING_LEVELS = [
    PricingLevel(key="standard", name="Standard", discount_percentage=0, is_default=True),
    PricingLevel(key="preferred", name="Preferred", discount_percentage=5),
    PricingLevel(key="vip", name="VIP", discount_percentage=10),
]


class CostParameters(BaseModel):
    """Tenant configuration consumed by the cost engine"""
    model_config = ConfigDict(from_attributes=True)

    fuel_price: float
    fuel_price_unit: FuelPriceUnit = FuelPriceUnit.GALLON
    meal_cost_per_day: float
    hotel_cost_per_night: float
    driver_incentive_per_day: float
    exchange_rate: float
    preferred_distance_unit: DistanceUnit = DistanceUnit.KM
    preferred_currency: str = "HNL"
    rounding_local: float = settings.DEFAULT_ROUNDING_LOCAL
    rounding_usd: float = settings.DEFAULT_ROUNDING_USD
    markup_options: List[float] = Field(default_factory=lambda: list(settings.MARKUP_OPTIONS))
    recommended_markup: float = settings.RECOMMENDED_MARKUP
    toll_fees: Dict[str, float] = Field(default_factory=dict)
    pricing_levels: List[PricingLevel] = Field(default_factory=lambda: list(DEFAULT_PRICING_LEVELS))


class ParametersCreate(CostParameters):
    year: int
    use_custom_exchange_rate: bool = False
    is_active: bool = False


class ParametersUpdate(BaseModel):
    fuel_price: Optional[float] = Field(default=None, gt=0)
    fuel_price_unit: Optional[FuelPriceUnit] = None
    meal_cost_per_day: Optional[float] = Field(default=None, ge=0)
    hotel_cost_per_night: Optional[float] = Field(default=None, ge=0)
    driver_incentive_per_day: Optional[float] = Field(default=None, ge=0)
    exchange_rate: Optional[float] = Field(default=None, gt=0)
    use_custom_exchange_rate: Optional[bool] = None
    preferred_distance_unit: Optional[DistanceUnit] = None
    preferred_currency: Optional[str] = None
    rounding_local: Optional[float] = Field(default=None, ge=0)
    rounding_usd: Optional[float] = Field(default=None, ge=0)
    markup_options: Optional[List[float]] = None
    recommended_markup: Optional[float] = None
    toll_fees: Optional[Dict[str, float]] = None
    pricing_levels: Optional[List[PricingLevel]] = None


class ParametersOut(ParametersCreate):
    id: int
    tenant_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None
