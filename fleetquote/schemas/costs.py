from pydantic import BaseModel, Field
from typing import List, Optional
from fleetquote.schemas.vehicle import VehicleProfile


class RouteSegment(BaseModel):
    origin: str
    destination: str
    distance: float = 0.0  # km
    duration: float = 0.0  # minutes


class RouteResult(BaseModel):
    total_distance: float  # km
    total_time: float  # minutes
    base_location: str = ""
    origin: str = ""
    destination: str = ""
    segments: List[RouteSegment] = Field(default_factory=list)


class CostCalculationRequest(BaseModel):
    route: RouteResult
    vehicle: VehicleProfile
    include_fuel: bool = True
    include_meals: bool = True
    include_tolls: bool = True
    include_driver_incentive: bool = False
    extra_mileage: float = 0.0  # km
    estimated_days: Optional[int] = None
    group_size: Optional[int] = None


class FuelCosts(BaseModel):
    consumption: float  # gallons
    cost: float
    price_per_unit: float


class RefuelingCosts(BaseModel):
    stops: int
    cost_per_stop: float
    total: float


class DriverExpenses(BaseModel):
    meals: float
    lodging: float
    incentive: float
    days: int
    total: float


class VehicleCosts(BaseModel):
    distance_cost: float
    daily_cost: float
    total: float


class TollCrossing(BaseModel):
    corridor: str
    origin: str
    destination: str
    amount: float


class TollCosts(BaseModel):
    crossings: List[TollCrossing] = Field(default_factory=list)
    exit_toll: float = 0.0
    total: float = 0.0


class DetailedCosts(BaseModel):
    fuel: FuelCosts
    driver: DriverExpenses
    vehicle: VehicleCosts
    refueling: RefuelingCosts
    tolls: TollCosts
    total_distance: float
    days: int
    total: float


class PricingOption(BaseModel):
    markup: float
    cost: float
    sale_price: float
    sale_price_hnl: float
    sale_price_usd: float
    recommended: bool = False
