from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from fleetquote.core.enums import QuotationStatus
from fleetquote.schemas.costs import DetailedCosts, PricingOption, RouteResult


class QuotationCreate(BaseModel):
    vehicle_id: int
    route: RouteResult
    client_name: Optional[str] = None
    group_size: Optional[int] = Field(default=None, ge=1)
    extra_mileage: float = Field(default=0.0, ge=0)
    estimated_days: Optional[int] = Field(default=None, ge=1)
    include_fuel: bool = True
    include_meals: bool = True
    include_tolls: bool = True
    include_driver_incentive: bool = False
    markup: Optional[float] = None
    pricing_level: Optional[str] = None
    notes: Optional[str] = None


class QuotationUpdate(BaseModel):
    status: Optional[QuotationStatus] = None
    client_name: Optional[str] = None
    notes: Optional[str] = None


class QuotationOut(BaseModel):
    id: int
    tenant_id: int
    quotation_number: str
    status: QuotationStatus
    vehicle_id: Optional[int] = None
    client_name: Optional[str] = None
    base_location: str
    origin: str
    destination: str
    total_distance: float
    total_time: float
    costs: DetailedCosts
    total_cost: float
    selected_markup: float
    discount_percentage: float
    sale_price_hnl: float
    sale_price_usd: float
    exchange_rate_used: float
    profit: dict
    pricing_options: List[PricingOption] = Field(default_factory=list)
    valid_until: Optional[datetime] = None
    notes: Optional[str] = None
    created_by: int
    created_at: datetime
    updated_at: Optional[datetime] = None
