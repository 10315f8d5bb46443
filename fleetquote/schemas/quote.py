from pydantic import BaseModel, Field
from typing import List
from fleetquote.schemas.costs import CostCalculationRequest, DetailedCosts, PricingOption
from fleetquote.schemas.parameters import CostParameters

class QuoteRequest(CostCalculationRequest):
    parameters: CostParameters
    discount_percentage: float = Field(default=0.0, ge=0, lt=100)

class QuoteResponse(BaseModel):
    costs: DetailedCosts
    pricing_options: List[PricingOption]
    exchange_rate: float
    currency: str
