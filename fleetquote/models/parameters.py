from sqlalchemy import Column, String, Float, Integer, Boolean, ForeignKey, Enum, JSON
from sqlalchemy.orm import relationship
from fleetquote.models.base import BaseModel
from fleetquote.core.enums import DistanceUnit, FuelPriceUnit


class SystemParameters(BaseModel):
    """Per-tenant, per-year cost configuration. One row per tenant is active."""
    __tablename__ = "system_parameters"

    tenant_id = Column(ForeignKey("tenants.id"), nullable=False, index=True)
    tenant = relationship("Tenant", backref="parameters")

    year = Column(Integer, nullable=False)
    fuel_price = Column(Float, nullable=False)
    fuel_price_unit = Column(Enum(FuelPriceUnit), default=FuelPriceUnit.GALLON, nullable=False)
    meal_cost_per_day = Column(Float, nullable=False)
    hotel_cost_per_night = Column(Float, nullable=False)
    driver_incentive_per_day = Column(Float, nullable=False)
    exchange_rate = Column(Float, nullable=False)
    use_custom_exchange_rate = Column(Boolean, default=False, nullable=False)
    preferred_distance_unit = Column(Enum(DistanceUnit), default=DistanceUnit.KM, nullable=False)
    preferred_currency = Column(String(8), default="HNL", nullable=False)
    rounding_local = Column(Float, nullable=False)
    rounding_usd = Column(Float, nullable=False)
    markup_options = Column(JSON, nullable=False)
    recommended_markup = Column(Float, nullable=False)
    toll_fees = Column(JSON, nullable=False, default=dict)
    pricing_levels = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=False, nullable=False)
