from sqlalchemy import Column, String, Float, Integer, Boolean, DateTime, ForeignKey, Enum, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from fleetquote.models.base import BaseModel
from fleetquote.core.enums import QuotationStatus


class Quotation(BaseModel):
    __tablename__ = "quotations"
    __table_args__ = (UniqueConstraint("tenant_id", "quotation_number", name="uq_quotation_tenant_number"),)

    tenant_id = Column(ForeignKey("tenants.id"), nullable=False, index=True)
    vehicle_id = Column(ForeignKey("vehicles.id"), nullable=True)
    created_by = Column(ForeignKey("users.id"), nullable=False)

    tenant = relationship("Tenant", backref="quotations")
    vehicle = relationship("Vehicle", backref="quotations")
    creator = relationship("User", backref="quotations")

    quotation_number = Column(String(20), nullable=False, index=True)
    status = Column(Enum(QuotationStatus), default=QuotationStatus.DRAFT, nullable=False)

    client_name = Column(String(120))
    base_location = Column(String(255), nullable=False)
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    group_size = Column(Integer)
    extra_mileage = Column(Float, default=0.0, nullable=False)
    estimated_days = Column(Integer)
    total_distance = Column(Float, nullable=False)
    total_time = Column(Float, nullable=False)
    route_segments = Column(JSON, nullable=False, default=list)

    include_fuel = Column(Boolean, default=True, nullable=False)
    include_meals = Column(Boolean, default=True, nullable=False)
    include_tolls = Column(Boolean, default=True, nullable=False)
    include_driver_incentive = Column(Boolean, default=False, nullable=False)

    costs = Column(JSON, nullable=False)
    total_cost = Column(Float, nullable=False)
    selected_markup = Column(Float, nullable=False)
    discount_percentage = Column(Float, default=0.0, nullable=False)
    sale_price_hnl = Column(Float, nullable=False)
    sale_price_usd = Column(Float, nullable=False)
    exchange_rate_used = Column(Float, nullable=False)
    pricing_options = Column(JSON, nullable=False, default=list)

    valid_until = Column(DateTime(timezone=True))
    notes = Column(String)
