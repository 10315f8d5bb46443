from sqlalchemy import Column, String, Float, Integer, ForeignKey, Enum
from sqlalchemy.orm import relationship
from fleetquote.models.base import BaseModel
from fleetquote.core.enums import DistanceUnit, FuelEfficiencyUnit, VehicleStatus


class Vehicle(BaseModel):
    __tablename__ = "vehicles"

    tenant_id = Column(ForeignKey("tenants.id"), nullable=False, index=True)
    tenant = relationship("Tenant", backref="vehicles")

    name = Column(String(120), nullable=False)
    make = Column(String(60))
    model = Column(String(60))
    plate = Column(String(20))
    passenger_capacity = Column(Integer, nullable=False)
    fuel_capacity = Column(Float, nullable=False)  # gallons
    fuel_efficiency = Column(Float, nullable=False)
    fuel_efficiency_unit = Column(Enum(FuelEfficiencyUnit), nullable=False)
    cost_per_distance = Column(Float, nullable=False)
    cost_per_day = Column(Float, nullable=False)
    distance_unit = Column(Enum(DistanceUnit), default=DistanceUnit.KM, nullable=False)
    status = Column(Enum(VehicleStatus), default=VehicleStatus.ACTIVE, nullable=False)
