from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from fleetquote.core.enums import DistanceUnit, FuelEfficiencyUnit, VehicleStatus


class VehicleProfile(BaseModel):
    """Vehicle attributes the cost engine reads. Fuel capacity is in gallons."""
    model_config = ConfigDict(from_attributes=True)

    name: Optional[str] = None
    passenger_capacity: Optional[int] = None
    fuel_capacity: float
    fuel_efficiency: float
    fuel_efficiency_unit: FuelEfficiencyUnit
    cost_per_distance: float
    cost_per_day: float
    distance_unit: DistanceUnit = DistanceUnit.KM
    status: VehicleStatus = VehicleStatus.ACTIVE


class VehicleCreate(BaseModel):
    name: str
    make: Optional[str] = None
    model: Optional[str] = None
    plate: Optional[str] = None
    passenger_capacity: int = Field(ge=1)
    fuel_capacity: float = Field(gt=0)
    fuel_efficiency: float = Field(gt=0)
    fuel_efficiency_unit: FuelEfficiencyUnit
    cost_per_distance: float = Field(ge=0)
    cost_per_day: float = Field(ge=0)
    distance_unit: DistanceUnit = DistanceUnit.KM
    status: VehicleStatus = VehicleStatus.ACTIVE


class VehicleUpdate(BaseModel):
    name: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    plate: Optional[str] = None
    passenger_capacity: Optional[int] = Field(default=None, ge=1)
    fuel_capacity: Optional[float] = Field(default=None, gt=0)
    fuel_efficiency: Optional[float] = Field(default=None, gt=0)
    fuel_efficiency_unit: Optional[FuelEfficiencyUnit] = None
    cost_per_distance: Optional[float] = Field(default=None, ge=0)
    cost_per_day: Optional[float] = Field(default=None, ge=0)
    distance_unit: Optional[DistanceUnit] = None
    status: Optional[VehicleStatus] = None


class VehicleOut(BaseModel):
    id: int
    tenant_id: int
    name: str
    make: Optional[str] = None
    model: Optional[str] = None
    plate: Optional[str] = None
    passenger_capacity: int
    fuel_capacity: float
    fuel_efficiency: float
    fuel_efficiency_unit: FuelEfficiencyUnit
    cost_per_distance: float
    cost_per_day: float
    distance_unit: DistanceUnit
    status: VehicleStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
