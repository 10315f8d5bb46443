from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional, List

from fleetquote.db.session import get_db
from fleetquote.models.vehicle import Vehicle
from fleetquote.schemas.vehicle import VehicleCreate, VehicleUpdate, VehicleOut
from fleetquote.core.security import get_current_user, require_admin
from fleetquote.core.audit_decorator import audit_log
from fleetquote.core.rate_limit import check_rate_limit
from fleetquote.core.auth_utils import check_not_found, check_tenant, filter_by_tenant
from fleetquote.core.response_builders import build_vehicle_response, build_vehicle_response_list
from fleetquote.core.enums import AuditAction, VehicleStatus

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


async def _get_vehicle(db: AsyncSession, vehicle_id: int, current_user) -> Vehicle:
    res = await db.execute(select(Vehicle).where(Vehicle.id == vehicle_id))
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", vehicle_id)
    check_tenant(vehicle, current_user, "Vehicle")
    return vehicle


@router.post("/", response_model=VehicleOut)
@audit_log(AuditAction.CREATE_VEHICLE)
async def create_vehicle(
    payload: VehicleCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    await check_rate_limit(int(current_user.id))

    vehicle = Vehicle(tenant_id=current_user.tenant_id, **payload.model_dump())
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    return build_vehicle_response(vehicle)


@router.get("/", response_model=List[VehicleOut])
async def list_vehicles(
    status: Optional[VehicleStatus] = Query(None),
    min_capacity: Optional[int] = Query(None, ge=1),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    q = filter_by_tenant(select(Vehicle), Vehicle, current_user)

    if status:
        q = q.where(Vehicle.status == status)
    if min_capacity:
        q = q.where(Vehicle.passenger_capacity >= min_capacity)

    q = q.order_by(Vehicle.id).limit(limit).offset(offset)
    res = await db.execute(q)

    return build_vehicle_response_list(res.scalars().all())


@router.get("/{vehicle_id}", response_model=VehicleOut)
async def get_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    vehicle = await _get_vehicle(db, vehicle_id, current_user)
    return build_vehicle_response(vehicle)


@router.put("/{vehicle_id}", response_model=VehicleOut)
@audit_log(AuditAction.UPDATE_VEHICLE)
async def update_vehicle(
    vehicle_id: int,
    payload: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    await check_rate_limit(int(current_user.id))

    vehicle = await _get_vehicle(db, vehicle_id, current_user)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(vehicle, field, value)

    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)

    return build_vehicle_response(vehicle)


@router.delete("/{vehicle_id}")
@audit_log(AuditAction.DELETE_VEHICLE)
async def delete_vehicle(
    vehicle_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    await check_rate_limit(int(current_user.id))

    vehicle = await _get_vehicle(db, vehicle_id, current_user)
    await db.delete(vehicle)
    await db.commit()

    return {"deleted": True}
