from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from typing import Optional, List
import logging
import time

from fleetquote.db.session import get_db
from fleetquote.models.quotation import Quotation
from fleetquote.models.vehicle import Vehicle
from fleetquote.schemas.quotation import QuotationCreate, QuotationUpdate, QuotationOut
from fleetquote.core.security import get_current_user
from fleetquote.core.audit_decorator import audit_log
from fleetquote.core.rate_limit import check_rate_limit
from fleetquote.core.auth_utils import check_not_found, check_ownership, check_tenant, filter_by_tenant, filter_by_user
from fleetquote.core.response_builders import build_quotation_response, build_quotation_response_list
from fleetquote.core.enums import AuditAction, QuotationStatus
from fleetquote.core.metrics import quote_calculations, quote_calculation_duration
from fleetquote.services.parameters import get_active_parameters
from fleetquote.services.quotations import (
    apply_quote,
    build_request,
    default_valid_until,
    next_quotation_number,
    price_quotation,
    resolve_discount,
)
from fleetquote.services.tasks import recalculate_quotation
from fleetquote.services.webhook import send_webhook
from fleetquote.utils.idempotency import get_idempotent, set_idempotent

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotations", tags=["quotations"])

NOTIFY_STATUSES = {QuotationStatus.SENT, QuotationStatus.APPROVED}

# draft -> sent -> approved/rejected/expired; terminal states stay put
ALLOWED_TRANSITIONS = {
    QuotationStatus.DRAFT: {QuotationStatus.SENT, QuotationStatus.EXPIRED},
    QuotationStatus.SENT: {QuotationStatus.APPROVED, QuotationStatus.REJECTED, QuotationStatus.EXPIRED, QuotationStatus.DRAFT},
    QuotationStatus.APPROVED: set(),
    QuotationStatus.REJECTED: set(),
    QuotationStatus.EXPIRED: set(),
}


async def _get_quotation(db: AsyncSession, quotation_id: int, current_user) -> Quotation:
    res = await db.execute(
        select(Quotation).where(Quotation.id == quotation_id).options(selectinload(Quotation.vehicle))
    )
    quotation = res.scalars().first()
    check_not_found(quotation, "Quotation", quotation_id)
    check_ownership(quotation, current_user, "Quotation")
    return quotation


@router.post("/", response_model=QuotationOut)
@audit_log(AuditAction.CREATE_QUOTATION)
async def create_quotation(
    payload: QuotationCreate,
    idempotency_key: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))

    if idempotency_key:
        prev = await get_idempotent(idempotency_key, int(current_user.id))
        if prev:
            return prev

    tenant_id = int(current_user.tenant_id)
    res = await db.execute(select(Vehicle).where(Vehicle.id == payload.vehicle_id))
    vehicle = res.scalars().first()
    check_not_found(vehicle, "Vehicle", payload.vehicle_id)
    check_tenant(vehicle, current_user, "Vehicle")

    params = await get_active_parameters(db, tenant_id)
    if params is None:
        raise HTTPException(status_code=409, detail="No active system parameters for this tenant")

    discount = resolve_discount(params, payload.pricing_level)
    start_time = time.time()
    try:
        quote = await price_quotation(build_request(vehicle, payload), params, discount)
    except Exception:
        quote_calculations.labels(source="quotation", status="error").inc()
        raise
    quote_calculations.labels(source="quotation", status="success").inc()
    quote_calculation_duration.labels(source="quotation").observe(time.time() - start_time)

    route = payload.route
    quotation = Quotation(
        tenant_id=tenant_id,
        vehicle_id=vehicle.id,
        created_by=int(current_user.id),
        quotation_number=await next_quotation_number(db, tenant_id),
        status=QuotationStatus.DRAFT,
        client_name=payload.client_name,
        base_location=route.base_location,
        origin=route.origin,
        destination=route.destination,
        group_size=payload.group_size,
        extra_mileage=payload.extra_mileage,
        estimated_days=payload.estimated_days,
        total_distance=route.total_distance,
        total_time=route.total_time,
        route_segments=[s.model_dump() for s in route.segments],
        include_fuel=payload.include_fuel,
        include_meals=payload.include_meals,
        include_tolls=payload.include_tolls,
        include_driver_incentive=payload.include_driver_incentive,
        valid_until=default_valid_until(),
        notes=payload.notes,
    )
    apply_quote(quotation, quote, payload.markup, discount)
    db.add(quotation)
    await db.commit()
    await db.refresh(quotation)
    logger.info(f"Created quotation {quotation.quotation_number} for tenant {tenant_id}")

    out = build_quotation_response(quotation)
    if idempotency_key:
        await set_idempotent(idempotency_key, int(current_user.id), out.model_dump(mode="json"))
    return out


@router.get("/", response_model=List[QuotationOut])
async def list_quotations(
    status: Optional[QuotationStatus] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    q = filter_by_tenant(select(Quotation), Quotation, current_user)
    q = filter_by_user(q, Quotation, current_user)

    if status:
        q = q.where(Quotation.status == status)

    q = q.order_by(Quotation.id.desc()).limit(limit).offset(offset)
    res = await db.execute(q)

    return build_quotation_response_list(res.scalars().all())


@router.get("/{quotation_id}", response_model=QuotationOut)
async def get_quotation(
    quotation_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    quotation = await _get_quotation(db, quotation_id, current_user)
    return build_quotation_response(quotation)


@router.put("/{quotation_id}", response_model=QuotationOut)
@audit_log(AuditAction.UPDATE_QUOTATION)
async def update_quotation(
    quotation_id: int,
    payload: QuotationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))

    quotation = await _get_quotation(db, quotation_id, current_user)
    old_status = quotation.status

    if payload.status and payload.status != old_status and payload.status not in ALLOWED_TRANSITIONS[old_status]:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status transition from {old_status} to {payload.status}"
        )

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(quotation, field, value)

    db.add(quotation)
    await db.commit()
    await db.refresh(quotation)

    if old_status != quotation.status and quotation.status in NOTIFY_STATUSES:
        await send_webhook({
            "quotation_id": quotation.id,
            "quotation_number": quotation.quotation_number,
            "sale_price_hnl": quotation.sale_price_hnl,
            "sale_price_usd": quotation.sale_price_usd,
            "status": str(quotation.status)
        })

    return build_quotation_response(quotation)


@router.delete("/{quotation_id}")
@audit_log(AuditAction.DELETE_QUOTATION)
async def delete_quotation(
    quotation_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))

    quotation = await _get_quotation(db, quotation_id, current_user)
    if quotation.status != QuotationStatus.DRAFT:
        raise HTTPException(status_code=409, detail="Only draft quotations can be deleted")

    await db.delete(quotation)
    await db.commit()

    return {"deleted": True}


@router.post("/{quotation_id}/recalculate")
@audit_log(AuditAction.RECALCULATE_QUOTATION)
async def recalculate(
    quotation_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))

    quotation = await _get_quotation(db, quotation_id, current_user)
    if quotation.status != QuotationStatus.DRAFT:
        raise HTTPException(status_code=409, detail="Only draft quotations can be recalculated")

    recalculate_quotation.delay(quotation_id)

    return {"status": "queued"}
