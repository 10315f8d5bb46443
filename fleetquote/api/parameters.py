from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List

from fleetquote.db.session import get_db
from fleetquote.models.parameters import SystemParameters
from fleetquote.schemas.parameters import CostParameters, ParametersCreate, ParametersUpdate, ParametersOut
from fleetquote.core.security import get_current_user, require_admin
from fleetquote.core.audit_decorator import audit_log
from fleetquote.core.rate_limit import check_rate_limit
from fleetquote.core.auth_utils import check_not_found, check_tenant, filter_by_tenant
from fleetquote.core.response_builders import build_parameters_response, build_parameters_response_list
from fleetquote.core.enums import AuditAction
from fleetquote.services.parameters import (
    activate_parameters,
    create_parameters,
    get_active_parameters,
    invalidate_active_parameters,
)
from fleetquote.services.pricing import generate_pricing_options

router = APIRouter(prefix="/parameters", tags=["parameters"])


async def _get_parameters(db: AsyncSession, parameters_id: int, current_user) -> SystemParameters:
    res = await db.execute(select(SystemParameters).where(SystemParameters.id == parameters_id))
    params = res.scalars().first()
    check_not_found(params, "Parameters", parameters_id)
    check_tenant(params, current_user, "Parameters")
    return params


def _check_ladder(params: CostParameters) -> None:
    # rejects duplicate or negative markups before they are stored
    generate_pricing_options(0.0, params.exchange_rate, params.markup_options, params.recommended_markup)


@router.get("/", response_model=List[ParametersOut])
async def list_parameters(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    q = filter_by_tenant(select(SystemParameters), SystemParameters, current_user)
    res = await db.execute(q.order_by(SystemParameters.year.desc(), SystemParameters.id.desc()))
    return build_parameters_response_list(res.scalars().all())


@router.get("/active", response_model=CostParameters)
async def get_active(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    params = await get_active_parameters(db, int(current_user.tenant_id))
    check_not_found(params, "Active parameters")
    return params


@router.get("/{parameters_id}", response_model=ParametersOut)
async def get_parameters(
    parameters_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    params = await _get_parameters(db, parameters_id, current_user)
    return build_parameters_response(params)


@router.post("/", response_model=ParametersOut)
@audit_log(AuditAction.CREATE_PARAMETERS)
async def create(
    payload: ParametersCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    await check_rate_limit(int(current_user.id))
    _check_ladder(payload)

    params = await create_parameters(db, int(current_user.tenant_id), payload)
    return build_parameters_response(params)


@router.put("/{parameters_id}", response_model=ParametersOut)
@audit_log(AuditAction.UPDATE_PARAMETERS)
async def update(
    parameters_id: int,
    payload: ParametersUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    await check_rate_limit(int(current_user.id))

    params = await _get_parameters(db, parameters_id, current_user)
    changes = payload.model_dump(exclude_unset=True)
    merged = CostParameters.model_validate({**CostParameters.model_validate(params).model_dump(), **changes})
    _check_ladder(merged)

    for field, value in changes.items():
        setattr(params, field, value)
    db.add(params)
    await db.commit()
    await db.refresh(params)

    if params.is_active:
        await invalidate_active_parameters(params.tenant_id)
    return build_parameters_response(params)


@router.post("/{parameters_id}/activate", response_model=ParametersOut)
@audit_log(AuditAction.ACTIVATE_PARAMETERS)
async def activate(
    parameters_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    await check_rate_limit(int(current_user.id))

    params = await _get_parameters(db, parameters_id, current_user)
    if params.is_active:
        raise HTTPException(status_code=409, detail="Parameters are already active")

    params = await activate_parameters(db, params)
    return build_parameters_response(params)
