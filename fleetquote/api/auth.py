import re
import secrets
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from fleetquote.schemas.auth import RegisterIn, TokenOut, UserCreate, UserOut
from fleetquote.models.tenant import Tenant
from fleetquote.models.user import User
from fleetquote.db.session import get_db
from fleetquote.core.security import create_access_token, hash_password, require_admin, verify_password
from fleetquote.core.enums import AuditAction, UserRole
from fleetquote.core.audit_log import log_audit
from fleetquote.services.parameters import create_default_parameters

router = APIRouter(prefix="/auth", tags=["auth"])


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f"{slug or 'tenant'}-{secrets.token_hex(3)}"


@router.post("/register", response_model=TokenOut)
async def register(payload: RegisterIn, db: AsyncSession = Depends(get_db)):
    """Onboard a new tenant with its first admin and default parameters"""
    res = await db.execute(select(User).where(User.username == payload.username))
    existing_user = res.scalars().first()
    if existing_user:
        raise HTTPException(status_code=400, detail="Username already taken")

    tenant = Tenant(name=payload.tenant_name, slug=_slugify(payload.tenant_name))
    db.add(tenant)
    await db.flush()

    hashed_password = hash_password(payload.password)
    new_user = User(
        tenant_id=tenant.id,
        username=payload.username,
        password_hash=hashed_password,
        role=UserRole.ADMIN,
    )
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    await create_default_parameters(db, tenant.id)
    await log_audit(db, int(new_user.id), AuditAction.REGISTER, {"username": payload.username}, tenant_id=tenant.id)

    token = create_access_token(str(new_user.id), new_user.role, tenant_id=tenant.id)
    return {"access_token": token}


@router.post("/login", response_model=TokenOut)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(User).where(User.username == form_data.username))
    user = res.scalars().first()
    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    await log_audit(db, int(user.id), AuditAction.LOGIN, {"username": form_data.username}, tenant_id=user.tenant_id)

    token = create_access_token(str(user.id), user.role, tenant_id=user.tenant_id)
    return {"access_token": token}


@router.post("/users", response_model=UserOut)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin)
):
    """Add a user to the caller's tenant"""
    res = await db.execute(select(User).where(User.username == payload.username))
    if res.scalars().first():
        raise HTTPException(status_code=400, detail="Username already taken")

    user = User(
        tenant_id=current_user.tenant_id,
        username=payload.username,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    return UserOut(id=user.id, tenant_id=user.tenant_id, username=user.username, role=user.role)
