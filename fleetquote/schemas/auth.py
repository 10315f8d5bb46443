from pydantic import BaseModel, Field
from fleetquote.core.enums import UserRole


class LoginIn(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=6)


class RegisterIn(LoginIn):
    tenant_name: str = Field(min_length=2, max_length=120)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserCreate(LoginIn):
    role: UserRole = UserRole.AGENT


class UserOut(BaseModel):
    id: int
    tenant_id: int
    username: str
    role: UserRole
