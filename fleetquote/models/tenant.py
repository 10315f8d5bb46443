from sqlalchemy import Column, String, Boolean
from fleetquote.models.base import BaseModel


class Tenant(BaseModel):
    __tablename__ = "tenants"
    name = Column(String(120), nullable=False)
    slug = Column(String(64), unique=True, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
