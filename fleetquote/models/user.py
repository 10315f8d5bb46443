from sqlalchemy import Column, String, Enum, ForeignKey
from sqlalchemy.orm import relationship
from fleetquote.models.base import BaseModel
from fleetquote.core.enums import UserRole


class User(BaseModel):
    __tablename__ = "users"
    tenant_id = Column(ForeignKey("tenants.id"), nullable=False, index=True)
    tenant = relationship("Tenant", backref="users")
    username = Column(String(64), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.AGENT)
