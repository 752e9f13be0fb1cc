"""User model for dashboard authentication"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import enum

from restodesk.database import Base


class UserRole(str, enum.Enum):
    """Dashboard roles"""
    SUPER_ADMIN = "super_admin"
    RESTAURANT_ADMIN = "restaurant_admin"
    STAFF_VIEWER = "staff_viewer"


ROLE_LEVELS = {
    UserRole.STAFF_VIEWER: 1,
    UserRole.RESTAURANT_ADMIN: 2,
    UserRole.SUPER_ADMIN: 3,
}


class User(Base):
    """Dashboard operator"""
    __tablename__ = "users"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"))
    
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255))
    role = Column(Enum(UserRole), default=UserRole.STAFF_VIEWER)
    is_active = Column(Boolean, default=True)
    
    # Current refresh token, rotated on every refresh
    refresh_token = Column(String(500))
    
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    tenant = relationship("Tenant", back_populates="users")
    
    def has_permission(self, required_role: UserRole) -> bool:
        """Check if user has at least the required role level"""
        return ROLE_LEVELS.get(self.role, 0) >= ROLE_LEVELS.get(required_role, 0)
