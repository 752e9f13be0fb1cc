"""Tenant-related models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from restodesk.database import Base


class Tenant(Base):
    """Restaurant account"""
    __tablename__ = "tenants"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    # Stable contact address, used to match payment-provider customers
    contact_email = Column(String(255), unique=True)
    timezone = Column(String(50), default="Europe/Paris")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    profile = relationship("Profile", back_populates="tenant", uselist=False)
    subscriber = relationship("Subscriber", back_populates="tenant", uselist=False)
    users = relationship("User", back_populates="tenant")


class Profile(Base):
    """Per-tenant minutes balance and recharge preferences"""
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("minutes_balance >= 0", name="ck_profiles_minutes_balance"),
    )
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), unique=True, nullable=False)
    display_name = Column(String(255))
    
    # Only mutated through services.minutes.add_minutes / consume_minutes
    minutes_balance = Column(Integer, nullable=False, default=0)
    
    auto_recharge_enabled = Column(Boolean, nullable=False, default=False)
    auto_recharge_threshold = Column(Integer, nullable=False, default=10)
    preferred_pack_type = Column(String(10))
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    tenant = relationship("Tenant", back_populates="profile")
