"""Billing models: minute recharges, plan subscriptions and minute consumption"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from restodesk.database import Base


class Recharge(Base):
    """Purchase of a block of call minutes"""
    __tablename__ = "recharges"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed')",
            name="ck_recharges_status",
        ),
    )
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)
    pack_type = Column(String(10), nullable=False)  # S, M, L, XL
    minutes = Column(Integer, nullable=False)
    price_cents = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    stripe_session_id = Column(String(255), unique=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Subscriber(Base):
    """Plan subscription, one row per tenant"""
    __tablename__ = "subscribers"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), unique=True, nullable=False)
    stripe_customer_id = Column(String(255), index=True)
    stripe_subscription_id = Column(String(255))
    tier = Column(String(20))  # basic, pro, premium
    status = Column(String(20))  # active, cancelled
    current_period_end = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    tenant = relationship("Tenant", back_populates="subscriber")


class MinuteConsumption(Base):
    """Ledger entry for minutes used by the voice agent"""
    __tablename__ = "minute_consumptions"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)
    minutes = Column(Integer, nullable=False)
    description = Column(Text)
    consumed_at = Column(DateTime, default=datetime.utcnow)
