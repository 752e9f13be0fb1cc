"""Audit trail models"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, JSON, Text
from sqlalchemy.dialects.postgresql import UUID

from restodesk.database import Base


class AuditLog(Base):
    """Audit trail for status transitions"""
    __tablename__ = "audit_logs"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"))
    
    # Actor information
    actor_id = Column(UUID(as_uuid=True))  # User ID or null for system
    actor_type = Column(String(50))  # user, system
    
    # Action details
    action = Column(String(100), nullable=False)  # order.status_changed, ...
    resource_type = Column(String(50))  # order, reservation
    resource_id = Column(UUID(as_uuid=True))
    
    # {"before": {...}, "after": {...}}
    data_json = Column(JSON)
    
    created_at = Column(DateTime, default=datetime.utcnow)


class WebhookLog(Base):
    """Outcome of every inbound or outbound webhook call"""
    __tablename__ = "webhook_logs"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    webhook_type = Column(String(50), nullable=False)  # automation, stripe, relay
    data_type = Column(String(100))  # reservation, order, checkout.session.completed, ...
    # No foreign key: unknown tenant ids are logged too
    tenant_id = Column(UUID(as_uuid=True))
    status = Column(String(20), nullable=False)  # success, ignored, error
    error_message = Column(Text)
    response_status = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)
