"""Notification model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID

from restodesk.database import Base


class Notification(Base):
    """Dashboard notification, append-only except for the read flag"""
    __tablename__ = "notifications"
    __table_args__ = (
        CheckConstraint(
            "category IN ('success', 'info', 'warning', 'error')",
            name="ck_notifications_category",
        ),
    )
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    category = Column(String(20), nullable=False, default="info")
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
