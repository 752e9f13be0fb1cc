"""Order model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Time, DateTime, ForeignKey, JSON, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID

from restodesk.database import Base


class Order(Base):
    """Phone orders captured by the voice agent"""
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("total_cents >= 0", name="ck_orders_total_cents"),
        CheckConstraint(
            "status IN ('received', 'preparing', 'ready', 'delivered')",
            name="ck_orders_status",
        ),
    )
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)
    
    client_name = Column(String(255), nullable=False)
    order_time = Column(Time)
    
    # Item names in the order the caller gave them: ["Pizza", "Coke", ...]
    items_json = Column(JSON, nullable=False, default=list)
    
    # Computed once at creation from menu_prices, never recomputed
    total_cents = Column(Integer, nullable=False, default=0)
    
    # Status, written only by the workflow engine
    status = Column(String(20), nullable=False, default="received", index=True)
    preparing_at = Column(DateTime)
    ready_at = Column(DateTime)
    delivered_at = Column(DateTime)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
