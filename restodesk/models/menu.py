"""Menu price model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from restodesk.database import Base


class MenuPrice(Base):
    """Price of a dish, looked up by exact name when an order comes in"""
    __tablename__ = "menu_prices"
    __table_args__ = (
        UniqueConstraint("tenant_id", "item_name", name="uq_menu_prices_tenant_item"),
    )
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)
    item_name = Column(String(255), nullable=False)
    price_cents = Column(Integer, nullable=False)  # Price in cents to avoid float issues
    category = Column(String(100))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
