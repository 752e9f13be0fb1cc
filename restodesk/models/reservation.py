"""Reservation model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Date, Time, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID

from restodesk.database import Base


class Reservation(Base):
    """Table reservations captured by the voice agent"""
    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("party_size >= 1", name="ck_reservations_party_size"),
        CheckConstraint(
            "status IN ('confirmed', 'arrived', 'cancelled')",
            name="ck_reservations_status",
        ),
    )
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(UUID(as_uuid=True), ForeignKey("tenants.id"), nullable=False, index=True)
    
    # Client
    client_name = Column(String(255), nullable=False)
    client_phone = Column(String(30))
    
    # Booking
    reservation_date = Column(Date)
    reservation_time = Column(Time)
    party_size = Column(Integer, nullable=False, default=1)
    
    # Status, written only by the workflow engine
    status = Column(String(20), nullable=False, default="confirmed", index=True)
    arrived_at = Column(DateTime)
    cancelled_at = Column(DateTime)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
