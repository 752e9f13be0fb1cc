"""Reservation schemas"""

from datetime import date, datetime, time
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, computed_field

from restodesk.workflow import EntityType, status_label


class ReservationResponse(BaseModel):
    """Reservation response"""
    id: UUID
    tenant_id: UUID
    client_name: str
    client_phone: Optional[str]
    reservation_date: Optional[date]
    reservation_time: Optional[time]
    party_size: int
    status: str
    arrived_at: Optional[datetime]
    cancelled_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def status_label(self) -> str:
        return status_label(EntityType.RESERVATION, self.status)

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    """Paginated reservation list"""
    items: List[ReservationResponse]
    total: int
    page: int
    page_size: int
