"""Order schemas"""

from datetime import datetime, time
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import AliasChoices, BaseModel, Field, computed_field

from restodesk.workflow import EntityType, next_state, status_label


class OrderResponse(BaseModel):
    """Order response"""
    id: UUID
    tenant_id: UUID
    client_name: str
    order_time: Optional[time]
    items: List[str] = Field(validation_alias=AliasChoices("items_json", "items"))
    total_cents: int
    status: str
    preparing_at: Optional[datetime]
    ready_at: Optional[datetime]
    delivered_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def total_amount(self) -> Decimal:
        return (Decimal(self.total_cents) / 100).quantize(Decimal("0.01"))

    @computed_field
    @property
    def status_label(self) -> str:
        return status_label(EntityType.ORDER, self.status)

    @computed_field
    @property
    def next_status(self) -> Optional[str]:
        target = next_state(EntityType.ORDER, self.status)
        return target.value if target else None

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    """Paginated order list"""
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int
