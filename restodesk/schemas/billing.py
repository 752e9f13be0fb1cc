"""Minutes, recharge and subscription schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class CheckoutRequest(BaseModel):
    """Buy a minutes pack"""
    pack_type: str


class CheckoutResponse(BaseModel):
    """Checkout session to redirect the operator to"""
    url: str
    recharge_id: UUID


class RechargeResponse(BaseModel):
    """Recharge response"""
    id: UUID
    pack_type: str
    minutes: int
    price_cents: int
    status: str
    stripe_session_id: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ConsumeRequest(BaseModel):
    """Minutes used by the voice agent"""
    minutes: int = Field(gt=0)
    description: Optional[str] = None


class ConsumeResponse(BaseModel):
    minutes_consumed: int
    minutes_balance: int
    low_balance: bool


class ConsumptionResponse(BaseModel):
    """Minute consumption ledger entry"""
    id: UUID
    minutes: int
    description: Optional[str]
    consumed_at: datetime

    class Config:
        from_attributes = True


class SubscriberResponse(BaseModel):
    """Plan subscription state"""
    tenant_id: UUID
    tier: Optional[str]
    status: Optional[str]
    current_period_end: Optional[datetime]

    class Config:
        from_attributes = True


class AutoRechargeUpdate(BaseModel):
    """Auto-recharge preferences"""
    auto_recharge_enabled: Optional[bool] = None
    auto_recharge_threshold: Optional[int] = Field(None, ge=0)
    preferred_pack_type: Optional[str] = None
