"""Tenant and profile schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field


class TenantCreate(BaseModel):
    """Create tenant request"""
    name: str
    contact_email: Optional[EmailStr] = None
    display_name: Optional[str] = None
    timezone: str = "Europe/Paris"


class TenantUpdate(BaseModel):
    """Update tenant request"""
    name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    timezone: Optional[str] = None
    is_active: Optional[bool] = None


class TenantResponse(BaseModel):
    """Tenant response"""
    id: UUID
    name: str
    contact_email: Optional[str]
    timezone: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """
    Update profile preferences.
    
    The minutes balance is deliberately absent: it only moves through
    recharges and consumption.
    """
    display_name: Optional[str] = None
    auto_recharge_enabled: Optional[bool] = None
    auto_recharge_threshold: Optional[int] = Field(None, ge=0)
    preferred_pack_type: Optional[str] = None


class ProfileResponse(BaseModel):
    """Profile response"""
    tenant_id: UUID
    display_name: Optional[str]
    minutes_balance: int
    auto_recharge_enabled: bool
    auto_recharge_threshold: int
    preferred_pack_type: Optional[str]
    updated_at: datetime

    class Config:
        from_attributes = True
