"""Menu price schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class MenuPriceCreate(BaseModel):
    """Create menu price request"""
    item_name: str = Field(min_length=1)
    price_cents: int = Field(ge=0)
    category: Optional[str] = None


class MenuPriceUpdate(BaseModel):
    """Update menu price request"""
    item_name: Optional[str] = Field(None, min_length=1)
    price_cents: Optional[int] = Field(None, ge=0)
    category: Optional[str] = None


class MenuPriceResponse(BaseModel):
    """Menu price response"""
    id: UUID
    tenant_id: UUID
    item_name: str
    price_cents: int
    category: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
