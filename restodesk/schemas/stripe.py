"""Stripe webhook event envelope"""

from typing import Any, Dict, Optional
from pydantic import BaseModel


class StripeEventData(BaseModel):
    object: Dict[str, Any]


class StripeEvent(BaseModel):
    """The parts of a Stripe event the reconciliation reads"""
    id: str
    type: str
    data: StripeEventData
    livemode: Optional[bool] = None

    @property
    def payload(self) -> Dict[str, Any]:
        return self.data.object

    @property
    def metadata(self) -> Dict[str, Any]:
        return self.payload.get("metadata") or {}
