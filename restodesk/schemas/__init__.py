"""Pydantic schemas for request/response validation"""

from restodesk.schemas.auth import Token, RefreshRequest, UserCreate, UserResponse
from restodesk.schemas.tenant import (
    TenantCreate,
    TenantUpdate,
    TenantResponse,
    ProfileUpdate,
    ProfileResponse,
)
from restodesk.schemas.status import StatusUpdate
from restodesk.schemas.reservation import ReservationResponse, ReservationListResponse
from restodesk.schemas.order import OrderResponse, OrderListResponse
from restodesk.schemas.menu import MenuPriceCreate, MenuPriceUpdate, MenuPriceResponse
from restodesk.schemas.notification import NotificationResponse, UnreadCountResponse
from restodesk.schemas.billing import (
    CheckoutRequest,
    CheckoutResponse,
    RechargeResponse,
    ConsumeRequest,
    ConsumeResponse,
    ConsumptionResponse,
    SubscriberResponse,
    AutoRechargeUpdate,
)
from restodesk.schemas.automation import (
    AutomationEvent,
    AutomationEventResponse,
    RelayRequest,
    RelayResponse,
)
from restodesk.schemas.stripe import StripeEvent

__all__ = [
    "Token",
    "RefreshRequest",
    "UserCreate",
    "UserResponse",
    "TenantCreate",
    "TenantUpdate",
    "TenantResponse",
    "ProfileUpdate",
    "ProfileResponse",
    "StatusUpdate",
    "ReservationResponse",
    "ReservationListResponse",
    "OrderResponse",
    "OrderListResponse",
    "MenuPriceCreate",
    "MenuPriceUpdate",
    "MenuPriceResponse",
    "NotificationResponse",
    "UnreadCountResponse",
    "CheckoutRequest",
    "CheckoutResponse",
    "RechargeResponse",
    "ConsumeRequest",
    "ConsumeResponse",
    "ConsumptionResponse",
    "SubscriberResponse",
    "AutoRechargeUpdate",
    "AutomationEvent",
    "AutomationEventResponse",
    "RelayRequest",
    "RelayResponse",
    "StripeEvent",
]
