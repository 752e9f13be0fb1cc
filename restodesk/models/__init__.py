"""Database models"""

from restodesk.models.tenant import Tenant, Profile
from restodesk.models.user import User, UserRole
from restodesk.models.reservation import Reservation
from restodesk.models.order import Order
from restodesk.models.menu import MenuPrice
from restodesk.models.billing import Recharge, Subscriber, MinuteConsumption
from restodesk.models.notification import Notification
from restodesk.models.audit import AuditLog, WebhookLog

__all__ = [
    "Tenant",
    "Profile",
    "User",
    "UserRole",
    "Reservation",
    "Order",
    "MenuPrice",
    "Recharge",
    "Subscriber",
    "MinuteConsumption",
    "Notification",
    "AuditLog",
    "WebhookLog",
]
