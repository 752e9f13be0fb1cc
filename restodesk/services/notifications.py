"""Notification helpers"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from restodesk.models.notification import Notification

CATEGORIES = ("success", "info", "warning", "error")


def notify(
    db: AsyncSession,
    tenant_id: UUID,
    title: str,
    message: str,
    category: str = "info",
) -> Notification:
    """Queue a notification on the session; the caller commits"""
    if category not in CATEGORIES:
        raise ValueError(f"Unknown notification category: {category}")
    
    notification = Notification(
        tenant_id=tenant_id,
        title=title,
        message=message,
        category=category,
    )
    db.add(notification)
    return notification
