"""Notification API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from restodesk.database import get_db
from restodesk.models.notification import Notification
from restodesk.schemas.notification import NotificationResponse, UnreadCountResponse
from restodesk.api.auth import TenantContext, get_tenant_context

router = APIRouter()


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """List notifications, newest first"""
    query = select(Notification).where(Notification.tenant_id == ctx.tenant_id)

    if unread_only:
        query = query.where(Notification.read == False)

    result = await db.execute(query.order_by(Notification.created_at.desc()).limit(limit))
    return result.scalars().all()


@router.get("/unread_count", response_model=UnreadCountResponse)
async def unread_count(
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.tenant_id == ctx.tenant_id,
            Notification.read == False,
        )
    )
    return UnreadCountResponse(unread=result.scalar())


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Mark one notification as read"""
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.tenant_id == ctx.tenant_id,
        )
    )
    notification = result.scalar_one_or_none()

    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.read = True
    await db.commit()
    await db.refresh(notification)

    return notification


@router.post("/read_all")
async def mark_all_read(
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Mark every unread notification as read"""
    result = await db.execute(
        update(Notification)
        .where(Notification.tenant_id == ctx.tenant_id, Notification.read == False)
        .values(read=True)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    return {"updated": result.rowcount}
