"""Order management API endpoints"""

from typing import Optional
from uuid import UUID
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from restodesk.database import get_db
from restodesk.errors import InvalidTransitionError, NotFoundError
from restodesk.models.order import Order
from restodesk.models.user import UserRole
from restodesk.schemas.order import OrderResponse, OrderListResponse
from restodesk.schemas.status import StatusUpdate
from restodesk.workflow import EntityType, apply_transition, next_state, parse_status
from restodesk.api.auth import TenantContext, get_tenant_context

router = APIRouter()


async def transition_order(
    db: AsyncSession,
    ctx: TenantContext,
    order_id: UUID,
    requested: str,
) -> Order:
    """Run a status change for the operator's tenant and map domain errors"""
    ctx.require(UserRole.RESTAURANT_ADMIN)

    if parse_status(EntityType.ORDER, requested) is None:
        raise HTTPException(status_code=422, detail=f"Unknown order status: {requested}")

    try:
        return await apply_transition(
            db,
            EntityType.ORDER,
            order_id,
            ctx.tenant_id,
            requested,
            actor=ctx.user,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    updated_since: Optional[datetime] = None,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """List orders for a tenant with pagination"""
    query = select(Order).where(Order.tenant_id == ctx.tenant_id)
    count_query = select(func.count(Order.id)).where(Order.tenant_id == ctx.tenant_id)

    if status:
        query = query.where(Order.status == status)
        count_query = count_query.where(Order.status == status)

    # Polling clients pass the newest updated_at they have seen
    if updated_since:
        query = query.where(Order.updated_at > updated_since)
        count_query = count_query.where(Order.updated_at > updated_since)

    # Get total
    total_result = await db.execute(count_query)
    total = total_result.scalar()

    # Get paginated results
    offset = (page - 1) * page_size
    query = query.order_by(Order.created_at.desc()).offset(offset).limit(page_size)

    result = await db.execute(query)
    orders = result.scalars().all()

    return OrderListResponse(
        items=[OrderResponse.model_validate(order) for order in orders],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Get order details"""
    result = await db.execute(
        select(Order).where(
            Order.id == order_id,
            Order.tenant_id == ctx.tenant_id,
        )
    )
    order = result.scalar_one_or_none()

    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    return order


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    status_data: StatusUpdate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Move an order to the requested status"""
    return await transition_order(db, ctx, order_id, status_data.status)


@router.post("/{order_id}/advance", response_model=OrderResponse)
async def advance_order(
    order_id: UUID,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Move an order one step along received -> preparing -> ready -> delivered"""
    ctx.require(UserRole.RESTAURANT_ADMIN)

    result = await db.execute(
        select(Order.status).where(
            Order.id == order_id,
            Order.tenant_id == ctx.tenant_id,
        )
    )
    current = result.scalar_one_or_none()

    if current is None:
        raise HTTPException(status_code=404, detail="Order not found")

    target = next_state(EntityType.ORDER, current)
    if target is None:
        raise HTTPException(status_code=409, detail=f"Order is already {current}")

    return await transition_order(db, ctx, order_id, target.value)
