"""Minute pack purchase API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restodesk.database import get_db
from restodesk.errors import UpstreamIntegrationError
from restodesk.models.billing import Recharge
from restodesk.models.tenant import Tenant
from restodesk.models.user import UserRole
from restodesk.schemas.billing import CheckoutRequest, CheckoutResponse, RechargeResponse
from restodesk.services.billing import PACKS, create_minutes_checkout
from restodesk.api.auth import TenantContext, get_tenant_context

router = APIRouter()


@router.get("", response_model=List[RechargeResponse])
async def list_recharges(
    status: Optional[str] = None,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """List recharges, newest first"""
    query = select(Recharge).where(Recharge.tenant_id == ctx.tenant_id)

    if status:
        query = query.where(Recharge.status == status)

    result = await db.execute(query.order_by(Recharge.created_at.desc()))
    return result.scalars().all()


@router.post("/checkout", response_model=CheckoutResponse, status_code=201)
async def create_checkout(
    checkout_data: CheckoutRequest,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Open a Stripe Checkout session for a minutes pack"""
    ctx.require(UserRole.RESTAURANT_ADMIN)

    if checkout_data.pack_type not in PACKS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid pack type: {checkout_data.pack_type}",
        )

    result = await db.execute(select(Tenant).where(Tenant.id == ctx.tenant_id))
    tenant = result.scalar_one_or_none()
    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")

    try:
        return await create_minutes_checkout(db, tenant, checkout_data.pack_type)
    except UpstreamIntegrationError as e:
        raise HTTPException(status_code=502, detail=str(e))
