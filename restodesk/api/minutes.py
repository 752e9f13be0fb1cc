"""Minutes balance API endpoints"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restodesk.database import get_db
from restodesk.errors import InsufficientMinutesError
from restodesk.models.billing import MinuteConsumption
from restodesk.models.tenant import Profile
from restodesk.models.user import UserRole
from restodesk.schemas.billing import (
    AutoRechargeUpdate,
    ConsumeRequest,
    ConsumeResponse,
    ConsumptionResponse,
)
from restodesk.schemas.tenant import ProfileResponse
from restodesk.services.billing import PACKS
from restodesk.services.minutes import record_usage
from restodesk.api.auth import TenantContext, get_tenant_context

router = APIRouter()


async def _get_profile(db: AsyncSession, ctx: TenantContext) -> Profile:
    result = await db.execute(select(Profile).where(Profile.tenant_id == ctx.tenant_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.get("", response_model=ProfileResponse)
async def get_minutes(
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Current balance and auto-recharge settings"""
    return await _get_profile(db, ctx)


@router.patch("/auto_recharge", response_model=ProfileResponse)
async def update_auto_recharge(
    recharge_data: AutoRechargeUpdate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Update auto-recharge settings"""
    ctx.require(UserRole.RESTAURANT_ADMIN)

    update_data = recharge_data.model_dump(exclude_unset=True)
    pack_type = update_data.get("preferred_pack_type")
    if pack_type is not None and pack_type not in PACKS:
        raise HTTPException(status_code=400, detail=f"Invalid pack type: {pack_type}")

    profile = await _get_profile(db, ctx)
    for field, value in update_data.items():
        setattr(profile, field, value)

    await db.commit()
    await db.refresh(profile)

    return profile


@router.post("/consume", response_model=ConsumeResponse)
async def consume(
    consume_data: ConsumeRequest,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Debit minutes used by the voice agent"""
    ctx.require(UserRole.RESTAURANT_ADMIN)
    await _get_profile(db, ctx)

    try:
        balance, low_balance = await record_usage(
            db,
            ctx.tenant_id,
            consume_data.minutes,
            consume_data.description,
        )
    except InsufficientMinutesError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return ConsumeResponse(
        minutes_consumed=consume_data.minutes,
        minutes_balance=balance,
        low_balance=low_balance,
    )


@router.get("/consumptions", response_model=List[ConsumptionResponse])
async def list_consumptions(
    limit: int = Query(50, ge=1, le=200),
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Consumption history, newest first"""
    result = await db.execute(
        select(MinuteConsumption)
        .where(MinuteConsumption.tenant_id == ctx.tenant_id)
        .order_by(MinuteConsumption.consumed_at.desc())
        .limit(limit)
    )
    return result.scalars().all()
