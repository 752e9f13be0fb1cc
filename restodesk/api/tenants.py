"""Tenant management API endpoints"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restodesk.config import settings
from restodesk.database import get_db
from restodesk.models.billing import Subscriber
from restodesk.models.tenant import Tenant, Profile
from restodesk.models.user import User, UserRole
from restodesk.schemas.auth import UserCreate, UserResponse
from restodesk.schemas.billing import SubscriberResponse
from restodesk.schemas.tenant import (
    TenantCreate,
    TenantUpdate,
    TenantResponse,
    ProfileUpdate,
    ProfileResponse,
)
from restodesk.api.auth import (
    TenantContext,
    get_password_hash,
    get_tenant_context,
    require_role,
)

router = APIRouter()


async def _get_profile(db: AsyncSession, ctx: TenantContext) -> Profile:
    result = await db.execute(select(Profile).where(Profile.tenant_id == ctx.tenant_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.get("", response_model=List[TenantResponse])
async def list_tenants(
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """List all tenants (SuperAdmin only)"""
    result = await db.execute(
        select(Tenant)
        .where(Tenant.is_active == True)
        .order_by(Tenant.created_at)
        .offset(skip)
        .limit(limit)
    )
    return result.scalars().all()


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    tenant_data: TenantCreate,
    current_user: User = Depends(require_role(UserRole.SUPER_ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Create a new tenant and its profile (SuperAdmin only)"""
    tenant = Tenant(
        name=tenant_data.name,
        contact_email=tenant_data.contact_email,
        timezone=tenant_data.timezone,
    )
    db.add(tenant)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Contact email already in use")

    # Every tenant needs a profile before webhooks can write to it
    profile = Profile(
        tenant_id=tenant.id,
        display_name=tenant_data.display_name or tenant_data.name,
        minutes_balance=settings.initial_minutes_balance,
        auto_recharge_threshold=settings.default_auto_recharge_threshold,
    )
    db.add(profile)
    await db.commit()
    await db.refresh(tenant)

    return tenant


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Get tenant details"""
    result = await db.execute(select(Tenant).where(Tenant.id == ctx.tenant_id))
    tenant = result.scalar_one_or_none()

    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")

    return tenant


@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_data: TenantUpdate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Update tenant details"""
    ctx.require(UserRole.RESTAURANT_ADMIN)

    update_data = tenant_data.model_dump(exclude_unset=True)
    if "is_active" in update_data:
        ctx.require(UserRole.SUPER_ADMIN)

    result = await db.execute(select(Tenant).where(Tenant.id == ctx.tenant_id))
    tenant = result.scalar_one_or_none()

    if not tenant:
        raise HTTPException(status_code=404, detail="Tenant not found")

    for field, value in update_data.items():
        setattr(tenant, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Contact email already in use")

    await db.refresh(tenant)
    return tenant


@router.get("/{tenant_id}/profile", response_model=ProfileResponse)
async def get_profile(
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Get the tenant profile"""
    return await _get_profile(db, ctx)


@router.patch("/{tenant_id}/profile", response_model=ProfileResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Update profile preferences"""
    ctx.require(UserRole.RESTAURANT_ADMIN)
    profile = await _get_profile(db, ctx)

    for field, value in profile_data.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)

    await db.commit()
    await db.refresh(profile)

    return profile


@router.get("/{tenant_id}/subscription", response_model=SubscriberResponse)
async def get_subscription(
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Get the tenant's plan subscription"""
    result = await db.execute(select(Subscriber).where(Subscriber.tenant_id == ctx.tenant_id))
    subscriber = result.scalar_one_or_none()

    if not subscriber:
        raise HTTPException(status_code=404, detail="No subscription")

    return subscriber


@router.post("/{tenant_id}/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Add a dashboard operator to the tenant"""
    ctx.require(UserRole.RESTAURANT_ADMIN)
    if user_data.role == UserRole.SUPER_ADMIN:
        ctx.require(UserRole.SUPER_ADMIN)

    user = User(
        tenant_id=None if user_data.role == UserRole.SUPER_ADMIN else ctx.tenant_id,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        full_name=user_data.full_name,
        role=user_data.role,
    )
    db.add(user)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Email already registered")

    await db.refresh(user)
    return user
