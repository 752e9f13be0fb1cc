"""Menu price API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restodesk.database import get_db
from restodesk.models.menu import MenuPrice
from restodesk.models.user import UserRole
from restodesk.schemas.menu import MenuPriceCreate, MenuPriceUpdate, MenuPriceResponse
from restodesk.api.auth import TenantContext, get_tenant_context

router = APIRouter()


async def _get_menu_price(db: AsyncSession, ctx: TenantContext, price_id: UUID) -> MenuPrice:
    result = await db.execute(
        select(MenuPrice).where(
            MenuPrice.id == price_id,
            MenuPrice.tenant_id == ctx.tenant_id,
        )
    )
    menu_price = result.scalar_one_or_none()
    if not menu_price:
        raise HTTPException(status_code=404, detail="Menu price not found")
    return menu_price


@router.get("", response_model=List[MenuPriceResponse])
async def list_menu_prices(
    category: Optional[str] = None,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """List the tenant's menu prices"""
    query = select(MenuPrice).where(MenuPrice.tenant_id == ctx.tenant_id)

    if category:
        query = query.where(MenuPrice.category == category)

    result = await db.execute(query.order_by(MenuPrice.category, MenuPrice.item_name))
    return result.scalars().all()


@router.post("", response_model=MenuPriceResponse, status_code=status.HTTP_201_CREATED)
async def create_menu_price(
    price_data: MenuPriceCreate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Add a priced dish"""
    ctx.require(UserRole.RESTAURANT_ADMIN)

    menu_price = MenuPrice(tenant_id=ctx.tenant_id, **price_data.model_dump())
    db.add(menu_price)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail=f"'{price_data.item_name}' already has a price")

    await db.refresh(menu_price)
    return menu_price


@router.patch("/{price_id}", response_model=MenuPriceResponse)
async def update_menu_price(
    price_id: UUID,
    price_data: MenuPriceUpdate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a dish price.

    Existing orders keep the total computed when they were created.
    """
    ctx.require(UserRole.RESTAURANT_ADMIN)
    menu_price = await _get_menu_price(db, ctx, price_id)

    for field, value in price_data.model_dump(exclude_unset=True).items():
        setattr(menu_price, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Another dish already has this name")

    await db.refresh(menu_price)
    return menu_price


@router.delete("/{price_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu_price(
    price_id: UUID,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Remove a dish price"""
    ctx.require(UserRole.RESTAURANT_ADMIN)
    menu_price = await _get_menu_price(db, ctx, price_id)

    await db.delete(menu_price)
    await db.commit()
