"""Order creation from automation events"""

from datetime import time
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from restodesk.models.menu import MenuPrice
from restodesk.models.order import Order
from restodesk.workflow import EntityType, INITIAL_STATUS

logger = structlog.get_logger()


async def price_items(
    db: AsyncSession,
    tenant_id: UUID,
    items: List[str],
) -> Tuple[int, List[str]]:
    """
    Sum the tenant's current menu prices for the given item names.
    
    Names are matched exactly. Repeated names are charged once per
    occurrence. Names with no price contribute zero and are returned as the
    second element so the caller can report them.
    """
    if not items:
        return 0, []
    
    result = await db.execute(
        select(MenuPrice.item_name, MenuPrice.price_cents).where(
            MenuPrice.tenant_id == tenant_id,
            MenuPrice.item_name.in_(set(items)),
        )
    )
    prices = {name: price for name, price in result.all()}
    
    total = 0
    unpriced = []
    for item in items:
        if item in prices:
            total += prices[item]
        else:
            unpriced.append(item)
    
    return total, unpriced


async def create_order(
    db: AsyncSession,
    tenant_id: UUID,
    client_name: str,
    items: List[str],
    order_time: Optional[time] = None,
) -> Order:
    """Insert an order in its initial status with its total fixed at creation"""
    total_cents, unpriced = await price_items(db, tenant_id, items)
    
    if unpriced:
        # Unknown dishes are accepted at zero cost; surface how often it happens
        logger.warning(
            "Order contains unpriced items",
            tenant_id=str(tenant_id),
            unpriced_items=len(unpriced),
            item_names=unpriced,
        )
    
    order = Order(
        tenant_id=tenant_id,
        client_name=client_name,
        order_time=order_time,
        items_json=list(items),
        total_cents=total_cents,
        status=INITIAL_STATUS[EntityType.ORDER].value,
    )
    db.add(order)
    return order
