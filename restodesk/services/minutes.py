"""Atomic minutes balance operations"""

from typing import Tuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from restodesk.errors import InsufficientMinutesError, NotFoundError
from restodesk.models.billing import MinuteConsumption
from restodesk.models.tenant import Profile
from restodesk.services.notifications import notify

logger = structlog.get_logger()


async def add_minutes(db: AsyncSession, tenant_id: UUID, minutes: int) -> None:
    """
    Credit minutes to a tenant in a single UPDATE.
    
    Does not commit; callers group it with the write that justifies the
    credit so both land or neither does.
    """
    if minutes <= 0:
        raise ValueError("minutes to add must be positive")
    
    result = await db.execute(
        update(Profile)
        .where(Profile.tenant_id == tenant_id)
        .values(minutes_balance=Profile.minutes_balance + minutes)
        .execution_options(synchronize_session=False)
    )
    
    if result.rowcount != 1:
        raise NotFoundError("Profile", tenant_id)
    
    logger.info("Minutes credited", tenant_id=str(tenant_id), minutes=minutes)


async def consume_minutes(
    db: AsyncSession,
    tenant_id: UUID,
    minutes: int,
    description: str = None,
) -> bool:
    """
    Debit minutes if the balance covers them.
    
    The balance check and the debit are one conditional UPDATE, so two
    concurrent consumers can never drive the balance below zero. Returns
    False, without writing anything, when the balance is insufficient.
    Does not commit.
    """
    if minutes <= 0:
        raise ValueError("minutes to consume must be positive")
    
    result = await db.execute(
        update(Profile)
        .where(Profile.tenant_id == tenant_id, Profile.minutes_balance >= minutes)
        .values(minutes_balance=Profile.minutes_balance - minutes)
        .execution_options(synchronize_session=False)
    )
    
    if result.rowcount != 1:
        logger.warning("Minutes consumption refused", tenant_id=str(tenant_id), minutes=minutes)
        return False
    
    db.add(MinuteConsumption(tenant_id=tenant_id, minutes=minutes, description=description))
    return True


async def record_usage(
    db: AsyncSession,
    tenant_id: UUID,
    minutes: int,
    description: str = None,
) -> Tuple[int, bool]:
    """
    Debit call minutes and warn the tenant when the balance gets low.

    A warning notification is queued only on the call that takes the balance
    from above the auto-recharge threshold to at or below it. Commits.
    Returns the new balance and whether it is at or below the threshold.
    """
    if not await consume_minutes(db, tenant_id, minutes, description):
        await db.rollback()
        raise InsufficientMinutesError(f"Balance does not cover {minutes} minutes")

    result = await db.execute(
        select(Profile.minutes_balance, Profile.auto_recharge_threshold).where(
            Profile.tenant_id == tenant_id
        )
    )
    balance, threshold = result.one()
    low_balance = balance <= threshold

    if low_balance and balance + minutes > threshold:
        notify(
            db,
            tenant_id,
            title="Low minutes balance",
            message=f"Only {balance} minutes left. Recharge to keep your voice agent answering.",
            category="warning",
        )

    await db.commit()

    logger.info(
        "Minutes consumed",
        tenant_id=str(tenant_id),
        minutes=minutes,
        balance=balance,
        low_balance=low_balance,
    )
    return balance, low_balance
