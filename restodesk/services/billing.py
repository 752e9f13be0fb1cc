"""Minute-pack checkout and payment-provider reconciliation"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
import stripe
import structlog

from restodesk.config import settings
from restodesk.errors import NotFoundError, UpstreamIntegrationError
from restodesk.models.billing import Recharge, Subscriber
from restodesk.models.tenant import Tenant
from restodesk.services.minutes import add_minutes
from restodesk.services.notifications import notify

logger = structlog.get_logger()

# pack type -> minutes granted and price in cents
PACKS: Dict[str, Dict[str, int]] = {
    "S": {"minutes": 100, "price_cents": 1900},
    "M": {"minutes": 250, "price_cents": 4900},
    "L": {"minutes": 750, "price_cents": 14900},
    "XL": {"minutes": 1500, "price_cents": 29900},
}

DEFAULT_TIER = "basic"


class MissingMetadataError(ValueError):
    """Checkout event lacks the metadata attached at session creation"""


# Checkout

async def create_minutes_checkout(
    db: AsyncSession,
    tenant: Tenant,
    pack_type: str,
) -> Dict[str, Any]:
    """
    Open a Stripe Checkout session for a minutes pack.
    
    The pending recharge is committed before Stripe is called so the event
    that later completes it always finds it. Everything the webhook needs is
    carried in the session metadata.
    """
    pack = PACKS.get(pack_type)
    if pack is None:
        raise ValueError(f"Invalid pack type: {pack_type}")
    
    recharge = Recharge(
        tenant_id=tenant.id,
        pack_type=pack_type,
        minutes=pack["minutes"],
        price_cents=pack["price_cents"],
        status="pending",
    )
    db.add(recharge)
    await db.commit()
    
    metadata = {
        "recharge_id": str(recharge.id),
        "tenant_id": str(tenant.id),
        "pack_type": pack_type,
        "minutes": str(pack["minutes"]),
    }
    
    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            customer_email=tenant.contact_email,
            line_items=[
                {
                    "price_data": {
                        "currency": settings.stripe_currency,
                        "product_data": {
                            "name": f"Pack {pack_type} - {pack['minutes']} minutes",
                        },
                        "unit_amount": pack["price_cents"],
                    },
                    "quantity": 1,
                },
            ],
            success_url=settings.checkout_success_url,
            cancel_url=settings.checkout_cancel_url,
            metadata=metadata,
            payment_intent_data={"metadata": metadata},
            api_key=settings.stripe_secret_key,
        )
    except stripe.StripeError as e:
        logger.error("Checkout session creation failed", tenant_id=str(tenant.id), error=str(e))
        recharge.status = "failed"
        await db.commit()
        raise UpstreamIntegrationError(f"Payment provider error: {e}") from e
    
    recharge.stripe_session_id = session.id
    await db.commit()
    
    logger.info(
        "Checkout session created",
        tenant_id=str(tenant.id),
        recharge_id=str(recharge.id),
        session_id=session.id,
    )
    
    return {"url": session.url, "recharge_id": recharge.id}


# Minutes purchase events

def _metadata_uuid(metadata: Dict[str, Any], *keys: str) -> Optional[UUID]:
    for key in keys:
        value = metadata.get(key)
        if value:
            return UUID(str(value))
    return None


async def complete_recharge(
    db: AsyncSession,
    session_id: str,
    metadata: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Settle a paid checkout session.
    
    The pending -> completed compare-and-set is the idempotency gate: only
    the delivery that wins it credits minutes and notifies. Status change,
    credit and notification are committed together.
    """
    try:
        recharge_id = _metadata_uuid(metadata, "recharge_id")
        tenant_id = _metadata_uuid(metadata, "tenant_id", "user_id")
        minutes = int(metadata.get("minutes") or 0)
    except ValueError as e:
        raise MissingMetadataError(f"Malformed checkout metadata: {e}") from e
    
    pack_type = metadata.get("pack_type")
    if not recharge_id or not tenant_id or not pack_type or minutes <= 0:
        raise MissingMetadataError("Missing required checkout metadata")
    
    result = await db.execute(
        update(Recharge)
        .where(
            Recharge.id == recharge_id,
            Recharge.tenant_id == tenant_id,
            Recharge.status == "pending",
        )
        .values(status="completed", stripe_session_id=session_id, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    
    if result.rowcount != 1:
        await db.rollback()
        existing = await db.execute(
            select(Recharge.status).where(
                Recharge.id == recharge_id,
                Recharge.tenant_id == tenant_id,
            )
        )
        status = existing.scalar_one_or_none()
        if status is None:
            raise NotFoundError("Recharge", recharge_id)
        
        logger.info(
            "Recharge already settled, skipping credit",
            recharge_id=str(recharge_id),
            status=status,
        )
        return {"tenant_id": tenant_id, "credited": False, "status": status}
    
    await add_minutes(db, tenant_id, minutes)
    notify(
        db,
        tenant_id,
        title="Recharge completed",
        message=f"Your recharge of {minutes} minutes was successful. The minutes are now available.",
        category="success",
    )
    await db.commit()
    
    logger.info(
        "Recharge completed",
        recharge_id=str(recharge_id),
        tenant_id=str(tenant_id),
        pack_type=pack_type,
        minutes=minutes,
    )
    return {"tenant_id": tenant_id, "credited": True, "status": "completed"}


async def fail_recharge(db: AsyncSession, metadata: Dict[str, Any]) -> Optional[UUID]:
    """Mark a pending recharge failed; settled recharges are left alone"""
    try:
        recharge_id = _metadata_uuid(metadata, "recharge_id")
    except ValueError:
        recharge_id = None
    
    if recharge_id is None:
        logger.info("Failed payment without recharge metadata, ignoring")
        return None
    
    result = await db.execute(
        update(Recharge)
        .where(Recharge.id == recharge_id, Recharge.status == "pending")
        .values(status="failed", updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    
    if result.rowcount == 1:
        logger.info("Recharge marked failed", recharge_id=str(recharge_id))
    
    existing = await db.execute(select(Recharge.tenant_id).where(Recharge.id == recharge_id))
    return existing.scalar_one_or_none()


# Plan subscription events

def tier_for_price(price_id: Optional[str]) -> str:
    return settings.stripe_price_tiers.get(price_id or "", DEFAULT_TIER)


async def resolve_subscription_tenant(
    db: AsyncSession,
    metadata: Dict[str, Any],
    customer_id: Optional[str],
) -> UUID:
    """
    Find the tenant a subscription event belongs to.
    
    Stable ids win: tenant id in the metadata, then a subscriber already
    linked to the Stripe customer. Matching the customer's email against the
    tenant contact email is the last resort.
    """
    try:
        tenant_id = _metadata_uuid(metadata, "tenant_id", "user_id")
    except ValueError:
        tenant_id = None
    
    if tenant_id:
        result = await db.execute(select(Tenant.id).where(Tenant.id == tenant_id))
        if result.scalar_one_or_none():
            return tenant_id
        raise NotFoundError("Tenant", tenant_id)
    
    if not customer_id:
        raise NotFoundError("Tenant")
    
    result = await db.execute(
        select(Subscriber.tenant_id).where(Subscriber.stripe_customer_id == customer_id)
    )
    tenant_id = result.scalars().first()
    if tenant_id:
        return tenant_id
    
    try:
        customer = stripe.Customer.retrieve(customer_id, api_key=settings.stripe_secret_key)
    except stripe.StripeError as e:
        raise UpstreamIntegrationError(f"Could not fetch customer {customer_id}: {e}") from e
    
    email = getattr(customer, "email", None)
    if getattr(customer, "deleted", False) or not email:
        raise NotFoundError("Customer email", customer_id)
    
    result = await db.execute(select(Tenant.id).where(Tenant.contact_email == email))
    tenant_id = result.scalar_one_or_none()
    if tenant_id is None:
        raise NotFoundError("Tenant for customer", customer_id)
    return tenant_id


async def activate_subscription(
    db: AsyncSession,
    tenant_id: UUID,
    customer_id: Optional[str],
    subscription_id: Optional[str],
    price_id: Optional[str],
    period_end: Optional[int],
) -> Subscriber:
    """Upsert the tenant's subscriber row as active"""
    tier = tier_for_price(price_id)
    current_period_end = datetime.utcfromtimestamp(period_end) if period_end else None
    
    result = await db.execute(select(Subscriber).where(Subscriber.tenant_id == tenant_id))
    subscriber = result.scalar_one_or_none()
    was_active = subscriber is not None and subscriber.status == "active"
    
    if subscriber is None:
        subscriber = Subscriber(tenant_id=tenant_id)
        db.add(subscriber)
    
    subscriber.stripe_customer_id = customer_id or subscriber.stripe_customer_id
    subscriber.stripe_subscription_id = subscription_id or subscriber.stripe_subscription_id
    subscriber.tier = tier
    subscriber.status = "active"
    subscriber.current_period_end = current_period_end
    subscriber.updated_at = datetime.utcnow()
    
    if not was_active:
        notify(
            db,
            tenant_id,
            title="Welcome!",
            message=(
                f"Thank you for subscribing to the {tier} plan! "
                "Your voice agent is being set up and we will keep you posted."
            ),
            category="success",
        )
    
    await db.commit()
    await db.refresh(subscriber)
    
    logger.info(
        "Subscription active",
        tenant_id=str(tenant_id),
        tier=tier,
        subscription_id=subscription_id,
    )
    return subscriber


async def cancel_subscription(db: AsyncSession, customer_id: Optional[str]) -> Optional[UUID]:
    """Mark the subscriber linked to a Stripe customer as cancelled"""
    if not customer_id:
        return None
    
    result = await db.execute(
        select(Subscriber).where(Subscriber.stripe_customer_id == customer_id)
    )
    subscriber = result.scalars().first()
    if subscriber is None:
        logger.warning("Cancelled subscription for unknown customer", customer_id=customer_id)
        return None
    
    subscriber.status = "cancelled"
    subscriber.updated_at = datetime.utcnow()
    tenant_id = subscriber.tenant_id
    await db.commit()
    
    logger.info("Subscription cancelled", tenant_id=str(tenant_id), customer_id=customer_id)
    return tenant_id
