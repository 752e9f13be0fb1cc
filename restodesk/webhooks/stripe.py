"""Stripe webhook handler"""

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
import stripe
import structlog

from restodesk.config import settings
from restodesk.database import get_db
from restodesk.errors import AuthenticationError, NotFoundError, UpstreamIntegrationError
from restodesk.schemas.stripe import StripeEvent
from restodesk.services.billing import (
    MissingMetadataError,
    activate_subscription,
    cancel_subscription,
    complete_recharge,
    fail_recharge,
    resolve_subscription_tenant,
)
from restodesk.services.webhook_log import record_webhook

router = APIRouter()
logger = structlog.get_logger()

WEBHOOK_TYPE = "stripe"


def verify_signature(payload: bytes, sig_header: Optional[str]) -> None:
    """Raise AuthenticationError unless the body carries a valid Stripe signature"""
    if not settings.stripe_webhook_secret:
        raise AuthenticationError("Webhook secret is not configured")
    if not sig_header:
        raise AuthenticationError("Missing Stripe-Signature header")

    try:
        stripe.WebhookSignature.verify_header(
            payload.decode("utf-8"),
            sig_header,
            settings.stripe_webhook_secret,
            stripe.Webhook.DEFAULT_TOLERANCE,
        )
    except (stripe.SignatureVerificationError, UnicodeDecodeError) as e:
        raise AuthenticationError(f"Invalid signature: {e}") from e


# Field access across Stripe API versions

def _first_line_price(lines: Dict[str, Any]) -> Optional[str]:
    data = (lines or {}).get("data") or []
    if not data:
        return None
    line = data[0]
    price = line.get("price") or {}
    if price.get("id"):
        return price["id"]
    details = (line.get("pricing") or {}).get("price_details") or {}
    return details.get("price")


def _subscription_fields(obj: Dict[str, Any]) -> Dict[str, Any]:
    items = (obj.get("items") or {}).get("data") or []
    period_end = obj.get("current_period_end")
    if period_end is None and items:
        period_end = items[0].get("current_period_end")
    return {
        "metadata": obj.get("metadata") or {},
        "customer_id": obj.get("customer"),
        "subscription_id": obj.get("id"),
        "price_id": _first_line_price(obj.get("items")),
        "period_end": period_end,
    }


def _invoice_fields(obj: Dict[str, Any]) -> Dict[str, Any]:
    details = obj.get("subscription_details") or (
        (obj.get("parent") or {}).get("subscription_details") or {}
    )
    return {
        "metadata": details.get("metadata") or obj.get("metadata") or {},
        "customer_id": obj.get("customer"),
        "subscription_id": obj.get("subscription") or details.get("subscription"),
        "price_id": _first_line_price(obj.get("lines")),
        "period_end": obj.get("period_end"),
    }


# Event handlers; each returns the tenant id it acted on, if any

async def _checkout_completed(db: AsyncSession, event: StripeEvent) -> Optional[UUID]:
    if event.payload.get("mode") == "subscription":
        # Plan checkouts are settled by the subscription events
        logger.info("Subscription checkout completed", event_id=event.id)
        return None

    outcome = await complete_recharge(db, event.payload.get("id"), event.metadata)
    return outcome["tenant_id"]


async def _payment_failed(db: AsyncSession, event: StripeEvent) -> Optional[UUID]:
    return await fail_recharge(db, event.metadata)


async def _subscription_active(db: AsyncSession, event: StripeEvent) -> Optional[UUID]:
    if event.type == "invoice.payment_succeeded":
        fields = _invoice_fields(event.payload)
        if not fields["subscription_id"]:
            logger.info("Invoice without subscription, ignoring", event_id=event.id)
            return None
    else:
        fields = _subscription_fields(event.payload)

    tenant_id = await resolve_subscription_tenant(db, fields["metadata"], fields["customer_id"])
    await activate_subscription(
        db,
        tenant_id,
        customer_id=fields["customer_id"],
        subscription_id=fields["subscription_id"],
        price_id=fields["price_id"],
        period_end=fields["period_end"],
    )
    return tenant_id


async def _subscription_deleted(db: AsyncSession, event: StripeEvent) -> Optional[UUID]:
    return await cancel_subscription(db, event.payload.get("customer"))


HANDLERS = {
    "checkout.session.completed": _checkout_completed,
    "checkout.session.expired": _payment_failed,
    "payment_intent.payment_failed": _payment_failed,
    "customer.subscription.created": _subscription_active,
    "invoice.payment_succeeded": _subscription_active,
    "customer.subscription.deleted": _subscription_deleted,
}


async def _fail(
    db: AsyncSession,
    status_code: int,
    message: str,
    event_type: Optional[str] = None,
) -> JSONResponse:
    await record_webhook(
        db,
        WEBHOOK_TYPE,
        "error",
        data_type=event_type,
        error_message=message,
        response_status=status_code,
    )
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("")
async def handle_stripe_event(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Apply a Stripe event.

    The signature is checked on the raw body before anything is parsed or
    written. Deliveries may repeat; handlers are idempotent.

    A paid session whose recharge row does not exist answers 404, so Stripe
    keeps retrying it and the miss stays visible in the dashboard.
    """
    payload = await request.body()

    try:
        verify_signature(payload, request.headers.get("stripe-signature"))
    except AuthenticationError as e:
        logger.warning("Stripe signature rejected", error=str(e))
        return await _fail(db, 400, str(e))

    try:
        event = StripeEvent.model_validate_json(payload)
    except ValidationError:
        logger.warning("Malformed Stripe event")
        return await _fail(db, 400, "Malformed event")

    logger.info("Stripe event received", event_id=event.id, event_type=event.type)

    handler = HANDLERS.get(event.type)
    if handler is None:
        logger.info("Unhandled Stripe event type", event_type=event.type)
        await record_webhook(db, WEBHOOK_TYPE, "ignored", data_type=event.type, response_status=200)
        return {"received": True}

    try:
        tenant_id = await handler(db, event)
    except MissingMetadataError as e:
        logger.warning("Stripe event missing metadata", event_id=event.id, error=str(e))
        return await _fail(db, 400, str(e), event.type)
    except NotFoundError as e:
        logger.warning("Stripe event target not found", event_id=event.id, error=str(e))
        return await _fail(db, 404, str(e), event.type)
    except UpstreamIntegrationError as e:
        logger.error("Stripe API call failed", event_id=event.id, error=str(e))
        return await _fail(db, 502, str(e), event.type)
    except Exception as e:
        logger.exception("Stripe event processing failed", event_id=event.id, event_type=event.type)
        return await _fail(db, 500, f"Processing failed: {e}", event.type)

    logger.info("Stripe event processed", event_id=event.id, event_type=event.type)
    await record_webhook(
        db,
        WEBHOOK_TYPE,
        "success",
        data_type=event.type,
        tenant_id=tenant_id,
        response_status=200,
    )
    return {"received": True}
