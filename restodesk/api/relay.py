"""Forward dashboard events to the call-automation platform"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from restodesk.database import get_db
from restodesk.errors import UpstreamIntegrationError
from restodesk.models.billing import Subscriber
from restodesk.models.tenant import Profile
from restodesk.schemas.automation import RelayRequest, RelayResponse
from restodesk.services.relay import AutomationRelay, get_relay
from restodesk.services.webhook_log import record_webhook
from restodesk.api.auth import TenantContext, get_tenant_context

router = APIRouter()
logger = structlog.get_logger()


@router.post("", response_model=RelayResponse)
async def relay_event(
    relay_data: RelayRequest,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
    relay: AutomationRelay = Depends(get_relay),
):
    """
    Send an event to the automation platform, enriched with the tenant's
    display name, minutes balance and subscription.
    """
    result = await db.execute(select(Profile).where(Profile.tenant_id == ctx.tenant_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")

    result = await db.execute(select(Subscriber).where(Subscriber.tenant_id == ctx.tenant_id))
    subscriber = result.scalar_one_or_none()

    event = {
        "type": relay_data.type,
        "tenant_id": str(ctx.tenant_id),
        "data": relay_data.data,
        "profile": {
            "display_name": profile.display_name,
            "minutes_balance": profile.minutes_balance,
        },
        "subscription": {
            "tier": subscriber.tier if subscriber else None,
            "status": subscriber.status if subscriber else None,
        },
    }

    try:
        upstream_status = await relay.send(event)
    except UpstreamIntegrationError as e:
        await record_webhook(
            db,
            "relay",
            "error",
            data_type=relay_data.type,
            tenant_id=ctx.tenant_id,
            error_message=str(e),
            response_status=502,
        )
        raise HTTPException(status_code=502, detail=str(e))

    await record_webhook(
        db,
        "relay",
        "success",
        data_type=relay_data.type,
        tenant_id=ctx.tenant_id,
        response_status=upstream_status,
    )

    return RelayResponse(success=True, type=relay_data.type, upstream_status=upstream_status)
