"""Call-automation platform webhook handler"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from restodesk.database import get_db
from restodesk.models.reservation import Reservation
from restodesk.models.tenant import Profile
from restodesk.schemas.automation import (
    AutomationEvent,
    AutomationEventResponse,
    extract_tenant_id,
)
from restodesk.services.ordering import create_order
from restodesk.services.webhook_log import record_webhook
from restodesk.workflow import EntityType, INITIAL_STATUS

router = APIRouter()
logger = structlog.get_logger()

WEBHOOK_TYPE = "automation"


async def _reject(
    db: AsyncSession,
    status_code: int,
    message: str,
    data_type=None,
    tenant_id=None,
    **extra,
) -> JSONResponse:
    logger.warning(
        "Automation event rejected",
        status=status_code,
        reason=message,
        data_type=data_type,
        tenant_id=str(tenant_id) if tenant_id else None,
    )
    await record_webhook(
        db,
        WEBHOOK_TYPE,
        "error",
        data_type=data_type,
        tenant_id=tenant_id,
        error_message=message,
        response_status=status_code,
    )
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@router.post("", response_model=AutomationEventResponse)
async def handle_automation_event(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Record a reservation or an order captured by the voice agent.

    The payload is unsigned; the tenant id it carries must match a tenant
    with a profile, otherwise nothing is written.
    """
    try:
        payload = await request.json()
    except ValueError:
        # Covers malformed JSON and bodies that are not UTF-8
        return await _reject(db, 400, "Body is not valid JSON")

    if not isinstance(payload, dict):
        return await _reject(db, 400, "Body must be a JSON object")

    data_type = payload.get("type") or payload.get("type_demande1") or payload.get("type_demande2")
    logger.info("Automation event received", data_type=data_type)

    raw_tenant_id = extract_tenant_id(payload)
    if not raw_tenant_id:
        return await _reject(db, 400, "restaurant_id or user_id is required", data_type)

    try:
        tenant_id = UUID(raw_tenant_id)
    except ValueError:
        return await _reject(db, 404, "Tenant not found", data_type)

    result = await db.execute(select(Profile.id).where(Profile.tenant_id == tenant_id))
    if result.scalar_one_or_none() is None:
        return await _reject(db, 404, "Tenant not found", data_type, tenant_id)

    try:
        event = AutomationEvent.model_validate(payload)
    except ValidationError as e:
        details = [
            {"loc": list(err["loc"]), "msg": err["msg"]}
            for err in e.errors()
        ]
        return await _reject(db, 422, "Invalid payload", data_type, tenant_id, details=details)

    try:
        if event.type == "reservation":
            record = Reservation(
                tenant_id=tenant_id,
                client_name=event.client_name,
                client_phone=event.client_phone,
                reservation_date=event.booking_date,
                reservation_time=event.requested_time,
                party_size=event.party_size,
                status=INITIAL_STATUS[EntityType.RESERVATION].value,
            )
            db.add(record)
        else:
            record = await create_order(
                db,
                tenant_id,
                event.client_name,
                event.items,
                order_time=event.requested_time,
            )

        await db.commit()
    except Exception as e:
        logger.exception(
            "Failed to record automation event",
            data_type=event.type,
            tenant_id=str(tenant_id),
        )
        await record_webhook(
            db,
            WEBHOOK_TYPE,
            "error",
            data_type=event.type,
            tenant_id=tenant_id,
            error_message=str(e),
            response_status=500,
        )
        return JSONResponse(status_code=500, content={"error": f"Failed to record {event.type}: {e}"})

    logger.info(
        "Automation event recorded",
        data_type=event.type,
        tenant_id=str(tenant_id),
        record_id=str(record.id),
    )
    await record_webhook(
        db,
        WEBHOOK_TYPE,
        "success",
        data_type=event.type,
        tenant_id=tenant_id,
        response_status=200,
    )

    return AutomationEventResponse(
        type=event.type,
        client_name=event.client_name,
        id=record.id,
    )
