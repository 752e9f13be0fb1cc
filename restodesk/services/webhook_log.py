"""Best-effort webhook audit log"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from restodesk.models.audit import WebhookLog

logger = structlog.get_logger()


async def record_webhook(
    db: AsyncSession,
    webhook_type: str,
    status: str,
    data_type: Optional[str] = None,
    tenant_id: Optional[UUID] = None,
    error_message: Optional[str] = None,
    response_status: Optional[int] = None,
) -> None:
    """
    Append a webhook_logs row in its own commit.
    
    Any pending, uncommitted work on the session is rolled back first, so a
    failed handler never gets its partial writes committed along with the
    log. A failure to write the log is only logged.
    """
    try:
        if db.in_transaction():
            await db.rollback()
        
        db.add(WebhookLog(
            webhook_type=webhook_type,
            data_type=data_type,
            tenant_id=tenant_id,
            status=status,
            error_message=error_message,
            response_status=response_status,
        ))
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(
            "Failed to write webhook log",
            webhook_type=webhook_type,
            data_type=data_type,
            error=str(e),
        )
