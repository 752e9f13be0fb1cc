"""Applies status transitions to reservation and order rows"""

from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from restodesk.errors import InvalidTransitionError, NotFoundError
from restodesk.models.audit import AuditLog
from restodesk.models.order import Order
from restodesk.models.reservation import Reservation
from restodesk.models.user import User
from restodesk.workflow.states import (
    EntityType,
    Status,
    STATUS_TIMESTAMPS,
    is_valid_transition,
    parse_status,
)

logger = structlog.get_logger()

MODELS = {
    EntityType.RESERVATION: Reservation,
    EntityType.ORDER: Order,
}


async def apply_transition(
    db: AsyncSession,
    entity_type: EntityType,
    entity_id: UUID,
    tenant_id: UUID,
    requested: Union[str, Status],
    actor: Optional[User] = None,
):
    """
    Move a reservation or order to the requested status.
    
    This is the only code path that writes the status column. The row is
    matched by id and owner, and the write is a compare-and-set on the status
    that was validated, so a concurrent transition makes this one fail
    instead of overwriting it. Requesting the current status is a no-op.
    
    Raises NotFoundError when the row does not exist for this tenant and
    InvalidTransitionError when the move is not a legal single step.
    """
    entity_type = EntityType(entity_type)
    model = MODELS[entity_type]
    
    result = await db.execute(
        select(model).where(model.id == entity_id, model.tenant_id == tenant_id)
    )
    record = result.scalar_one_or_none()
    
    if record is None:
        raise NotFoundError(entity_type.value.capitalize(), entity_id)
    
    current = record.status
    target = parse_status(entity_type, requested)
    if target is None:
        raise InvalidTransitionError(entity_type.value, current, str(requested))
    
    if target.value == current:
        logger.info(
            "Transition is a no-op",
            entity_type=entity_type.value,
            entity_id=str(entity_id),
            status=current,
        )
        return record
    
    if not is_valid_transition(entity_type, current, target):
        raise InvalidTransitionError(entity_type.value, current, target.value)
    
    now = datetime.utcnow()
    values = {"status": target.value, "updated_at": now}
    timestamp_column = STATUS_TIMESTAMPS.get(target)
    if timestamp_column:
        values[timestamp_column] = now
    
    result = await db.execute(
        update(model)
        .where(
            model.id == entity_id,
            model.tenant_id == tenant_id,
            model.status == current,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    
    if result.rowcount != 1:
        # Someone else moved the record between our read and our write
        await db.rollback()
        raise InvalidTransitionError(entity_type.value, current, target.value)
    
    db.add(AuditLog(
        tenant_id=tenant_id,
        actor_id=actor.id if actor else None,
        actor_type="user" if actor else "system",
        action=f"{entity_type.value}.status_changed",
        resource_type=entity_type.value,
        resource_id=entity_id,
        data_json={"before": {"status": current}, "after": {"status": target.value}},
    ))
    
    await db.commit()
    await db.refresh(record)
    
    logger.info(
        "Status changed",
        entity_type=entity_type.value,
        entity_id=str(entity_id),
        tenant_id=str(tenant_id),
        from_status=current,
        to_status=target.value,
    )
    
    return record
