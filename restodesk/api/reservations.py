"""Reservation management API endpoints"""

from typing import Optional
from uuid import UUID
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from restodesk.database import get_db
from restodesk.errors import InvalidTransitionError, NotFoundError
from restodesk.models.reservation import Reservation
from restodesk.models.user import UserRole
from restodesk.schemas.reservation import ReservationResponse, ReservationListResponse
from restodesk.schemas.status import StatusUpdate
from restodesk.workflow import EntityType, apply_transition, parse_status
from restodesk.api.auth import TenantContext, get_tenant_context

router = APIRouter()


@router.get("", response_model=ReservationListResponse)
async def list_reservations(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: Optional[str] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    updated_since: Optional[datetime] = None,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """List reservations for a tenant with pagination"""
    query = select(Reservation).where(Reservation.tenant_id == ctx.tenant_id)
    count_query = select(func.count(Reservation.id)).where(Reservation.tenant_id == ctx.tenant_id)

    if status:
        query = query.where(Reservation.status == status)
        count_query = count_query.where(Reservation.status == status)

    if from_date:
        query = query.where(Reservation.reservation_date >= from_date)
        count_query = count_query.where(Reservation.reservation_date >= from_date)

    if to_date:
        query = query.where(Reservation.reservation_date <= to_date)
        count_query = count_query.where(Reservation.reservation_date <= to_date)

    if updated_since:
        query = query.where(Reservation.updated_at > updated_since)
        count_query = count_query.where(Reservation.updated_at > updated_since)

    # Get total
    total_result = await db.execute(count_query)
    total = total_result.scalar()

    # Get paginated results
    offset = (page - 1) * page_size
    query = query.order_by(
        Reservation.reservation_date.desc(),
        Reservation.reservation_time.desc(),
    ).offset(offset).limit(page_size)

    result = await db.execute(query)
    reservations = result.scalars().all()

    return ReservationListResponse(
        items=[ReservationResponse.model_validate(r) for r in reservations],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(
    reservation_id: UUID,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Get reservation details"""
    result = await db.execute(
        select(Reservation).where(
            Reservation.id == reservation_id,
            Reservation.tenant_id == ctx.tenant_id,
        )
    )
    reservation = result.scalar_one_or_none()

    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")

    return reservation


@router.patch("/{reservation_id}/status", response_model=ReservationResponse)
async def update_reservation_status(
    reservation_id: UUID,
    status_data: StatusUpdate,
    ctx: TenantContext = Depends(get_tenant_context),
    db: AsyncSession = Depends(get_db),
):
    """Mark a confirmed reservation as arrived or cancelled"""
    ctx.require(UserRole.RESTAURANT_ADMIN)

    if parse_status(EntityType.RESERVATION, status_data.status) is None:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown reservation status: {status_data.status}",
        )

    try:
        return await apply_transition(
            db,
            EntityType.RESERVATION,
            reservation_id,
            ctx.tenant_id,
            status_data.status,
            actor=ctx.user,
        )
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Reservation not found")
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
