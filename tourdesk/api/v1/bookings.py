"""Bookings API — quotes and CRUD over priced booking snapshots.

Every create and update is priced by the pricing engine and must pass the
room-allocation gate before anything is written.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.api.deps import get_db
from tourdesk.models.booking import Booking
from tourdesk.models.period import Period
from tourdesk.pricing import BookingQuantities
from tourdesk.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingQuoteRequest,
    BookingQuoteResponse,
    BookingResponse,
    BookingUpdate,
    PriceLineResponse,
)
from tourdesk.schemas.common import MessageResponse
from tourdesk.services import booking_service

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_booking_or_404(booking_id: uuid.UUID, db: AsyncSession) -> Booking:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()

    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booking not found",
        )
    return booking


async def _get_period_or_404(period_id: uuid.UUID, db: AsyncSession, tour_id: uuid.UUID | None = None) -> Period:
    """Fetch a period, optionally checking it belongs to ``tour_id``."""
    query = select(Period).where(Period.id == period_id)
    if tour_id is not None:
        query = query.where(Period.tour_id == tour_id)
    result = await db.execute(query)
    period = result.scalar_one_or_none()

    if period is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Period not found",
        )
    return period


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/quote",
    response_model=BookingQuoteResponse,
    summary="Price a booking draft",
)
async def quote_booking(
    body: BookingQuoteRequest,
    db: AsyncSession = Depends(get_db),
) -> BookingQuoteResponse:
    """Compute the total and room-allocation verdict without saving anything.

    Over-allocation is reported in the response rather than rejected, so a
    form can show it inline while the operator is still editing.
    """
    period = await _get_period_or_404(body.period_id, db) if body.period_id is not None else None
    quantities = BookingQuantities(**body.quantities.model_dump())
    explicit = body.prices.model_dump() if body.prices is not None else None

    result = booking_service.quote(quantities, period, explicit)

    return BookingQuoteResponse(
        total_amount=result.total_amount,
        total_passengers=result.total_passengers,
        total_rooms=result.total_rooms,
        is_room_over_allocated=result.is_room_over_allocated,
        room_overage=result.room_overage,
        prices=result.prices.as_snapshot(),
        lines=[
            PriceLineResponse(
                category=line.category.value,
                quantity=line.quantity,
                unit_price=line.unit_price,
                amount=line.amount,
            )
            for line in result.lines
        ],
    )


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
) -> Booking:
    """Create a booking on a period of the given tour.

    Validates that:
    - The period exists and belongs to ``tour_id``.
    - Rooms do not outnumber travelers.
    - A client-sent ``total_amount`` matches the computed total.
    """
    period = await _get_period_or_404(body.period_id, db, tour_id=body.tour_id)
    return await booking_service.create_booking(db, body, period)


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List bookings",
)
async def list_bookings(
    tour_id: uuid.UUID | None = Query(None, description="Filter by tour"),
    period_id: uuid.UUID | None = Query(None, description="Filter by period"),
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    source: str | None = Query(None, description="Filter by booking source"),
    search: str | None = Query(None, description="Match on booking code, name, email or phone"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Return a paginated list of bookings, newest first."""
    filters = []
    if tour_id is not None:
        filters.append(Booking.tour_id == tour_id)
    if period_id is not None:
        filters.append(Booking.period_id == period_id)
    if status_filter is not None:
        filters.append(Booking.status == status_filter)
    if source is not None:
        filters.append(Booking.source == source)
    if search:
        pattern = f"%{search}%"
        filters.append(
            Booking.booking_code.ilike(pattern)
            | Booking.first_name.ilike(pattern)
            | Booking.last_name.ilike(pattern)
            | Booking.email.ilike(pattern)
            | Booking.phone.ilike(pattern)
        )

    # Total count
    total_result = await db.execute(select(func.count()).select_from(Booking).where(*filters))
    total = total_result.scalar_one()

    # Fetch page
    items_query = select(Booking).where(*filters).order_by(Booking.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return {"items": items, "total": total}


@router.get(
    "/{booking_id}",
    response_model=BookingDetailResponse,
    summary="Get booking detail with nested tour and period",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> Booking:
    """Retrieve a single booking with its tour and period."""
    return await _get_booking_or_404(booking_id, db)


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Update a booking",
)
async def update_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    db: AsyncSession = Depends(get_db),
) -> Booking:
    """Partially update a booking.

    Re-prices the booking when quantities, unit prices or the period change,
    and re-runs the room-allocation gate before saving.
    """
    booking = await _get_booking_or_404(booking_id, db)

    new_period = None
    if body.period_id is not None and body.period_id != booking.period_id:
        new_period = await _get_period_or_404(body.period_id, db)

    return await booking_service.update_booking(db, booking, body, new_period)


@router.delete(
    "/{booking_id}",
    response_model=MessageResponse,
    summary="Delete a booking",
)
async def delete_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Delete a booking."""
    booking = await _get_booking_or_404(booking_id, db)

    await db.delete(booking)
    await db.flush()
    return {"message": "Booking deleted"}
