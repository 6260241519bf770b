"""Shared API dependencies — single import point for all routers.

Re-exports the database session and provides path-parameter lookups that
404 on unknown resources::

    from tourdesk.api.deps import get_db, get_tour
"""

import uuid

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.database import get_db
from tourdesk.models.period import Period
from tourdesk.models.tour import Tour


async def get_tour(tour_id: uuid.UUID, db: AsyncSession = Depends(get_db)) -> Tour:
    """Resolve ``{tour_id}`` or raise 404."""
    result = await db.execute(select(Tour).where(Tour.id == tour_id))
    tour = result.scalar_one_or_none()
    if tour is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tour not found",
        )
    return tour


async def get_period(
    period_id: uuid.UUID,
    tour: Tour = Depends(get_tour),
    db: AsyncSession = Depends(get_db),
) -> Period:
    """Resolve ``{period_id}`` within ``{tour_id}`` or raise 404."""
    result = await db.execute(select(Period).where(Period.id == period_id, Period.tour_id == tour.id))
    period = result.scalar_one_or_none()
    if period is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Period not found",
        )
    return period


__all__ = [
    "get_db",
    "get_period",
    "get_tour",
]
