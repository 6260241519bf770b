"""Tours CRUD API routes."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.api.deps import get_db, get_tour
from tourdesk.models.tour import Tour
from tourdesk.schemas.common import MessageResponse
from tourdesk.schemas.tour import (
    TourCreate,
    TourListResponse,
    TourResponse,
    TourUpdate,
)

router = APIRouter(prefix="/api/v1/tours", tags=["tours"])


async def _check_code_conflict(db: AsyncSession, tour_code: str, exclude: Tour | None = None) -> None:
    """Raise 409 if another tour already uses ``tour_code``."""
    query = select(Tour).where(Tour.tour_code == tour_code)
    if exclude is not None:
        query = query.where(Tour.id != exclude.id)
    result = await db.execute(query)
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Tour code already exists",
        )


@router.post(
    "",
    response_model=TourResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new tour",
)
async def create_tour(
    body: TourCreate,
    db: AsyncSession = Depends(get_db),
) -> TourResponse:
    """Create a tour. Tour codes are unique."""
    await _check_code_conflict(db, body.tour_code)

    tour = Tour(**body.model_dump())
    db.add(tour)
    await db.flush()
    await db.refresh(tour)
    return TourResponse.model_validate(tour)


@router.get(
    "",
    response_model=TourListResponse,
    summary="List tours",
)
async def list_tours(
    status_filter: str | None = Query(None, alias="status"),
    search: str | None = Query(None, description="Match on tour code or title"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> TourListResponse:
    """Return a paginated list of tours."""
    filters = []
    if status_filter is not None:
        filters.append(Tour.status == status_filter)
    if search:
        pattern = f"%{search}%"
        filters.append(Tour.tour_code.ilike(pattern) | Tour.title.ilike(pattern))

    # Total count
    count_query = select(func.count()).select_from(Tour).where(*filters)
    total_result = await db.execute(count_query)
    total = total_result.scalar_one()

    # Fetch page
    items_query = select(Tour).where(*filters).order_by(Tour.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return TourListResponse(
        items=[TourResponse.model_validate(t) for t in items],
        total=total,
    )


@router.get(
    "/{tour_id}",
    response_model=TourResponse,
    summary="Get a tour by ID",
)
async def get_tour_detail(tour: Tour = Depends(get_tour)) -> TourResponse:
    """Retrieve a single tour. Returns 404 if not found."""
    return TourResponse.model_validate(tour)


@router.put(
    "/{tour_id}",
    response_model=TourResponse,
    summary="Update a tour",
)
async def update_tour(
    body: TourUpdate,
    tour: Tour = Depends(get_tour),
    db: AsyncSession = Depends(get_db),
) -> TourResponse:
    """Partially update a tour. Existing period dates are not shifted."""
    update_data = body.model_dump(exclude_unset=True)
    if update_data.get("tour_code") and update_data["tour_code"] != tour.tour_code:
        await _check_code_conflict(db, update_data["tour_code"], exclude=tour)

    for field, value in update_data.items():
        if value is not None:
            setattr(tour, field, value)

    db.add(tour)
    await db.flush()
    await db.refresh(tour)
    return TourResponse.model_validate(tour)


@router.delete(
    "/{tour_id}",
    response_model=MessageResponse,
    summary="Delete a tour",
)
async def delete_tour(
    tour: Tour = Depends(get_tour),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete a tour and cascade-delete its periods and offers."""
    # Pick up periods created since the tour was loaded.
    await db.refresh(tour)
    await db.delete(tour)
    await db.flush()
    return MessageResponse(message="Tour deleted")
