"""Tour periods API — CRUD, status toggle, and bulk updates across periods.

Periods are a tour sub-resource: ``/api/v1/tours/{tour_id}/periods``.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.api.deps import get_db, get_period, get_tour
from tourdesk.models.period import Period
from tourdesk.models.tour import Tour
from tourdesk.pricing import BulkUpdate, BulkUpdateKind
from tourdesk.schemas.common import MessageResponse
from tourdesk.schemas.period import (
    BulkUpdateRequest,
    BulkUpdateResponse,
    MassDiscountRequest,
    MassPromoRequest,
    PeriodCreate,
    PeriodListResponse,
    PeriodResponse,
    PeriodUpdate,
)
from tourdesk.services.period_service import (
    PeriodsNotFound,
    apply_bulk_update,
    create_period,
    list_periods,
    toggle_period_status,
    update_period,
)

router = APIRouter(prefix="/api/v1/tours/{tour_id}/periods", tags=["periods"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _run_bulk(db: AsyncSession, tour: Tour, command: BulkUpdate) -> BulkUpdateResponse:
    """Apply ``command`` or 404 without writing anything."""
    try:
        periods = await apply_bulk_update(db, tour.id, command)
    except PeriodsNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return BulkUpdateResponse(
        kind=command.kind.value,
        updated=len(periods),
        period_ids=sorted((p.id for p in periods), key=str),
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get(
    "",
    response_model=PeriodListResponse,
    summary="List a tour's periods",
)
async def list_tour_periods(
    tour: Tour = Depends(get_tour),
    db: AsyncSession = Depends(get_db),
) -> PeriodListResponse:
    """Return every period of the tour ordered by start date, with seat totals."""
    periods = await list_periods(db, tour.id)
    return PeriodListResponse(
        items=[PeriodResponse.model_validate(p) for p in periods],
        total=len(periods),
        total_available=sum(p.available for p in periods),
    )


@router.post(
    "",
    response_model=PeriodResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a period with its offer",
)
async def create_tour_period(
    body: PeriodCreate,
    tour: Tour = Depends(get_tour),
    db: AsyncSession = Depends(get_db),
) -> PeriodResponse:
    """Create a period. ``end_date`` defaults from the tour's duration."""
    period = await create_period(db, tour, body)
    return PeriodResponse.model_validate(period)


@router.post(
    "/bulk-update",
    response_model=BulkUpdateResponse,
    summary="Set visibility or sale status on many periods",
)
async def bulk_update_periods(
    body: BulkUpdateRequest,
    tour: Tour = Depends(get_tour),
    db: AsyncSession = Depends(get_db),
) -> BulkUpdateResponse:
    """Apply one visibility or sale-status change to every selected period."""
    if body.updates.is_visible is not None:
        command = BulkUpdate.build(body.period_ids, BulkUpdateKind.VISIBILITY, body.updates.is_visible)
    else:
        command = BulkUpdate.build(body.period_ids, BulkUpdateKind.SALE_STATUS, body.updates.sale_status)
    return await _run_bulk(db, tour, command)


@router.post(
    "/mass-update-promo",
    response_model=BulkUpdateResponse,
    summary="Overwrite the promo campaign on many periods",
)
async def mass_update_promo(
    body: MassPromoRequest,
    tour: Tour = Depends(get_tour),
    db: AsyncSession = Depends(get_db),
) -> BulkUpdateResponse:
    """Apply one promo to every selected period; promo usage restarts at 0."""
    command = BulkUpdate.build(
        body.period_ids,
        BulkUpdateKind.PROMO,
        body.model_dump(exclude={"period_ids"}),
    )
    return await _run_bulk(db, tour, command)


@router.post(
    "/mass-update-discount",
    response_model=BulkUpdateResponse,
    summary="Set category discounts on many periods",
)
async def mass_update_discount(
    body: MassDiscountRequest,
    tour: Tour = Depends(get_tour),
    db: AsyncSession = Depends(get_db),
) -> BulkUpdateResponse:
    """Apply the same four category discounts to every selected period."""
    command = BulkUpdate.build(
        body.period_ids,
        BulkUpdateKind.DISCOUNT,
        body.model_dump(exclude={"period_ids"}),
    )
    return await _run_bulk(db, tour, command)


@router.get(
    "/{period_id}",
    response_model=PeriodResponse,
    summary="Get a period by ID",
)
async def get_tour_period(period: Period = Depends(get_period)) -> PeriodResponse:
    """Retrieve a single period with its offer."""
    return PeriodResponse.model_validate(period)


@router.put(
    "/{period_id}",
    response_model=PeriodResponse,
    summary="Update a period and its offer",
)
async def update_tour_period(
    body: PeriodUpdate,
    period: Period = Depends(get_period),
    db: AsyncSession = Depends(get_db),
) -> PeriodResponse:
    """Partially update a period. Offer fields overwrite the offer's values."""
    period = await update_period(db, period, body)
    return PeriodResponse.model_validate(period)


@router.patch(
    "/{period_id}/toggle-status",
    response_model=PeriodResponse,
    summary="Toggle a period between open and closed",
)
async def toggle_tour_period_status(
    period: Period = Depends(get_period),
    db: AsyncSession = Depends(get_db),
) -> PeriodResponse:
    period = await toggle_period_status(db, period)
    return PeriodResponse.model_validate(period)


@router.delete(
    "/{period_id}",
    response_model=MessageResponse,
    summary="Delete a period",
)
async def delete_tour_period(
    period: Period = Depends(get_period),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Hard-delete a period and its offer."""
    await db.delete(period)
    await db.flush()
    return MessageResponse(message="Period deleted")

