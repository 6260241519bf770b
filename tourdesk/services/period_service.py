"""Period service — period/offer writes and bulk updates across periods."""

import logging
import uuid
from collections.abc import Iterable
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.config import settings
from tourdesk.models.period import Period, PeriodOffer
from tourdesk.models.tour import Tour
from tourdesk.pricing import (
    BulkUpdate,
    ValidationFailure,
    available_seats,
    derive_sale_status,
    toggle_status,
)
from tourdesk.schemas.period import DISCOUNT_FIELDS, OFFER_FIELDS, PeriodCreate, PeriodUpdate

logger = logging.getLogger(__name__)

_NON_NULLABLE = frozenset({"start_date", "end_date", "capacity", "booked", "status", "is_visible", "sale_status"})


class PeriodsNotFound(LookupError):
    """Some ids of a bulk selection do not exist on the tour."""

    def __init__(self, missing: Iterable[uuid.UUID]) -> None:
        self.missing = sorted(missing, key=str)
        super().__init__(f"Periods not found: {', '.join(str(period_id) for period_id in self.missing)}")


def default_end_date(start_date: date, duration_days: int) -> date:
    """Last travel day of a period starting on ``start_date``."""
    return start_date + timedelta(days=max(duration_days, 1) - 1)


def split_period_payload(data: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split a flat period body into ``(period_fields, offer_fields)``."""
    period_fields = {name: value for name, value in data.items() if name not in OFFER_FIELDS}
    offer_fields = {name: value for name, value in data.items() if name in OFFER_FIELDS}
    for name in DISCOUNT_FIELDS:
        if name in offer_fields and offer_fields[name] is None:
            offer_fields[name] = Decimal("0")
    return period_fields, offer_fields


def apply_availability_rules(period: Period) -> None:
    """Check seat counts and, when enabled, auto-mark a full period sold out."""
    available_seats(period.capacity, period.booked)
    if settings.auto_sold_out:
        new_status = derive_sale_status(period.sale_status, period.capacity, period.booked).value
        if new_status != period.sale_status:
            logger.info("Period %s is full; sale_status %s -> %s", period.id, period.sale_status, new_status)
            period.sale_status = new_status


async def list_periods(db: AsyncSession, tour_id: uuid.UUID) -> list[Period]:
    result = await db.execute(select(Period).where(Period.tour_id == tour_id).order_by(Period.start_date))
    return list(result.scalars().all())


async def create_period(db: AsyncSession, tour: Tour, body: PeriodCreate) -> Period:
    """Create a period and its offer.

    ``end_date`` is derived from the tour duration when omitted; capacity,
    currency and cancellation policy fall back to the configured defaults.
    """
    period_fields, offer_fields = split_period_payload(body.model_dump())

    if period_fields["end_date"] is None:
        period_fields["end_date"] = default_end_date(body.start_date, tour.duration_days)
    if period_fields["capacity"] is None:
        period_fields["capacity"] = settings.default_period_capacity
    if offer_fields["currency"] is None:
        offer_fields["currency"] = settings.default_currency
    if offer_fields["cancellation_policy"] is None:
        offer_fields["cancellation_policy"] = settings.default_cancellation_policy

    period = Period(tour_id=tour.id, **period_fields)
    period.offer = PeriodOffer(promo_used=0, **offer_fields)
    apply_availability_rules(period)

    db.add(period)
    await db.flush()
    await db.refresh(period)
    logger.info("Created period %s (%s..%s) on tour %s", period.id, period.start_date, period.end_date, tour.tour_code)
    return period


async def update_period(db: AsyncSession, period: Period, body: PeriodUpdate) -> Period:
    """Partially update a period; offer fields replace the offer's values.

    Raises:
        ValidationFailure: the effective dates are inverted or booked seats
            exceed capacity.
    """
    period_fields, offer_fields = split_period_payload(body.model_dump(exclude_unset=True))
    period_fields = {
        name: value for name, value in period_fields.items() if value is not None or name not in _NON_NULLABLE
    }

    # Validate the effective state before touching the loaded row.
    effective_start = period_fields.get("start_date", period.start_date)
    effective_end = period_fields.get("end_date", period.end_date)
    if effective_end < effective_start:
        raise ValidationFailure("end_date must not be before start_date")
    available_seats(period_fields.get("capacity", period.capacity), period_fields.get("booked", period.booked))

    for field, value in period_fields.items():
        setattr(period, field, value)

    if offer_fields:
        if period.offer is None:
            period.offer = PeriodOffer(currency=settings.default_currency, promo_used=0)
        for field, value in offer_fields.items():
            if field == "currency" and value is None:
                continue
            setattr(period.offer, field, value)

    apply_availability_rules(period)

    db.add(period)
    await db.flush()
    await db.refresh(period)
    return period


async def toggle_period_status(db: AsyncSession, period: Period) -> Period:
    """Flip a period between open and closed."""
    period.status = toggle_status(period.status).value
    await db.flush()
    await db.refresh(period)
    return period


async def apply_bulk_update(db: AsyncSession, tour_id: uuid.UUID, command: BulkUpdate) -> list[Period]:
    """Apply one bulk command to every selected period of a tour.

    All-or-nothing: when any selected id is missing (or belongs to another
    tour) nothing is written and :class:`PeriodsNotFound` is raised.  The
    caller's transaction covers the whole set.
    """
    result = await db.execute(
        select(Period).where(Period.tour_id == tour_id, Period.id.in_(list(command.period_ids)))
    )
    periods = list(result.scalars().all())

    missing = set(command.period_ids) - {period.id for period in periods}
    if missing:
        logger.warning(
            "Rejected %s bulk update on tour %s: %d unknown periods",
            command.kind.value,
            tour_id,
            len(missing),
        )
        raise PeriodsNotFound(missing)

    command.apply_to(periods, offer_factory=lambda: PeriodOffer(currency=settings.default_currency, promo_used=0))
    for period in periods:
        apply_availability_rules(period)
    await db.flush()

    logger.info("Applied %s bulk update to %d periods on tour %s", command.kind.value, len(periods), tour_id)
    return periods
