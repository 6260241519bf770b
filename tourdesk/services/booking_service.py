"""Booking service — quoting, the submission gate, and price snapshots.

Every booking write goes through :func:`price_booking` so the booking create
and edit paths and the quote endpoint share one computation.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.config import settings
from tourdesk.models.booking import Booking
from tourdesk.models.period import Period
from tourdesk.pricing import (
    BookingPriceResult,
    BookingQuantities,
    OfferPrices,
    PriceCategory,
    ResolvedPrices,
    ValidationFailure,
    compute,
    ensure_room_allocation,
    resolve_all,
)
from tourdesk.schemas.booking import QUANTITY_FIELDS, UNIT_PRICE_FIELDS, BookingCreate, BookingUpdate

logger = logging.getLogger(__name__)

_NON_NULLABLE = frozenset({*QUANTITY_FIELDS, *UNIT_PRICE_FIELDS, "first_name", "last_name", "email", "phone", "status"})


def generate_booking_code(today: date | None = None) -> str:
    """Return a human-readable booking reference such as ``BK-20261018-1A2B3C``."""
    today = today or date.today()
    return f"BK-{today:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


def price_booking(
    quantities: BookingQuantities,
    offer: Any | None,
    explicit_prices: Mapping[str, Decimal | None] | None = None,
) -> BookingPriceResult:
    """Resolve unit prices and compute the booking total.

    Args:
        quantities: Passenger and room counts.
        offer: The period's offer (ORM row or mapping); ``None`` when the
            period has none configured.
        explicit_prices: ``price_<category>`` values that override the
            offer's resolved prices; ``None`` entries fall back to the offer.

    Raises:
        MissingPriceError: strict mode and a booked category has no price.
        NegativeNetPriceError: an offer discount exceeds its price.
    """
    explicit = {
        PriceCategory(name.removeprefix("price_")): Decimal(value)
        for name, value in (explicit_prices or {}).items()
        if value is not None
    }
    resolved = resolve_all(
        offer if offer is not None else OfferPrices(),
        strict=settings.pricing_strict_mode,
        clamp_negative=settings.pricing_clamp_negative,
        required=quantities.priced_categories() - set(explicit),
    )
    prices = ResolvedPrices(
        **{category.value: explicit.get(category, resolved.for_category(category)) for category in PriceCategory}
    )
    # The snapshot columns hold two decimals; the total must be built from what is stored.
    return compute(quantities, prices.rounded())


def _check_client_total(client_total: Decimal | None, computed_total: Decimal) -> None:
    if client_total is not None and Decimal(client_total) != computed_total:
        raise ValidationFailure(f"total_amount {client_total} does not match computed total {computed_total}")


def quote(
    quantities: BookingQuantities,
    period: Period | None,
    explicit_prices: Mapping[str, Any] | None = None,
) -> BookingPriceResult:
    """Price a draft without persisting anything; over-allocation is reported, not raised."""
    return price_booking(quantities, period.offer if period is not None else None, explicit_prices)


async def create_booking(db: AsyncSession, body: BookingCreate, period: Period) -> Booking:
    """Price, gate and persist a new booking on ``period``.

    Raises:
        RoomOverAllocatedError: more rooms than travelers.
        ValidationFailure: a client-sent ``total_amount`` disagrees with the
            computed one.
    """
    data = body.model_dump()
    quantities = BookingQuantities(**{name: data[name] for name in QUANTITY_FIELDS})
    result = price_booking(quantities, period.offer, {name: data[name] for name in UNIT_PRICE_FIELDS})

    ensure_room_allocation(result)
    _check_client_total(body.total_amount, result.total_amount)

    booking = Booking(
        booking_code=generate_booking_code(),
        tour_id=period.tour_id,
        period_id=period.id,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        phone=body.phone,
        sale_code=body.sale_code,
        special_request=body.special_request,
        admin_note=body.admin_note,
        status=body.status,
        source=body.source,
        total_amount=result.total_amount,
        **quantities.as_dict(),
        **result.prices.as_snapshot(),
    )
    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    logger.info(
        "Created booking %s on period %s: %d travelers, total %s",
        booking.booking_code,
        period.id,
        result.total_passengers,
        result.total_amount,
    )
    return booking


async def update_booking(
    db: AsyncSession,
    booking: Booking,
    body: BookingUpdate,
    new_period: Period | None = None,
) -> Booking:
    """Partially update a booking, re-pricing it when pricing inputs change.

    Unchanged unit prices keep their snapshot values; moving to
    ``new_period`` re-resolves them from that period's offer instead.
    """
    update_data = body.model_dump(exclude_unset=True)
    update_data.pop("period_id", None)
    client_total = update_data.pop("total_amount", None)

    period_changed = new_period is not None and new_period.id != booking.period_id
    pricing_changed = period_changed or any(name in update_data for name in (*QUANTITY_FIELDS, *UNIT_PRICE_FIELDS))

    if pricing_changed:
        quantities = BookingQuantities(
            **{
                name: update_data[name] if update_data.get(name) is not None else getattr(booking, name)
                for name in QUANTITY_FIELDS
            }
        )
        if period_changed:
            offer = new_period.offer
            explicit = {name: update_data.get(name) for name in UNIT_PRICE_FIELDS}
        else:
            offer = None
            explicit = {
                name: update_data[name] if update_data.get(name) is not None else getattr(booking, name)
                for name in UNIT_PRICE_FIELDS
            }
        result = price_booking(quantities, offer, explicit)
        ensure_room_allocation(result)
        _check_client_total(client_total, result.total_amount)

        update_data.update(quantities.as_dict())
        update_data.update(result.prices.as_snapshot())
        update_data["total_amount"] = result.total_amount
    else:
        _check_client_total(client_total, booking.total_amount)

    if period_changed:
        booking.period_id = new_period.id
        booking.tour_id = new_period.tour_id

    for field, value in update_data.items():
        if value is None and field in _NON_NULLABLE:
            continue
        setattr(booking, field, value)

    db.add(booking)
    await db.flush()
    await db.refresh(booking)
    logger.info("Updated booking %s (repriced=%s)", booking.booking_code, pricing_changed)
    return booking
