"""Period availability: seat arithmetic and the sale-status model.

A period has two independent, operator-set axes: ``is_visible`` (display
toggle) and ``sale_status`` (commercial state).  ``available`` is derived
from ``capacity - booked`` and is shown alongside; it only drives
``sale_status`` when the optional auto-sold-out rule is enabled.
"""

import enum

from tourdesk.pricing.errors import ValidationFailure


class SaleStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKING = "booking"
    SOLD_OUT = "sold_out"


class PeriodStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    SOLD_OUT = "sold_out"
    CANCELLED = "cancelled"


def available_seats(capacity: int, booked: int) -> int:
    """Return ``capacity - booked``.

    Raises:
        ValidationFailure: either count is negative, or more seats are booked
            than the period holds.
    """
    if capacity < 0 or booked < 0:
        raise ValidationFailure("capacity and booked must be non-negative")
    if booked > capacity:
        raise ValidationFailure(f"booked seats ({booked}) exceed capacity ({capacity})")
    return capacity - booked


def derive_sale_status(current: SaleStatus | str, capacity: int, booked: int) -> SaleStatus:
    """Auto-sold-out rule: a full period is ``sold_out``, otherwise unchanged.

    The rule never moves a period *out* of ``sold_out``; reopening sales is an
    operator decision.
    """
    if available_seats(capacity, booked) == 0:
        return SaleStatus.SOLD_OUT
    return SaleStatus(current)


def toggle_status(status: PeriodStatus | str) -> PeriodStatus:
    """Flip ``open`` and ``closed``; sold-out and cancelled periods stay put."""
    status = PeriodStatus(status)
    if status is PeriodStatus.OPEN:
        return PeriodStatus.CLOSED
    if status is PeriodStatus.CLOSED:
        return PeriodStatus.OPEN
    return status


def is_bookable(
    *,
    is_visible: bool,
    status: PeriodStatus | str,
    sale_status: SaleStatus | str,
    capacity: int,
    booked: int,
) -> bool:
    """Whether a new booking may be taken on the period."""
    return (
        is_visible
        and PeriodStatus(status) is PeriodStatus.OPEN
        and SaleStatus(sale_status) is not SaleStatus.SOLD_OUT
        and available_seats(capacity, booked) > 0
    )
