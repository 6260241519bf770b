"""BookingPricingCalculator — quoted total and room-allocation verdict.

``compute`` is pure and cheap; callers re-run it on every quantity or price
change instead of caching.  It never raises: blocking submission on an
over-allocated result is the job of :mod:`tourdesk.pricing.validation`.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from typing import Any

from tourdesk.pricing.offer import PriceCategory
from tourdesk.pricing.resolver import ResolvedPrices

logger = logging.getLogger(__name__)


def _to_count(value: Any) -> int:
    """Coerce a form value to a non-negative int; invalid input counts as 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        count = value
    elif isinstance(value, float):
        count = int(value) if math.isfinite(value) else 0
    else:
        try:
            count = int(str(value).strip())
        except ValueError:
            return 0
    return max(count, 0)


@dataclass(frozen=True)
class BookingQuantities:
    """Passenger and room counts of a booking draft.

    ``qty_adult_single`` is both a passenger count and a room count: every
    single-occupancy adult takes one room of their own.
    """

    qty_adult: int = 1
    qty_adult_single: int = 0
    qty_child_bed: int = 0
    qty_child_nobed: int = 0
    qty_infant: int = 0
    qty_triple: int = 0
    qty_twin: int = 0
    qty_double: int = 0

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BookingQuantities":
        """Build from loosely-typed form data.

        Absent keys keep the field default; blank or invalid counts become 0.
        """
        return cls(**{name: _to_count(data[name]) for name in cls.__dataclass_fields__ if name in data})

    @property
    def total_passengers(self) -> int:
        # Infants occupy neither a counted seat nor a room.
        return self.qty_adult + self.qty_adult_single + self.qty_child_bed + self.qty_child_nobed

    @property
    def total_rooms(self) -> int:
        return self.qty_triple + self.qty_twin + self.qty_double + self.qty_adult_single

    def priced_categories(self) -> set[PriceCategory]:
        """Categories whose unit price contributes to the total."""
        used: set[PriceCategory] = set()
        if self.qty_adult or self.qty_adult_single:
            used.add(PriceCategory.ADULT)
        if self.qty_adult_single:
            used.add(PriceCategory.SINGLE)
        if self.qty_child_bed:
            used.add(PriceCategory.CHILD_BED)
        if self.qty_child_nobed:
            used.add(PriceCategory.CHILD_NOBED)
        if self.qty_infant:
            used.add(PriceCategory.INFANT)
        return used

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class PriceLine:
    """One row of the quote breakdown."""

    category: PriceCategory
    quantity: int
    unit_price: Decimal
    amount: Decimal


@dataclass(frozen=True)
class BookingPriceResult:
    """Derived totals for a booking draft; not persisted until submit."""

    total_amount: Decimal
    total_passengers: int
    total_rooms: int
    is_room_over_allocated: bool
    quantities: BookingQuantities
    prices: ResolvedPrices
    lines: tuple[PriceLine, ...] = field(default_factory=tuple)

    @property
    def room_overage(self) -> int:
        return max(self.total_rooms - self.total_passengers, 0)


def compute(quantities: BookingQuantities, prices: ResolvedPrices) -> BookingPriceResult:
    """Compute the total amount and room-allocation verdict.

    A single-room adult pays the full adult fare plus the single-room
    supplement::

        total = qty_adult * adult
              + qty_adult_single * (adult + single)
              + qty_child_bed * child_bed
              + qty_child_nobed * child_nobed
              + qty_infant * infant
    """
    lines = (
        PriceLine(PriceCategory.ADULT, quantities.qty_adult, prices.adult, quantities.qty_adult * prices.adult),
        PriceLine(
            PriceCategory.SINGLE,
            quantities.qty_adult_single,
            prices.adult + prices.single,
            quantities.qty_adult_single * (prices.adult + prices.single),
        ),
        PriceLine(
            PriceCategory.CHILD_BED,
            quantities.qty_child_bed,
            prices.child_bed,
            quantities.qty_child_bed * prices.child_bed,
        ),
        PriceLine(
            PriceCategory.CHILD_NOBED,
            quantities.qty_child_nobed,
            prices.child_nobed,
            quantities.qty_child_nobed * prices.child_nobed,
        ),
        PriceLine(PriceCategory.INFANT, quantities.qty_infant, prices.infant, quantities.qty_infant * prices.infant),
    )
    total_amount = sum((line.amount for line in lines), Decimal("0"))
    total_passengers = quantities.total_passengers
    total_rooms = quantities.total_rooms

    logger.debug(
        "Computed total=%s passengers=%d rooms=%d",
        total_amount,
        total_passengers,
        total_rooms,
    )
    return BookingPriceResult(
        total_amount=total_amount,
        total_passengers=total_passengers,
        total_rooms=total_rooms,
        is_room_over_allocated=total_rooms > total_passengers,
        quantities=quantities,
        prices=prices,
        lines=lines,
    )
