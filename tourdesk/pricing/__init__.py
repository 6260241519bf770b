"""Tour-period pricing and room-allocation engine.

Pure, synchronous functions shared by the booking and period endpoints::

    from tourdesk.pricing import BookingQuantities, compute, resolve_all

    prices = resolve_all(period.offer)
    result = compute(BookingQuantities(qty_adult=2, qty_twin=1), prices)
"""

from tourdesk.pricing.availability import (
    PeriodStatus,
    SaleStatus,
    available_seats,
    derive_sale_status,
    is_bookable,
    toggle_status,
)
from tourdesk.pricing.bulk import BulkUpdate, BulkUpdateKind, DiscountPayload, PromoPayload
from tourdesk.pricing.calculator import BookingPriceResult, BookingQuantities, PriceLine, compute
from tourdesk.pricing.errors import (
    BulkUpdateError,
    MissingPriceError,
    NegativeNetPriceError,
    PricingError,
    RoomOverAllocatedError,
    ValidationFailure,
)
from tourdesk.pricing.offer import OfferPrices, PriceCategory, to_amount, to_money
from tourdesk.pricing.resolver import ResolvedPrices, resolve, resolve_all
from tourdesk.pricing.validation import (
    RoomAllocationOk,
    RoomOverAllocated,
    ensure_room_allocation,
    validate,
)

__all__ = [
    "BookingPriceResult",
    "BookingQuantities",
    "BulkUpdate",
    "BulkUpdateError",
    "BulkUpdateKind",
    "DiscountPayload",
    "MissingPriceError",
    "NegativeNetPriceError",
    "OfferPrices",
    "PeriodStatus",
    "PriceCategory",
    "PriceLine",
    "PricingError",
    "PromoPayload",
    "ResolvedPrices",
    "RoomAllocationOk",
    "RoomOverAllocated",
    "RoomOverAllocatedError",
    "SaleStatus",
    "ValidationFailure",
    "available_seats",
    "compute",
    "derive_sale_status",
    "ensure_room_allocation",
    "is_bookable",
    "resolve",
    "resolve_all",
    "to_amount",
    "to_money",
    "toggle_status",
    "validate",
]
