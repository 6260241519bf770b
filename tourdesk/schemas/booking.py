"""Pydantic v2 request/response schemas for booking and quote endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from tourdesk.schemas.period import PeriodResponse
from tourdesk.schemas.tour import TourResponse

QUANTITY_FIELDS = (
    "qty_adult",
    "qty_adult_single",
    "qty_child_bed",
    "qty_child_nobed",
    "qty_infant",
    "qty_triple",
    "qty_twin",
    "qty_double",
)

UNIT_PRICE_FIELDS = ("price_adult", "price_single", "price_child_bed", "price_child_nobed", "price_infant")

_STATUS_PATTERN = "^(pending|confirmed|paid|cancelled|completed)$"
_SOURCE_PATTERN = "^(website|flash_sale|admin)$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class QuantitiesInput(BaseModel):
    """Passenger and room counts of a booking draft."""

    qty_adult: int = Field(1, ge=1)
    qty_adult_single: int = Field(0, ge=0)
    qty_child_bed: int = Field(0, ge=0)
    qty_child_nobed: int = Field(0, ge=0)
    qty_infant: int = Field(0, ge=0)
    qty_triple: int = Field(0, ge=0)
    qty_twin: int = Field(0, ge=0)
    qty_double: int = Field(0, ge=0)


class UnitPricesInput(BaseModel):
    """Resolved unit prices; absent categories price at 0."""

    price_adult: Decimal | None = Field(None, ge=0, decimal_places=2)
    price_single: Decimal | None = Field(None, ge=0, decimal_places=2)
    price_child_bed: Decimal | None = Field(None, ge=0, decimal_places=2)
    price_child_nobed: Decimal | None = Field(None, ge=0, decimal_places=2)
    price_infant: Decimal | None = Field(None, ge=0, decimal_places=2)


class BookingQuoteRequest(BaseModel):
    """Quote a draft from a period's offer, from explicit unit prices, or both.

    Explicit prices win over the offer, category by category.
    """

    period_id: uuid.UUID | None = None
    quantities: QuantitiesInput
    prices: UnitPricesInput | None = None

    @model_validator(mode="after")
    def check_price_source(self) -> "BookingQuoteRequest":
        """A quote needs an offer or explicit prices to price against."""
        if self.period_id is None and self.prices is None:
            raise ValueError("provide period_id or prices")
        return self


class BookingCreate(QuantitiesInput, UnitPricesInput):
    """Schema for creating a booking.

    Unit prices left out are resolved from the period's offer.  When
    ``total_amount`` is sent it must match the computed total.
    """

    tour_id: uuid.UUID
    period_id: uuid.UUID
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    total_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    sale_code: str | None = Field(None, max_length=50)
    special_request: str | None = None
    admin_note: str | None = None
    status: str = Field("pending", pattern=_STATUS_PATTERN)
    source: str = Field("admin", pattern=_SOURCE_PATTERN)


class BookingUpdate(BaseModel):
    """Schema for partially updating a booking. All fields optional.

    Changing quantities or prices re-prices the booking; moving it to another
    period re-resolves unit prices from that period's offer unless prices are
    sent too.
    """

    period_id: uuid.UUID | None = None
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, min_length=1, max_length=50)
    qty_adult: int | None = Field(None, ge=1)
    qty_adult_single: int | None = Field(None, ge=0)
    qty_child_bed: int | None = Field(None, ge=0)
    qty_child_nobed: int | None = Field(None, ge=0)
    qty_infant: int | None = Field(None, ge=0)
    qty_triple: int | None = Field(None, ge=0)
    qty_twin: int | None = Field(None, ge=0)
    qty_double: int | None = Field(None, ge=0)
    price_adult: Decimal | None = Field(None, ge=0, decimal_places=2)
    price_single: Decimal | None = Field(None, ge=0, decimal_places=2)
    price_child_bed: Decimal | None = Field(None, ge=0, decimal_places=2)
    price_child_nobed: Decimal | None = Field(None, ge=0, decimal_places=2)
    price_infant: Decimal | None = Field(None, ge=0, decimal_places=2)
    total_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    sale_code: str | None = Field(None, max_length=50)
    special_request: str | None = None
    admin_note: str | None = None
    status: str | None = Field(None, pattern=_STATUS_PATTERN)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PriceLineResponse(BaseModel):
    category: str
    quantity: int
    unit_price: Decimal
    amount: Decimal


class BookingQuoteResponse(BaseModel):
    """Computed totals and room-allocation verdict for a draft."""

    total_amount: Decimal
    total_passengers: int
    total_rooms: int
    is_room_over_allocated: bool
    room_overage: int
    prices: dict[str, Decimal]
    lines: list[PriceLineResponse]


class BookingResponse(BaseModel):
    """Standard booking response returned from CRUD operations."""

    id: uuid.UUID
    booking_code: str
    tour_id: uuid.UUID
    period_id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    qty_adult: int
    qty_adult_single: int
    qty_child_bed: int
    qty_child_nobed: int
    qty_infant: int
    qty_triple: int
    qty_twin: int
    qty_double: int
    price_adult: Decimal
    price_single: Decimal
    price_child_bed: Decimal
    price_child_nobed: Decimal
    price_infant: Decimal
    total_amount: Decimal
    sale_code: str | None = None
    special_request: str | None = None
    admin_note: str | None = None
    status: str
    source: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingDetailResponse(BookingResponse):
    """Extended booking response with nested tour and period details."""

    tour: TourResponse | None = None
    period: PeriodResponse | None = None


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int
