"""Pydantic v2 request/response schemas for period and bulk-update endpoints.

Period create/update bodies are flat: period fields and offer fields travel
together, the way the period form submits them.  Responses nest the offer.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tourdesk.pricing import to_amount

MONEY_FIELDS = (
    "price_adult",
    "discount_adult",
    "price_single",
    "discount_single",
    "price_child_bed",
    "discount_child_bed",
    "price_child_nobed",
    "discount_child_nobed",
    "price_infant",
    "net_price_adult",
    "net_price_single",
    "deposit",
)

DISCOUNT_FIELDS = ("discount_adult", "discount_single", "discount_child_bed", "discount_child_nobed")

_STATUS_PATTERN = "^(open|closed|sold_out|cancelled)$"
_SALE_STATUS_PATTERN = "^(available|booking|sold_out)$"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class OfferFields(BaseModel):
    """Offer fields accepted on period create/update.

    Numeric strings (``"29,900"``) are parsed to numbers and empty optional
    fields are sent on as ``None``.
    """

    currency: str | None = Field(None, min_length=3, max_length=3)
    price_adult: Decimal | None = Field(None, ge=0)
    discount_adult: Decimal | None = Field(None, ge=0)
    price_single: Decimal | None = Field(None, ge=0)
    discount_single: Decimal | None = Field(None, ge=0)
    price_child_bed: Decimal | None = Field(None, ge=0)
    discount_child_bed: Decimal | None = Field(None, ge=0)
    price_child_nobed: Decimal | None = Field(None, ge=0)
    discount_child_nobed: Decimal | None = Field(None, ge=0)
    price_infant: Decimal | None = Field(None, ge=0)
    net_price_adult: Decimal | None = Field(None, ge=0)
    net_price_single: Decimal | None = Field(None, ge=0)
    deposit: Decimal | None = Field(None, ge=0)
    cancellation_policy: str | None = None
    promo_name: str | None = Field(None, max_length=255)
    promo_start_date: date | None = None
    promo_end_date: date | None = None
    promo_quota: int | None = Field(None, ge=0)

    @field_validator(*MONEY_FIELDS, mode="before")
    @classmethod
    def _parse_amount(cls, value: Any) -> Any:
        value = _blank_to_none(value)
        if value is None:
            return None
        amount = to_amount(value)
        # Leave unparseable input for pydantic to report.
        return value if amount is None else amount

    @field_validator(
        "cancellation_policy",
        "promo_name",
        "promo_start_date",
        "promo_end_date",
        "promo_quota",
        mode="before",
    )
    @classmethod
    def _empty_optional(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def check_promo_window(self) -> "OfferFields":
        """If both promo dates are provided, the window must not be inverted."""
        if (
            self.promo_start_date is not None
            and self.promo_end_date is not None
            and self.promo_end_date < self.promo_start_date
        ):
            raise ValueError("promo_end_date must not be before promo_start_date")
        return self


OFFER_FIELDS: frozenset[str] = frozenset(OfferFields.model_fields)


class PeriodCreate(OfferFields):
    """Schema for creating a period together with its offer.

    ``end_date`` defaults to ``start_date + duration_days - 1`` of the tour.
    """

    period_code: str | None = Field(None, max_length=50)
    start_date: date
    end_date: date | None = None
    capacity: int | None = Field(None, ge=0)
    booked: int = Field(0, ge=0)
    status: str = Field("open", pattern=_STATUS_PATTERN)
    is_visible: bool = True
    sale_status: str = Field("available", pattern=_SALE_STATUS_PATTERN)

    @model_validator(mode="after")
    def check_dates_and_seats(self) -> "PeriodCreate":
        """Validate end_date >= start_date and booked <= capacity."""
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.capacity is not None and self.booked > self.capacity:
            raise ValueError("booked must not exceed capacity")
        return self


class PeriodUpdate(OfferFields):
    """Schema for partially updating a period and its offer. All fields optional."""

    period_code: str | None = Field(None, max_length=50)
    start_date: date | None = None
    end_date: date | None = None
    capacity: int | None = Field(None, ge=0)
    booked: int | None = Field(None, ge=0)
    status: str | None = Field(None, pattern=_STATUS_PATTERN)
    is_visible: bool | None = None
    sale_status: str | None = Field(None, pattern=_SALE_STATUS_PATTERN)

    @model_validator(mode="after")
    def check_dates(self) -> "PeriodUpdate":
        """If both dates are provided, validate end_date >= start_date."""
        if self.start_date is not None and self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BulkUpdateFields(BaseModel):
    """Exactly one of ``is_visible`` or ``sale_status``."""

    is_visible: bool | None = None
    sale_status: str | None = Field(None, pattern=_SALE_STATUS_PATTERN)

    @model_validator(mode="after")
    def check_single_kind(self) -> "BulkUpdateFields":
        provided = [name for name in ("is_visible", "sale_status") if getattr(self, name) is not None]
        if len(provided) != 1:
            raise ValueError("updates must set exactly one of is_visible or sale_status")
        return self


class BulkUpdateRequest(BaseModel):
    """Body of ``POST /tours/{tour_id}/periods/bulk-update``."""

    period_ids: list[uuid.UUID]
    updates: BulkUpdateFields


class MassPromoRequest(BaseModel):
    """Body of ``POST /tours/{tour_id}/periods/mass-update-promo``."""

    period_ids: list[uuid.UUID]
    promo_name: str = Field(..., min_length=1, max_length=255)
    promo_start_date: date | None = None
    promo_end_date: date | None = None
    promo_quota: int = Field(0, ge=0)


class MassDiscountRequest(BaseModel):
    """Body of ``POST /tours/{tour_id}/periods/mass-update-discount``."""

    period_ids: list[uuid.UUID]
    discount_adult: Decimal = Field(Decimal("0"), ge=0)
    discount_single: Decimal = Field(Decimal("0"), ge=0)
    discount_child_bed: Decimal = Field(Decimal("0"), ge=0)
    discount_child_nobed: Decimal = Field(Decimal("0"), ge=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class OfferResponse(BaseModel):
    """Priced configuration of a period."""

    id: uuid.UUID
    period_id: uuid.UUID
    currency: str
    price_adult: Decimal | None = None
    discount_adult: Decimal
    price_single: Decimal | None = None
    discount_single: Decimal
    price_child_bed: Decimal | None = None
    discount_child_bed: Decimal
    price_child_nobed: Decimal | None = None
    discount_child_nobed: Decimal
    price_infant: Decimal | None = None
    net_price_adult: Decimal | None = None
    net_price_single: Decimal | None = None
    deposit: Decimal | None = None
    cancellation_policy: str | None = None
    promo_name: str | None = None
    promo_start_date: date | None = None
    promo_end_date: date | None = None
    promo_quota: int | None = None
    promo_used: int

    model_config = ConfigDict(from_attributes=True)


class PeriodResponse(BaseModel):
    """Period with derived availability and its nested offer."""

    id: uuid.UUID
    tour_id: uuid.UUID
    period_code: str | None = None
    start_date: date
    end_date: date
    capacity: int
    booked: int
    available: int
    status: str
    is_visible: bool
    sale_status: str
    is_bookable: bool
    offer: OfferResponse | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PeriodListResponse(BaseModel):
    """List of a tour's periods."""

    items: list[PeriodResponse]
    total: int
    total_available: int


class BulkUpdateResponse(BaseModel):
    """Outcome of a bulk update; all selected periods or none are changed."""

    kind: str
    updated: int
    period_ids: list[uuid.UUID]
