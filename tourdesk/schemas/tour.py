"""Pydantic v2 request/response schemas for tour endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TourCreate(BaseModel):
    """Schema for creating a new tour."""

    tour_code: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    duration_days: int = Field(1, ge=1)
    duration_nights: int = Field(0, ge=0)
    status: str = Field("active", pattern="^(active|draft|inactive)$")


class TourUpdate(BaseModel):
    """Schema for partially updating a tour. All fields optional."""

    tour_code: str | None = Field(None, min_length=1, max_length=50)
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    duration_days: int | None = Field(None, ge=1)
    duration_nights: int | None = Field(None, ge=0)
    status: str | None = Field(None, pattern="^(active|draft|inactive)$")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TourResponse(BaseModel):
    """Public tour information returned from the API."""

    id: uuid.UUID
    tour_code: str
    title: str
    description: str | None = None
    duration_days: int
    duration_nights: int
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TourListResponse(BaseModel):
    """Paginated list of tours."""

    items: list[TourResponse]
    total: int
