"""Pydantic v2 request/response schemas for booking endpoints."""

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from venue_booking.domain import BookingStatus

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for submitting a booking.

    Required fields are optional at this layer so that the booking
    coordinator reports every missing field in one validation error.
    ``venue_id`` is kept as a string; legacy clients send numeric ids, which
    are accepted and converted.
    """

    venue_id: str | None = None
    date: datetime.date | None = None
    end_date: datetime.date | None = None
    time_slot: str = Field("full-day", max_length=50)
    guest_count: int | None = None
    price: Decimal | None = None
    contact_name: str | None = Field(None, max_length=255)
    contact_email: str | None = Field(None, max_length=255)
    contact_phone: str | None = Field(None, max_length=50)
    special_requests: str | None = None

    @field_validator("venue_id", mode="before")
    @classmethod
    def _numeric_venue_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class BookingStatusUpdate(BaseModel):
    """Schema for an administrative status change."""

    status: str = Field(..., pattern="^(pending|confirmed|cancelled)$")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    venue_id: uuid.UUID
    user_id: uuid.UUID
    date: datetime.date
    end_date: datetime.date | None = None
    time_slot: str
    guest_count: int
    price: Decimal
    contact_name: str
    contact_email: str
    contact_phone: str
    special_requests: str | None = None
    status: BookingStatus
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class BookingEnvelope(BaseModel):
    """Single booking wrapped the way the frontend expects it."""

    booking: BookingResponse


class BookingListResponse(BaseModel):
    """Bookings of the current user, newest first."""

    items: list[BookingResponse]
    total: int
