"""Bookings API router.

Ownership rule: a user only sees and cancels their own bookings. Status
changes other than cancellation are reserved for administrators.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Header, status

from venue_booking.api.deps import get_booking_coordinator, get_current_active_user, get_current_admin
from venue_booking.domain import BookingInput, BookingStatus
from venue_booking.models.user import User
from venue_booking.schemas.booking import (
    BookingCreate,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from venue_booking.services.booking_service import BookingCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a booking",
)
async def create_booking(
    body: BookingCreate,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key", max_length=255),
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
    current_user: User = Depends(get_current_active_user),
) -> BookingEnvelope:
    """Create a pending booking for the current user.

    Sending the same ``Idempotency-Key`` again returns the original booking
    instead of creating a second one.
    """
    logger.info("Booking submission from user %s for venue %s", current_user.id, body.venue_id)
    booking = await coordinator.place_booking(
        BookingInput(user_id=current_user.id, **body.model_dump()),
        idempotency_key=idempotency_key,
    )
    return BookingEnvelope(booking=BookingResponse.model_validate(booking))


@router.get("", response_model=BookingListResponse, summary="List the current user's bookings")
async def list_bookings(
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
    current_user: User = Depends(get_current_active_user),
) -> BookingListResponse:
    bookings = await coordinator.list_bookings(current_user.id)
    return BookingListResponse(
        items=[BookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/{booking_id}", response_model=BookingEnvelope, summary="Get one of the current user's bookings")
async def get_booking(
    booking_id: uuid.UUID,
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
    current_user: User = Depends(get_current_active_user),
) -> BookingEnvelope:
    booking = await coordinator.get_booking(booking_id, current_user.id)
    return BookingEnvelope(booking=BookingResponse.model_validate(booking))


@router.post("/{booking_id}/cancel", response_model=BookingEnvelope, summary="Cancel a booking")
async def cancel_booking(
    booking_id: uuid.UUID,
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
    current_user: User = Depends(get_current_active_user),
) -> BookingEnvelope:
    """Cancel one of the current user's bookings. Cancelling again is harmless."""
    booking = await coordinator.cancel_booking(booking_id, current_user.id)
    return BookingEnvelope(booking=BookingResponse.model_validate(booking))


@router.patch("/{booking_id}/status", response_model=BookingEnvelope, summary="Change booking status (admin)")
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
    admin: User = Depends(get_current_admin),
) -> BookingEnvelope:
    booking = await coordinator.update_status(booking_id, BookingStatus(body.status))
    logger.info("Admin %s set booking %s to %s", admin.id, booking_id, body.status)
    return BookingEnvelope(booking=BookingResponse.model_validate(booking))
