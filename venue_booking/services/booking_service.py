"""Booking coordinator — all booking business logic lives here.

Submission is one sequential pipeline:

1. validate the request;
2. resolve the venue reference;
3. check capacity and compute the price;
4. persist the booking as pending;
5. mark every booked day unavailable.

Only step 4 has to succeed. Availability failures are logged and dropped;
the booking stands without them. Nothing wraps steps 4 and 5 in a single
transaction, and two submissions for the same venue and day can both
succeed.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal

from venue_booking.domain import Booking, BookingInput, BookingStatus, PriceBreakdown, Venue
from venue_booking.domain.errors import (
    AvailabilityUpdateWarning,
    BookingNotFoundError,
    BookingPermissionError,
    InvalidRangeError,
    InvalidStatusTransitionError,
    ValidationError,
    VenueNotFoundError,
)
from venue_booking.domain.pricing import booked_dates, compute_price
from venue_booking.services.venue_resolver import VenueResolver
from venue_booking.stores.interfaces import BookingStore, VenueStore

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("venue_id", "date", "guest_count", "contact_name", "contact_email", "contact_phone")


def validate_booking_input(data: BookingInput) -> None:
    """Check that a booking request is complete and internally consistent.

    Raises:
        ValidationError: If a required field is missing or a value is out of range.
        InvalidRangeError: If ``end_date`` is before ``date``.
    """
    missing = []
    for name in _REQUIRED_FIELDS:
        value = getattr(data, name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)
    if missing:
        raise ValidationError(f"Missing required booking information: {', '.join(missing)}")

    if data.guest_count < 1:
        raise ValidationError("guest_count must be at least 1")
    if data.end_date is not None and data.end_date < data.date:
        raise InvalidRangeError()
    if data.price is not None and data.price < 0:
        raise ValidationError("price must not be negative")


class BookingCoordinator:
    """Service for pricing, submitting, listing, and cancelling venue bookings."""

    def __init__(
        self,
        venues: VenueStore,
        bookings: BookingStore,
        *,
        resolver: VenueResolver | None = None,
        tolerate_permission_errors: bool = False,
    ) -> None:
        self._venues = venues
        self._bookings = bookings
        self._resolver = resolver or VenueResolver(venues)
        self._tolerate_permission_errors = tolerate_permission_errors

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    async def estimate_price(
        self,
        venue_id: uuid.UUID,
        start_date: date,
        end_date: date | None,
        guest_count: int,
    ) -> PriceBreakdown:
        """Price a prospective booking for display.

        Raises:
            VenueNotFoundError: If the venue does not exist.
            ValidationError: If the venue has no base price or the input is invalid.
        """
        venue = await self._venues.get_venue(venue_id)
        if venue is None:
            raise VenueNotFoundError(str(venue_id))
        if venue.base_price is None:
            raise ValidationError("This venue has no pricing information")
        rules = await self._venues.get_pricing_rules(venue.id)
        return compute_price(venue.base_price, rules, start_date, end_date, guest_count)

    async def _booking_price(self, venue: Venue, data: BookingInput) -> Decimal:
        if venue.base_price is not None and venue.base_price > 0:
            rules = await self._venues.get_pricing_rules(venue.id)
            breakdown = compute_price(venue.base_price, rules, data.date, data.end_date, data.guest_count)
            if data.price is not None and data.price != breakdown.total_price:
                logger.warning(
                    "Submitted price %s for venue %s differs from computed price %s; using computed price",
                    data.price,
                    venue.id,
                    breakdown.total_price,
                )
            return breakdown.total_price

        if data.price is not None:
            logger.warning("Venue %s has no pricing data; using submitted price %s", venue.id, data.price)
            return data.price

        raise ValidationError("Price could not be determined for this venue")

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit_booking(self, data: BookingInput, *, idempotency_key: str | None = None) -> uuid.UUID:
        """Create a pending booking and mark its days unavailable.

        Returns:
            The ID of the new booking, or of the booking previously created
            with the same ``idempotency_key`` by the same user.

        Raises:
            ValidationError: If the request is incomplete, out of range, or exceeds capacity.
            VenueNotFoundError: If the venue reference cannot be resolved.
            PersistenceError: If the booking could not be saved.
        """
        booking = await self.place_booking(data, idempotency_key=idempotency_key)
        return booking.id

    async def place_booking(self, data: BookingInput, *, idempotency_key: str | None = None) -> Booking:
        """Same pipeline as :meth:`submit_booking`, returning the whole booking.

        When the store refused the write and refusals are tolerated, the
        returned booking carries a placeholder id and was never saved.
        """
        validate_booking_input(data)

        if idempotency_key:
            existing = await self._bookings.find_booking_by_idempotency_key(data.user_id, idempotency_key)
            if existing is not None:
                logger.info("Replayed booking submission %s for user %s", existing.id, data.user_id)
                return existing

        venue = await self._resolver.resolve(data.venue_id)
        self._check_capacity(venue, data.guest_count)
        price = await self._booking_price(venue, data)

        booking = Booking(
            venue_id=venue.id,
            user_id=data.user_id,
            date=data.date,
            end_date=data.end_date,
            time_slot=data.time_slot,
            guest_count=data.guest_count,
            price=price,
            contact_name=data.contact_name.strip(),
            contact_email=data.contact_email.strip(),
            contact_phone=data.contact_phone.strip(),
            special_requests=data.special_requests,
            status=BookingStatus.PENDING,
            idempotency_key=idempotency_key,
        )

        try:
            booking_id = await self._bookings.insert_booking(booking)
        except BookingPermissionError:
            if not self._tolerate_permission_errors:
                raise
            booking.id = uuid.uuid4()
            logger.warning(
                "Booking store refused booking for venue %s; returning placeholder id %s",
                venue.id,
                booking.id,
            )
            return booking

        logger.info("Created booking %s for venue %s on %s", booking_id, venue.id, data.date)
        await self._mark_unavailable(venue.id, data.date, data.end_date, booking_id)

        stored = await self._bookings.get_booking(booking_id)
        if stored is None:
            booking.id = booking_id
            return booking
        return stored

    @staticmethod
    def _check_capacity(venue: Venue, guest_count: int) -> None:
        if venue.capacity_min is not None and guest_count < venue.capacity_min:
            raise ValidationError(f"This venue requires at least {venue.capacity_min} guests")
        if venue.capacity_max is not None and guest_count > venue.capacity_max:
            raise ValidationError(f"This venue holds at most {venue.capacity_max} guests")

    async def _mark_unavailable(
        self,
        venue_id: uuid.UUID,
        start_date: date,
        end_date: date | None,
        booking_id: uuid.UUID,
    ) -> None:
        for day in booked_dates(start_date, end_date):
            try:
                await self._venues.upsert_availability(venue_id, day, False)
            except AvailabilityUpdateWarning as warning:
                logger.warning("%s (booking %s kept)", warning.message, booking_id)

    # ------------------------------------------------------------------
    # Queries and status changes
    # ------------------------------------------------------------------

    async def list_bookings(self, user_id: uuid.UUID) -> list[Booking]:
        """Return the user's bookings, newest first."""
        return await self._bookings.find_bookings_by_user(user_id)

    async def get_booking(self, booking_id: uuid.UUID, user_id: uuid.UUID) -> Booking:
        """Return a booking owned by the user.

        Raises:
            BookingNotFoundError: If it does not exist or belongs to someone else.
        """
        booking = await self._bookings.get_booking(booking_id)
        if booking is None or booking.user_id != user_id:
            raise BookingNotFoundError(str(booking_id))
        return booking

    async def cancel_booking(self, booking_id: uuid.UUID, user_id: uuid.UUID) -> Booking:
        """Cancel a booking owned by the user. Cancelling twice is a no-op."""
        booking = await self.get_booking(booking_id, user_id)
        if booking.status is BookingStatus.CANCELLED:
            return booking
        logger.info("Cancelling booking %s for user %s", booking_id, user_id)
        return await self._bookings.update_booking_status(booking_id, BookingStatus.CANCELLED)

    async def update_status(self, booking_id: uuid.UUID, status: BookingStatus) -> Booking:
        """Administrative status change. Cancelled bookings cannot be reopened.

        Raises:
            BookingNotFoundError: If the booking does not exist.
            InvalidStatusTransitionError: If the booking is cancelled and ``status`` is not.
        """
        booking = await self._bookings.get_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(str(booking_id))
        if booking.status is status:
            return booking
        if booking.status is BookingStatus.CANCELLED:
            raise InvalidStatusTransitionError(booking.status.value, status.value)
        logger.info("Booking %s status %s -> %s", booking_id, booking.status.value, status.value)
        return await self._bookings.update_booking_status(booking_id, status)
