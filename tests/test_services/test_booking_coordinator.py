"""Tests for the booking coordinator, using in-memory stores."""

import logging
import uuid
from datetime import date
from decimal import Decimal

import pytest

from venue_booking.domain import AdjustmentType, BookingInput, BookingStatus, PricingRule, RuleKind, Venue
from venue_booking.domain.errors import (
    BookingNotFoundError,
    BookingPermissionError,
    ErrorCode,
    InvalidRangeError,
    InvalidStatusTransitionError,
    PersistenceError,
    ValidationError,
    VenueNotFoundError,
)
from venue_booking.services.booking_service import BookingCoordinator, validate_booking_input
from venue_booking.services.venue_resolver import VenueResolver

USER_ID = uuid.uuid4()


def _venue(**overrides) -> Venue:
    defaults = dict(
        id=uuid.uuid4(),
        name="Lakeside Lawn",
        location="Udaipur",
        capacity_min=50,
        capacity_max=300,
        base_price=Decimal("100000"),
    )
    defaults.update(overrides)
    return Venue(**defaults)


def _input(venue_id, **overrides) -> BookingInput:
    defaults = dict(
        user_id=USER_ID,
        venue_id=str(venue_id) if venue_id is not None else None,
        date=date(2023, 12, 1),
        guest_count=150,
        contact_name="Asha Rao",
        contact_email="asha@example.com",
        contact_phone="+91 98200 00000",
    )
    defaults.update(overrides)
    return BookingInput(**defaults)


@pytest.fixture
def venue(venue_store) -> Venue:
    return venue_store.add(
        _venue(),
        [
            PricingRule(RuleKind.SEASONAL, AdjustmentType.PERCENTAGE, Decimal("20"), months=frozenset({12})),
            PricingRule(RuleKind.GUEST_COUNT, AdjustmentType.FLAT, Decimal("100"), per_guest_above=100),
        ],
    )


@pytest.fixture
def coordinator(venue_store, booking_store) -> BookingCoordinator:
    return BookingCoordinator(venue_store, booking_store)


class TestValidateBookingInput:
    """Test required-field and range validation."""

    def test_complete_input_passes(self):
        validate_booking_input(_input(uuid.uuid4()))

    def test_missing_contact_email(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_booking_input(_input(uuid.uuid4(), contact_email=None))
        assert "contact_email" in exc_info.value.message

    def test_blank_strings_count_as_missing(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_booking_input(_input(uuid.uuid4(), contact_name="   ", contact_phone=""))
        assert "contact_name" in exc_info.value.message
        assert "contact_phone" in exc_info.value.message

    def test_missing_venue_and_date(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_booking_input(_input(None, date=None))
        assert "venue_id" in exc_info.value.message
        assert "date" in exc_info.value.message

    def test_zero_guests_rejected(self):
        with pytest.raises(ValidationError):
            validate_booking_input(_input(uuid.uuid4(), guest_count=0))

    def test_end_before_start_rejected(self):
        with pytest.raises(InvalidRangeError):
            validate_booking_input(_input(uuid.uuid4(), end_date=date(2023, 11, 30)))

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            validate_booking_input(_input(uuid.uuid4(), price=Decimal("-1")))


class TestSubmitBooking:
    """Test the booking submission pipeline."""

    async def test_creates_one_pending_booking(self, coordinator, booking_store, venue):
        booking_id = await coordinator.submit_booking(_input(venue.id))

        assert booking_id
        assert list(booking_store.bookings) == [booking_id]
        stored = booking_store.bookings[booking_id]
        assert stored.status is BookingStatus.PENDING
        assert stored.venue_id == venue.id
        assert stored.user_id == USER_ID

    async def test_price_is_computed_from_rules(self, coordinator, venue):
        booking = await coordinator.place_booking(_input(venue.id))
        # 100000 base + 20% December + 50 guests over 100 at 100 each
        assert booking.price == Decimal("125000")

    async def test_computed_price_wins_over_submitted_price(self, coordinator, venue, caplog):
        with caplog.at_level(logging.WARNING, logger="venue_booking.services.booking_service"):
            booking = await coordinator.place_booking(_input(venue.id, price=Decimal("1")))
        assert booking.price == Decimal("125000")
        assert "differs from computed price" in caplog.text

    async def test_submitted_price_used_without_pricing_data(self, venue_store, coordinator, caplog):
        unpriced = venue_store.add(_venue(base_price=None))
        with caplog.at_level(logging.WARNING, logger="venue_booking.services.booking_service"):
            booking = await coordinator.place_booking(_input(unpriced.id, price=Decimal("88000")))
        assert booking.price == Decimal("88000")
        assert "no pricing data" in caplog.text

    async def test_no_price_at_all_is_rejected(self, venue_store, booking_store, coordinator):
        unpriced = venue_store.add(_venue(base_price=None))
        with pytest.raises(ValidationError):
            await coordinator.submit_booking(_input(unpriced.id))
        assert booking_store.bookings == {}

    async def test_missing_contact_email_creates_nothing(self, coordinator, booking_store, venue_store, venue):
        with pytest.raises(ValidationError):
            await coordinator.submit_booking(_input(venue.id, contact_email=None))
        assert booking_store.bookings == {}
        assert venue_store.availability == {}

    async def test_capacity_bounds(self, coordinator, booking_store, venue):
        with pytest.raises(ValidationError):
            await coordinator.submit_booking(_input(venue.id, guest_count=10))
        with pytest.raises(ValidationError):
            await coordinator.submit_booking(_input(venue.id, guest_count=301))
        assert booking_store.bookings == {}

    async def test_contact_fields_are_trimmed(self, coordinator, venue):
        booking = await coordinator.place_booking(_input(venue.id, contact_name="  Asha Rao "))
        assert booking.contact_name == "Asha Rao"

    async def test_single_day_marks_date_unavailable(self, coordinator, venue_store, venue):
        await coordinator.submit_booking(_input(venue.id))
        availability = await venue_store.get_availability(venue.id)
        assert availability == {date(2023, 12, 1): False}
        assert len(venue_store.upserts) == 1

    async def test_multi_day_marks_every_day(self, coordinator, venue_store, venue):
        await coordinator.submit_booking(_input(venue.id, end_date=date(2023, 12, 3)))
        availability = await venue_store.get_availability(venue.id)
        assert availability == {
            date(2023, 12, 1): False,
            date(2023, 12, 2): False,
            date(2023, 12, 3): False,
        }
        assert venue_store.upserts == [
            (venue.id, date(2023, 12, 1), False),
            (venue.id, date(2023, 12, 2), False),
            (venue.id, date(2023, 12, 3), False),
        ]

    async def test_availability_failure_keeps_booking(self, coordinator, venue_store, booking_store, venue, caplog):
        venue_store.fail_availability = True
        with caplog.at_level(logging.WARNING, logger="venue_booking.services.booking_service"):
            booking_id = await coordinator.submit_booking(_input(venue.id, end_date=date(2023, 12, 2)))
        assert booking_id in booking_store.bookings
        assert caplog.text.count("Could not update availability") == 2

    async def test_duplicate_dates_both_succeed(self, coordinator, booking_store, venue):
        """Without an idempotency key nothing stops a second booking of the same day."""
        first = await coordinator.submit_booking(_input(venue.id))
        second = await coordinator.submit_booking(_input(venue.id))
        assert first != second
        assert len(booking_store.bookings) == 2


class TestIdempotency:
    """Test replay of submissions carrying an idempotency key."""

    async def test_same_key_returns_same_booking(self, coordinator, booking_store, venue):
        first = await coordinator.submit_booking(_input(venue.id), idempotency_key="abc")
        second = await coordinator.submit_booking(_input(venue.id), idempotency_key="abc")
        assert first == second
        assert len(booking_store.bookings) == 1

    async def test_different_keys_create_two(self, coordinator, booking_store, venue):
        await coordinator.submit_booking(_input(venue.id), idempotency_key="abc")
        await coordinator.submit_booking(_input(venue.id), idempotency_key="def")
        assert len(booking_store.bookings) == 2

    async def test_keys_are_scoped_per_user(self, coordinator, booking_store, venue):
        await coordinator.submit_booking(_input(venue.id), idempotency_key="abc")
        await coordinator.submit_booking(_input(venue.id, user_id=uuid.uuid4()), idempotency_key="abc")
        assert len(booking_store.bookings) == 2


class TestVenueResolution:
    """Test strict and compatibility venue resolution through the coordinator."""

    async def test_unknown_venue_strict(self, coordinator, booking_store, venue):
        with pytest.raises(VenueNotFoundError):
            await coordinator.submit_booking(_input(uuid.uuid4()))
        assert booking_store.bookings == {}

    async def test_malformed_venue_strict(self, coordinator, venue):
        with pytest.raises(VenueNotFoundError):
            await coordinator.submit_booking(_input("42"))

    async def test_unknown_venue_with_fallback_creates_placeholder(self, venue_store, booking_store):
        coordinator = BookingCoordinator(
            venue_store, booking_store, resolver=VenueResolver(venue_store, fallback=True)
        )
        venue_id = uuid.uuid4()
        booking = await coordinator.place_booking(_input(venue_id))
        assert booking.venue_id == venue_id
        assert venue_store.venues[venue_id].is_placeholder


class TestPermissionErrors:
    """Test the store refusing a booking on permission grounds."""

    async def test_propagates_by_default(self, coordinator, booking_store, venue_store, venue):
        booking_store.insert_error = BookingPermissionError()
        with pytest.raises(PersistenceError) as exc_info:
            await coordinator.submit_booking(_input(venue.id))
        assert exc_info.value.code is ErrorCode.PERMISSION_DENIED
        assert venue_store.availability == {}

    async def test_tolerated_returns_placeholder_id(self, venue_store, booking_store, venue, caplog):
        booking_store.insert_error = BookingPermissionError()
        coordinator = BookingCoordinator(venue_store, booking_store, tolerate_permission_errors=True)
        with caplog.at_level(logging.WARNING, logger="venue_booking.services.booking_service"):
            booking = await coordinator.place_booking(_input(venue.id))
        assert isinstance(booking.id, uuid.UUID)
        assert booking.status is BookingStatus.PENDING
        assert booking_store.bookings == {}
        assert venue_store.availability == {}
        assert "placeholder id" in caplog.text

    async def test_other_persistence_errors_always_propagate(self, venue_store, booking_store, venue):
        booking_store.insert_error = PersistenceError("disk full")
        coordinator = BookingCoordinator(venue_store, booking_store, tolerate_permission_errors=True)
        with pytest.raises(PersistenceError):
            await coordinator.submit_booking(_input(venue.id))


class TestEstimatePrice:
    """Test price estimates for display."""

    async def test_estimate(self, coordinator, venue):
        breakdown = await coordinator.estimate_price(venue.id, date(2023, 12, 1), date(2023, 12, 3), 150)
        assert breakdown.day_count == 3
        assert breakdown.base_price == Decimal("300000")
        assert breakdown.seasonal_adjustment == Decimal("60000")
        assert breakdown.guest_price == Decimal("5000")
        assert breakdown.total_price == Decimal("365000")

    async def test_unknown_venue(self, coordinator, venue_store):
        with pytest.raises(VenueNotFoundError):
            await coordinator.estimate_price(uuid.uuid4(), date(2023, 12, 1), None, 10)
        assert venue_store.venues == {}

    async def test_venue_without_price(self, coordinator, venue_store):
        unpriced = venue_store.add(_venue(base_price=None))
        with pytest.raises(ValidationError):
            await coordinator.estimate_price(unpriced.id, date(2023, 12, 1), None, 10)


class TestCancelAndStatus:
    """Test cancellation and administrative status changes."""

    async def test_cancel_sets_cancelled(self, coordinator, venue):
        booking_id = await coordinator.submit_booking(_input(venue.id))
        cancelled = await coordinator.cancel_booking(booking_id, USER_ID)
        assert cancelled.status is BookingStatus.CANCELLED

    async def test_cancel_twice_is_idempotent(self, coordinator, venue):
        booking_id = await coordinator.submit_booking(_input(venue.id))
        await coordinator.cancel_booking(booking_id, USER_ID)
        again = await coordinator.cancel_booking(booking_id, USER_ID)
        assert again.status is BookingStatus.CANCELLED

    async def test_cancel_other_users_booking(self, coordinator, booking_store, venue):
        booking_id = await coordinator.submit_booking(_input(venue.id))
        with pytest.raises(BookingNotFoundError):
            await coordinator.cancel_booking(booking_id, uuid.uuid4())
        assert booking_store.bookings[booking_id].status is BookingStatus.PENDING

    async def test_cancel_unknown_booking(self, coordinator):
        with pytest.raises(BookingNotFoundError):
            await coordinator.cancel_booking(uuid.uuid4(), USER_ID)

    async def test_confirm(self, coordinator, venue):
        booking_id = await coordinator.submit_booking(_input(venue.id))
        booking = await coordinator.update_status(booking_id, BookingStatus.CONFIRMED)
        assert booking.status is BookingStatus.CONFIRMED

    async def test_cancelled_cannot_be_reopened(self, coordinator, venue):
        booking_id = await coordinator.submit_booking(_input(venue.id))
        await coordinator.cancel_booking(booking_id, USER_ID)
        with pytest.raises(InvalidStatusTransitionError):
            await coordinator.update_status(booking_id, BookingStatus.CONFIRMED)

    async def test_same_status_is_noop(self, coordinator, venue):
        booking_id = await coordinator.submit_booking(_input(venue.id))
        booking = await coordinator.update_status(booking_id, BookingStatus.PENDING)
        assert booking.status is BookingStatus.PENDING

    async def test_update_unknown_booking(self, coordinator):
        with pytest.raises(BookingNotFoundError):
            await coordinator.update_status(uuid.uuid4(), BookingStatus.CONFIRMED)

    async def test_list_only_own_bookings(self, coordinator, venue):
        mine = await coordinator.submit_booking(_input(venue.id))
        await coordinator.submit_booking(_input(venue.id, user_id=uuid.uuid4()))
        bookings = await coordinator.list_bookings(USER_ID)
        assert [b.id for b in bookings] == [mine]
