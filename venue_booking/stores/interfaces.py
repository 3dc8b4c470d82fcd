"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Services depend only on
these interfaces and never on which backend is behind them.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import date

from venue_booking.domain import Booking, BookingStatus, PricingRule, Venue, VisitRequest


class VenueStore(ABC):
    """Interface for venue, pricing rule, and availability persistence."""

    @abstractmethod
    async def get_venue(self, venue_id: uuid.UUID) -> Venue | None:
        """Return a venue by ID, or None if not found."""
        ...

    @abstractmethod
    async def list_venues(self, location: str | None = None, min_guests: int | None = None) -> list[Venue]:
        """Return venues ordered by name, optionally filtered."""
        ...

    @abstractmethod
    async def find_any_venue(self) -> Venue | None:
        """Return some existing venue, or None if there are none."""
        ...

    @abstractmethod
    async def create_placeholder_venue(self, venue_id: uuid.UUID | None = None) -> Venue:
        """Create a synthetic venue so that a booking reference can be satisfied."""
        ...

    @abstractmethod
    async def get_pricing_rules(self, venue_id: uuid.UUID) -> list[PricingRule]:
        """Return the pricing rules configured for a venue."""
        ...

    @abstractmethod
    async def add_pricing_rule(self, venue_id: uuid.UUID, rule: PricingRule) -> PricingRule:
        """Attach a new pricing rule to a venue."""
        ...

    @abstractmethod
    async def get_availability(
        self,
        venue_id: uuid.UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> dict[date, bool]:
        """Return the recorded availability flags for a venue.

        Dates without a record are absent from the result and count as available.
        """
        ...

    @abstractmethod
    async def upsert_availability(self, venue_id: uuid.UUID, day: date, is_available: bool) -> None:
        """Create or update the availability flag for one venue and day.

        Raises:
            AvailabilityUpdateWarning: If the flag could not be written.
        """
        ...

    @abstractmethod
    async def add_visit_request(self, visit: VisitRequest) -> VisitRequest:
        """Persist a venue visit request and return it with its ID."""
        ...


class BookingStore(ABC):
    """Interface for booking persistence."""

    @abstractmethod
    async def insert_booking(self, booking: Booking) -> uuid.UUID:
        """Persist a new booking and return its ID.

        Raises:
            BookingPermissionError: If the store refuses the write on policy grounds.
            PersistenceError: If the write fails for any other reason.
        """
        ...

    @abstractmethod
    async def get_booking(self, booking_id: uuid.UUID) -> Booking | None:
        """Return a booking by ID, or None if not found."""
        ...

    @abstractmethod
    async def find_bookings_by_user(self, user_id: uuid.UUID) -> list[Booking]:
        """Return all bookings of a user, newest first."""
        ...

    @abstractmethod
    async def find_booking_by_idempotency_key(self, user_id: uuid.UUID, key: str) -> Booking | None:
        """Return the booking a user previously submitted with this key, if any."""
        ...

    @abstractmethod
    async def update_booking_status(self, booking_id: uuid.UUID, status: BookingStatus) -> Booking:
        """Set the status of an existing booking and return the updated booking."""
        ...
