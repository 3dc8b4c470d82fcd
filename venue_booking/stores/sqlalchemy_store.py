"""SQLAlchemy implementation of the venue and booking stores.

ORM rows never leave this module: every method translates to and from the
domain models in ``venue_booking.domain``.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import or_, select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.domain import Booking, BookingStatus, PricingRule, Venue, VisitRequest
from venue_booking.domain.errors import (
    AvailabilityUpdateWarning,
    BookingNotFoundError,
    BookingPermissionError,
    PersistenceError,
)
from venue_booking.models.booking import Booking as BookingRow
from venue_booking.models.venue import Venue as VenueRow
from venue_booking.models.venue import VenueAvailability, VenuePricingRule, VenueVisit
from venue_booking.stores.interfaces import BookingStore, VenueStore

logger = logging.getLogger(__name__)

# SQLSTATE 42501 is insufficient_privilege; row-level security violations report it too.
_PERMISSION_MARKERS = ("permission denied", "row-level security", "42501", "unauthorized")

PLACEHOLDER_VENUE = {
    "name": "Auto-Created Venue",
    "description": "This venue was created automatically to satisfy a booking reference",
    "location": "System Location",
    "capacity_min": 50,
    "capacity_max": 200,
    "base_price": Decimal("50000"),
    "price_per_hour": Decimal("5000"),
    "amenities": ["System Created"],
    "tags": ["System", "Auto-Created"],
    "images": [],
}


# ---------------------------------------------------------------------------
# Row <-> domain translation
# ---------------------------------------------------------------------------


def _to_venue(row: VenueRow) -> Venue:
    return Venue(
        id=row.id,
        name=row.name,
        location=row.location,
        capacity_min=row.capacity_min,
        capacity_max=row.capacity_max,
        base_price=row.base_price,
        is_placeholder=row.is_placeholder,
    )


def _to_rule(row: VenuePricingRule) -> PricingRule:
    return PricingRule.from_condition(row.rule_type, row.adjustment_type, row.adjustment_value, row.condition)


def _to_booking(row: BookingRow) -> Booking:
    return Booking(
        id=row.id,
        venue_id=row.venue_id,
        user_id=row.user_id,
        date=row.date,
        end_date=row.end_date,
        time_slot=row.time_slot,
        guest_count=row.guest_count,
        price=row.price,
        contact_name=row.contact_name,
        contact_email=row.contact_email,
        contact_phone=row.contact_phone,
        special_requests=row.special_requests,
        status=BookingStatus(row.status),
        idempotency_key=row.idempotency_key,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _is_permission_error(exc: DBAPIError) -> bool:
    text = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in text for marker in _PERMISSION_MARKERS)


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class SqlAlchemyVenueStore(VenueStore):
    """Venue store backed by the application's relational database."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_venue(self, venue_id: uuid.UUID) -> Venue | None:
        row = await self._session.get(VenueRow, venue_id)
        return _to_venue(row) if row is not None else None

    async def list_venues(self, location: str | None = None, min_guests: int | None = None) -> list[Venue]:
        query = select(VenueRow).where(VenueRow.is_placeholder.is_(False))
        if location:
            query = query.where(VenueRow.location.ilike(f"%{location}%"))
        if min_guests is not None:
            query = query.where(or_(VenueRow.capacity_max.is_(None), VenueRow.capacity_max >= min_guests))
        result = await self._session.execute(query.order_by(VenueRow.name))
        return [_to_venue(row) for row in result.scalars().all()]

    async def find_any_venue(self) -> Venue | None:
        result = await self._session.execute(select(VenueRow).order_by(VenueRow.created_at).limit(1))
        row = result.scalar_one_or_none()
        return _to_venue(row) if row is not None else None

    async def create_placeholder_venue(self, venue_id: uuid.UUID | None = None) -> Venue:
        row = VenueRow(id=venue_id or uuid.uuid4(), is_placeholder=True, **PLACEHOLDER_VENUE)
        self._session.add(row)
        await self._session.flush()
        logger.info("Created placeholder venue %s", row.id)
        return _to_venue(row)

    async def get_pricing_rules(self, venue_id: uuid.UUID) -> list[PricingRule]:
        result = await self._session.execute(
            select(VenuePricingRule)
            .where(VenuePricingRule.venue_id == venue_id)
            .order_by(VenuePricingRule.created_at)
        )
        return [_to_rule(row) for row in result.scalars().all()]

    async def add_pricing_rule(self, venue_id: uuid.UUID, rule: PricingRule) -> PricingRule:
        row = VenuePricingRule(
            venue_id=venue_id,
            rule_type=rule.kind.value,
            adjustment_type=rule.adjustment_type.value,
            adjustment_value=rule.adjustment_value,
            condition=rule.condition,
        )
        self._session.add(row)
        await self._session.flush()
        return rule

    async def get_availability(
        self,
        venue_id: uuid.UUID,
        start: date | None = None,
        end: date | None = None,
    ) -> dict[date, bool]:
        query = select(VenueAvailability).where(VenueAvailability.venue_id == venue_id)
        if start is not None:
            query = query.where(VenueAvailability.date >= start)
        if end is not None:
            query = query.where(VenueAvailability.date <= end)
        result = await self._session.execute(query.order_by(VenueAvailability.date))
        return {row.date: row.is_available for row in result.scalars().all()}

    async def upsert_availability(self, venue_id: uuid.UUID, day: date, is_available: bool) -> None:
        try:
            async with self._session.begin_nested():
                result = await self._session.execute(
                    select(VenueAvailability).where(
                        VenueAvailability.venue_id == venue_id,
                        VenueAvailability.date == day,
                    )
                )
                row = result.scalar_one_or_none()
                if row is None:
                    self._session.add(VenueAvailability(venue_id=venue_id, date=day, is_available=is_available))
                else:
                    row.is_available = is_available
        except SQLAlchemyError as exc:
            logger.debug("Availability upsert failed for venue %s on %s: %s", venue_id, day, exc)
            raise AvailabilityUpdateWarning(str(venue_id), day.isoformat()) from exc

    async def add_visit_request(self, visit: VisitRequest) -> VisitRequest:
        row = VenueVisit(
            venue_id=visit.venue_id,
            user_id=visit.user_id,
            name=visit.name,
            email=visit.email,
            phone=visit.phone,
            preferred_date=visit.preferred_date,
            preferred_time=visit.preferred_time,
            notes=visit.notes,
            status=visit.status,
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return VisitRequest(
            id=row.id,
            venue_id=row.venue_id,
            user_id=row.user_id,
            name=row.name,
            email=row.email,
            phone=row.phone,
            preferred_date=row.preferred_date,
            preferred_time=row.preferred_time,
            notes=row.notes,
            status=row.status,
            created_at=row.created_at,
        )


class SqlAlchemyBookingStore(BookingStore):
    """Booking store backed by the application's relational database."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def insert_booking(self, booking: Booking) -> uuid.UUID:
        row = BookingRow(
            id=booking.id or uuid.uuid4(),
            venue_id=booking.venue_id,
            user_id=booking.user_id,
            date=booking.date,
            end_date=booking.end_date,
            time_slot=booking.time_slot,
            guest_count=booking.guest_count,
            price=booking.price,
            contact_name=booking.contact_name,
            contact_email=booking.contact_email,
            contact_phone=booking.contact_phone,
            special_requests=booking.special_requests,
            status=booking.status.value,
            idempotency_key=booking.idempotency_key,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
        except DBAPIError as exc:
            if _is_permission_error(exc):
                raise BookingPermissionError() from exc
            raise PersistenceError(f"Failed to create booking: {exc.orig or exc}") from exc
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to create booking: {exc}") from exc
        # Load server-side timestamps while we are still in an awaitable context
        await self._session.refresh(row)
        return row.id

    async def get_booking(self, booking_id: uuid.UUID) -> Booking | None:
        row = await self._session.get(BookingRow, booking_id)
        return _to_booking(row) if row is not None else None

    async def find_bookings_by_user(self, user_id: uuid.UUID) -> list[Booking]:
        result = await self._session.execute(
            select(BookingRow)
            .where(BookingRow.user_id == user_id)
            .order_by(BookingRow.created_at.desc(), BookingRow.date.desc())
        )
        return [_to_booking(row) for row in result.scalars().all()]

    async def find_booking_by_idempotency_key(self, user_id: uuid.UUID, key: str) -> Booking | None:
        result = await self._session.execute(
            select(BookingRow).where(BookingRow.user_id == user_id, BookingRow.idempotency_key == key)
        )
        row = result.scalar_one_or_none()
        return _to_booking(row) if row is not None else None

    async def update_booking_status(self, booking_id: uuid.UUID, status: BookingStatus) -> Booking:
        row = await self._session.get(BookingRow, booking_id)
        if row is None:
            raise BookingNotFoundError(str(booking_id))
        row.status = status.value
        await self._session.flush()
        await self._session.refresh(row)
        return _to_booking(row)
