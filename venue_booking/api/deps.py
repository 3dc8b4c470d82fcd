"""Shared API dependencies — single import point for all routers.

Re-exports database session and authentication dependencies, and wires the
SQLAlchemy stores into the booking coordinator for each request::

    from venue_booking.api.deps import get_db, get_current_active_user
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from venue_booking.auth.dependencies import get_current_active_user, get_current_admin, get_current_user
from venue_booking.config import settings
from venue_booking.database import get_db
from venue_booking.services.booking_service import BookingCoordinator
from venue_booking.services.venue_resolver import VenueResolver
from venue_booking.stores.interfaces import VenueStore
from venue_booking.stores.sqlalchemy_store import SqlAlchemyBookingStore, SqlAlchemyVenueStore


async def get_venue_store(db: AsyncSession = Depends(get_db)) -> VenueStore:
    """Venue store bound to the request's session."""
    return SqlAlchemyVenueStore(db)


async def get_booking_coordinator(db: AsyncSession = Depends(get_db)) -> BookingCoordinator:
    """Booking coordinator bound to the request's session and configured shims."""
    venues = SqlAlchemyVenueStore(db)
    resolver = VenueResolver(
        venues,
        fallback=settings.venue_reference_fallback,
        legacy_ids=settings.legacy_venue_ids,
    )
    return BookingCoordinator(
        venues,
        SqlAlchemyBookingStore(db),
        resolver=resolver,
        tolerate_permission_errors=settings.tolerate_booking_permission_errors,
    )


__all__ = [
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_current_admin",
    "get_venue_store",
    "get_booking_coordinator",
]
