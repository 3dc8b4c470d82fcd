"""Shared test configuration and fixtures.

Each test gets a fresh in-memory SQLite database (aiosqlite driver) with all
tables created, so tests never share rows and need no external server.
"""

import uuid
from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from venue_booking.auth.jwt import create_token_pair
from venue_booking.auth.passwords import hash_password
from venue_booking.database import Base, get_db
from venue_booking.domain import Booking, BookingStatus, PricingRule, Venue, VisitRequest
from venue_booking.domain.errors import AvailabilityUpdateWarning, BookingNotFoundError
from venue_booking.main import app
from venue_booking.models.user import User
from venue_booking.models.venue import Venue as VenueRow
from venue_booking.models.venue import VenuePricingRule
from venue_booking.stores.interfaces import BookingStore, VenueStore

# ---------------------------------------------------------------------------
# Per-test database: one in-memory SQLite connection shared through StaticPool
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session on the per-test database."""
    session = AsyncSession(bind=test_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: users and tokens
# ---------------------------------------------------------------------------


async def _create_user(db_session: AsyncSession, *, role: str = "customer", is_active: bool = True) -> User:
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{role}-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name=f"Test {role.title()}",
        is_active=is_active,
        role=role,
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


def _headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create and return a customer directly in the DB."""
    return await _create_user(db_session)


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict[str, str]:
    """Return Authorization headers for the test customer."""
    return _headers_for(test_user)


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """A second customer, for ownership checks."""
    return await _create_user(db_session)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict[str, str]:
    return _headers_for(other_user)


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create and return an administrator."""
    return await _create_user(db_session, role="admin")


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return _headers_for(admin_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: venues
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_venue(db_session: AsyncSession) -> VenueRow:
    """A venue with a 10,000 day rate and no pricing rules."""
    venue = VenueRow(
        name="Garden Pavilion",
        location="Udaipur, Rajasthan",
        capacity_min=20,
        capacity_max=150,
        base_price=Decimal("10000"),
        price_per_hour=Decimal("1000"),
        amenities=["garden", "parking"],
        tags=["outdoor"],
        images=[],
    )
    db_session.add(venue)
    await db_session.flush()
    await db_session.refresh(venue)
    return venue


@pytest_asyncio.fixture
async def priced_venue(db_session: AsyncSession) -> VenueRow:
    """A venue with a seasonal surcharge, a weekday discount, and a per-guest fee."""
    venue = VenueRow(
        name="The Grand Ballroom",
        location="Mumbai, Maharashtra",
        capacity_min=50,
        capacity_max=500,
        base_price=Decimal("75000"),
        amenities=[],
        tags=[],
        images=[],
    )
    db_session.add(venue)
    await db_session.flush()
    db_session.add_all(
        [
            VenuePricingRule(
                venue_id=venue.id,
                rule_type="seasonal",
                adjustment_type="percentage",
                adjustment_value=Decimal("20"),
                condition={"months": [11, 12, 1, 2]},
            ),
            VenuePricingRule(
                venue_id=venue.id,
                rule_type="weekday",
                adjustment_type="percentage",
                adjustment_value=Decimal("-15"),
                condition={"days": [1, 2, 3, 4]},
            ),
            VenuePricingRule(
                venue_id=venue.id,
                rule_type="guest_count",
                adjustment_type="flat",
                adjustment_value=Decimal("100"),
                condition={"per_guest_above": 100},
            ),
        ]
    )
    await db_session.flush()
    await db_session.refresh(venue)
    return venue


# ---------------------------------------------------------------------------
# In-memory stores for coordinator unit tests
# ---------------------------------------------------------------------------


class InMemoryVenueStore(VenueStore):
    """Dictionary-backed venue store. ``fail_availability`` makes every upsert fail."""

    def __init__(self) -> None:
        self.venues: dict[uuid.UUID, Venue] = {}
        self.rules: dict[uuid.UUID, list[PricingRule]] = {}
        self.availability: dict[tuple[uuid.UUID, date], bool] = {}
        self.visits: list[VisitRequest] = []
        self.upserts: list[tuple[uuid.UUID, date, bool]] = []
        self.fail_availability = False

    def add(self, venue: Venue, rules: list[PricingRule] | None = None) -> Venue:
        self.venues[venue.id] = venue
        self.rules[venue.id] = list(rules or [])
        return venue

    async def get_venue(self, venue_id):
        return self.venues.get(venue_id)

    async def list_venues(self, location=None, min_guests=None):
        venues = [v for v in self.venues.values() if not v.is_placeholder]
        if location:
            venues = [v for v in venues if v.location and location.lower() in v.location.lower()]
        if min_guests is not None:
            venues = [v for v in venues if v.capacity_max is None or v.capacity_max >= min_guests]
        return sorted(venues, key=lambda v: v.name)

    async def find_any_venue(self):
        return next(iter(self.venues.values()), None)

    async def create_placeholder_venue(self, venue_id=None):
        venue = Venue(
            id=venue_id or uuid.uuid4(),
            name="Auto-Created Venue",
            capacity_min=50,
            capacity_max=200,
            base_price=Decimal("50000"),
            is_placeholder=True,
        )
        return self.add(venue)

    async def get_pricing_rules(self, venue_id):
        return list(self.rules.get(venue_id, []))

    async def add_pricing_rule(self, venue_id, rule):
        self.rules.setdefault(venue_id, []).append(rule)
        return rule

    async def get_availability(self, venue_id, start=None, end=None):
        return {
            day: flag
            for (vid, day), flag in sorted(self.availability.items())
            if vid == venue_id and (start is None or day >= start) and (end is None or day <= end)
        }

    async def upsert_availability(self, venue_id, day, is_available):
        self.upserts.append((venue_id, day, is_available))
        if self.fail_availability:
            raise AvailabilityUpdateWarning(str(venue_id), day.isoformat())
        self.availability[(venue_id, day)] = is_available

    async def add_visit_request(self, visit):
        self.visits.append(visit)
        return visit


class InMemoryBookingStore(BookingStore):
    """Dictionary-backed booking store. Set ``insert_error`` to make inserts fail."""

    def __init__(self) -> None:
        self.bookings: dict[uuid.UUID, Booking] = {}
        self.insert_error: Exception | None = None

    async def insert_booking(self, booking):
        if self.insert_error is not None:
            raise self.insert_error
        booking_id = booking.id or uuid.uuid4()
        booking.id = booking_id
        self.bookings[booking_id] = booking
        return booking_id

    async def get_booking(self, booking_id):
        return self.bookings.get(booking_id)

    async def find_bookings_by_user(self, user_id):
        return list(reversed([b for b in self.bookings.values() if b.user_id == user_id]))

    async def find_booking_by_idempotency_key(self, user_id, key):
        for booking in self.bookings.values():
            if booking.user_id == user_id and booking.idempotency_key == key:
                return booking
        return None

    async def update_booking_status(self, booking_id, status: BookingStatus):
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(str(booking_id))
        booking.status = status
        return booking


@pytest.fixture
def venue_store() -> InMemoryVenueStore:
    return InMemoryVenueStore()


@pytest.fixture
def booking_store() -> InMemoryBookingStore:
    return InMemoryBookingStore()
