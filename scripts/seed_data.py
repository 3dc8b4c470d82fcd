"""Seed the database with a demo couple, an admin, and sample wedding venues.

The Grand Ballroom carries the three sample pricing rules: a winter-season
surcharge, a midweek discount, and a per-guest fee above 100 guests. Each
venue gets availability rows for the next 30 days.

Apply migrations first, then run from the repository root:
    alembic upgrade head
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add the repository root to the path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from venue_booking.auth.passwords import hash_password
from venue_booking.database import async_session_factory
from venue_booking.models.booking import Booking
from venue_booking.models.user import User
from venue_booking.models.venue import Venue, VenueAvailability, VenuePricingRule

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_USERS = [
    {"email": "demo@venuebooking.dev", "password": "demo1234", "name": "Asha & Rohan", "role": "customer"},
    {"email": "admin@venuebooking.dev", "password": "admin1234", "name": "Venue Admin", "role": "admin"},
]

VENUES = [
    {
        "name": "The Grand Ballroom",
        "description": (
            "A chandelier-lit ballroom with a sprung dance floor, bridal suite, and in-house "
            "catering for up to 500 guests."
        ),
        "location": "Mumbai, Maharashtra",
        "capacity_min": 50,
        "capacity_max": 500,
        "base_price": Decimal("75000"),
        "price_per_hour": Decimal("7500"),
        "amenities": ["Catering", "Bridal Suite", "Valet Parking", "Dance Floor"],
        "tags": ["Indoor", "Luxury", "Ballroom"],
        "images": [],
        "rules": [
            ("seasonal", "percentage", Decimal("20"), {"months": [11, 12, 1, 2]}),
            ("weekday", "percentage", Decimal("-15"), {"days": [1, 2, 3, 4]}),
            ("guest_count", "flat", Decimal("100"), {"per_guest_above": 100}),
        ],
    },
    {
        "name": "Lakeside Lawn",
        "description": "An open lawn on the banks of Lake Pichola with space for a mandap and sunset pheras.",
        "location": "Udaipur, Rajasthan",
        "capacity_min": 30,
        "capacity_max": 250,
        "base_price": Decimal("55000"),
        "price_per_hour": Decimal("5000"),
        "amenities": ["Lake View", "Generator Backup", "Parking"],
        "tags": ["Outdoor", "Lakeside"],
        "images": [],
        "rules": [
            ("seasonal", "percentage", Decimal("10"), {"months": [10, 11, 12]}),
        ],
    },
]

AVAILABILITY_DAYS = 30


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with demo users and venues.

    Idempotent: existing demo users and venues with the same names are
    deleted, together with their bookings, before re-seeding.
    """
    async with async_session_factory() as session:
        emails = [u["email"] for u in DEMO_USERS]
        names = [v["name"] for v in VENUES]

        existing_users = (await session.execute(select(User.id).where(User.email.in_(emails)))).scalars().all()
        existing_venues = (await session.execute(select(Venue.id).where(Venue.name.in_(names)))).scalars().all()
        if existing_users or existing_venues:
            print("⚠️  Demo data already exists. Deleting and re-seeding...")
            await session.execute(
                delete(Booking).where(Booking.user_id.in_(existing_users) | Booking.venue_id.in_(existing_venues))
            )
            await session.execute(delete(VenueAvailability).where(VenueAvailability.venue_id.in_(existing_venues)))
            await session.execute(delete(VenuePricingRule).where(VenuePricingRule.venue_id.in_(existing_venues)))
            await session.execute(delete(Venue).where(Venue.id.in_(existing_venues)))
            await session.execute(delete(User).where(User.id.in_(existing_users)))
            await session.flush()

        # ------------------------------------------------------------------
        # 1. Users
        # ------------------------------------------------------------------
        for user_data in DEMO_USERS:
            user = User(
                email=user_data["email"],
                hashed_password=hash_password(user_data["password"]),
                name=user_data["name"],
                role=user_data["role"],
                is_active=True,
            )
            session.add(user)
            await session.flush()
            print(f"✅ Created {user.role}: {user.email} (id={user.id})")

        # ------------------------------------------------------------------
        # 2. Venues, pricing rules, availability
        # ------------------------------------------------------------------
        today = date.today()
        for venue_data in VENUES:
            data = dict(venue_data)
            rules = data.pop("rules")
            venue = Venue(**data)
            session.add(venue)
            await session.flush()

            for rule_type, adjustment_type, value, condition in rules:
                session.add(
                    VenuePricingRule(
                        venue_id=venue.id,
                        rule_type=rule_type,
                        adjustment_type=adjustment_type,
                        adjustment_value=value,
                        condition=condition,
                    )
                )
            for offset in range(AVAILABILITY_DAYS):
                session.add(
                    VenueAvailability(venue_id=venue.id, date=today + timedelta(days=offset), is_available=True)
                )
            await session.flush()
            print(f"   🏛️  {venue.name} — {venue.location} (₹{venue.base_price}/day, {len(rules)} pricing rules)")

        await session.commit()

    print()
    print("=" * 60)
    print("📊 Seed Summary")
    print("=" * 60)
    print(f"   Users:        {len(DEMO_USERS)} (demo@venuebooking.dev / demo1234)")
    print(f"   Venues:       {len(VENUES)}")
    print(f"   Availability: {AVAILABILITY_DAYS} days per venue")
    print("=" * 60)
    print("🎉 Done! You can now log in at /api/auth/login")


if __name__ == "__main__":
    asyncio.run(seed())
