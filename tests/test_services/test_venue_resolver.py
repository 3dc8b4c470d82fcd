"""Tests for venue reference resolution."""

import logging
import uuid
from decimal import Decimal

import pytest

from venue_booking.domain import Venue
from venue_booking.domain.errors import VenueNotFoundError
from venue_booking.services.venue_resolver import VenueResolver, parse_venue_id

LEGACY_ID = "3f0c2e6e-8b9a-4c3d-8b5a-c4f6e9e7d8c1"


def _venue(venue_id=None, name="Heritage Haveli") -> Venue:
    return Venue(id=venue_id or uuid.uuid4(), name=name, capacity_min=10, capacity_max=100, base_price=Decimal("5000"))


class TestParseVenueId:
    def test_uuid_string(self):
        raw = str(uuid.uuid4())
        assert parse_venue_id(raw) == uuid.UUID(raw)

    def test_uuid_instance(self):
        value = uuid.uuid4()
        assert parse_venue_id(value) is value

    def test_surrounding_whitespace(self):
        raw = str(uuid.uuid4())
        assert parse_venue_id(f"  {raw} ") == uuid.UUID(raw)

    @pytest.mark.parametrize("raw", [None, "", "3", "venue-3", "not-a-uuid"])
    def test_malformed(self, raw):
        assert parse_venue_id(raw) is None


class TestStrictResolver:
    """Strict mode only accepts ids of existing venues."""

    async def test_existing_venue(self, venue_store):
        venue = venue_store.add(_venue())
        resolved = await VenueResolver(venue_store).resolve(str(venue.id))
        assert resolved == venue

    async def test_unknown_uuid(self, venue_store):
        venue_store.add(_venue())
        with pytest.raises(VenueNotFoundError) as exc_info:
            await VenueResolver(venue_store).resolve(str(uuid.uuid4()))
        assert len(venue_store.venues) == 1
        assert exc_info.value.message == "Venue not found"

    async def test_legacy_id_not_mapped(self, venue_store):
        venue_store.add(_venue(uuid.UUID(LEGACY_ID)))
        resolver = VenueResolver(venue_store, legacy_ids={"3": LEGACY_ID})
        with pytest.raises(VenueNotFoundError) as exc_info:
            await resolver.resolve("3")
        assert exc_info.value.venue_ref == "3"

    async def test_missing_reference(self, venue_store):
        with pytest.raises(VenueNotFoundError):
            await VenueResolver(venue_store).resolve(None)


class TestFallbackResolver:
    """Compatibility mode repairs references instead of rejecting them."""

    async def test_existing_venue_untouched(self, venue_store):
        venue = venue_store.add(_venue())
        resolved = await VenueResolver(venue_store, fallback=True).resolve(venue.id)
        assert resolved == venue
        assert len(venue_store.venues) == 1

    async def test_legacy_id_mapped(self, venue_store, caplog):
        legacy = venue_store.add(_venue(uuid.UUID(LEGACY_ID), name="Mapped"))
        venue_store.add(_venue(name="Other"))
        resolver = VenueResolver(venue_store, fallback=True, legacy_ids={"3": LEGACY_ID})
        with caplog.at_level(logging.WARNING, logger="venue_booking.services.venue_resolver"):
            resolved = await resolver.resolve("3")
        assert resolved == legacy
        assert "Mapped legacy venue id" in caplog.text

    async def test_unmapped_malformed_uses_any_venue(self, venue_store):
        venue = venue_store.add(_venue())
        resolved = await VenueResolver(venue_store, fallback=True).resolve("venue-99")
        assert resolved == venue
        assert len(venue_store.venues) == 1

    async def test_malformed_without_venues_creates_placeholder(self, venue_store, caplog):
        with caplog.at_level(logging.WARNING, logger="venue_booking.services.venue_resolver"):
            resolved = await VenueResolver(venue_store, fallback=True).resolve("7")
        assert resolved.is_placeholder
        assert list(venue_store.venues) == [resolved.id]
        assert "created placeholder" in caplog.text

    async def test_unknown_uuid_gets_placeholder_with_that_id(self, venue_store):
        venue_store.add(_venue())
        venue_id = uuid.uuid4()
        resolved = await VenueResolver(venue_store, fallback=True).resolve(str(venue_id))
        assert resolved.id == venue_id
        assert resolved.is_placeholder

    async def test_mapped_id_missing_gets_placeholder(self, venue_store):
        resolver = VenueResolver(venue_store, fallback=True, legacy_ids={"3": LEGACY_ID})
        resolved = await resolver.resolve("3")
        assert resolved.id == uuid.UUID(LEGACY_ID)
        assert resolved.is_placeholder
