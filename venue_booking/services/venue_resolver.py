"""Venue reference resolution.

Turns the venue identifier a caller sent into the ID of a venue that exists.

In strict mode (the default) anything that is not the UUID of an existing
venue is rejected with ``VenueNotFoundError``.

Compatibility mode exists for demo data where venue ids drifted between
stores. It repairs the reference in order:

1. legacy numeric ids are mapped through ``legacy_venue_ids``;
2. an unmapped malformed id falls back to any existing venue;
3. with no venue at all, a placeholder venue is created.

A well-formed id that does not exist gets a placeholder venue with that id.
Every repair is logged as a warning.
"""

import logging
import uuid
from collections.abc import Mapping

from venue_booking.domain import Venue
from venue_booking.domain.errors import VenueNotFoundError
from venue_booking.stores.interfaces import VenueStore

logger = logging.getLogger(__name__)


def parse_venue_id(raw: str | uuid.UUID | None) -> uuid.UUID | None:
    """Return the UUID for a well-formed reference, or None."""
    if raw is None:
        return None
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw).strip())
    except ValueError:
        return None


class VenueResolver:
    """Resolve caller-supplied venue references against a ``VenueStore``."""

    def __init__(
        self,
        store: VenueStore,
        *,
        fallback: bool = False,
        legacy_ids: Mapping[str, str] | None = None,
    ) -> None:
        self._store = store
        self._fallback = fallback
        self._legacy_ids = dict(legacy_ids or {})

    async def resolve(self, raw: str | uuid.UUID | None) -> Venue:
        """Return the existing venue a reference points to.

        Raises:
            VenueNotFoundError: In strict mode, when the reference is malformed or unknown.
        """
        venue_id = parse_venue_id(raw)

        if venue_id is not None:
            venue = await self._store.get_venue(venue_id)
            if venue is not None:
                return venue

        if not self._fallback:
            raise VenueNotFoundError(str(raw))

        if venue_id is None:
            venue_id = self._map_legacy_id(raw)

        if venue_id is None:
            venue = await self._store.find_any_venue()
            if venue is not None:
                logger.warning("Venue reference %r is malformed; using existing venue %s", raw, venue.id)
                return venue
            venue = await self._store.create_placeholder_venue()
            logger.warning("Venue reference %r is malformed and no venues exist; created placeholder %s", raw, venue.id)
            return venue

        venue = await self._store.get_venue(venue_id)
        if venue is not None:
            return venue

        venue = await self._store.create_placeholder_venue(venue_id)
        logger.warning("Venue %s does not exist; created placeholder venue", venue_id)
        return venue

    def _map_legacy_id(self, raw: str | uuid.UUID | None) -> uuid.UUID | None:
        if raw is None:
            return None
        mapped = self._legacy_ids.get(str(raw).strip())
        if mapped is None:
            return None
        venue_id = parse_venue_id(mapped)
        if venue_id is not None:
            logger.warning("Mapped legacy venue id %r to %s", raw, venue_id)
        return venue_id
