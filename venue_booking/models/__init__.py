"""SQLAlchemy models for the venue booking service.

All models are imported here so that ``Base.metadata`` knows every table
before ``create_all`` runs. If you add a new model, import it in this file.
"""

from venue_booking.models.booking import Booking
from venue_booking.models.user import User
from venue_booking.models.venue import Venue, VenueAvailability, VenuePricingRule, VenueVisit

__all__ = [
    "Booking",
    "User",
    "Venue",
    "VenueAvailability",
    "VenuePricingRule",
    "VenueVisit",
]
