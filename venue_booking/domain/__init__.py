from venue_booking.domain.models import (
    AdjustmentType,
    Booking,
    BookingInput,
    BookingStatus,
    PriceBreakdown,
    PricingRule,
    RuleKind,
    Venue,
    VisitRequest,
)

__all__ = [
    "AdjustmentType",
    "Booking",
    "BookingInput",
    "BookingStatus",
    "PriceBreakdown",
    "PricingRule",
    "RuleKind",
    "Venue",
    "VisitRequest",
]
