"""Domain models for venues, pricing and bookings.

These are plain objects with no persistence or HTTP concerns. The
SQLAlchemy store translates ORM rows to and from them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class RuleKind(str, Enum):
    SEASONAL = "seasonal"
    WEEKDAY = "weekday"
    GUEST_COUNT = "guest_count"


class AdjustmentType(str, Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PricingRule:
    """One conditional adjustment applied on top of a venue's base price.

    ``months`` holds 1-12 for seasonal rules, ``days`` holds 0 (Sunday) to 6
    for weekday rules, and ``per_guest_above`` is the guest-count floor for
    guest-count rules.
    """

    kind: RuleKind
    adjustment_type: AdjustmentType
    adjustment_value: Decimal
    months: frozenset[int] = frozenset()
    days: frozenset[int] = frozenset()
    per_guest_above: int = 0

    @classmethod
    def from_condition(
        cls,
        kind: str | RuleKind,
        adjustment_type: str | AdjustmentType,
        adjustment_value: Decimal | int | float | str,
        condition: dict | None,
    ) -> PricingRule:
        """Build a rule from the stored ``condition`` JSON shape."""
        condition = condition or {}
        return cls(
            kind=RuleKind(kind),
            adjustment_type=AdjustmentType(adjustment_type),
            adjustment_value=Decimal(str(adjustment_value)),
            months=frozenset(int(m) for m in condition.get("months", ())),
            days=frozenset(int(d) for d in condition.get("days", ())),
            per_guest_above=int(condition.get("per_guest_above") or 0),
        )

    @property
    def condition(self) -> dict:
        if self.kind is RuleKind.SEASONAL:
            return {"months": sorted(self.months)}
        if self.kind is RuleKind.WEEKDAY:
            return {"days": sorted(self.days)}
        return {"per_guest_above": self.per_guest_above}


@dataclass(frozen=True)
class PriceBreakdown:
    """Result of a price computation. ``total_price`` is the sum of the other three."""

    base_price: Decimal
    seasonal_adjustment: Decimal
    guest_price: Decimal
    total_price: Decimal
    day_count: int


@dataclass(frozen=True)
class Venue:
    """Domain representation of a venue."""

    id: uuid.UUID
    name: str
    location: str | None = None
    capacity_min: int | None = None
    capacity_max: int | None = None
    base_price: Decimal | None = None
    is_placeholder: bool = False


@dataclass(frozen=True)
class BookingInput:
    """Booking request as submitted by a caller, before validation.

    ``venue_id`` stays a raw string until the venue reference is resolved.
    ``price`` is the caller's own snapshot of the estimate it displayed.
    """

    user_id: uuid.UUID
    venue_id: str | None = None
    date: date | None = None
    end_date: date | None = None
    guest_count: int | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    special_requests: str | None = None
    time_slot: str = "full-day"
    price: Decimal | None = None


@dataclass
class Booking:
    """Domain representation of a persisted booking."""

    venue_id: uuid.UUID
    user_id: uuid.UUID
    date: date
    guest_count: int
    price: Decimal
    contact_name: str
    contact_email: str
    contact_phone: str
    end_date: date | None = None
    time_slot: str = "full-day"
    special_requests: str | None = None
    status: BookingStatus = BookingStatus.PENDING
    idempotency_key: str | None = None
    id: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class VisitRequest:
    """A request to tour a venue."""

    venue_id: uuid.UUID
    name: str
    email: str
    phone: str
    preferred_date: date
    preferred_time: str
    notes: str | None = None
    user_id: uuid.UUID | None = None
    status: str = "pending"
    id: uuid.UUID | None = None
    created_at: datetime | None = field(default=None, compare=False)
