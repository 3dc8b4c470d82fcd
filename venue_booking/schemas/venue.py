"""Pydantic v2 request/response schemas for venue endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PriceEstimateRequest(BaseModel):
    """Dates and guest count to price a prospective booking."""

    date: date
    end_date: date | None = None
    guest_count: int = Field(..., ge=0)


class PricingRuleCreate(BaseModel):
    """Schema for adding a pricing rule to a venue."""

    rule_type: str = Field(..., pattern="^(seasonal|weekday|guest_count)$")
    adjustment_type: str = Field(..., pattern="^(percentage|flat)$")
    adjustment_value: Decimal
    condition: dict = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_condition(self) -> "PricingRuleCreate":
        """Validate the condition payload for the rule type."""
        if self.rule_type == "seasonal":
            months = self.condition.get("months")
            if not months or not all(isinstance(m, int) and 1 <= m <= 12 for m in months):
                raise ValueError("seasonal rules need condition.months with values 1-12")
        elif self.rule_type == "weekday":
            days = self.condition.get("days")
            if not days or not all(isinstance(d, int) and 0 <= d <= 6 for d in days):
                raise ValueError("weekday rules need condition.days with values 0-6")
        else:
            if self.adjustment_type != "flat":
                raise ValueError("guest_count rules only support flat adjustments")
            floor = self.condition.get("per_guest_above", 0)
            if not isinstance(floor, int) or floor < 0:
                raise ValueError("guest_count rules need a non-negative condition.per_guest_above")
        return self


class VisitRequestCreate(BaseModel):
    """Schema for requesting a venue visit."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    preferred_date: date
    preferred_time: str = Field(..., min_length=1, max_length=50)
    notes: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PricingRuleResponse(BaseModel):
    """A pricing rule in its stored shape."""

    rule_type: str
    adjustment_type: str
    adjustment_value: Decimal
    condition: dict


class VenueResponse(BaseModel):
    """Public venue information returned from the API."""

    id: uuid.UUID
    name: str
    location: str | None = None
    capacity_min: int | None = None
    capacity_max: int | None = None
    base_price: Decimal | None = None

    model_config = ConfigDict(from_attributes=True)


class VenueDetailResponse(VenueResponse):
    """Venue with its pricing rules."""

    pricing_rules: list[PricingRuleResponse] = []


class VenueListResponse(BaseModel):
    """List of venues."""

    items: list[VenueResponse]
    total: int


class AvailabilityResponse(BaseModel):
    """Recorded availability flags for a venue. Missing dates are available."""

    venue_id: uuid.UUID
    availability: dict[date, bool]


class PriceBreakdownResponse(BaseModel):
    """Price breakdown for a prospective booking."""

    base_price: Decimal
    seasonal_adjustment: Decimal
    guest_price: Decimal
    total_price: Decimal
    day_count: int

    model_config = ConfigDict(from_attributes=True)


class VisitRequestResponse(BaseModel):
    """A stored venue visit request."""

    id: uuid.UUID
    venue_id: uuid.UUID
    name: str
    email: str
    phone: str
    preferred_date: date
    preferred_time: str
    notes: str | None = None
    status: str
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
