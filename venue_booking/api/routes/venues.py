"""Venues API router — discovery, availability, price estimates, visit requests."""

from __future__ import annotations

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status

from venue_booking.api.deps import (
    get_booking_coordinator,
    get_current_active_user,
    get_current_admin,
    get_venue_store,
)
from venue_booking.domain import PricingRule, Venue, VisitRequest
from venue_booking.domain.errors import InvalidRangeError, VenueNotFoundError
from venue_booking.models.user import User
from venue_booking.schemas.venue import (
    AvailabilityResponse,
    PriceBreakdownResponse,
    PriceEstimateRequest,
    PricingRuleCreate,
    PricingRuleResponse,
    VenueDetailResponse,
    VenueListResponse,
    VenueResponse,
    VisitRequestCreate,
    VisitRequestResponse,
)
from venue_booking.services.booking_service import BookingCoordinator
from venue_booking.stores.interfaces import VenueStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/venues", tags=["venues"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _get_venue_or_404(store: VenueStore, venue_id: uuid.UUID) -> Venue:
    venue = await store.get_venue(venue_id)
    if venue is None:
        raise VenueNotFoundError(str(venue_id))
    return venue


def _rule_response(rule: PricingRule) -> PricingRuleResponse:
    return PricingRuleResponse(
        rule_type=rule.kind.value,
        adjustment_type=rule.adjustment_type.value,
        adjustment_value=rule.adjustment_value,
        condition=rule.condition,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=VenueListResponse, summary="List venues")
async def list_venues(
    location: str | None = Query(None, description="Case-insensitive location substring"),
    guests: int | None = Query(None, ge=1, description="Only venues that can hold this many guests"),
    store: VenueStore = Depends(get_venue_store),
) -> VenueListResponse:
    venues = await store.list_venues(location=location, min_guests=guests)
    return VenueListResponse(items=[VenueResponse.model_validate(v) for v in venues], total=len(venues))


@router.get("/{venue_id}", response_model=VenueDetailResponse, summary="Get a venue with its pricing rules")
async def get_venue(
    venue_id: uuid.UUID,
    store: VenueStore = Depends(get_venue_store),
) -> VenueDetailResponse:
    venue = await _get_venue_or_404(store, venue_id)
    rules = await store.get_pricing_rules(venue.id)
    return VenueDetailResponse(
        **VenueResponse.model_validate(venue).model_dump(),
        pricing_rules=[_rule_response(rule) for rule in rules],
    )


@router.get("/{venue_id}/availability", response_model=AvailabilityResponse, summary="Get availability flags")
async def get_availability(
    venue_id: uuid.UUID,
    start: date | None = Query(None, alias="from", description="First date to include"),
    end: date | None = Query(None, alias="to", description="Last date to include"),
    store: VenueStore = Depends(get_venue_store),
) -> AvailabilityResponse:
    """Return recorded availability. Dates that are absent are available."""
    if start is not None and end is not None and end < start:
        raise InvalidRangeError()
    await _get_venue_or_404(store, venue_id)
    availability = await store.get_availability(venue_id, start, end)
    return AvailabilityResponse(venue_id=venue_id, availability=availability)


@router.post(
    "/{venue_id}/price-estimate",
    response_model=PriceBreakdownResponse,
    summary="Price a prospective booking",
)
async def estimate_price(
    venue_id: uuid.UUID,
    body: PriceEstimateRequest,
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
) -> PriceBreakdownResponse:
    breakdown = await coordinator.estimate_price(venue_id, body.date, body.end_date, body.guest_count)
    return PriceBreakdownResponse.model_validate(breakdown)


@router.post(
    "/{venue_id}/pricing-rules",
    response_model=PricingRuleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a pricing rule (admin)",
)
async def add_pricing_rule(
    venue_id: uuid.UUID,
    body: PricingRuleCreate,
    store: VenueStore = Depends(get_venue_store),
    admin: User = Depends(get_current_admin),
) -> PricingRuleResponse:
    await _get_venue_or_404(store, venue_id)
    rule = PricingRule.from_condition(body.rule_type, body.adjustment_type, body.adjustment_value, body.condition)
    stored = await store.add_pricing_rule(venue_id, rule)
    logger.info("Admin %s added %s pricing rule to venue %s", admin.id, rule.kind.value, venue_id)
    return _rule_response(stored)


@router.post(
    "/{venue_id}/visits",
    response_model=VisitRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a venue visit",
)
async def request_visit(
    venue_id: uuid.UUID,
    body: VisitRequestCreate,
    store: VenueStore = Depends(get_venue_store),
    current_user: User = Depends(get_current_active_user),
) -> VisitRequestResponse:
    await _get_venue_or_404(store, venue_id)
    visit = await store.add_visit_request(
        VisitRequest(
            venue_id=venue_id,
            user_id=current_user.id,
            name=body.name,
            email=body.email,
            phone=body.phone,
            preferred_date=body.preferred_date,
            preferred_time=body.preferred_time,
            notes=body.notes,
        )
    )
    return VisitRequestResponse.model_validate(visit)
