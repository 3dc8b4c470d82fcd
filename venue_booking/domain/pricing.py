"""Venue price computation.

Pure functions only: no I/O, no clock. Money is ``Decimal`` throughout.
Percentage adjustments are rounded half-up to whole cents, the precision
bookings are stored at, so ``total_price`` is always exactly the sum of its
parts and an estimate matches the price later saved on the booking.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from venue_booking.domain.errors import InvalidRangeError, ValidationError
from venue_booking.domain.models import AdjustmentType, PriceBreakdown, PricingRule, RuleKind

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
_CENT = Decimal("0.01")


def day_count(start_date: date, end_date: date | None) -> int:
    """Number of billable days, counting both endpoints of the range."""
    if end_date is None:
        return 1
    if end_date < start_date:
        raise InvalidRangeError()
    return max(1, (end_date - start_date).days + 1)


def booked_dates(start_date: date, end_date: date | None) -> Iterator[date]:
    """Yield every calendar day in the inclusive range."""
    for offset in range(day_count(start_date, end_date)):
        yield start_date + timedelta(days=offset)


def weekday_number(day: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return day.isoweekday() % 7


def _adjustment(rule: PricingRule, base_total: Decimal) -> Decimal:
    if rule.adjustment_type is AdjustmentType.PERCENTAGE:
        return (base_total * rule.adjustment_value / _HUNDRED).quantize(_CENT, rounding=ROUND_HALF_UP)
    return rule.adjustment_value


def compute_price(
    base_price: Decimal | int | float | str,
    rules: Iterable[PricingRule],
    start_date: date,
    end_date: date | None,
    guest_count: int,
) -> PriceBreakdown:
    """Compute the price breakdown for a venue booking.

    Seasonal and weekday rules are matched against ``start_date`` only, even
    when the range crosses a month or weekday boundary, and both feed
    ``seasonal_adjustment``. Guest-count rules charge a flat amount for each
    guest above the rule's floor.

    Raises:
        ValidationError: If ``base_price`` is not positive or ``guest_count`` is negative.
        InvalidRangeError: If ``end_date`` is before ``start_date``.
    """
    base = Decimal(str(base_price))
    if base <= _ZERO:
        raise ValidationError("base_price must be greater than zero")
    if guest_count < 0:
        raise ValidationError("guest_count must not be negative")

    days = day_count(start_date, end_date)
    base_total = base * days
    month = start_date.month
    weekday = weekday_number(start_date)

    seasonal_adjustment = _ZERO
    guest_price = _ZERO

    for rule in rules:
        if rule.kind is RuleKind.SEASONAL:
            if month in rule.months:
                seasonal_adjustment += _adjustment(rule, base_total)
        elif rule.kind is RuleKind.WEEKDAY:
            if weekday in rule.days:
                seasonal_adjustment += _adjustment(rule, base_total)
        elif rule.kind is RuleKind.GUEST_COUNT:
            if rule.adjustment_type is not AdjustmentType.FLAT:
                logger.warning("Skipping percentage guest-count rule; only flat amounts are supported")
                continue
            if guest_count > rule.per_guest_above:
                guest_price += (guest_count - rule.per_guest_above) * rule.adjustment_value

    return PriceBreakdown(
        base_price=base_total,
        seasonal_adjustment=seasonal_adjustment,
        guest_price=guest_price,
        total_price=base_total + seasonal_adjustment + guest_price,
        day_count=days,
    )
