"""Venue models — venues, their pricing rules, per-date availability, and visit requests."""

import uuid
import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, ForeignKey, Numeric, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from venue_booking.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Venue(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A bookable wedding venue with capacity bounds and a base day rate."""

    __tablename__ = "venues"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    location: Mapped[str | None] = mapped_column(String(255), default=None, index=True)
    capacity_min: Mapped[int | None] = mapped_column(default=None)
    capacity_max: Mapped[int | None] = mapped_column(default=None)
    base_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), default=None)
    price_per_hour: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), default=None)
    amenities: Mapped[list | None] = mapped_column(JSON, default=list)
    tags: Mapped[list | None] = mapped_column(JSON, default=list)
    images: Mapped[list | None] = mapped_column(JSON, default=list)
    # Set only on venues created to satisfy a booking reference in compatibility mode
    is_placeholder: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    pricing_rules: Mapped[list["VenuePricingRule"]] = relationship(
        back_populates="venue", lazy="selectin", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name={self.name!r})>"


class VenuePricingRule(UUIDPrimaryKeyMixin, Base):
    """One seasonal, weekday, or guest-count price adjustment for a venue."""

    __tablename__ = "venue_pricing_rules"

    venue_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("venues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rule_type: Mapped[str] = mapped_column(String(50), nullable=False)  # seasonal, weekday, guest_count
    adjustment_type: Mapped[str] = mapped_column(String(50), nullable=False)  # percentage, flat
    adjustment_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    condition: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime.datetime] = mapped_column(server_default=func.now())

    venue: Mapped["Venue"] = relationship(back_populates="pricing_rules")

    def __repr__(self) -> str:
        return f"<VenuePricingRule(venue_id={self.venue_id}, type={self.rule_type!r})>"


class VenueAvailability(UUIDPrimaryKeyMixin, Base):
    """Availability flag for one venue on one calendar day. No row means available."""

    __tablename__ = "venue_availability"

    venue_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("venues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    updated_at: Mapped[datetime.datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("venue_id", "date", name="uq_venue_availability_venue_date"),)


class VenueVisit(UUIDPrimaryKeyMixin, Base):
    """A request to tour a venue before booking it."""

    __tablename__ = "venue_visits"

    venue_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("venues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    preferred_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    preferred_time: Mapped[str] = mapped_column(String(50), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), default="pending")
    created_at: Mapped[datetime.datetime] = mapped_column(server_default=func.now())
