"""Domain error codes for venue pricing and bookings."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_RANGE = "INVALID_RANGE"
    VENUE_NOT_FOUND = "VENUE_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    AVAILABILITY_UPDATE_FAILED = "AVAILABILITY_UPDATE_FAILED"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when booking or pricing input is missing or malformed."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> None:
        super().__init__(code=code, message=message)


class InvalidRangeError(ValidationError):
    """Raised when an end date falls before its start date."""

    def __init__(self) -> None:
        super().__init__("end_date must not be before date", code=ErrorCode.INVALID_RANGE)


class VenueNotFoundError(DomainError):
    """Raised when a venue reference cannot be resolved to an existing venue."""

    def __init__(self, venue_ref: str) -> None:
        super().__init__(
            code=ErrorCode.VENUE_NOT_FOUND,
            message="Venue not found",
        )
        self.venue_ref = venue_ref


class BookingNotFoundError(DomainError):
    """Raised when a booking does not exist or belongs to another user."""

    def __init__(self, booking_id: str) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_NOT_FOUND,
            message="Booking not found",
        )
        self.booking_id = booking_id


class InvalidStatusTransitionError(DomainError):
    """Raised when a booking status change is not allowed."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_STATUS_TRANSITION,
            message=f"Cannot change booking status from {current} to {requested}",
        )


class PersistenceError(DomainError):
    """Raised when the booking store rejects a write for a non-validation reason."""

    def __init__(self, message: str = "Failed to save booking", code: ErrorCode = ErrorCode.PERSISTENCE_ERROR) -> None:
        super().__init__(code=code, message=message)


class BookingPermissionError(PersistenceError):
    """Raised when the booking store refuses a write on permission or policy grounds."""

    def __init__(self, message: str = "Not permitted to create booking") -> None:
        super().__init__(message, code=ErrorCode.PERMISSION_DENIED)


class AvailabilityUpdateWarning(DomainError):
    """Raised by a store when an availability flag could not be written.

    Never surfaces to API callers; the booking coordinator logs and drops it.
    """

    def __init__(self, venue_id: str, day: str) -> None:
        super().__init__(
            code=ErrorCode.AVAILABILITY_UPDATE_FAILED,
            message=f"Could not update availability for venue {venue_id} on {day}",
        )
