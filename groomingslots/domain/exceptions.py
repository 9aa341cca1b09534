"""
Domain-specific exception hierarchy for the grooming booking engine.
"""

from __future__ import annotations

from typing import Any, Sequence


class SchedulingError(Exception):
    """Base class for all engine-level errors."""


class ValidationError(SchedulingError, ValueError):
    """Raised when a value object or entity cannot be constructed."""


class InvalidTime(ValidationError):
    """Raised when a time-of-day is not a valid 24-hour ``HH:MM`` value."""


class InvalidOrdering(ValidationError):
    """Raised when an interval does not start strictly before it ends."""


class InvalidDay(ValidationError):
    """Raised when a day-of-week falls outside 0-6."""


class EmptySet(ValidationError):
    """Raised when an availability pattern would end up without windows."""


class InvalidException(ValidationError):
    """Raised when an exception date cannot be interpreted as a calendar date."""


class OverlappingWindows(ValidationError):
    """Raised when two windows on the same weekday overlap each other."""


class InvalidBooking(ValidationError):
    """Raised when a booking entity is missing required data."""


class InvalidTransition(SchedulingError):
    """Raised when a booking status change is not allowed by its lifecycle."""

    def __init__(self, current: Any, target: Any) -> None:
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot transition booking from {_status_name(current)} "
            f"to {_status_name(target)}"
        )


class BookingNotEditable(SchedulingError):
    """Raised when a booking in a closed status is modified."""

    def __init__(self, status: Any, action: str) -> None:
        self.status = status
        super().__init__(f"Cannot {action} a booking with status {_status_name(status)}")


class BookingConflictError(SchedulingError):
    """Raised by the booking use case when the requested interval is taken."""

    def __init__(self, conflicts: Sequence[Any]) -> None:
        self.conflicts = list(conflicts)
        super().__init__(
            f"Requested interval conflicts with {len(self.conflicts)} existing booking(s)"
        )


class BookingNotFound(SchedulingError, KeyError):
    """Raised when the repository has no booking with the requested id."""

    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(booking_id)

    def __str__(self) -> str:
        return f"Booking not found: {self.booking_id}"


def _status_name(status: Any) -> str:
    return getattr(status, "value", str(status))
