"""
Booked intervals and the booking entity that owns them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import pendulum
from pendulum import DateTime

from .dates import to_datetime
from .exceptions import BookingNotEditable, InvalidBooking, InvalidOrdering
from .status import SCHEDULING_LIFECYCLE, StatusMachine


@dataclass(frozen=True)
class BookedInterval:
    """
    An absolute time interval between start and end.

    Overlap checks treat it as half-open [start, end), so touching intervals
    do not overlap; ``includes_instant`` accepts both bounds.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        object.__setattr__(self, "start", to_datetime(self.start))
        object.__setattr__(self, "end", to_datetime(self.end))
        if self.start >= self.end:
            raise InvalidOrdering(f"Start time {self.start} must be before end time {self.end}")

    @classmethod
    def create_from_duration(cls, start: datetime, duration_minutes: int) -> "BookedInterval":
        if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
            raise InvalidOrdering(
                f"Duration must be a positive number of minutes, got {duration_minutes!r}"
            )
        start_dt = to_datetime(start)
        return cls(start=start_dt, end=start_dt.add(minutes=duration_minutes))

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "BookedInterval") -> bool:
        """Check if this interval overlaps with another; touching intervals do not."""
        return self.start < other.end and self.end > other.start

    def contains(self, other: "BookedInterval") -> bool:
        return self.start <= other.start and self.end >= other.end

    def includes_instant(self, instant: datetime) -> bool:
        """Check whether an instant lies within the interval, bounds included."""
        return self.start <= to_datetime(instant) <= self.end

    def to_dict(self) -> Dict[str, str]:
        return {
            "start": self.start.to_iso8601_string(),
            "end": self.end.to_iso8601_string(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "BookedInterval":
        return cls(start=to_datetime(data["start"]), end=to_datetime(data["end"]))

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class ScheduledService:
    """A grooming service booked as part of a booking, priced at booking time."""
    service_id: str
    name: str
    price: Decimal
    duration_minutes: int
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        object.__setattr__(self, "price", Decimal(str(self.price)))
        if self.price < 0:
            raise InvalidBooking(f"Service price cannot be negative, got {self.price}")
        if self.duration_minutes <= 0:
            raise InvalidBooking(
                f"Service duration must be positive, got {self.duration_minutes}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "service_id": self.service_id,
            "name": self.name,
            "price": str(self.price),
            "duration_minutes": self.duration_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduledService":
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            service_id=data["service_id"],
            name=data.get("name", data["service_id"]),
            price=Decimal(str(data.get("price", "0"))),
            duration_minutes=int(data.get("duration_minutes", 60)),
        )


def _now() -> DateTime:
    return pendulum.now("UTC")


@dataclass(eq=False)
class Booking:
    """
    A pet-grooming booking occupying one interval of the shop's calendar.

    The status is owned by ``lifecycle``; every status change goes through
    ``transition_to`` so the transition table is enforced in one place.
    The entity is not synchronised: callers serialise concurrent changes
    to the same booking.
    """
    id: str
    interval: BookedInterval
    customer_id: str
    pet_id: str
    services: List[ScheduledService]
    status: Optional[Enum] = None
    notes: Optional[str] = None
    lifecycle: StatusMachine = SCHEDULING_LIFECYCLE
    created_at: DateTime = field(default_factory=_now)
    updated_at: DateTime = field(default_factory=_now)

    def __post_init__(self):
        if not self.id:
            raise InvalidBooking("Booking id is required")
        if not isinstance(self.interval, BookedInterval):
            raise InvalidBooking(f"Invalid booking interval: {self.interval!r}")
        if not self.customer_id:
            raise InvalidBooking("Customer id is required")
        if not self.pet_id:
            raise InvalidBooking("Pet id is required")

        self.services = self._validate_services(self.services)

        if self.status is None:
            self.status = self.lifecycle.initial
        else:
            try:
                self.status = self.lifecycle.coerce(self.status)
            except ValueError as exc:
                raise InvalidBooking(str(exc)) from exc

        if self.notes is not None:
            self.notes = self.notes.strip()

    @classmethod
    def create(
        cls,
        interval: BookedInterval,
        customer_id: str,
        pet_id: str,
        services: Sequence[ScheduledService],
        *,
        notes: Optional[str] = None,
        lifecycle: StatusMachine = SCHEDULING_LIFECYCLE,
        booking_id: Optional[str] = None,
    ) -> "Booking":
        """Create a new booking in the lifecycle's initial status."""
        return cls(
            id=booking_id or str(uuid.uuid4()),
            interval=interval,
            customer_id=customer_id,
            pet_id=pet_id,
            services=list(services),
            notes=notes,
            lifecycle=lifecycle,
        )

    @staticmethod
    def _validate_services(services: Sequence[ScheduledService]) -> List[ScheduledService]:
        if not services:
            raise InvalidBooking("At least one service must be booked")
        return list(services)

    @property
    def start(self) -> DateTime:
        return self.interval.start

    @property
    def end(self) -> DateTime:
        return self.interval.end

    @property
    def total_price(self) -> Decimal:
        return sum((service.price for service in self.services), Decimal("0"))

    def total_duration_minutes(self) -> int:
        return self.interval.duration_minutes()

    def is_active(self, count_finished: bool = False) -> bool:
        """Whether the booking still blocks its interval."""
        return self.lifecycle.is_active(self.status, count_finished=count_finished)

    def is_closed(self) -> bool:
        """Finished or cancelled bookings can no longer be edited."""
        return not self.is_active()

    def transition_to(self, target) -> "Booking":
        """
        Move the booking to another status.

        Raises:
            InvalidTransition: If the lifecycle does not allow the change.
        """
        self.status = self.lifecycle.transition(self.status, target)
        self._touch()
        return self

    def confirm(self) -> "Booking":
        return self.transition_to("CONFIRMED")

    def start_service(self) -> "Booking":
        return self.transition_to("IN_PROGRESS")

    def complete(self) -> "Booking":
        return self.transition_to("COMPLETED")

    def mark_no_show(self) -> "Booking":
        return self.transition_to("NO_SHOW")

    def rebook(self) -> "Booking":
        """Put a missed booking back on the calendar."""
        return self.transition_to("SCHEDULED")

    def cancel(self) -> "Booking":
        cancelled = next(iter(self.lifecycle.cancelled))
        return self.transition_to(cancelled)

    def update_interval(self, interval: BookedInterval) -> "Booking":
        if self.is_closed():
            raise BookingNotEditable(self.status, "reschedule")
        self.interval = interval
        self._touch()
        return self

    def update_services(self, services: Sequence[ScheduledService]) -> "Booking":
        if self.is_closed():
            raise BookingNotEditable(self.status, "change the services of")
        self.services = self._validate_services(services)
        self._touch()
        return self

    def add_notes(self, notes: str) -> "Booking":
        self.notes = notes.strip()
        self._touch()
        return self

    def has_conflict_with(self, other: "Booking") -> bool:
        """Two active bookings conflict when their intervals overlap."""
        if not self.is_active() or not other.is_active():
            return False
        return self.interval.overlaps(other.interval)

    def _touch(self) -> None:
        self.updated_at = _now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            **self.interval.to_dict(),
            "status": self.status.value,
            "customer_id": self.customer_id,
            "pet_id": self.pet_id,
            "services": [service.to_dict() for service in self.services],
            "total_price": str(self.total_price),
            "notes": self.notes,
            "created_at": self.created_at.to_iso8601_string(),
            "updated_at": self.updated_at.to_iso8601_string(),
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        lifecycle: StatusMachine = SCHEDULING_LIFECYCLE,
    ) -> "Booking":
        kwargs: Dict[str, Any] = {}
        for key in ("created_at", "updated_at"):
            if data.get(key):
                kwargs[key] = to_datetime(data[key])

        return cls(
            id=data["id"],
            interval=BookedInterval.from_dict(data),
            customer_id=data["customer_id"],
            pet_id=data["pet_id"],
            services=[ScheduledService.from_dict(item) for item in data.get("services", [])],
            status=data.get("status"),
            notes=data.get("notes"),
            lifecycle=lifecycle,
            **kwargs,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Booking):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
