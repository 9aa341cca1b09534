"""
Application service for creating and managing bookings.

The service coordinates the repository collaborator and the domain-level
``ConflictDetector``. The detector only decides; the guarantee that no two
active bookings overlap comes from running "read existing bookings, check,
write" inside the repository's ``atomic()`` unit of work. A relational
implementation maps ``atomic()`` to a SERIALIZABLE transaction (or relies
on a range-exclusion constraint); the in-memory adapter holds a lock.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import ContextManager, Iterable, List, Optional, Protocol, Sequence

from ..domain.booking import BookedInterval, Booking, ScheduledService
from ..domain.conflicts import ConflictDetector
from ..domain.exceptions import BookingConflictError, BookingNotEditable, InvalidBooking
from ..domain.status import SCHEDULING_LIFECYCLE, StatusMachine

logger = logging.getLogger(__name__)


class BookingRepositoryProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the service."""

    def atomic(self) -> ContextManager[None]:
        """Run the enclosed reads and writes as one serializable unit of work."""

    def find_active_bookings_overlapping(
        self,
        interval: BookedInterval,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Return bookings that may overlap the interval.

        The query may be generous at the boundaries; exact inclusive and
        exclusive handling is left to the ConflictDetector.
        """

    def find_between(self, start: datetime, end: datetime) -> List[Booking]:
        """Return all bookings touching the given range."""

    def get(self, booking_id: str) -> Booking:
        """Return a booking or raise BookingNotFound."""

    def add(self, booking: Booking) -> Booking:
        """Insert a new booking."""

    def save(self, booking: Booking) -> Booking:
        """Persist changes to an existing booking."""

    def delete(self, booking_id: str) -> None:
        """Hard-delete a booking."""


class BookingService:
    """
    Booking use cases: create, reschedule, change status.

    Dependency inversion toward a protocol makes it easy to plug in a real
    database adapter or the in-memory implementation in tests.
    """

    def __init__(
        self,
        repository: BookingRepositoryProtocol,
        conflict_detector: Optional[ConflictDetector] = None,
        lifecycle: StatusMachine = SCHEDULING_LIFECYCLE,
    ) -> None:
        self._repository = repository
        self._conflict_detector = conflict_detector or ConflictDetector()
        self._lifecycle = lifecycle

    @property
    def lifecycle(self) -> StatusMachine:
        return self._lifecycle

    def check_conflict(
        self,
        interval: BookedInterval,
        active_bookings: Iterable[Booking],
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """Return the subset of bookings that conflict; empty means available."""
        return self._conflict_detector.check_conflict(
            interval,
            active_bookings,
            exclude_booking_id=exclude_booking_id,
        )

    def find_conflicts(
        self,
        interval: BookedInterval,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Look up conflicts for an interval.

        Read-only and not atomic: the answer may be stale by the time a
        booking is written. Use ``create_booking`` to book safely.
        """
        candidates = self._repository.find_active_bookings_overlapping(
            interval,
            exclude_booking_id=exclude_booking_id,
        )
        return self.check_conflict(interval, candidates, exclude_booking_id)

    def create_booking(
        self,
        *,
        start: datetime,
        customer_id: str,
        pet_id: str,
        services: Sequence[ScheduledService],
        end: Optional[datetime] = None,
        notes: Optional[str] = None,
        booking_id: Optional[str] = None,
    ) -> Booking:
        """
        Book an interval for a pet.

        Without ``end`` the interval lasts as long as the booked services
        together.

        Raises:
            BookingConflictError: If an active booking overlaps the interval
            ValidationError: If the booking data is invalid
        """
        interval = self._build_interval(start, end, services)
        booking = Booking.create(
            interval,
            customer_id,
            pet_id,
            services,
            notes=notes,
            lifecycle=self._lifecycle,
            booking_id=booking_id,
        )

        with self._repository.atomic():
            self._ensure_free(interval)
            created = self._repository.add(booking)

        logger.info("Created booking %s for %s", created.id, interval)
        return created

    def reschedule_booking(
        self,
        booking_id: str,
        start: datetime,
        end: Optional[datetime] = None,
    ) -> Booking:
        """
        Move a booking to a new interval.

        Raises:
            BookingNotFound: If the booking does not exist
            BookingNotEditable: If the booking is finished or cancelled
            BookingConflictError: If another active booking overlaps
        """
        with self._repository.atomic():
            booking = self._repository.get(booking_id)
            if booking.is_closed():
                raise BookingNotEditable(booking.status, "reschedule")
            interval = self._build_interval(start, end, booking.services)
            self._ensure_free(interval, exclude_booking_id=booking.id)
            booking.update_interval(interval)
            saved = self._repository.save(booking)

        logger.info("Rescheduled booking %s to %s", booking_id, interval)
        return saved

    def transition(self, booking_id: str, target) -> Booking:
        """
        Change the status of a booking.

        A booking that becomes active again (a no-show put back on the
        calendar) must not collide with bookings made in the meantime.

        Raises:
            BookingNotFound: If the booking does not exist
            InvalidTransition: If the lifecycle forbids the change
            BookingConflictError: If a reactivated booking would overlap
        """
        with self._repository.atomic():
            booking = self._repository.get(booking_id)
            was_active = booking.is_active()
            previous = booking.status

            target_status = booking.lifecycle.transition(booking.status, target)
            if not was_active and booking.lifecycle.is_active(target_status):
                self._ensure_free(booking.interval, exclude_booking_id=booking.id)

            booking.transition_to(target_status)
            saved = self._repository.save(booking)

        logger.info(
            "Booking %s moved from %s to %s", booking_id, previous.value, saved.status.value
        )
        return saved

    def cancel_booking(self, booking_id: str) -> Booking:
        cancelled = next(iter(self._lifecycle.cancelled))
        return self.transition(booking_id, cancelled)

    def delete_booking(self, booking_id: str) -> None:
        with self._repository.atomic():
            self._repository.get(booking_id)
            self._repository.delete(booking_id)
        logger.info("Deleted booking %s", booking_id)

    def _ensure_free(
        self,
        interval: BookedInterval,
        exclude_booking_id: Optional[str] = None,
    ) -> None:
        conflicts = self.find_conflicts(interval, exclude_booking_id=exclude_booking_id)
        if conflicts:
            logger.warning(
                "Rejected interval %s: %d conflicting booking(s)", interval, len(conflicts)
            )
            raise BookingConflictError(conflicts)

    @staticmethod
    def _build_interval(
        start: datetime,
        end: Optional[datetime],
        services: Sequence[ScheduledService],
    ) -> BookedInterval:
        if not services:
            raise InvalidBooking("At least one service must be booked")
        if end is not None:
            return BookedInterval(start=start, end=end)
        duration = sum(service.duration_minutes for service in services)
        return BookedInterval.create_from_duration(start, duration)
