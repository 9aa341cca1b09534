"""
Booking-conflict detection.

The detector is a pure decision function: it only looks at the bookings it
is given. It cannot stop two concurrent callers from both seeing "no
conflict" and inserting overlapping bookings. Callers that create or move
bookings must run the repository read, this check and the write inside one
atomic unit of work (see ``BookingService``).
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .booking import BookedInterval, Booking

logger = logging.getLogger(__name__)


class ConflictDetector:
    """
    Decides whether a candidate interval collides with existing bookings.

    Cancelled bookings never conflict. Completed and no-show bookings are
    ignored unless ``count_finished`` is set.
    """

    def __init__(self, count_finished: bool = False):
        self.count_finished = count_finished

    @staticmethod
    def is_conflicting(candidate: BookedInterval, existing: BookedInterval) -> bool:
        """
        Check a candidate [s, e) against an existing booking [s', e').

        A conflict is any of:
        - the candidate starts during the existing booking: s' <= s < e'
        - the candidate ends during the existing booking:   s' < e <= e'
        - the candidate contains the existing booking:      s <= s' and e >= e'

        Touching intervals (e == s' or s == e') do not conflict.
        """
        s, e = candidate.start, candidate.end
        s_existing, e_existing = existing.start, existing.end

        starts_during = s_existing <= s < e_existing
        ends_during = s_existing < e <= e_existing
        contains = s <= s_existing and e >= e_existing

        return starts_during or ends_during or contains

    def is_blocking(self, booking: Booking) -> bool:
        """Whether a booking's status makes it take part in conflict checks."""
        return booking.is_active(count_finished=self.count_finished)

    def check_conflict(
        self,
        candidate: BookedInterval,
        bookings: Iterable[Booking],
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Return the bookings that conflict with the candidate interval.

        Args:
            candidate: Interval requested for a new or moved booking
            bookings: Existing bookings, typically from the repository
            exclude_booking_id: Booking being moved, ignored in the check

        Returns:
            Conflicting bookings; an empty list means the slot is free
        """
        conflicts: List[Booking] = []

        for booking in bookings:
            if exclude_booking_id is not None and booking.id == exclude_booking_id:
                continue
            if not self.is_blocking(booking):
                continue
            if self.is_conflicting(candidate, booking.interval):
                conflicts.append(booking)

        if conflicts:
            logger.debug(
                "Interval %s conflicts with %s",
                candidate,
                ", ".join(booking.id for booking in conflicts),
            )

        return conflicts

    def has_conflict(
        self,
        candidate: BookedInterval,
        bookings: Iterable[Booking],
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        return bool(self.check_conflict(candidate, bookings, exclude_booking_id))
