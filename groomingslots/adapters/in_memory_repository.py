"""
In-memory booking repository for tests, demos and the CLI.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from ..domain.booking import BookedInterval, Booking
from ..domain.dates import to_datetime
from ..domain.exceptions import BookingNotFound
from ..domain.status import SCHEDULING_LIFECYCLE, StatusMachine

logger = logging.getLogger(__name__)


class InMemoryBookingRepository:
    """
    Repository keeping bookings in a dict.

    ``atomic()`` holds a re-entrant lock for the whole block, so a
    conflict check followed by an insert cannot interleave with another
    caller's check and insert.
    """

    def __init__(self, bookings: Iterable[Booking] = ()):
        self._bookings: Dict[str, Booking] = {}
        self._lock = threading.RLock()
        for booking in bookings:
            self._bookings[booking.id] = booking

    @classmethod
    def load_from_json(
        cls,
        data_file: Path,
        lifecycle: StatusMachine = SCHEDULING_LIFECYCLE,
    ) -> "InMemoryBookingRepository":
        """
        Load bookings from a JSON file holding a list of booking objects.

        Entries that are not objects or fail validation are skipped with a
        warning.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not valid JSON or not a list
        """
        if not data_file.exists():
            raise FileNotFoundError(f"Bookings file not found: {data_file}")

        try:
            with open(data_file, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {data_file}: {exc}") from exc

        if not isinstance(raw, list):
            raise ValueError("Bookings file must contain a list at the root level.")

        bookings: List[Booking] = []
        for item in raw:
            if not isinstance(item, dict):
                logger.warning("Skipping booking entry that is not an object: %r", item)
                continue
            try:
                bookings.append(Booking.from_dict(item, lifecycle=lifecycle))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Could not load booking entry %r: %s", item.get("id"), exc)

        return cls(bookings)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            yield

    def find_active_bookings_overlapping(
        self,
        interval: BookedInterval,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        # Closed bounds and finished bookings included: the ConflictDetector
        # applies the exact boundary rule and the finished-booking policy.
        with self._lock:
            return [
                booking
                for booking in self._bookings.values()
                if booking.id != exclude_booking_id
                and booking.is_active(count_finished=True)
                and booking.start <= interval.end
                and booking.end >= interval.start
            ]

    def find_between(self, start: datetime, end: datetime) -> List[Booking]:
        range_start = to_datetime(start)
        range_end = to_datetime(end)
        with self._lock:
            found = [
                booking
                for booking in self._bookings.values()
                if booking.start <= range_end and booking.end >= range_start
            ]
        return sorted(found, key=lambda booking: booking.start)

    def get(self, booking_id: str) -> Booking:
        with self._lock:
            try:
                return self._bookings[booking_id]
            except KeyError:
                raise BookingNotFound(booking_id) from None

    def add(self, booking: Booking) -> Booking:
        with self._lock:
            if booking.id in self._bookings:
                raise ValueError(f"Booking {booking.id} already exists")
            self._bookings[booking.id] = booking
            return booking

    def save(self, booking: Booking) -> Booking:
        with self._lock:
            if booking.id not in self._bookings:
                raise BookingNotFound(booking.id)
            self._bookings[booking.id] = booking
            return booking

    def delete(self, booking_id: str) -> None:
        with self._lock:
            if self._bookings.pop(booking_id, None) is None:
                raise BookingNotFound(booking_id)

    def __len__(self) -> int:
        return len(self._bookings)
