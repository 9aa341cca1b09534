"""
Open-slot calculation: opening hours minus closed dates minus bookings.

Pure domain logic without external dependencies (no database, no I/O).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from pendulum import DateTime

from .availability import AvailabilityWithExceptions
from .booking import BookedInterval, Booking
from .conflicts import ConflictDetector
from .dates import day_of_week, to_datetime


@dataclass(frozen=True)
class OpenSlot:
    """A free block of the shop's calendar."""
    interval: BookedInterval

    def duration_minutes(self) -> int:
        return self.interval.duration_minutes()

    def format_display(self) -> str:
        """Format: Weekday, DD.MM.YYYY | HH:MM - HH:MM (N min)"""
        start = self.interval.start
        end = self.interval.end
        return (
            f"{start.format('dddd', locale='en')}, {start.format('DD.MM.YYYY')} | "
            f"{start.format('HH:mm')} - {end.format('HH:mm')} ({self.duration_minutes()} min)"
        )


class OpenSlotCalculator:
    """
    Calculates the free blocks of the shop's calendar.

    Algorithm:
    1. Build the opening blocks of every day in the range, skipping closed dates
    2. Subtract the intervals of the bookings that still block their slot
    3. Filter by minimum duration
    4. Return complete blocks (not split into smaller chunks)
    """

    def __init__(
        self,
        availability: AvailabilityWithExceptions,
        conflict_detector: Optional[ConflictDetector] = None,
    ):
        self.availability = availability
        self.conflict_detector = conflict_detector or ConflictDetector()

    def find_open_slots(
        self,
        start_date: datetime,
        end_date: datetime,
        bookings: Iterable[Booking],
        min_duration_minutes: int = 30,
    ) -> List[OpenSlot]:
        """
        Find all open slots between two instants.

        Args:
            start_date: Start of the search period
            end_date: End of the search period
            bookings: Existing bookings; inactive ones are ignored
            min_duration_minutes: Minimum duration for a slot to be listed

        Returns:
            List of OpenSlot objects in chronological order
        """
        start = to_datetime(start_date)
        end = to_datetime(end_date)

        opening_blocks = self._get_opening_blocks(start, end)
        if not opening_blocks:
            return []

        busy_ranges = [
            booking.interval
            for booking in bookings
            if self.conflict_detector.is_blocking(booking)
        ]

        free_ranges = self._invert_busy_to_free(opening_blocks, busy_ranges)

        return [
            OpenSlot(interval=free_range)
            for free_range in free_ranges
            if free_range.duration_minutes() >= min_duration_minutes
        ]

    def _get_opening_blocks(self, start: DateTime, end: DateTime) -> List[BookedInterval]:
        """
        Generate the opening-hour blocks within the range, one per window
        and day, merged where windows touch.
        """
        blocks: List[BookedInterval] = []
        current = start.start_of("day")

        while current <= end:
            if not self.availability.is_exception_date(current):
                windows = sorted(
                    self.availability.weekly.windows_for_day(day_of_week(current)),
                    key=lambda window: window.start_minute,
                )
                for window in windows:
                    block = BookedInterval(
                        start=current.set(hour=window.start_minute // 60, minute=window.start_minute % 60),
                        end=current.set(hour=window.end_minute // 60, minute=window.end_minute % 60),
                    )
                    clipped = self._clip_range_to_bounds(block, start, end)
                    if clipped:
                        blocks.append(clipped)

            current = current.add(days=1)

        return self._merge_adjacent_ranges(blocks)

    def _clip_range_to_bounds(
        self,
        time_range: BookedInterval,
        min_bound: DateTime,
        max_bound: DateTime,
    ) -> Optional[BookedInterval]:
        """
        Clip a range to fit within bounds.
        Returns None if the range is completely outside bounds.
        """
        if time_range.end <= min_bound or time_range.start >= max_bound:
            return None

        return BookedInterval(
            start=max(time_range.start, min_bound),
            end=min(time_range.end, max_bound),
        )

    def _invert_busy_to_free(
        self,
        opening_blocks: List[BookedInterval],
        busy_ranges: List[BookedInterval],
    ) -> List[BookedInterval]:
        """
        Convert busy intervals to free intervals within opening hours.

        Start with the opening blocks, subtract all busy intervals, and what
        remains is free time.
        """
        free_times: List[BookedInterval] = []
        sorted_busy = sorted(busy_ranges, key=lambda r: r.start)

        for block in opening_blocks:
            overlapping_busy = [busy for busy in sorted_busy if block.overlaps(busy)]

            if not overlapping_busy:
                free_times.append(block)
                continue

            free_times.extend(self._subtract_busy_from_block(block, overlapping_busy))

        return free_times

    def _subtract_busy_from_block(
        self,
        block: BookedInterval,
        busy_ranges: List[BookedInterval],
    ) -> List[BookedInterval]:
        """
        Subtract busy intervals from an opening block.

        Example:
        Opening: 09:00 - 17:00
        Busy: [10:00-11:00, 14:00-15:00]
        Result: [09:00-10:00, 11:00-14:00, 15:00-17:00]
        """
        free_ranges: List[BookedInterval] = []
        current_start = block.start

        for busy in busy_ranges:
            clipped_busy_start = max(busy.start, block.start)
            clipped_busy_end = min(busy.end, block.end)

            if current_start < clipped_busy_start:
                free_ranges.append(BookedInterval(start=current_start, end=clipped_busy_start))

            current_start = max(current_start, clipped_busy_end)

        if current_start < block.end:
            free_ranges.append(BookedInterval(start=current_start, end=block.end))

        return free_ranges

    def _merge_adjacent_ranges(self, ranges: List[BookedInterval]) -> List[BookedInterval]:
        """
        Merge overlapping or adjacent ranges.

        Example: [09:00-12:00, 12:00-15:00] -> [09:00-15:00]
        """
        if not ranges:
            return []

        sorted_ranges = sorted(ranges, key=lambda r: r.start)
        merged: List[BookedInterval] = [sorted_ranges[0]]

        for current in sorted_ranges[1:]:
            last = merged[-1]
            if current.start <= last.end:
                merged[-1] = BookedInterval(start=last.start, end=max(last.end, current.end))
            else:
                merged.append(current)

        return merged
