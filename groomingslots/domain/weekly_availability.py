"""
Weekly opening-hours pattern built from recurring time windows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Tuple

from .exceptions import EmptySet, OverlappingWindows
from .time_window import TimeLike, TimeWindow


@dataclass(frozen=True, eq=False)
class WeeklyAvailability:
    """
    An immutable, non-empty set of TimeWindows describing a weekly pattern.

    Several windows may share a weekday (split shifts), but windows on the
    same weekday must not overlap. Construction order is preserved.
    """
    windows: Tuple[TimeWindow, ...]

    def __post_init__(self):
        windows = tuple(self.windows)
        if not windows:
            raise EmptySet("Weekly availability needs at least one time window")

        for index, window in enumerate(windows):
            for other in windows[index + 1:]:
                if window.overlaps(other):
                    raise OverlappingWindows(
                        f"Time windows {window} and {other} overlap"
                    )

        object.__setattr__(self, "windows", windows)

    @classmethod
    def create(cls, windows: Iterable[TimeWindow]) -> "WeeklyAvailability":
        return cls(windows=tuple(windows))

    @classmethod
    def create_from_days_of_week(
        cls,
        days: Iterable[int],
        start: TimeLike,
        end: TimeLike,
    ) -> "WeeklyAvailability":
        """
        Build one window per distinct day, all sharing the same hours.

        Duplicate days are dropped; first-seen order is kept.
        """
        unique_days: List[int] = []
        for day in days:
            if day not in unique_days:
                unique_days.append(day)

        if not unique_days:
            raise EmptySet("At least one day of the week is required")

        return cls(windows=tuple(TimeWindow.create(day, start, end) for day in unique_days))

    def includes_instant(self, instant: datetime) -> bool:
        return any(window.includes_instant(instant) for window in self.windows)

    def includes_time_on_day(self, value: TimeLike, day: int) -> bool:
        """Check a time-of-day against the windows defined for one weekday."""
        return any(window.includes_time(value) for window in self.windows_for_day(day))

    def includes_day(self, day: int) -> bool:
        return any(window.day_of_week == day for window in self.windows)

    def windows_for_day(self, day: int) -> List[TimeWindow]:
        """Windows defined for a weekday, in construction order."""
        return [window for window in self.windows if window.day_of_week == day]

    def overlaps(self, other: "WeeklyAvailability") -> bool:
        """Check if any window of this pattern overlaps any window of the other."""
        return any(
            mine.overlaps(theirs)
            for mine in self.windows
            for theirs in other.windows
        )

    def exclude_days(self, days: Iterable[int]) -> "WeeklyAvailability":
        """
        Return a new pattern without the windows on the given days.

        Raises:
            EmptySet: If every window would be removed.
        """
        excluded = set(days)
        remaining = tuple(w for w in self.windows if w.day_of_week not in excluded)
        if not remaining:
            raise EmptySet("Cannot exclude every day of the weekly availability")
        return WeeklyAvailability(windows=remaining)

    def get_days_of_week(self) -> List[int]:
        """Sorted list of the distinct weekdays covered by the pattern."""
        return sorted({int(window.day_of_week) for window in self.windows})

    def duration_minutes(self) -> int:
        """Duration of the first window."""
        return self.windows[0].duration_minutes()

    def to_dict(self) -> List[Dict[str, Any]]:
        return [window.to_dict() for window in self.windows]

    @classmethod
    def from_dict(cls, data: Iterable[Dict[str, Any]]) -> "WeeklyAvailability":
        return cls(windows=tuple(TimeWindow.from_dict(item) for item in data))

    def _sort_key(self) -> Tuple[Tuple[int, int, int], ...]:
        return tuple(sorted(
            (int(w.day_of_week), w.start_minute, w.end_minute) for w in self.windows
        ))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeeklyAvailability):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __hash__(self) -> int:
        return hash(self._sort_key())

    def __str__(self) -> str:
        return "; ".join(str(window) for window in self.windows)
