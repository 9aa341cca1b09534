"""
Weekly availability with calendar exceptions (holidays, closures).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from pendulum import DateTime

from .dates import DateLike, day_of_week, to_date, to_datetime
from .exceptions import EmptySet
from .time_window import TimeLike
from .weekly_availability import WeeklyAvailability

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 30

# From this hour on, the search for the next occurrence starts on the next day.
LATE_DAY_CUTOFF_HOUR = 23


@dataclass(frozen=True)
class AvailabilityWithExceptions:
    """
    A weekly pattern that does not apply on specific calendar dates.

    Exception dates are stored as plain dates; any time-of-day component
    is dropped on construction, and probes are normalised the same way.
    Every "mutating" method returns a new instance.
    """
    weekly: WeeklyAvailability
    exception_dates: FrozenSet[date] = field(default_factory=frozenset)

    def __post_init__(self):
        if not isinstance(self.weekly, WeeklyAvailability):
            raise EmptySet(f"A weekly availability is required, got {self.weekly!r}")
        normalized = frozenset(to_date(value) for value in self.exception_dates)
        object.__setattr__(self, "exception_dates", normalized)

    @classmethod
    def create(
        cls,
        weekly: WeeklyAvailability,
        exceptions: Iterable[DateLike] = (),
    ) -> "AvailabilityWithExceptions":
        return cls(weekly=weekly, exception_dates=frozenset(to_date(d) for d in exceptions))

    @classmethod
    def create_from_days_of_week(
        cls,
        days: Iterable[int],
        start: TimeLike,
        end: TimeLike,
        exceptions: Iterable[DateLike] = (),
    ) -> "AvailabilityWithExceptions":
        weekly = WeeklyAvailability.create_from_days_of_week(days, start, end)
        return cls.create(weekly, exceptions)

    @property
    def exceptions(self) -> List[date]:
        """Exception dates in chronological order."""
        return sorted(self.exception_dates)

    def is_exception_date(self, value: DateLike) -> bool:
        return to_date(value) in self.exception_dates

    def includes_instant(self, instant: datetime) -> bool:
        """
        Check whether the pattern is active at an instant.

        Exception dates always win, whatever the time-of-day.
        """
        if self.is_exception_date(instant):
            return False
        return self.weekly.includes_instant(instant)

    def add_exception(self, value: DateLike) -> "AvailabilityWithExceptions":
        return AvailabilityWithExceptions(
            weekly=self.weekly,
            exception_dates=self.exception_dates | {to_date(value)},
        )

    def remove_exception(self, value: DateLike) -> "AvailabilityWithExceptions":
        """Return a copy without the given date; unknown dates are ignored."""
        return AvailabilityWithExceptions(
            weekly=self.weekly,
            exception_dates=self.exception_dates - {to_date(value)},
        )

    def clear_exceptions(self) -> "AvailabilityWithExceptions":
        return AvailabilityWithExceptions(weekly=self.weekly)

    def overlaps(self, other: "AvailabilityWithExceptions") -> bool:
        """Compare the weekly patterns only; exception dates are not considered."""
        return self.weekly.overlaps(other.weekly)

    def get_next_occurrence(
        self,
        from_instant: datetime,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ) -> Optional[DateTime]:
        """
        Find the next instant, strictly after ``from_instant``, at which a
        window opens.

        Algorithm:
        1. Walk forward one calendar day at a time, at most ``horizon_days``
           iterations. The first iteration stays on the starting date unless
           it is already past the late-day cutoff.
        2. Skip weekdays without windows and exception dates.
        3. Take the first window defined for the weekday (construction
           order) and build its start time on that date.
        4. Return the first candidate later than ``from_instant``.

        Returns:
            The next opening instant, or None if the horizon holds none.
        """
        if isinstance(horizon_days, bool) or not isinstance(horizon_days, int) or horizon_days <= 0:
            raise ValueError(f"horizon_days must be a positive integer, got {horizon_days!r}")

        start = to_datetime(from_instant)
        current = start

        for offset in range(horizon_days):
            if offset > 0 or current.hour >= LATE_DAY_CUTOFF_HOUR:
                current = current.add(days=1).start_of("day")

            weekday = day_of_week(current)
            windows = self.weekly.windows_for_day(weekday)
            if not windows:
                continue

            if self.is_exception_date(current):
                logger.debug("Skipping exception date %s", current.to_date_string())
                continue

            first_window = windows[0]
            candidate = current.set(
                hour=first_window.start_minute // 60,
                minute=first_window.start_minute % 60,
                second=0,
                microsecond=0,
            )

            if candidate > start:
                return candidate

        logger.debug(
            "No occurrence within %d day(s) after %s", horizon_days, start.to_iso8601_string()
        )
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "windows": self.weekly.to_dict(),
            "exceptions": [d.isoformat() for d in self.exceptions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AvailabilityWithExceptions":
        return cls.create(
            WeeklyAvailability.from_dict(data["windows"]),
            data.get("exceptions", []),
        )
