"""
Recurring weekly time window value object.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Dict, Union

from .dates import DayOfWeek, day_of_week, minute_of_day
from .exceptions import InvalidDay, InvalidOrdering, InvalidTime

TimeLike = Union[str, time, int]

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_time(value: TimeLike) -> int:
    """
    Convert a time-of-day to minutes since midnight.

    Accepts ``HH:MM`` strings (24-hour, zero padded), ``datetime.time``
    objects and minute-of-day integers.

    Raises:
        InvalidTime: If the value is not a valid 24-hour time.
    """
    if isinstance(value, bool):
        raise InvalidTime(f"Invalid time: {value!r}")
    if isinstance(value, str):
        match = _TIME_PATTERN.match(value)
        if not match:
            raise InvalidTime(f"Invalid time {value!r}, expected HH:MM")
        return int(match.group(1)) * 60 + int(match.group(2))
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    if isinstance(value, int):
        if not 0 <= value < MINUTES_PER_DAY:
            raise InvalidTime(f"Minute of day must be between 0 and 1439, got {value}")
        return value
    raise InvalidTime(f"Invalid time: {value!r}")


def format_minutes(minutes: int) -> str:
    """Format a minute-of-day as ``HH:MM``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _validate_day(value: Any) -> DayOfWeek:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 6:
        raise InvalidDay(f"Day of week must be between 0 and 6, got {value!r}")
    return DayOfWeek(value)


@dataclass(frozen=True)
class TimeWindow:
    """
    A single interval on one day of the week, e.g. "Monday 09:00-17:00".

    Invariant: start_minute < end_minute, both within one day.

    Bounds are inclusive for point checks (``includes_time``) and open for
    window-to-window overlap, so 12:00 belongs to both 09:00-12:00 and
    12:00-15:00 while the two windows do not overlap.
    """
    day_of_week: DayOfWeek
    start_minute: int
    end_minute: int

    def __post_init__(self):
        object.__setattr__(self, "day_of_week", _validate_day(self.day_of_week))
        object.__setattr__(self, "start_minute", parse_time(self.start_minute))
        object.__setattr__(self, "end_minute", parse_time(self.end_minute))
        if self.end_minute <= self.start_minute:
            raise InvalidOrdering(
                f"Start time {format_minutes(self.start_minute)} must be before "
                f"end time {format_minutes(self.end_minute)}"
            )

    @classmethod
    def create(cls, day: int, start: TimeLike, end: TimeLike) -> "TimeWindow":
        """Build a window from a weekday and two ``HH:MM`` times."""
        return cls(day_of_week=day, start_minute=start, end_minute=end)

    @property
    def start_time(self) -> str:
        return format_minutes(self.start_minute)

    @property
    def end_time(self) -> str:
        return format_minutes(self.end_minute)

    def includes_time(self, value: TimeLike) -> bool:
        """Check whether a time-of-day lies within the window, bounds included."""
        minute = parse_time(value)
        return self.start_minute <= minute <= self.end_minute

    def includes_instant(self, instant: datetime) -> bool:
        """Check whether an instant falls on this weekday and inside the window."""
        if day_of_week(instant) != self.day_of_week:
            return False
        return self.includes_time(minute_of_day(instant))

    def overlaps(self, other: "TimeWindow") -> bool:
        """Check if this window overlaps with another; touching windows do not."""
        if self.day_of_week != other.day_of_week:
            return False
        return self.start_minute < other.end_minute and self.end_minute > other.start_minute

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end_minute - self.start_minute

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day_of_week": int(self.day_of_week),
            "start_time": self.start_time,
            "end_time": self.end_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeWindow":
        return cls.create(data["day_of_week"], data["start_time"], data["end_time"])

    def __str__(self) -> str:
        return f"{self.day_of_week.name.title()} {self.start_time}-{self.end_time}"
