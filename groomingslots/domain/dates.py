"""
Helpers for normalising calendar values handed to the engine.

Weekdays follow the shop's calendar convention: 0 is Sunday, 6 is Saturday.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import IntEnum
from typing import Union

import pendulum
from pendulum import DateTime

from .exceptions import InvalidException

DateLike = Union[date, datetime, str]


class DayOfWeek(IntEnum):
    """Days of the week, Sunday first."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


def day_of_week(value: date) -> int:
    """Return the Sunday-first weekday (0-6) of a date or datetime."""
    return value.isoweekday() % 7


def minute_of_day(value: datetime) -> int:
    """Return the minute-of-day of a datetime, ignoring seconds."""
    return value.hour * 60 + value.minute


def to_datetime(value: Union[datetime, str]) -> DateTime:
    """
    Coerce an instant into a pendulum ``DateTime``.

    Naive datetimes keep their wall-clock value and are tagged as UTC, which
    is what ``pendulum.instance`` does.
    """
    if isinstance(value, DateTime):
        return value
    if isinstance(value, datetime):
        return pendulum.instance(value)
    if isinstance(value, str):
        parsed = pendulum.parse(value)
        if isinstance(parsed, DateTime):
            return parsed
    raise TypeError(f"Expected a datetime or ISO 8601 string, got {value!r}")


def to_date(value: DateLike) -> date:
    """
    Normalise a calendar value to a plain ``datetime.date``.

    The time-of-day component of datetimes is discarded.

    Raises:
        InvalidException: If the value cannot be read as a calendar date.
    """
    if isinstance(value, datetime):
        return date(value.year, value.month, value.day)
    if isinstance(value, date):
        return date(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            parsed = pendulum.parse(value)
        except ValueError as exc:
            raise InvalidException(f"Invalid exception date: {value!r}") from exc
        if isinstance(parsed, (datetime, date)):
            return date(parsed.year, parsed.month, parsed.day)
    raise InvalidException(f"Invalid exception date: {value!r}")
