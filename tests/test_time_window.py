"""
Tests for the TimeWindow value object.
"""

from datetime import time

import pendulum
import pytest

from groomingslots.domain.dates import DayOfWeek
from groomingslots.domain.exceptions import InvalidDay, InvalidOrdering, InvalidTime
from groomingslots.domain.time_window import TimeWindow, parse_time

TZ = "America/Sao_Paulo"


class TestTimeWindowCreation:
    """Tests for TimeWindow validation."""

    def test_create_valid_window(self):
        """Test creating a valid window."""
        window = TimeWindow.create(DayOfWeek.MONDAY, "09:00", "17:30")

        assert window.day_of_week == DayOfWeek.MONDAY
        assert window.start_minute == 9 * 60
        assert window.end_minute == 17 * 60 + 30
        assert window.start_time == "09:00"
        assert window.end_time == "17:30"
        assert window.duration_minutes() == 510

    @pytest.mark.parametrize("value", ["9:00", "24:00", "12:60", "noon", "", "12:00:00"])
    def test_invalid_time_format(self, value):
        """Times must be zero-padded 24-hour HH:MM values."""
        with pytest.raises(InvalidTime):
            TimeWindow.create(1, value, "23:00")

    def test_end_before_start_raises_invalid_ordering(self):
        with pytest.raises(InvalidOrdering, match="must be before"):
            TimeWindow.create(1, "17:00", "09:00")

    def test_equal_start_and_end_raises_invalid_ordering(self):
        with pytest.raises(InvalidOrdering):
            TimeWindow.create(1, "09:00", "09:00")

    @pytest.mark.parametrize("day", [-1, 7, 1.5, "1", True])
    def test_invalid_day(self, day):
        with pytest.raises(InvalidDay):
            TimeWindow.create(day, "09:00", "10:00")

    def test_validation_errors_are_value_errors(self):
        """Construction errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            TimeWindow.create(1, "25:00", "26:00")

    def test_value_equality(self):
        a = TimeWindow.create(1, "09:00", "12:00")
        b = TimeWindow.create(1, "09:00", "12:00")
        c = TimeWindow.create(2, "09:00", "12:00")

        assert a == b
        assert hash(a) == hash(b)
        assert a != c

    def test_window_is_immutable(self):
        window = TimeWindow.create(1, "09:00", "12:00")

        with pytest.raises(AttributeError):
            window.start_minute = 0

    def test_parse_time_accepts_time_objects_and_minutes(self):
        assert parse_time(time(8, 15)) == 495
        assert parse_time(495) == 495
        with pytest.raises(InvalidTime):
            parse_time(24 * 60)


class TestTimeWindowQueries:
    """Tests for inclusion and overlap checks."""

    def test_includes_time_bounds_are_inclusive(self):
        window = TimeWindow.create(1, "09:00", "17:00")

        assert window.includes_time("09:00")
        assert window.includes_time("17:00")
        assert window.includes_time("12:34")
        assert not window.includes_time("08:59")
        assert not window.includes_time("17:01")

    def test_includes_instant_checks_weekday(self):
        window = TimeWindow.create(DayOfWeek.MONDAY, "09:00", "17:00")

        monday = pendulum.parse("2024-11-25 10:00", tz=TZ)
        tuesday = pendulum.parse("2024-11-26 10:00", tz=TZ)

        assert window.includes_instant(monday)
        assert not window.includes_instant(tuesday)

    def test_includes_instant_checks_time_of_day(self):
        window = TimeWindow.create(DayOfWeek.MONDAY, "09:00", "17:00")

        assert window.includes_instant(pendulum.parse("2024-11-25 17:00", tz=TZ))
        assert not window.includes_instant(pendulum.parse("2024-11-25 17:01", tz=TZ))
        assert not window.includes_instant(pendulum.parse("2024-11-25 08:59", tz=TZ))

    def test_sunday_is_day_zero(self):
        window = TimeWindow.create(DayOfWeek.SUNDAY, "10:00", "14:00")

        assert window.includes_instant(pendulum.parse("2024-11-24 11:00", tz=TZ))

    def test_overlapping_windows(self):
        a = TimeWindow.create(1, "09:00", "12:00")
        b = TimeWindow.create(1, "11:00", "14:00")

        assert a.overlaps(b)
        assert b.overlaps(a)

    def test_touching_windows_do_not_overlap(self):
        """12:00 is included by both windows, yet they do not overlap."""
        morning = TimeWindow.create(1, "09:00", "12:00")
        afternoon = TimeWindow.create(1, "12:00", "15:00")

        assert not morning.overlaps(afternoon)
        assert not afternoon.overlaps(morning)
        assert morning.includes_time("12:00")
        assert afternoon.includes_time("12:00")

    def test_windows_on_different_days_never_overlap(self):
        a = TimeWindow.create(1, "09:00", "17:00")
        b = TimeWindow.create(2, "09:00", "17:00")

        assert not a.overlaps(b)

    def test_dict_round_trip(self):
        window = TimeWindow.create(3, "08:30", "12:15")

        assert window.to_dict() == {"day_of_week": 3, "start_time": "08:30", "end_time": "12:15"}
        assert TimeWindow.from_dict(window.to_dict()) == window
