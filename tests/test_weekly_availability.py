"""
Tests for the WeeklyAvailability pattern.
"""

import pendulum
import pytest

from groomingslots.domain.dates import DayOfWeek
from groomingslots.domain.exceptions import EmptySet, OverlappingWindows
from groomingslots.domain.time_window import TimeWindow
from groomingslots.domain.weekly_availability import WeeklyAvailability

TZ = "America/Sao_Paulo"

MONDAY = DayOfWeek.MONDAY
WEDNESDAY = DayOfWeek.WEDNESDAY
FRIDAY = DayOfWeek.FRIDAY


class TestWeeklyAvailabilityCreation:
    """Tests for construction and invariants."""

    def test_create_requires_windows(self):
        with pytest.raises(EmptySet):
            WeeklyAvailability.create([])

    def test_create_from_days_of_week_deduplicates(self):
        weekly = WeeklyAvailability.create_from_days_of_week(
            [WEDNESDAY, MONDAY, WEDNESDAY], "09:00", "17:00"
        )

        assert len(weekly.windows) == 2
        assert [w.day_of_week for w in weekly.windows] == [WEDNESDAY, MONDAY]
        assert weekly.get_days_of_week() == [1, 3]

    def test_create_from_no_days_raises(self):
        with pytest.raises(EmptySet):
            WeeklyAvailability.create_from_days_of_week([], "09:00", "17:00")

    def test_split_shift_on_same_day_is_allowed(self):
        weekly = WeeklyAvailability.create([
            TimeWindow.create(MONDAY, "14:00", "18:00"),
            TimeWindow.create(MONDAY, "09:00", "12:00"),
        ])

        assert weekly.get_days_of_week() == [1]
        assert [w.start_time for w in weekly.windows_for_day(MONDAY)] == ["14:00", "09:00"]

    def test_overlapping_windows_on_same_day_are_rejected(self):
        with pytest.raises(OverlappingWindows):
            WeeklyAvailability.create([
                TimeWindow.create(MONDAY, "09:00", "13:00"),
                TimeWindow.create(MONDAY, "12:00", "18:00"),
            ])

    def test_duplicate_window_is_rejected(self):
        window = TimeWindow.create(MONDAY, "09:00", "13:00")

        with pytest.raises(OverlappingWindows):
            WeeklyAvailability.create([window, window])

    def test_equality_ignores_window_order(self):
        a = WeeklyAvailability.create_from_days_of_week([MONDAY, FRIDAY], "09:00", "17:00")
        b = WeeklyAvailability.create_from_days_of_week([FRIDAY, MONDAY], "09:00", "17:00")

        assert a == b
        assert hash(a) == hash(b)


class TestWeeklyAvailabilityQueries:
    """Tests for inclusion, overlap and derived patterns."""

    def setup_method(self):
        self.weekly = WeeklyAvailability.create_from_days_of_week(
            [MONDAY, WEDNESDAY], "09:00", "17:00"
        )

    def test_includes_instant(self):
        assert self.weekly.includes_instant(pendulum.parse("2024-11-25 09:00", tz=TZ))
        assert self.weekly.includes_instant(pendulum.parse("2024-11-27 16:59", tz=TZ))
        assert not self.weekly.includes_instant(pendulum.parse("2024-11-26 10:00", tz=TZ))
        assert not self.weekly.includes_instant(pendulum.parse("2024-11-25 18:00", tz=TZ))

    def test_includes_day_and_time_on_day(self):
        assert self.weekly.includes_day(MONDAY)
        assert not self.weekly.includes_day(FRIDAY)
        assert self.weekly.includes_time_on_day("17:00", WEDNESDAY)
        assert not self.weekly.includes_time_on_day("10:00", FRIDAY)

    def test_overlaps_is_symmetric(self):
        other = WeeklyAvailability.create([TimeWindow.create(WEDNESDAY, "16:00", "20:00")])
        touching = WeeklyAvailability.create([TimeWindow.create(WEDNESDAY, "17:00", "20:00")])
        elsewhere = WeeklyAvailability.create([TimeWindow.create(FRIDAY, "09:00", "17:00")])

        assert self.weekly.overlaps(other) and other.overlaps(self.weekly)
        assert not self.weekly.overlaps(touching) and not touching.overlaps(self.weekly)
        assert not self.weekly.overlaps(elsewhere) and not elsewhere.overlaps(self.weekly)

    def test_exclude_days_returns_new_instance(self):
        reduced = self.weekly.exclude_days([WEDNESDAY])

        assert reduced.get_days_of_week() == [1]
        assert self.weekly.get_days_of_week() == [1, 3]

    def test_exclude_all_days_raises(self):
        with pytest.raises(EmptySet):
            self.weekly.exclude_days([MONDAY, WEDNESDAY])

    def test_duration_is_first_window(self):
        weekly = WeeklyAvailability.create([
            TimeWindow.create(MONDAY, "09:00", "10:00"),
            TimeWindow.create(FRIDAY, "09:00", "17:00"),
        ])

        assert weekly.duration_minutes() == 60

    def test_dict_round_trip(self):
        assert WeeklyAvailability.from_dict(self.weekly.to_dict()) == self.weekly
