"""
Tests for YAML configuration loading.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from groomingslots.config import AppConfig, SchedulingSettings, ShopHoursConfig
from groomingslots.domain.dates import DayOfWeek
from groomingslots.domain.status import APPOINTMENT_LIFECYCLE, SCHEDULING_LIFECYCLE

CONFIG_YAML = """
shop_name: Happy Paws
timezone: America/Sao_Paulo
opening_hours:
  - days: [1, 2, 3, 4, 5]
    start: "09:00"
    end: "12:00"
  - days: [1, 2, 3, 4, 5]
    start: "13:00"
    end: "18:00"
  - days: [6]
    start: "08:00"
    end: "13:00"
closed_dates:
  - 2024-12-25
  - 2025-01-01
scheduling:
  horizon_days: 45
  status_vocabulary: appointment
  count_finished_as_conflicts: true
bookings_file: bookings.json
"""


class TestAppConfig:
    """Tests for AppConfig."""

    def test_load_from_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(CONFIG_YAML, encoding="utf-8")

        config = AppConfig.load_from_yaml(config_path)

        assert config.shop_name == "Happy Paws"
        assert config.closed_dates == [date(2024, 12, 25), date(2025, 1, 1)]
        assert config.scheduling.horizon_days == 45
        assert config.bookings_file == tmp_path / "bookings.json"

    def test_builders(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(CONFIG_YAML, encoding="utf-8")
        config = AppConfig.load_from_yaml(config_path)

        availability = config.build_availability()

        assert availability.weekly.get_days_of_week() == [1, 2, 3, 4, 5, 6]
        assert len(availability.weekly.windows_for_day(DayOfWeek.MONDAY)) == 2
        assert availability.is_exception_date(date(2024, 12, 25))
        assert config.build_lifecycle() is APPOINTMENT_LIFECYCLE
        assert config.build_conflict_detector().count_finished is True

    def test_defaults(self):
        config = AppConfig()

        assert config.build_weekly_availability().get_days_of_week() == [2, 3, 4, 5, 6]
        assert config.build_lifecycle() is SCHEDULING_LIFECYCLE
        assert config.build_conflict_detector().count_finished is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("opening_hours: [", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid YAML"):
            AppConfig.load_from_yaml(config_path)

    def test_root_must_be_mapping(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- 1\n- 2\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(config_path)

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            AppConfig(timezone="Mars/Olympus_Mons")

    def test_overlapping_blocks_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(opening_hours=[
                {"days": [1], "start": "09:00", "end": "13:00"},
                {"days": [1, 2], "start": "12:00", "end": "18:00"},
            ])

    def test_empty_opening_hours_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig(opening_hours=[])

    def test_duplicate_closed_dates_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate closed dates"):
            AppConfig(closed_dates=["2024-12-25", "2024-12-25"])


class TestShopHoursConfig:
    """Tests for opening-hour blocks."""

    def test_days_are_deduplicated(self):
        block = ShopHoursConfig(days=[3, 1, 3], start="09:00", end="17:00")

        assert block.days == [3, 1]
        assert len(block.to_windows()) == 2

    @pytest.mark.parametrize("days", [[], [7], [-1, 2]])
    def test_invalid_days(self, days):
        with pytest.raises(ValidationError):
            ShopHoursConfig(days=days)

    def test_invalid_time(self):
        with pytest.raises(ValidationError):
            ShopHoursConfig(days=[1], start="9am")

    def test_end_must_follow_start(self):
        with pytest.raises(ValidationError, match="end must be later than start"):
            ShopHoursConfig(days=[1], start="18:00", end="09:00")


def test_scheduling_settings_must_be_positive():
    with pytest.raises(ValidationError):
        SchedulingSettings(horizon_days=0)
    with pytest.raises(ValidationError):
        SchedulingSettings(status_vocabulary="other")
