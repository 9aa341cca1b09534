"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import date
from pathlib import Path
from typing import List, Literal, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.availability import DEFAULT_HORIZON_DAYS, AvailabilityWithExceptions
from .domain.conflicts import ConflictDetector
from .domain.status import StatusMachine, get_lifecycle
from .domain.time_window import TimeWindow, parse_time
from .domain.weekly_availability import WeeklyAvailability


class ShopHoursConfig(BaseModel):
    """One block of opening hours shared by several weekdays (0=Sunday)."""
    days: List[int]
    start: str = "09:00"
    end: str = "18:00"

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range and deduplicated."""
        if not value:
            raise ValueError("days must list at least one weekday")
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"days must be between 0 and 6, got {invalid_days}")
        # Preserve order while removing duplicates
        seen: set[int] = set()
        deduped: List[int] = []
        for day in value:
            if day not in seen:
                deduped.append(day)
                seen.add(day)
        return deduped

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Validate HH:MM format."""
        parse_time(value)
        return value

    @model_validator(mode="after")
    def validate_hours_order(self) -> "ShopHoursConfig":
        """Ensure the shop opens before it closes."""
        if parse_time(self.end) <= parse_time(self.start):
            raise ValueError("end must be later than start")
        return self

    def to_windows(self) -> List[TimeWindow]:
        return [TimeWindow.create(day, self.start, self.end) for day in self.days]


class SchedulingSettings(BaseModel):
    """Tuning knobs for the scheduling engine."""
    horizon_days: int = DEFAULT_HORIZON_DAYS
    default_duration_minutes: int = 60
    status_vocabulary: Literal["scheduling", "appointment"] = "scheduling"
    count_finished_as_conflicts: bool = False

    @field_validator("horizon_days", "default_duration_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value


def _default_opening_hours() -> List[ShopHoursConfig]:
    # Tuesday to Saturday
    return [ShopHoursConfig(days=[2, 3, 4, 5, 6], start="09:00", end="18:00")]


class AppConfig(BaseModel):
    """Application configuration."""
    shop_name: str = "Grooming Shop"
    timezone: str = "America/Sao_Paulo"
    opening_hours: List[ShopHoursConfig] = Field(default_factory=_default_opening_hours)
    closed_dates: List[date] = Field(default_factory=list)
    scheduling: SchedulingSettings = Field(default_factory=SchedulingSettings)
    bookings_file: Optional[Path] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            pendulum.timezone(value)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("opening_hours")
    @classmethod
    def validate_opening_hours(cls, value: List[ShopHoursConfig]) -> List[ShopHoursConfig]:
        if not value:
            raise ValueError("opening_hours must contain at least one block")
        return value

    @field_validator("closed_dates")
    @classmethod
    def validate_closed_dates(cls, value: List[date]) -> List[date]:
        """Ensure closed dates are unique."""
        duplicates = sorted({d for d in value if value.count(d) > 1})
        if duplicates:
            raise ValueError(
                f"Duplicate closed dates: {', '.join(d.isoformat() for d in duplicates)}"
            )
        return value

    @model_validator(mode="after")
    def validate_windows(self) -> "AppConfig":
        """Opening-hour blocks must not overlap on a shared weekday."""
        self.build_weekly_availability()
        return self

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``bookings_file`` is resolved against the config file's
        directory.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)
        if config.bookings_file is not None and not config.bookings_file.is_absolute():
            config.bookings_file = config_path.parent / config.bookings_file
        return config

    def build_weekly_availability(self) -> WeeklyAvailability:
        windows: List[TimeWindow] = []
        for block in self.opening_hours:
            windows.extend(block.to_windows())
        return WeeklyAvailability.create(windows)

    def build_availability(self) -> AvailabilityWithExceptions:
        """Opening hours with the configured closed dates."""
        return AvailabilityWithExceptions.create(
            self.build_weekly_availability(),
            self.closed_dates,
        )

    def build_lifecycle(self) -> StatusMachine:
        return get_lifecycle(self.scheduling.status_vocabulary)

    def build_conflict_detector(self) -> ConflictDetector:
        return ConflictDetector(count_finished=self.scheduling.count_finished_as_conflicts)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
