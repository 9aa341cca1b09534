"""
Domain layer - the scheduling engine, pure logic without external I/O.
"""

from .availability import DEFAULT_HORIZON_DAYS, AvailabilityWithExceptions
from .booking import BookedInterval, Booking, ScheduledService
from .conflicts import ConflictDetector
from .dates import DayOfWeek
from .occurrence import NextOccurrenceFinder
from .slot_calculator import OpenSlot, OpenSlotCalculator
from .status import (
    APPOINTMENT_LIFECYCLE,
    SCHEDULING_LIFECYCLE,
    AppointmentStatus,
    SchedulingStatus,
    StatusMachine,
    get_lifecycle,
)
from .time_window import TimeWindow
from .weekly_availability import WeeklyAvailability

__all__ = [
    "APPOINTMENT_LIFECYCLE",
    "AppointmentStatus",
    "AvailabilityWithExceptions",
    "BookedInterval",
    "Booking",
    "ConflictDetector",
    "DEFAULT_HORIZON_DAYS",
    "DayOfWeek",
    "NextOccurrenceFinder",
    "OpenSlot",
    "OpenSlotCalculator",
    "SCHEDULING_LIFECYCLE",
    "ScheduledService",
    "SchedulingStatus",
    "StatusMachine",
    "TimeWindow",
    "WeeklyAvailability",
    "get_lifecycle",
]
