"""
Booking status vocabularies and the lifecycle state machine that governs them.

Two vocabularies are supported: the six-state ``SchedulingStatus`` used by
multi-service schedulings and the five-state ``AppointmentStatus`` used by
single-service appointments. A ``StatusMachine`` binds one vocabulary to its
transition table so every status change is validated in one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Type

from .exceptions import InvalidTransition


class SchedulingStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    CANCELED = "CANCELED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"


@dataclass(frozen=True)
class StatusMachine:
    """
    Transition table for one status vocabulary.

    Attributes:
        name: Short identifier used in configuration ("scheduling", ...)
        vocabulary: The status enum
        initial: Status given to new bookings
        transitions: Allowed targets per status; missing keys are terminal
        cancelled: Statuses that never block a time slot
        finished: Statuses whose slot has already been used up; they only
            block a slot when the conflict policy says so
    """
    name: str
    vocabulary: Type[Enum]
    initial: Enum
    transitions: Mapping[Enum, FrozenSet[Enum]]
    cancelled: FrozenSet[Enum] = field(default_factory=frozenset)
    finished: FrozenSet[Enum] = field(default_factory=frozenset)

    def coerce(self, status) -> Enum:
        """Convert a raw value (e.g. "CONFIRMED") to a member of the vocabulary."""
        if isinstance(status, self.vocabulary):
            return status
        try:
            return self.vocabulary(getattr(status, "value", status))
        except ValueError as exc:
            allowed = ", ".join(member.value for member in self.vocabulary)
            raise ValueError(
                f"Invalid status {status!r} for {self.name} bookings. Must be one of: {allowed}"
            ) from exc

    def allowed_targets(self, current) -> FrozenSet[Enum]:
        return self.transitions.get(self.coerce(current), frozenset())

    def is_terminal(self, status) -> bool:
        return not self.allowed_targets(status)

    def can_transition(self, current, target) -> bool:
        return self.coerce(target) in self.allowed_targets(current)

    def transition(self, current, target) -> Enum:
        """
        Validate a status change and return the new status.

        Raises:
            InvalidTransition: If the lifecycle does not allow the change.
        """
        current_status = self.coerce(current)
        target_status = self.coerce(target)
        if target_status not in self.allowed_targets(current_status):
            raise InvalidTransition(current_status, target_status)
        return target_status

    def is_active(self, status, count_finished: bool = False) -> bool:
        """Whether a booking in this status still occupies its time slot."""
        status = self.coerce(status)
        if status in self.cancelled:
            return False
        if status in self.finished and not count_finished:
            return False
        return True


def _table(entries: Dict[Enum, tuple]) -> Dict[Enum, FrozenSet[Enum]]:
    return {status: frozenset(targets) for status, targets in entries.items()}


SCHEDULING_LIFECYCLE = StatusMachine(
    name="scheduling",
    vocabulary=SchedulingStatus,
    initial=SchedulingStatus.SCHEDULED,
    transitions=_table({
        SchedulingStatus.SCHEDULED: (
            SchedulingStatus.CONFIRMED,
            SchedulingStatus.IN_PROGRESS,
            SchedulingStatus.COMPLETED,
            SchedulingStatus.NO_SHOW,
            SchedulingStatus.CANCELLED,
        ),
        SchedulingStatus.CONFIRMED: (
            SchedulingStatus.IN_PROGRESS,
            SchedulingStatus.COMPLETED,
            SchedulingStatus.NO_SHOW,
            SchedulingStatus.CANCELLED,
        ),
        SchedulingStatus.IN_PROGRESS: (
            SchedulingStatus.COMPLETED,
            SchedulingStatus.CANCELLED,
        ),
        SchedulingStatus.NO_SHOW: (SchedulingStatus.SCHEDULED,),
    }),
    cancelled=frozenset({SchedulingStatus.CANCELLED}),
    finished=frozenset({SchedulingStatus.COMPLETED, SchedulingStatus.NO_SHOW}),
)

APPOINTMENT_LIFECYCLE = StatusMachine(
    name="appointment",
    vocabulary=AppointmentStatus,
    initial=AppointmentStatus.SCHEDULED,
    transitions=_table({
        AppointmentStatus.SCHEDULED: (
            AppointmentStatus.CONFIRMED,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.NO_SHOW,
            AppointmentStatus.CANCELED,
        ),
        AppointmentStatus.CONFIRMED: (
            AppointmentStatus.COMPLETED,
            AppointmentStatus.NO_SHOW,
            AppointmentStatus.CANCELED,
        ),
        AppointmentStatus.NO_SHOW: (AppointmentStatus.SCHEDULED,),
    }),
    cancelled=frozenset({AppointmentStatus.CANCELED}),
    finished=frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.NO_SHOW}),
)

LIFECYCLES: Dict[str, StatusMachine] = {
    SCHEDULING_LIFECYCLE.name: SCHEDULING_LIFECYCLE,
    APPOINTMENT_LIFECYCLE.name: APPOINTMENT_LIFECYCLE,
}


def get_lifecycle(name: str) -> StatusMachine:
    """Look up a lifecycle by its configuration name."""
    try:
        return LIFECYCLES[name]
    except KeyError:
        raise ValueError(
            f"Unknown status vocabulary {name!r}. Use one of: {', '.join(sorted(LIFECYCLES))}"
        ) from None
