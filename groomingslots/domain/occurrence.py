"""
Availability queries for calendar and slot-suggestion use cases.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pendulum import DateTime

from .availability import DEFAULT_HORIZON_DAYS, AvailabilityWithExceptions


class NextOccurrenceFinder:
    """
    Answers "is the shop open?" and "when does it open next?".

    The search horizon is injected so shops with sparse opening hours can
    look further ahead than the default.
    """

    def __init__(
        self,
        availability: AvailabilityWithExceptions,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ):
        self.availability = availability
        self.horizon_days = horizon_days

    def is_available(self, instant: datetime) -> bool:
        return self.availability.includes_instant(instant)

    def next_available(
        self,
        from_instant: datetime,
        horizon_days: Optional[int] = None,
    ) -> Optional[DateTime]:
        """Next opening instant after ``from_instant``, or None if none is found."""
        horizon = self.horizon_days if horizon_days is None else horizon_days
        return self.availability.get_next_occurrence(from_instant, horizon_days=horizon)
