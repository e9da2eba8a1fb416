"""
Core business logic for generating bookable slots for one staff member.

Pure domain logic: working hours and busy times are gathered by the service
layer and handed in here.
"""

import logging
from datetime import date
from typing import List, Sequence

from pendulum import DateTime, FixedTimezone

from .models import Slot, TimeRange, WorkingWindow
from .timezone import governing_timezone, local_datetime

logger = logging.getLogger(__name__)

# Slots always start on the hour and are spaced one hour apart.
SLOT_STEP_MINUTES = 60


class SlotGenerator:
    """
    Generates hour-aligned slots of a fixed duration inside a working window.

    Algorithm:
    1. Skip the day entirely if the window is unavailable
    2. Convert the window to instants in the governing timezone
    3. Round the start up to the next whole hour
    4. Walk forward in one-hour steps, emitting slots that fit the window
       and do not overlap any busy interval
    """

    def __init__(self, tz: FixedTimezone | None = None):
        self.tz = tz or governing_timezone()

    def generate(
        self,
        window: WorkingWindow,
        day: date,
        busy_intervals: Sequence[TimeRange],
        duration_minutes: int,
        buffer_minutes: int = 0,
    ) -> List[Slot]:
        """
        Compute the slots for one day.

        Args:
            window: The user's working window for the weekday of ``day``
            day: Calendar day in the governing timezone
            busy_intervals: Busy ranges from the external calendar
            duration_minutes: Length of each slot
            buffer_minutes: Accepted for forward compatibility; slot spacing
                is fixed at one hour and does not use it

        Returns:
            Slots in chronological order
        """
        if duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be greater than zero, got {duration_minutes}")

        if not window.is_available:
            return []

        work_start = local_datetime(day, window.start_time, self.tz)
        work_end = local_datetime(day, window.end_time, self.tz)

        slots: List[Slot] = []
        cursor = self._round_up_to_hour(work_start)

        while cursor < work_end:
            slot_end = cursor.add(minutes=duration_minutes)

            if slot_end > work_end:
                break

            candidate = TimeRange(start=cursor, end=slot_end)
            if any(candidate.overlaps(busy) for busy in busy_intervals):
                logger.debug("Slot %s blocked for %s", candidate, window.user_id)
            else:
                slots.append(Slot(start=cursor, end=slot_end))

            cursor = cursor.add(minutes=SLOT_STEP_MINUTES)

        return slots

    @staticmethod
    def _round_up_to_hour(instant: DateTime) -> DateTime:
        """09:30 becomes 10:00; 09:00 stays 09:00."""
        if instant.minute or instant.second or instant.microsecond:
            return instant.start_of("hour").add(hours=1)
        return instant
