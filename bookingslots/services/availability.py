"""
Application services for per-user slot generation and availability checks.

The service gathers working hours, holidays and busy times from the
collaborators and delegates the slot calculation to the domain-level
``SlotGenerator``. Collaborators are typed as protocols so they can be
stubbed in tests.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, time
from typing import List

from pendulum import DateTime

from ..domain.models import (
    DEFAULT_WORKDAY_END,
    DEFAULT_WORKDAY_START,
    BookingStatus,
    Slot,
    StaffAvailability,
    WorkingWindow,
)
from ..domain.slot_generator import SlotGenerator
from ..domain.timezone import as_date, day_bounds, day_of_week, local_date
from .protocols import BookingStore, CalendarGateway, HolidayStore, WorkingHoursStore

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Answers "which slots does user U have on day D" and "is U free then".
    """

    def __init__(
        self,
        calendar: CalendarGateway,
        working_hours: WorkingHoursStore,
        holidays: HolidayStore,
        bookings: BookingStore,
        slot_generator: SlotGenerator | None = None,
        default_start: time = DEFAULT_WORKDAY_START,
        default_end: time = DEFAULT_WORKDAY_END,
    ) -> None:
        self._calendar = calendar
        self._working_hours = working_hours
        self._holidays = holidays
        self._bookings = bookings
        self._slot_generator = slot_generator or SlotGenerator()
        self._default_start = default_start
        self._default_end = default_end

    @property
    def tz(self):
        return self._slot_generator.tz

    async def working_window(self, user_id: str, day: date) -> WorkingWindow:
        """Stored window for the weekday of ``day``, or the default window."""
        dow = day_of_week(day)
        window = await self._working_hours.get_working_window(user_id, dow)
        if window is None:
            return WorkingWindow.default(user_id, dow, self._default_start, self._default_end)
        return window

    async def generate_slots(
        self,
        user_id: str,
        day: date,
        duration_minutes: int,
        buffer_minutes: int = 0,
    ) -> List[Slot]:
        """
        Compute the bookable slots of one user on one day.

        Returns an empty list when the day is not worked or is a holiday;
        calendar failures propagate.
        """
        day = as_date(day)
        window = await self.working_window(user_id, day)
        if not window.is_available:
            return []

        if await self._holidays.has_holiday(user_id, day):
            logger.debug("User %s is on holiday on %s", user_id, day)
            return []

        day_start, day_end = day_bounds(day, self.tz)
        busy = await self._calendar.list_busy_intervals(user_id, day_start, day_end)

        slots = self._slot_generator.generate(
            window=window,
            day=day,
            busy_intervals=busy,
            duration_minutes=duration_minutes,
            buffer_minutes=buffer_minutes,
        )
        logger.debug("Generated %d slot(s) for %s on %s", len(slots), user_id, day)
        return slots

    async def is_available(self, user_id: str, start: DateTime, end: DateTime) -> bool:
        """
        Whether ``user_id`` has no active booking overlapping ``[start, end)``
        and no holiday on the local day of ``start``.
        """
        overlapping, on_holiday = await asyncio.gather(
            self._bookings.find_overlapping(
                user_id,
                start,
                end,
                exclude_statuses=(BookingStatus.CANCELLED,),
            ),
            self._holidays.has_holiday(user_id, local_date(start, self.tz)),
        )
        if overlapping:
            logger.debug("User %s has %d overlapping booking(s)", user_id, len(overlapping))
            return False
        return not on_holiday

    async def is_available_for(self, user_id: str, start: DateTime, duration_minutes: int) -> bool:
        return await self.is_available(user_id, start, start.add(minutes=duration_minutes))

    async def staff_availability(self, user_id: str, day: date) -> StaffAvailability:
        """Whether a staff member works on ``day`` at all, with the reason if not."""
        day = as_date(day)
        window = await self._working_hours.get_working_window(user_id, day_of_week(day))
        if window is None or not window.is_available:
            return StaffAvailability(
                user_id=user_id,
                date=day,
                is_available=False,
                reason="not a working day",
            )

        holiday = await self._holidays.get_holiday(user_id, day)
        if holiday is not None:
            return StaffAvailability(
                user_id=user_id,
                date=day,
                is_available=False,
                reason=f"holiday: {holiday.reason or 'unavailable'}",
            )

        return StaffAvailability(user_id=user_id, date=day, is_available=True, window=window)
