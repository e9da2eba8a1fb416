"""
Protocols describing the collaborators the booking engine reads from.

Implementations own their timeouts and raise on connectivity or auth
failures; the engine lets those errors propagate.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional, Protocol, Sequence

from pendulum import DateTime

from ..domain.models import (
    BookingLink,
    BookingStatus,
    BusyInterval,
    ExistingBooking,
    Holiday,
    WorkingWindow,
)


class CalendarGateway(Protocol):
    """External calendar returning busy time for a user."""

    async def list_busy_intervals(
        self,
        user_id: str,
        day_start: DateTime,
        day_end: DateTime,
    ) -> List[BusyInterval]:
        """Return busy ranges overlapping ``[day_start, day_end)``."""


class WorkingHoursStore(Protocol):
    async def get_working_window(self, user_id: str, day_of_week: int) -> Optional[WorkingWindow]:
        """Return the configured window, or ``None`` when unset."""


class HolidayStore(Protocol):
    async def has_holiday(self, user_id: str, day: date) -> bool:
        """Whether a holiday is recorded on the calendar day."""

    async def get_holiday(self, user_id: str, day: date) -> Optional[Holiday]:
        """Return the holiday recorded on the calendar day, if any."""


class BookingStore(Protocol):
    async def find_overlapping(
        self,
        user_id: str,
        start: DateTime,
        end: DateTime,
        exclude_statuses: Sequence[BookingStatus] = (BookingStatus.CANCELLED,),
    ) -> List[ExistingBooking]:
        """Bookings of ``user_id`` overlapping ``[start, end)``."""

    async def find_last_assigned(
        self,
        booking_link_id: str,
        user_id: str,
    ) -> Optional[ExistingBooking]:
        """Most recently created non-cancelled booking of the user on the link."""

    async def count_active(self, user_id: str, start: DateTime, end: DateTime) -> int:
        """Number of non-cancelled bookings starting within ``[start, end)``."""


class BookingLinkStore(Protocol):
    async def get_booking_link(self, booking_link_id: str) -> Optional[BookingLink]:
        """Return the link with its members, or ``None`` when unknown."""
