"""
Per-staff booking counts for reporting.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Dict, Sequence

from pendulum import FixedTimezone

from ..domain.timezone import as_date, day_bounds, governing_timezone
from .protocols import BookingStore


class StaffStatistics:
    def __init__(self, bookings: BookingStore, tz: FixedTimezone | None = None) -> None:
        self._bookings = bookings
        self.tz = tz or governing_timezone()

    async def booking_count(self, user_id: str, month: date) -> int:
        """Non-cancelled bookings starting in the calendar month of ``month``."""
        first_day = as_date(month).first_of("month")
        start, _ = day_bounds(first_day, self.tz)
        end, _ = day_bounds(first_day.add(months=1), self.tz)
        return await self._bookings.count_active(user_id, start, end)

    async def booking_stats(self, user_ids: Sequence[str], month: date) -> Dict[str, int]:
        counts = await asyncio.gather(*(self.booking_count(user_id, month) for user_id in user_ids))
        return dict(zip(user_ids, counts))
