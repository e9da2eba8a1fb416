"""
Final validation of a booking request right before it is persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import pendulum
from pendulum import DateTime

from ..domain.exceptions import BookingTooSoonError, NoAvailableStaffError
from .assignment import AssignmentResolver
from .availability import AvailabilityService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingPlan:
    """The host and window a new booking should be written with."""
    booking_link_id: str
    user_id: str
    start: DateTime
    end: DateTime


class BookingPlanner:
    """
    Re-checks a requested start time and picks the host.

    Slot listings shown to guests may be stale by the time they submit;
    the plan is always recomputed from current bookings and holidays.
    """

    def __init__(self, availability: AvailabilityService, resolver: AssignmentResolver) -> None:
        self._availability = availability
        self._resolver = resolver

    async def plan_booking(
        self,
        booking_link_id: str,
        start: DateTime,
        now: Optional[DateTime] = None,
    ) -> BookingPlan:
        """
        Raises:
            BookingLinkNotFoundError: If the link does not exist
            BookingTooSoonError: If ``start`` falls inside the advance notice
            NoAvailableStaffError: If nobody can host the window any more
        """
        link = await self._resolver.get_link(booking_link_id)

        earliest = (now or pendulum.now(self._availability.tz)).add(minutes=link.advance_notice)
        if start < earliest:
            raise BookingTooSoonError(
                f"Booking time {start.to_iso8601_string()} is too soon; "
                f"earliest allowed is {earliest.to_iso8601_string()}"
            )

        if link.members:
            user_id = await self._resolver.resolve_for_link(link, start, link.duration)
        elif await self._availability.is_available_for(link.user_id, start, link.duration):
            user_id = link.user_id
        else:
            user_id = None

        if user_id is None:
            raise NoAvailableStaffError(
                f"No available staff for {start.to_iso8601_string()} on link {link.id}"
            )

        logger.info("Booking on link %s at %s assigned to %s", link.id, start, user_id)
        return BookingPlan(
            booking_link_id=link.id,
            user_id=user_id,
            start=start,
            end=start.add(minutes=link.duration),
        )
