"""
Unified slot listing for public booking pages.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Dict, List, Optional

import pendulum
from pendulum import DateTime

from ..domain.models import BookingLink, Slot
from .assignment import AssignmentResolver
from .availability import AvailabilityService

logger = logging.getLogger(__name__)


class SlotMerger:
    """
    Builds the guest-facing calendar of a booking link.

    Round-robin links generate slots per member, merge them on the start
    instant and attach the host picked by the ``AssignmentResolver``; other
    links show the owner's slots unchanged.
    """

    def __init__(self, availability: AvailabilityService, resolver: AssignmentResolver) -> None:
        self._availability = availability
        self._resolver = resolver

    async def merge_slots(
        self,
        booking_link_id: str,
        day: date,
        duration_minutes: int,
        buffer_minutes: int = 0,
    ) -> List[Slot]:
        link = await self._resolver.get_link(booking_link_id)
        return await self._merge_for_link(link, day, duration_minutes, buffer_minutes)

    async def available_slots(
        self,
        booking_link_id: str,
        day: date,
        now: Optional[DateTime] = None,
    ) -> List[Slot]:
        """
        Slots for the link's own duration, minus those inside the advance notice.
        """
        link = await self._resolver.get_link(booking_link_id)
        slots = await self._merge_for_link(link, day, link.duration, link.buffer_time)

        earliest = (now or pendulum.now(self._availability.tz)).add(minutes=link.advance_notice)
        return [slot for slot in slots if slot.start >= earliest]

    async def _merge_for_link(
        self,
        link: BookingLink,
        day: date,
        duration_minutes: int,
        buffer_minutes: int,
    ) -> List[Slot]:
        if not link.round_robin_enabled or not link.members:
            return await self._availability.generate_slots(
                link.user_id, day, duration_minutes, buffer_minutes
            )

        per_member = await asyncio.gather(
            *(
                self._availability.generate_slots(
                    member.user_id, day, duration_minutes, buffer_minutes
                )
                for member in link.members
            )
        )

        # First member to propose a start instant wins the key.
        proposed: Dict[str, Slot] = {}
        for member_slots in per_member:
            for slot in member_slots:
                proposed.setdefault(slot.key, slot)

        assignees = await asyncio.gather(
            *(
                self._resolver.resolve_for_link(link, slot.start, duration_minutes)
                for slot in proposed.values()
            )
        )

        merged: List[Slot] = []
        for slot, user_id in zip(proposed.values(), assignees):
            if user_id is None:
                logger.debug("Dropping %s on link %s: nobody free on re-check", slot.key, link.id)
                continue
            merged.append(slot.with_assignee(user_id))

        return sorted(merged, key=lambda slot: slot.start)
