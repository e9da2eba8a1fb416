"""
Staff assignment for booking links with several members.

Fairness is recomputed from booking history on every call instead of being
kept in a shared round-robin pointer, so any number of server processes can
resolve assignments without coordination.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

import pendulum
from pendulum import DateTime

from ..domain.exceptions import BookingLinkNotFoundError
from ..domain.models import BookingLink, BookingLinkMember
from .availability import AvailabilityService
from .protocols import BookingLinkStore, BookingStore

logger = logging.getLogger(__name__)

# Members never assigned on a link sort before everyone else.
NEVER_ASSIGNED = pendulum.from_timestamp(0)


class AssignmentResolver:
    """
    Decides which member hosts a booking at a given time.

    - no members: the link owner
    - round robin disabled (ALL): every member must be free, the OWNER
      member (or the link owner) hosts
    - round robin enabled (ANY): the free member assigned least recently
      on this link hosts; ties keep member list order
    """

    def __init__(
        self,
        links: BookingLinkStore,
        bookings: BookingStore,
        availability: AvailabilityService,
    ) -> None:
        self._links = links
        self._bookings = bookings
        self._availability = availability

    async def get_link(self, booking_link_id: str) -> BookingLink:
        link = await self._links.get_booking_link(booking_link_id)
        if link is None:
            raise BookingLinkNotFoundError(booking_link_id)
        if link.has_inconsistent_policy:
            logger.warning(
                "Booking link %s has round_robin_enabled=%s but booking_condition=%s; "
                "round_robin_enabled takes precedence",
                link.id,
                link.round_robin_enabled,
                link.booking_condition.value,
            )
        return link

    async def resolve_assignment(
        self,
        booking_link_id: str,
        start: DateTime,
        duration_minutes: int,
    ) -> Optional[str]:
        """
        Return the user id that should host ``[start, start + duration)``.

        ``None`` means nobody can take the booking; that is a normal
        outcome, not an error.
        """
        link = await self.get_link(booking_link_id)
        return await self.resolve_for_link(link, start, duration_minutes)

    async def resolve_for_link(
        self,
        link: BookingLink,
        start: DateTime,
        duration_minutes: int,
    ) -> Optional[str]:
        if not link.members:
            return link.user_id

        available = await self._available_members(link.members, start, duration_minutes)

        if not link.round_robin_enabled:
            if len(available) < len(link.members):
                logger.debug("Link %s: not every member is free at %s", link.id, start)
                return None
            owner = link.owner_member()
            return owner.user_id if owner else link.user_id

        if not available:
            logger.debug("Link %s: no member is free at %s", link.id, start)
            return None

        ranked = await self._rank_by_last_assignment(link.id, available)
        chosen = ranked[0][0].user_id
        logger.info(
            "Round robin on link %s at %s picked %s from %s",
            link.id,
            start.to_iso8601_string(),
            chosen,
            [(member.user_id, last.to_iso8601_string()) for member, last in ranked],
        )
        return chosen

    async def _available_members(
        self,
        members: Sequence[BookingLinkMember],
        start: DateTime,
        duration_minutes: int,
    ) -> List[BookingLinkMember]:
        """Members free for the window, in their original order."""
        flags = await asyncio.gather(
            *(
                self._availability.is_available_for(member.user_id, start, duration_minutes)
                for member in members
            )
        )
        return [member for member, free in zip(members, flags) if free]

    async def _rank_by_last_assignment(
        self,
        booking_link_id: str,
        members: Sequence[BookingLinkMember],
    ) -> List[Tuple[BookingLinkMember, DateTime]]:
        """Least recently assigned first; ``sorted`` is stable so ties keep input order."""
        last_bookings = await asyncio.gather(
            *(
                self._bookings.find_last_assigned(booking_link_id, member.user_id)
                for member in members
            )
        )
        ranked = [
            (member, booking.created_at if booking is not None else NEVER_ASSIGNED)
            for member, booking in zip(members, last_bookings)
        ]
        return sorted(ranked, key=lambda item: item[1])
