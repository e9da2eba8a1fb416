"""
Tests for the commit-time validation in BookingPlanner.
"""

import asyncio

import pendulum
import pytest

from bookingslots.domain.exceptions import (
    BookingLinkNotFoundError,
    BookingTooSoonError,
    NoAvailableStaffError,
)
from bookingslots.domain.models import (
    BookingCondition,
    BookingLink,
    BookingLinkMember,
    Holiday,
    MemberRole,
)
from bookingslots.domain.timezone import governing_timezone

TZ = governing_timezone()
NOW = pendulum.parse("2024-06-03 08:00", tz=TZ)


def at(text: str):
    return pendulum.parse(text, tz=TZ)


@pytest.fixture
def links(store):
    store.booking_links["solo"] = BookingLink(
        id="solo", user_id="alice", duration=45, advance_notice=60,
    )
    store.booking_links["team"] = BookingLink(
        id="team",
        user_id="alice",
        duration=60,
        booking_condition=BookingCondition.ANY,
        round_robin_enabled=True,
        members=(
            BookingLinkMember("team", "alice", MemberRole.OWNER),
            BookingLinkMember("team", "bob"),
        ),
    )
    return store.booking_links


def _plan(engine, link_id, start):
    return asyncio.run(engine.planner.plan_booking(link_id, at(start), now=NOW))


class TestPlanBooking:
    def test_single_owner_plan(self, engine, links):
        plan = _plan(engine, "solo", "2024-06-03 10:00")

        assert plan.user_id == "alice"
        assert plan.booking_link_id == "solo"
        assert plan.end == at("2024-06-03 10:45")

    def test_too_soon(self, engine, links):
        with pytest.raises(BookingTooSoonError):
            _plan(engine, "solo", "2024-06-03 08:30")

    def test_single_owner_already_booked(self, engine, links, book):
        book("alice", "2024-06-03 10:30", "2024-06-03 11:30")

        with pytest.raises(NoAvailableStaffError):
            _plan(engine, "solo", "2024-06-03 10:00")

    def test_single_owner_on_holiday(self, engine, links, store):
        store.holidays.append(Holiday("alice", pendulum.date(2024, 6, 3)))

        with pytest.raises(NoAvailableStaffError):
            _plan(engine, "solo", "2024-06-03 10:00")

    def test_round_robin_picks_free_member(self, engine, links, book):
        book("alice", "2024-06-03 10:00", "2024-06-03 11:00")

        assert _plan(engine, "team", "2024-06-03 10:00").user_id == "bob"

    def test_round_robin_nobody_free(self, engine, links, book):
        book("alice", "2024-06-03 10:00", "2024-06-03 11:00")
        book("bob", "2024-06-03 10:00", "2024-06-03 11:00")

        with pytest.raises(NoAvailableStaffError):
            _plan(engine, "team", "2024-06-03 10:00")

    def test_recheck_sees_booking_made_after_listing(self, engine, links, book):
        """A slot shown earlier is refused once someone else took it."""
        monday = pendulum.date(2024, 6, 3)
        listed = asyncio.run(engine.merger.available_slots("solo", monday, now=NOW))
        assert listed[0].start == at("2024-06-03 09:00")

        book("alice", "2024-06-03 09:00", "2024-06-03 09:45")

        with pytest.raises(NoAvailableStaffError):
            _plan(engine, "solo", "2024-06-03 09:00")

    def test_unknown_link(self, engine, links):
        with pytest.raises(BookingLinkNotFoundError):
            _plan(engine, "missing", "2024-06-03 10:00")
