"""
Shared fixtures: an in-memory store, a fixture calendar and a wired engine.
"""

import pendulum
import pytest

from bookingslots.adapters.memory import FixtureCalendarGateway, InMemoryStore
from bookingslots.domain.models import BookingStatus, ExistingBooking
from bookingslots.domain.timezone import governing_timezone
from bookingslots.engine import BookingEngine

TZ = governing_timezone()


def at(text: str):
    """Parse a wall-clock timestamp in the governing timezone."""
    return pendulum.parse(text, tz=TZ)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def calendar():
    return FixtureCalendarGateway()


@pytest.fixture
def engine(store, calendar):
    return BookingEngine.build(
        calendar=calendar,
        working_hours=store,
        holidays=store,
        bookings=store,
        links=store,
    )


@pytest.fixture
def book(store):
    """Record a booking in the store, as the booking write path would."""
    counter = {"n": 0}

    def _book(user_id, start, end, link_id=None, created_at=None, status=BookingStatus.CONFIRMED):
        counter["n"] += 1
        booking = ExistingBooking(
            id=f"b-{counter['n']}",
            booking_link_id=link_id,
            user_id=user_id,
            start_time=at(start),
            end_time=at(end),
            status=status,
            created_at=at(created_at) if created_at else at(start),
        )
        store.add_booking(booking)
        return booking

    return _book
