"""
Tests for the AvailabilityService orchestration layer.
"""

import asyncio
from datetime import date

import pendulum
import pytest

from bookingslots.domain.exceptions import UpstreamError
from bookingslots.domain.models import BookingStatus, Holiday, TimeRange, WorkingWindow
from bookingslots.domain.timezone import governing_timezone

TZ = governing_timezone()
MONDAY = date(2024, 6, 3)


def at(text: str):
    return pendulum.parse(text, tz=TZ)


def _hours(slots):
    return [slot.start.format("HH:mm") for slot in slots]


class TestGenerateSlots:
    def test_uses_stored_working_window(self, engine, store):
        store.working_windows[("alice", 1)] = WorkingWindow.from_strings("alice", 1, "09:00", "12:00")

        slots = asyncio.run(engine.availability.generate_slots("alice", MONDAY, 60))

        assert _hours(slots) == ["09:00", "10:00", "11:00"]

    def test_defaults_to_nine_to_six(self, engine):
        slots = asyncio.run(engine.availability.generate_slots("alice", MONDAY, 60))

        assert _hours(slots)[0] == "09:00"
        assert _hours(slots)[-1] == "17:00"
        assert len(slots) == 9

    def test_busy_times_come_from_calendar(self, engine, store, calendar):
        store.working_windows[("alice", 1)] = WorkingWindow.from_strings("alice", 1, "09:00", "12:00")
        calendar.busy["alice"] = [TimeRange(start=at("2024-06-03 10:00"), end=at("2024-06-03 10:30"))]

        slots = asyncio.run(engine.availability.generate_slots("alice", MONDAY, 60))

        assert _hours(slots) == ["09:00", "11:00"]
        user_id, day_start, day_end = calendar.calls[0]
        assert user_id == "alice"
        assert day_start == at("2024-06-03 00:00")
        assert day_end == at("2024-06-04 00:00")

    def test_holiday_wins_over_working_hours(self, engine, store, calendar):
        store.working_windows[("alice", 1)] = WorkingWindow.from_strings("alice", 1, "09:00", "12:00")
        store.holidays.append(Holiday("alice", MONDAY, "Vacation"))

        assert asyncio.run(engine.availability.generate_slots("alice", MONDAY, 60)) == []
        assert calendar.calls == []

    def test_unavailable_weekday(self, engine, store):
        store.working_windows[("alice", 1)] = WorkingWindow.from_strings(
            "alice", 1, "09:00", "18:00", is_available=False
        )

        assert asyncio.run(engine.availability.generate_slots("alice", MONDAY, 60)) == []

    def test_calendar_failure_propagates(self, engine, calendar):
        calendar.unreachable_users.add("alice")

        with pytest.raises(UpstreamError):
            asyncio.run(engine.availability.generate_slots("alice", MONDAY, 60))

    def test_repeated_calls_match(self, engine, calendar):
        calendar.busy["alice"] = [TimeRange(start=at("2024-06-03 13:00"), end=at("2024-06-03 14:00"))]

        first = asyncio.run(engine.availability.generate_slots("alice", MONDAY, 60))
        second = asyncio.run(engine.availability.generate_slots("alice", MONDAY, 60))

        assert first == second


class TestIsAvailable:
    def test_free_user(self, engine):
        assert asyncio.run(
            engine.availability.is_available("alice", at("2024-06-03 10:00"), at("2024-06-03 11:00"))
        )

    def test_overlapping_booking_blocks(self, engine, book):
        book("alice", "2024-06-03 10:30", "2024-06-03 11:30")

        assert not asyncio.run(
            engine.availability.is_available("alice", at("2024-06-03 10:00"), at("2024-06-03 11:00"))
        )

    def test_adjacent_booking_does_not_block(self, engine, book):
        book("alice", "2024-06-03 11:00", "2024-06-03 12:00")

        assert asyncio.run(
            engine.availability.is_available("alice", at("2024-06-03 10:00"), at("2024-06-03 11:00"))
        )

    def test_cancelled_booking_does_not_block(self, engine, book):
        book("alice", "2024-06-03 10:00", "2024-06-03 11:00", status=BookingStatus.CANCELLED)

        assert asyncio.run(
            engine.availability.is_available_for("alice", at("2024-06-03 10:00"), 60)
        )

    def test_completed_booking_blocks(self, engine, book):
        book("alice", "2024-06-03 10:00", "2024-06-03 11:00", status=BookingStatus.COMPLETED)

        assert not asyncio.run(
            engine.availability.is_available_for("alice", at("2024-06-03 10:00"), 60)
        )

    def test_holiday_blocks_whole_local_day(self, engine, store):
        store.holidays.append(Holiday("alice", MONDAY))

        assert not asyncio.run(
            engine.availability.is_available_for("alice", at("2024-06-03 23:00"), 60)
        )
        assert asyncio.run(
            engine.availability.is_available_for("alice", at("2024-06-04 00:00"), 60)
        )

    def test_holiday_day_is_taken_in_governing_timezone(self, engine, store):
        """16:00 UTC on the 2nd is 01:00 on the 3rd at +09:00."""
        store.holidays.append(Holiday("alice", MONDAY))
        start = pendulum.datetime(2024, 6, 2, 16, 0, tz="UTC")

        assert not asyncio.run(engine.availability.is_available_for("alice", start, 60))


class TestStaffAvailability:
    def test_not_a_working_day_without_window(self, engine):
        status = asyncio.run(engine.availability.staff_availability("alice", MONDAY))

        assert not status.is_available
        assert status.reason == "not a working day"

    def test_unavailable_window(self, engine, store):
        store.working_windows[("alice", 1)] = WorkingWindow.from_strings(
            "alice", 1, "09:00", "18:00", is_available=False
        )

        status = asyncio.run(engine.availability.staff_availability("alice", MONDAY))

        assert not status.is_available

    def test_holiday_reason(self, engine, store):
        store.working_windows[("alice", 1)] = WorkingWindow.from_strings("alice", 1, "09:00", "18:00")
        store.holidays.append(Holiday("alice", MONDAY, "Conference"))

        status = asyncio.run(engine.availability.staff_availability("alice", MONDAY))

        assert not status.is_available
        assert status.reason == "holiday: Conference"

    def test_working_day(self, engine, store):
        window = WorkingWindow.from_strings("alice", 1, "10:00", "16:00")
        store.working_windows[("alice", 1)] = window

        status = asyncio.run(engine.availability.staff_availability("alice", MONDAY))

        assert status.is_available
        assert status.window == window
