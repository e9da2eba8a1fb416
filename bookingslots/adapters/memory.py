"""
In-memory collaborators backed by a fixture file.

These stand in for the relational stores and the external calendar when
running the engine from the CLI or in tests, without any database or
calendar credentials.
"""

import json
import logging
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pendulum
import yaml
from pendulum import DateTime, FixedTimezone

from ..domain.exceptions import UpstreamError
from ..domain.models import (
    BookingCondition,
    BookingLink,
    BookingLinkMember,
    BookingStatus,
    ExistingBooking,
    Holiday,
    MemberRole,
    TimeRange,
    WorkingWindow,
)
from ..domain.timezone import as_date, governing_timezone

logger = logging.getLogger(__name__)


class InMemoryStore:
    """
    Working hours, holidays, bookings and booking links kept in lists.

    Implements ``WorkingHoursStore``, ``HolidayStore``, ``BookingStore`` and
    ``BookingLinkStore``.
    """

    def __init__(
        self,
        working_windows: Iterable[WorkingWindow] = (),
        holidays: Iterable[Holiday] = (),
        bookings: Iterable[ExistingBooking] = (),
        booking_links: Iterable[BookingLink] = (),
    ):
        self.working_windows: Dict[Tuple[str, int], WorkingWindow] = {}
        for window in working_windows:
            self.working_windows[(window.user_id, window.day_of_week)] = window
        self.holidays: List[Holiday] = list(holidays)
        self.bookings: List[ExistingBooking] = list(bookings)
        self.booking_links: Dict[str, BookingLink] = {link.id: link for link in booking_links}

    async def get_working_window(self, user_id: str, day_of_week: int) -> Optional[WorkingWindow]:
        return self.working_windows.get((user_id, day_of_week))

    async def get_holiday(self, user_id: str, day: date) -> Optional[Holiday]:
        target = as_date(day)
        for holiday in self.holidays:
            if holiday.user_id == user_id and as_date(holiday.date) == target:
                return holiday
        return None

    async def has_holiday(self, user_id: str, day: date) -> bool:
        return await self.get_holiday(user_id, day) is not None

    async def find_overlapping(
        self,
        user_id: str,
        start: DateTime,
        end: DateTime,
        exclude_statuses: Sequence[BookingStatus] = (BookingStatus.CANCELLED,),
    ) -> List[ExistingBooking]:
        requested = TimeRange(start=start, end=end)
        return [
            booking
            for booking in self.bookings
            if booking.user_id == user_id
            and booking.status not in exclude_statuses
            and booking.time_range.overlaps(requested)
        ]

    async def find_last_assigned(self, booking_link_id: str, user_id: str) -> Optional[ExistingBooking]:
        candidates = [
            booking
            for booking in self.bookings
            if booking.booking_link_id == booking_link_id
            and booking.user_id == user_id
            and booking.is_active
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda booking: booking.created_at)

    async def count_active(self, user_id: str, start: DateTime, end: DateTime) -> int:
        return sum(
            1
            for booking in self.bookings
            if booking.user_id == user_id
            and booking.is_active
            and start <= booking.start_time < end
        )

    async def get_booking_link(self, booking_link_id: str) -> Optional[BookingLink]:
        return self.booking_links.get(booking_link_id)

    def add_booking(self, booking: ExistingBooking) -> None:
        self.bookings.append(booking)

    def cancel_booking(self, booking_id: str) -> None:
        self.bookings = [
            replace(booking, status=BookingStatus.CANCELLED) if booking.id == booking_id else booking
            for booking in self.bookings
        ]


class FixtureCalendarGateway:
    """
    Calendar gateway answering from a fixed list of busy ranges per user.

    Users listed in ``unreachable_users`` raise ``UpstreamError``, which lets
    callers exercise calendar outages.
    """

    def __init__(
        self,
        busy: Optional[Dict[str, List[TimeRange]]] = None,
        unreachable_users: Iterable[str] = (),
    ):
        self.busy: Dict[str, List[TimeRange]] = busy or {}
        self.unreachable_users = set(unreachable_users)
        self.calls: List[Tuple[str, DateTime, DateTime]] = []

    async def list_busy_intervals(
        self,
        user_id: str,
        day_start: DateTime,
        day_end: DateTime,
    ) -> List[TimeRange]:
        self.calls.append((user_id, day_start, day_end))
        if user_id in self.unreachable_users:
            raise UpstreamError(f"Calendar for {user_id} is unreachable")

        window = TimeRange(start=day_start, end=day_end)
        return [busy for busy in self.busy.get(user_id, []) if busy.overlaps(window)]


def parse_instant(value: Any, tz: FixedTimezone) -> DateTime:
    """Parse a fixture timestamp; naive values are read in ``tz``."""
    if isinstance(value, datetime):
        return pendulum.instance(value, tz=tz)
    parsed = pendulum.parse(str(value), tz=tz)
    if not isinstance(parsed, DateTime):
        raise ValueError(f"Expected a timestamp, got '{value}'")
    return parsed


def parse_clock_value(value: Any) -> str:
    """YAML reads unquoted 10:00 as the base-60 integer 600."""
    if isinstance(value, int):
        return f"{value // 60:02d}:{value % 60:02d}"
    return str(value)


def parse_day(value: Any) -> date:
    if isinstance(value, date):
        return as_date(value)
    return as_date(date.fromisoformat(str(value)))


def _build_link(raw: Dict[str, Any]) -> BookingLink:
    link_id = str(raw["id"])
    members = tuple(
        BookingLinkMember(
            booking_link_id=link_id,
            user_id=str(member["user_id"]),
            role=MemberRole(member.get("role", MemberRole.VIEWER.value)),
        )
        for member in raw.get("members", [])
    )
    return BookingLink(
        id=link_id,
        user_id=str(raw["user_id"]),
        duration=int(raw["duration"]),
        buffer_time=int(raw.get("buffer_time", 0)),
        advance_notice=int(raw.get("advance_notice", 0)),
        booking_condition=BookingCondition(raw.get("booking_condition", BookingCondition.ALL.value)),
        round_robin_enabled=bool(raw.get("round_robin_enabled", False)),
        members=members,
    )


def build_fixture(
    data: Dict[str, Any],
    tz: Optional[FixedTimezone] = None,
) -> Tuple[InMemoryStore, FixtureCalendarGateway]:
    """
    Build the in-memory store and calendar from a fixture mapping.

    Raises:
        ValueError: If a record is malformed
    """
    tz = tz or governing_timezone()

    try:
        windows = [
            WorkingWindow.from_strings(
                user_id=str(raw["user_id"]),
                day_of_week=int(raw["day_of_week"]),
                start_time=parse_clock_value(raw["start"]),
                end_time=parse_clock_value(raw["end"]),
                is_available=bool(raw.get("is_available", True)),
            )
            for raw in data.get("working_hours", [])
        ]
        holidays = [
            Holiday(
                user_id=str(raw["user_id"]),
                date=parse_day(raw["date"]),
                reason=raw.get("reason"),
            )
            for raw in data.get("holidays", [])
        ]
        bookings = [
            ExistingBooking(
                id=str(raw["id"]),
                booking_link_id=raw.get("booking_link_id"),
                user_id=str(raw["user_id"]),
                start_time=parse_instant(raw["start"], tz),
                end_time=parse_instant(raw["end"], tz),
                status=BookingStatus(raw.get("status", BookingStatus.CONFIRMED.value)),
                created_at=parse_instant(raw.get("created_at", raw["start"]), tz),
            )
            for raw in data.get("bookings", [])
        ]
        links = [_build_link(raw) for raw in data.get("booking_links", [])]

        busy: Dict[str, List[TimeRange]] = {}
        for raw in data.get("busy", []):
            busy.setdefault(str(raw["user_id"]), []).append(
                TimeRange(start=parse_instant(raw["start"], tz), end=parse_instant(raw["end"], tz))
            )
    except KeyError as exc:
        raise ValueError(f"Fixture record is missing field {exc}") from exc

    logger.debug(
        "Loaded fixture: %d window(s), %d holiday(s), %d booking(s), %d link(s)",
        len(windows),
        len(holidays),
        len(bookings),
        len(links),
    )
    store = InMemoryStore(
        working_windows=windows,
        holidays=holidays,
        bookings=bookings,
        booking_links=links,
    )
    return store, FixtureCalendarGateway(busy=busy)


def load_fixture(
    data_file: Path,
    tz: Optional[FixedTimezone] = None,
) -> Tuple[InMemoryStore, FixtureCalendarGateway]:
    """
    Load a YAML or JSON fixture file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the content is invalid
    """
    if not data_file.exists():
        raise FileNotFoundError(f"Data file not found: {data_file}")

    with open(data_file, "r", encoding="utf-8") as f:
        try:
            if data_file.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ValueError(f"Invalid fixture in {data_file}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Fixture file must contain a mapping at the root level.")

    return build_fixture(data, tz=tz)
