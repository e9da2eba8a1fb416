"""
Domain models for booking links, working hours and bookable slots.
"""

from dataclasses import dataclass, field, replace
from datetime import date, time
from enum import Enum
from typing import Optional, Tuple

from pendulum import DateTime

DEFAULT_WORKDAY_START = time(9, 0)
DEFAULT_WORKDAY_END = time(18, 0)


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range ``[start, end)``.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another (touching ends do not count)."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"{self.start.format('YYYY-MM-DD HH:mm')} - {self.end.format('HH:mm')}"


# Busy time reported by the external calendar.
BusyInterval = TimeRange


def parse_clock(value: str) -> time:
    """Parse an ``HH:MM`` string as stored with working hours."""
    try:
        hour, minute = (int(part) for part in value.split(":"))
        return time(hour=hour, minute=minute)
    except ValueError as exc:
        raise ValueError(f"Invalid time of day '{value}', expected HH:MM") from exc


@dataclass(frozen=True)
class WorkingWindow:
    """
    A user's open interval for one weekday.

    ``day_of_week`` follows the stored convention 0=Sunday .. 6=Saturday.
    """
    user_id: str
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool = True

    def __post_init__(self):
        if self.day_of_week not in range(7):
            raise ValueError(f"day_of_week must be between 0 and 6, got {self.day_of_week}")

    @classmethod
    def from_strings(
        cls,
        user_id: str,
        day_of_week: int,
        start_time: str,
        end_time: str,
        is_available: bool = True,
    ) -> "WorkingWindow":
        return cls(
            user_id=user_id,
            day_of_week=day_of_week,
            start_time=parse_clock(start_time),
            end_time=parse_clock(end_time),
            is_available=is_available,
        )

    @classmethod
    def default(
        cls,
        user_id: str,
        day_of_week: int,
        start_time: time = DEFAULT_WORKDAY_START,
        end_time: time = DEFAULT_WORKDAY_END,
    ) -> "WorkingWindow":
        """The window used when a user never configured this weekday."""
        return cls(
            user_id=user_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
        )


@dataclass(frozen=True)
class Holiday:
    """A calendar day on which the user takes no bookings."""
    user_id: str
    date: date
    reason: Optional[str] = None


class BookingStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class ExistingBooking:
    """The subset of a stored booking needed for overlap and fairness checks."""
    id: str
    booking_link_id: Optional[str]
    user_id: str
    start_time: DateTime
    end_time: DateTime
    status: BookingStatus
    created_at: DateTime

    @property
    def is_active(self) -> bool:
        return self.status is not BookingStatus.CANCELLED

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)


class MemberRole(str, Enum):
    OWNER = "OWNER"
    VIEWER = "VIEWER"


@dataclass(frozen=True)
class BookingLinkMember:
    booking_link_id: str
    user_id: str
    role: MemberRole = MemberRole.VIEWER


class BookingCondition(str, Enum):
    ALL = "ALL"  # every member must be free
    ANY = "ANY"  # one free member is enough


@dataclass(frozen=True)
class BookingLink:
    """
    A public booking page and its scheduling policy.

    ``round_robin_enabled`` alone decides between ALL and ANY semantics;
    ``booking_condition`` is kept for display and consistency checks.
    """
    id: str
    user_id: str
    duration: int
    buffer_time: int = 0
    advance_notice: int = 0
    booking_condition: BookingCondition = BookingCondition.ALL
    round_robin_enabled: bool = False
    members: Tuple[BookingLinkMember, ...] = field(default_factory=tuple)

    @property
    def has_inconsistent_policy(self) -> bool:
        return self.round_robin_enabled != (self.booking_condition is BookingCondition.ANY)

    def owner_member(self) -> Optional[BookingLinkMember]:
        for member in self.members:
            if member.role is MemberRole.OWNER:
                return member
        return None


@dataclass(frozen=True)
class Slot:
    """
    A bookable window, optionally carrying the host it would be assigned to.
    """
    start: DateTime
    end: DateTime
    assigned_user: Optional[str] = None

    @property
    def key(self) -> str:
        """Merge key: the ISO-8601 form of the start instant."""
        return self.start.to_iso8601_string()

    def with_assignee(self, user_id: str) -> "Slot":
        return replace(self, assigned_user=user_id)


@dataclass(frozen=True)
class StaffAvailability:
    """Summary of whether a staff member works on a given day and why not."""
    user_id: str
    date: date
    is_available: bool
    reason: Optional[str] = None
    window: Optional[WorkingWindow] = None
