"""
Domain layer - Pure business logic without external dependencies.
"""

from .models import (
    BookingCondition,
    BookingLink,
    BookingLinkMember,
    BookingStatus,
    BusyInterval,
    ExistingBooking,
    Holiday,
    MemberRole,
    Slot,
    StaffAvailability,
    TimeRange,
    WorkingWindow,
)
from .slot_generator import SlotGenerator

__all__ = [
    "BookingCondition",
    "BookingLink",
    "BookingLinkMember",
    "BookingStatus",
    "BusyInterval",
    "ExistingBooking",
    "Holiday",
    "MemberRole",
    "Slot",
    "StaffAvailability",
    "TimeRange",
    "WorkingWindow",
    "SlotGenerator",
]
