"""
Service layer helpers that orchestrate collaborators and domain logic.
"""

from .assignment import AssignmentResolver
from .availability import AvailabilityService
from .booking_planner import BookingPlan, BookingPlanner
from .protocols import (
    BookingLinkStore,
    BookingStore,
    CalendarGateway,
    HolidayStore,
    WorkingHoursStore,
)
from .slot_merger import SlotMerger
from .statistics import StaffStatistics

__all__ = [
    "AssignmentResolver",
    "AvailabilityService",
    "BookingPlan",
    "BookingPlanner",
    "BookingLinkStore",
    "BookingStore",
    "CalendarGateway",
    "HolidayStore",
    "WorkingHoursStore",
    "SlotMerger",
    "StaffStatistics",
]
