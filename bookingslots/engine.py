"""
Wiring of the booking services around one set of collaborators.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .adapters.memory import load_fixture
from .config import AppConfig
from .domain.slot_generator import SlotGenerator
from .services import (
    AssignmentResolver,
    AvailabilityService,
    BookingLinkStore,
    BookingPlanner,
    BookingStore,
    CalendarGateway,
    HolidayStore,
    SlotMerger,
    StaffStatistics,
    WorkingHoursStore,
)


@dataclass
class BookingEngine:
    availability: AvailabilityService
    resolver: AssignmentResolver
    merger: SlotMerger
    planner: BookingPlanner
    statistics: StaffStatistics

    @classmethod
    def build(
        cls,
        *,
        calendar: CalendarGateway,
        working_hours: WorkingHoursStore,
        holidays: HolidayStore,
        bookings: BookingStore,
        links: BookingLinkStore,
        config: Optional[AppConfig] = None,
    ) -> "BookingEngine":
        config = config or AppConfig()
        tz = config.tzinfo()
        availability = AvailabilityService(
            calendar=calendar,
            working_hours=working_hours,
            holidays=holidays,
            bookings=bookings,
            slot_generator=SlotGenerator(tz=tz),
            default_start=config.default_window.get_start_time(),
            default_end=config.default_window.get_end_time(),
        )
        resolver = AssignmentResolver(links=links, bookings=bookings, availability=availability)
        return cls(
            availability=availability,
            resolver=resolver,
            merger=SlotMerger(availability=availability, resolver=resolver),
            planner=BookingPlanner(availability=availability, resolver=resolver),
            statistics=StaffStatistics(bookings=bookings, tz=tz),
        )

    @classmethod
    def from_fixture(cls, data_file: Path, config: Optional[AppConfig] = None) -> "BookingEngine":
        """Build an engine over the in-memory store and calendar in ``data_file``."""
        config = config or AppConfig()
        store, calendar = load_fixture(data_file, tz=config.tzinfo())
        return cls.build(
            calendar=calendar,
            working_hours=store,
            holidays=store,
            bookings=store,
            links=store,
            config=config,
        )
