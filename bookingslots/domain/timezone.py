"""
Fixed-offset time arithmetic.

Every wall-clock to instant conversion goes through this module so the
organisation-wide offset can later be replaced by per-user zones without
touching the slot algorithm.
"""

from datetime import date, time
from typing import Tuple

import pendulum
from pendulum import Date, DateTime, FixedTimezone

DEFAULT_UTC_OFFSET_HOURS = 9


def governing_timezone(offset_hours: int = DEFAULT_UTC_OFFSET_HOURS) -> FixedTimezone:
    """Return the fixed timezone all working hours are interpreted in."""
    return pendulum.fixed_timezone(offset_hours * 3600)


def as_date(day: date) -> Date:
    """Normalise any ``datetime.date`` to a pendulum ``Date``."""
    return pendulum.date(day.year, day.month, day.day)


def local_datetime(day: date, time_of_day: time, tz: FixedTimezone) -> DateTime:
    """Combine a calendar day and a wall-clock time into an instant."""
    return pendulum.datetime(
        day.year,
        day.month,
        day.day,
        time_of_day.hour,
        time_of_day.minute,
        tz=tz,
    )


def local_date(instant: DateTime, tz: FixedTimezone) -> Date:
    """Return the calendar day an instant falls on in the governing zone."""
    return instant.in_timezone(tz).date()


def day_bounds(day: date, tz: FixedTimezone) -> Tuple[DateTime, DateTime]:
    """Half-open ``[00:00, next 00:00)`` range covering one local day."""
    start = local_datetime(day, time(0, 0), tz)
    return start, start.add(days=1)


def day_of_week(day: date) -> int:
    """Weekday index as stored with working hours: 0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7
