"""
Domain-specific exception hierarchy for the booking slot engine.

"No one is free" is a valid business outcome and is never raised from the
core: slot listings come back empty and assignments come back as ``None``.
"""


class BookingSlotsError(Exception):
    """Base class for all application-level errors."""


class NotFoundError(BookingSlotsError):
    """Raised when a referenced record does not exist."""


class BookingLinkNotFoundError(NotFoundError):
    """Raised when a booking link id cannot be resolved."""

    def __init__(self, booking_link_id: str):
        super().__init__(f"Booking link not found: {booking_link_id}")
        self.booking_link_id = booking_link_id


class UpstreamError(BookingSlotsError):
    """Raised when calendar or store data cannot be fetched or parsed."""


class BookingRejectedError(BookingSlotsError):
    """Raised when a booking request must be refused to the guest."""


class BookingTooSoonError(BookingRejectedError):
    """Raised when the requested start violates the advance notice."""


class NoAvailableStaffError(BookingRejectedError):
    """Raised when nobody can take the requested slot any more."""
