"""
Domain-specific exception hierarchy for the scheduling engine.

Every error is recoverable at the call boundary: the reply layer turns each
one into a Portuguese message for the customer.
"""

from __future__ import annotations

from typing import Optional

from pendulum import Date


class AgendaError(Exception):
    """Base class for all application-level errors."""


class RecordStoreError(AgendaError):
    """Raised when the record store cannot be reached or returns garbage."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# --- date resolution -------------------------------------------------------


class DateResolutionError(AgendaError):
    """Raised when a date expression cannot be turned into a calendar date."""

    def __init__(self, message: str, expression: str = "") -> None:
        super().__init__(message)
        self.expression = expression


class UnknownMonth(DateResolutionError):
    def __init__(self, month_name: str, expression: str = "") -> None:
        super().__init__(f"Unknown month name: {month_name!r}", expression)
        self.month_name = month_name


class InvalidCalendarDate(DateResolutionError):
    def __init__(self, day: int, month: int, year: int, expression: str = "") -> None:
        super().__init__(f"Invalid calendar date: {day}/{month}/{year}", expression)
        self.day = day
        self.month = month
        self.year = year


class WeekdayMismatch(DateResolutionError):
    """
    The weekday the user typed disagrees with the weekday of the date.

    ``expected`` is the typed weekday, ``actual`` the real one (0=Sunday).
    """

    def __init__(self, expected: int, actual: int, derived_date: Date, expression: str = "") -> None:
        super().__init__(
            f"{derived_date.to_date_string()} falls on weekday {actual}, not {expected}",
            expression,
        )
        self.expected = expected
        self.actual = actual
        self.derived_date = derived_date


class UnrecognizedFormat(DateResolutionError):
    def __init__(self, expression: str) -> None:
        super().__init__(f"Unrecognized date expression: {expression!r}", expression)


# --- availability ----------------------------------------------------------


class AvailabilityError(AgendaError):
    """Raised when availability cannot be computed for an attendant/date."""


class AttendantNotFound(AvailabilityError):
    def __init__(self, attendant_id: str) -> None:
        super().__init__(f"Attendant not found: {attendant_id}")
        self.attendant_id = attendant_id


class AttendantInactive(AvailabilityError):
    def __init__(self, attendant_id: str, name: str = "") -> None:
        super().__init__(f"Attendant is inactive: {name or attendant_id}")
        self.attendant_id = attendant_id
        self.name = name


class NoWorkWindowsConfigured(AvailabilityError):
    def __init__(self, attendant_id: str, name: str = "") -> None:
        super().__init__(f"No work windows configured for {name or attendant_id}")
        self.attendant_id = attendant_id
        self.name = name


class NoWindowsForWeekday(AvailabilityError):
    def __init__(self, attendant_id: str, weekday: int, name: str = "") -> None:
        super().__init__(f"No work windows for weekday {weekday} ({name or attendant_id})")
        self.attendant_id = attendant_id
        self.weekday = weekday
        self.name = name


class AttendantOffDay(NoWindowsForWeekday):
    """The weekday is outside the attendant's recurring work days."""


class DateInPast(AvailabilityError):
    def __init__(self, target_date: Date) -> None:
        super().__init__(f"Date is in the past: {target_date.to_date_string()}")
        self.target_date = target_date


class AdvanceBookingLimitExceeded(AvailabilityError):
    def __init__(self, target_date: Date, limit_days: int) -> None:
        super().__init__(
            f"Date {target_date.to_date_string()} is more than {limit_days} days ahead"
        )
        self.target_date = target_date
        self.limit_days = limit_days


# --- bookings --------------------------------------------------------------


class BookingError(AgendaError):
    """Raised when a booking cannot be created or cancelled."""


class MissingBookingField(BookingError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required booking field: {field}")
        self.field = field


class SlotUnavailable(BookingError):
    def __init__(self, start_time: str, target_date: Date) -> None:
        super().__init__(f"{start_time} is not available on {target_date.to_date_string()}")
        self.start_time = start_time
        self.target_date = target_date


class BookingNotFound(BookingError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Booking not found: {booking_id}")
        self.booking_id = booking_id


class BookingAlreadyCancelled(BookingError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Booking already cancelled: {booking_id}")
        self.booking_id = booking_id


class BookingCompleted(BookingError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Booking already completed: {booking_id}")
        self.booking_id = booking_id


class NoPendingSelection(BookingError):
    """A numbered cancellation was requested before any list was shown."""


class InvalidSelection(BookingError):
    def __init__(self, number: int, options: int) -> None:
        super().__init__(f"Selection {number} is not between 1 and {options}")
        self.number = number
        self.options = options
