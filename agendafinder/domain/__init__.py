"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability_calendar import AvailabilityCalendar
from .booking_conflicts import BookingConflictSet
from .date_resolver import DateExpressionResolver
from .models import Attendant, Booking, CalendarDay, ResolvedDate, Service, Slot, WorkWindow
from .schedule_index import WorkScheduleIndex
from .slot_calculator import SlotAvailabilityCalculator

__all__ = [
    "AvailabilityCalendar",
    "Attendant",
    "Booking",
    "BookingConflictSet",
    "CalendarDay",
    "DateExpressionResolver",
    "ResolvedDate",
    "Service",
    "Slot",
    "SlotAvailabilityCalculator",
    "WorkScheduleIndex",
    "WorkWindow",
]
