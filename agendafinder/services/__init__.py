"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability import AvailabilityResult, AvailabilityService, CalendarResult
from .bookings import BookingRequest, BookingService
from .conversation import ConversationContext
from .records import RecordStoreProtocol, ScheduleRecords
from .replies import SchedulingAssistant, describe_error

__all__ = [
    "AvailabilityResult",
    "AvailabilityService",
    "BookingRequest",
    "BookingService",
    "CalendarResult",
    "ConversationContext",
    "RecordStoreProtocol",
    "ScheduleRecords",
    "SchedulingAssistant",
    "describe_error",
]
