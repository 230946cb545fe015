"""
Existing bookings and the time ranges they occupy.
"""

import logging
from typing import Iterable, List, Optional

from pendulum import Date

from .models import Booking, MinuteRange

logger = logging.getLogger(__name__)

DEFAULT_CANCELLED_STATUSES = ("cancelled", "canceled", "cancelado", "agendamento_cancelado")


def find_collision(candidate: MinuteRange, bookings: Iterable[Booking]) -> Optional[Booking]:
    """Return the first booking the candidate range collides with, if any."""
    for booking in bookings:
        if candidate.collides_with(booking.occupied()):
            logger.debug(
                "Candidate %s collides with booking %s at %s",
                candidate, booking.id, booking.start_label,
            )
            return booking
    return None


class BookingConflictSet:
    """
    Active bookings for conflict detection.

    Cancelled bookings are kept out; every other status (awaiting, started,
    confirmed, ...) blocks its ``[start, start + duration)`` range.
    """

    def __init__(
        self,
        bookings: Iterable[Booking],
        cancelled_statuses: Iterable[str] = DEFAULT_CANCELLED_STATUSES,
    ):
        self.cancelled_statuses = frozenset(s.lower() for s in cancelled_statuses)
        self._bookings: List[Booking] = list(bookings)

    def active_bookings_for(self, attendant_id: str, date: Date) -> List[Booking]:
        return [
            booking for booking in self._bookings
            if booking.attendant_id == attendant_id
            and booking.date == date
            and not booking.is_cancelled(self.cancelled_statuses)
        ]

    def conflicts(
        self,
        attendant_id: str,
        date: Date,
        candidate: MinuteRange,
    ) -> Optional[Booking]:
        return find_collision(candidate, self.active_bookings_for(attendant_id, date))
