"""
Core business logic for calculating bookable time slots.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
from typing import Dict, Iterable, List

from pendulum import Date, DateTime

from .booking_conflicts import DEFAULT_CANCELLED_STATUSES, find_collision
from .models import Booking, MinuteRange, Slot, WorkWindow, weekday_of

logger = logging.getLogger(__name__)

DEFAULT_LEAD_TIME_MINUTES = 30


class SlotAvailabilityCalculator:
    """
    Calculates bookable slots from work windows and existing bookings.

    Each work window is a fixed bookable start time, not a range to be
    subdivided. Algorithm:
    1. Take the start time of every window valid for the target weekday
    2. On today's date, drop starts earlier than now + lead time
    3. Drop starts whose [start, start + service duration) hits a booking
    4. Collapse duplicate start times (first window wins)
    5. Return the survivors ordered by start time
    """

    def __init__(
        self,
        lead_time_minutes: int = DEFAULT_LEAD_TIME_MINUTES,
        cancelled_statuses: Iterable[str] = DEFAULT_CANCELLED_STATUSES,
    ):
        self.lead_time_minutes = lead_time_minutes
        self.cancelled_statuses = frozenset(s.lower() for s in cancelled_statuses)

    def available_slots(
        self,
        windows: Iterable[WorkWindow],
        bookings: Iterable[Booking],
        service_duration: int,
        target_date: Date,
        now: DateTime,
    ) -> List[Slot]:
        """
        Find all bookable slots for one attendant on one date.

        Args:
            windows: The attendant's work windows
            bookings: The attendant's bookings on ``target_date``
            service_duration: Length of the service being booked, in minutes
            target_date: Day being queried
            now: Current instant, in the business timezone

        Returns:
            Slots ordered by start time; empty when nothing fits
        """
        weekday = weekday_of(target_date)
        is_today = target_date == now.date()
        active = self._active_bookings(bookings, target_date)

        # Step 1: candidate starts from windows valid for the weekday
        candidates = [
            window for window in windows
            if window.available and window.is_valid_for(weekday)
        ]

        if not candidates:
            return []

        slots: Dict[int, Slot] = {}

        for window in candidates:
            start = window.start_time

            # Step 4: duplicates from overlapping window records
            if start in slots:
                continue

            # Step 2: minimum lead time on the current day
            if is_today and self._too_soon(start, now):
                logger.debug("Skipping %s: earlier than the lead time", window.start_label)
                continue

            # Step 3: conflicts with existing bookings
            candidate = MinuteRange.from_start(start, service_duration)
            if find_collision(candidate, active) is not None:
                continue

            slots[start] = Slot(start_time=start, duration_minutes=service_duration)

        # Step 5: ordered by start time
        return sorted(slots.values(), key=lambda slot: slot.start_time)

    def _active_bookings(self, bookings: Iterable[Booking], target_date: Date) -> List[Booking]:
        return [
            booking for booking in bookings
            if booking.date == target_date
            and not booking.is_cancelled(self.cancelled_statuses)
        ]

    def _too_soon(self, start: int, now: DateTime) -> bool:
        earliest = now.add(minutes=self.lead_time_minutes)
        candidate = now.set(hour=start // 60, minute=start % 60, second=0, microsecond=0)
        return candidate < earliest

