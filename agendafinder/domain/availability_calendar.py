"""
Day-by-day availability summaries over a date range.
"""

from typing import Callable, Iterable, List

from pendulum import Date

from .models import CalendarDay, weekday_of

DEFAULT_CALENDAR_MAX_DAYS = 30


class AvailabilityCalendar:
    """
    Repeats the slot calculation over a date range.

    The range is clipped to ``max_span_days`` after the start date. A day is
    only counted when the attendant normally works that weekday; a workday can
    still show zero slots when it is fully booked.
    """

    def __init__(self, max_span_days: int = DEFAULT_CALENDAR_MAX_DAYS):
        self.max_span_days = max_span_days

    def clip_end(self, start_date: Date, end_date: Date) -> Date:
        return min(end_date, start_date.add(days=self.max_span_days))

    def build(
        self,
        work_days: Iterable[int],
        start_date: Date,
        end_date: Date,
        count_slots: Callable[[Date], int],
    ) -> List[CalendarDay]:
        """
        Build one CalendarDay per date in ``[start_date, clipped end]``.

        Args:
            work_days: Recurring weekdays of the attendant (0=Sunday)
            start_date: First day of the range
            end_date: Requested last day of the range
            count_slots: Returns the number of bookable slots on a date;
                only called for workdays

        Returns:
            Calendar rows in date order
        """
        workdays = frozenset(work_days)
        last = self.clip_end(start_date, end_date)
        days: List[CalendarDay] = []

        current = start_date
        while current <= last:
            slot_count = count_slots(current) if weekday_of(current) in workdays else 0
            days.append(
                CalendarDay(
                    date=current,
                    has_availability=slot_count > 0,
                    slot_count=slot_count,
                )
            )
            current = current.add(days=1)

        return days
