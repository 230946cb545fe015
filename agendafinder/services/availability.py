"""
Application service for availability queries.

Coordinates loading attendants, work windows and bookings through the
record store and delegates the actual slot calculation to the domain-level
``SlotAvailabilityCalculator``. Nothing is cached: every call reads the
current bookings, since they can change between two messages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

import pendulum
from pendulum import Date, DateTime

from ..config import AppConfig, DefaultsConfig
from ..domain.availability_calendar import AvailabilityCalendar
from ..domain.booking_conflicts import BookingConflictSet
from ..domain.date_resolver import DateExpressionResolver
from ..domain.exceptions import (
    AdvanceBookingLimitExceeded,
    AttendantInactive,
    AttendantNotFound,
    AttendantOffDay,
    AvailabilityError,
    DateInPast,
    NoWindowsForWeekday,
    NoWorkWindowsConfigured,
)
from ..domain.models import (
    Attendant,
    Booking,
    CalendarDay,
    ResolvedDate,
    Slot,
    parse_clock,
    weekday_of,
)
from ..domain.schedule_index import WorkScheduleIndex
from ..domain.slot_calculator import SlotAvailabilityCalculator
from .records import RecordStoreProtocol, ScheduleRecords

logger = logging.getLogger(__name__)

DateInput = Union[Date, str]


@dataclass
class AvailabilityResult:
    """Bookable slots of one attendant on one date."""
    attendant: Attendant
    date: ResolvedDate
    service_duration: int
    slots: List[Slot] = field(default_factory=list)
    active_bookings: List[Booking] = field(default_factory=list)

    @property
    def slot_labels(self) -> List[str]:
        return [slot.label for slot in self.slots]

    def to_dict(self) -> dict:
        return {
            "date": self.date.iso_date,
            "day_of_week": self.date.weekday_name,
            "attendant": self.attendant.name,
            "service_duration": self.service_duration,
            "available_slots": [slot.to_dict() for slot in self.slots],
        }


@dataclass
class CalendarResult:
    attendant: Attendant
    days: List[CalendarDay] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "attendant": self.attendant.name,
            "calendar": [day.to_dict() for day in self.days],
        }


class AvailabilityService:
    """
    Answers "when can I book?" questions for the conversation layer.

    Exposes three query operations: ``resolve_date_expression``,
    ``available_slots`` and ``calendar``. Each returns a result object or
    raises a typed ``AgendaError``.
    """

    def __init__(
        self,
        records: ScheduleRecords,
        resolver: DateExpressionResolver,
        calculator: SlotAvailabilityCalculator,
        calendar: AvailabilityCalendar,
        defaults: Optional[DefaultsConfig] = None,
        timezone: str = "America/Sao_Paulo",
        cancelled_statuses: Optional[List[str]] = None,
    ) -> None:
        self._records = records
        self._resolver = resolver
        self._calculator = calculator
        self._calendar = calendar
        self.defaults = defaults or DefaultsConfig()
        self.timezone = timezone
        self.cancelled_statuses = cancelled_statuses or list(calculator.cancelled_statuses)

    @classmethod
    def from_config(cls, store: RecordStoreProtocol, config: AppConfig) -> "AvailabilityService":
        """Wire the service with every constant taken from the configuration."""
        defaults = config.defaults
        cancelled = config.statuses.cancelled_aliases
        return cls(
            records=ScheduleRecords(store, default_booking_duration=defaults.booking_duration_minutes),
            resolver=DateExpressionResolver(timezone=config.timezone),
            calculator=SlotAvailabilityCalculator(
                lead_time_minutes=defaults.lead_time_minutes,
                cancelled_statuses=cancelled,
            ),
            calendar=AvailabilityCalendar(max_span_days=defaults.calendar_max_days),
            defaults=defaults,
            timezone=config.timezone,
            cancelled_statuses=cancelled,
        )

    @property
    def records(self) -> ScheduleRecords:
        return self._records

    def now(self) -> DateTime:
        return pendulum.now(self.timezone)

    def resolve_date_expression(self, expression: str, now: Optional[DateTime] = None) -> ResolvedDate:
        return self._resolver.resolve(expression, now or self.now())

    def available_slots(
        self,
        attendant_id: str,
        date: DateInput,
        service_id: Optional[str] = None,
        service_duration: Optional[int] = None,
        now: Optional[DateTime] = None,
    ) -> AvailabilityResult:
        """
        Compute the bookable slots of an attendant on a date.

        Args:
            attendant_id: Attendant to query
            date: A date, or a raw expression resolved first
            service_id: Service whose duration sizes the slots
            service_duration: Explicit duration, overrides the service lookup
            now: Current instant (defaults to now in the business timezone)

        Returns:
            AvailabilityResult with slots ordered by start time

        Raises:
            DateResolutionError: ``date`` is an expression that cannot be resolved
            AvailabilityError: Validation failed (past date, unknown attendant, ...)
            RecordStoreError: The record store could not be read
        """
        now = now or self.now()
        target = self._target_date(date, now)

        self._check_booking_window(target, now)
        attendant = self._load_attendant(attendant_id)
        duration = self._service_duration(service_id, service_duration)

        index = WorkScheduleIndex(self._records.work_windows(attendant.id))
        slots, active = self._compute(attendant, index, target, duration, now)

        logger.info(
            "Attendant %s on %s: %d slot(s) for %d min",
            attendant.id, target.to_date_string(), len(slots), duration,
        )
        return AvailabilityResult(
            attendant=attendant,
            date=ResolvedDate(date=target),
            service_duration=duration,
            slots=slots,
            active_bookings=active,
        )

    def is_slot_available(
        self,
        attendant_id: str,
        date: DateInput,
        time: str,
        service_id: Optional[str] = None,
        service_duration: Optional[int] = None,
        now: Optional[DateTime] = None,
    ) -> bool:
        """Check one specific "HH:MM" start time."""
        start = parse_clock(time)
        result = self.available_slots(attendant_id, date, service_id, service_duration, now)
        return any(slot.start_time == start for slot in result.slots)

    def calendar(
        self,
        attendant_id: str,
        start_date: DateInput,
        end_date: DateInput,
        service_id: Optional[str] = None,
        service_duration: Optional[int] = None,
        now: Optional[DateTime] = None,
    ) -> CalendarResult:
        """
        Summarize availability day by day.

        Days on which the slot computation fails validation (past dates,
        beyond the advance limit, no windows) count as zero slots.
        """
        now = now or self.now()
        start = self._target_date(start_date, now)
        end = self._target_date(end_date, now)

        attendant = self._load_attendant(attendant_id)
        duration = self._service_duration(service_id, service_duration)
        index = WorkScheduleIndex(self._records.work_windows(attendant.id))

        def count_slots(day: Date) -> int:
            try:
                self._check_booking_window(day, now)
                slots, _ = self._compute(attendant, index, day, duration, now)
            except AvailabilityError as e:
                logger.debug("No slots on %s: %s", day.to_date_string(), e)
                return 0
            return len(slots)

        days = self._calendar.build(attendant.work_days, start, end, count_slots)
        return CalendarResult(attendant=attendant, days=days)

    def available_attendants(
        self,
        date: DateInput,
        service_id: Optional[str] = None,
        service_duration: Optional[int] = None,
        now: Optional[DateTime] = None,
    ) -> List[AvailabilityResult]:
        """
        Find every attendant with at least one free slot on a date.

        Inactive attendants, attendants off on that weekday or without
        windows for it, and fully booked attendants are left out. Results
        follow the record store's name order.

        Raises:
            DateInPast / AdvanceBookingLimitExceeded: The date itself is not bookable
        """
        now = now or self.now()
        target = self._target_date(date, now)
        self._check_booking_window(target, now)
        duration = self._service_duration(service_id, service_duration)

        results = []
        for attendant in self._records.attendants():
            if not attendant.active:
                continue
            index = WorkScheduleIndex(self._records.work_windows(attendant.id))
            try:
                slots, active = self._compute(attendant, index, target, duration, now)
            except AvailabilityError as e:
                logger.debug("Skipping %s on %s: %s", attendant.id, target.to_date_string(), e)
                continue
            if slots:
                results.append(AvailabilityResult(
                    attendant=attendant,
                    date=ResolvedDate(date=target),
                    service_duration=duration,
                    slots=slots,
                    active_bookings=active,
                ))

        logger.info("%d attendant(s) available on %s", len(results), target.to_date_string())
        return results

    def _target_date(self, value: DateInput, now: DateTime) -> Date:
        if isinstance(value, str):
            return self._resolver.resolve(value, now).date
        return pendulum.date(value.year, value.month, value.day)

    def _check_booking_window(self, target: Date, now: DateTime) -> None:
        today = pendulum.date(now.year, now.month, now.day)
        if target < today:
            raise DateInPast(target)

        limit = self.defaults.advance_booking_days
        if target > today.add(days=limit):
            raise AdvanceBookingLimitExceeded(target, limit)

    def _load_attendant(self, attendant_id: str) -> Attendant:
        attendant = self._records.attendant(attendant_id)
        if attendant is None:
            raise AttendantNotFound(attendant_id)
        if not attendant.active:
            raise AttendantInactive(attendant.id, attendant.name)
        return attendant

    def _service_duration(self, service_id: Optional[str], explicit: Optional[int]) -> int:
        if explicit:
            return explicit
        if service_id:
            service = self._records.service(service_id)
            if service and service.duration_minutes:
                return service.duration_minutes
            logger.info("Service %s has no duration, using the default", service_id)
        return self.defaults.service_duration_minutes

    def _compute(
        self,
        attendant: Attendant,
        index: WorkScheduleIndex,
        target: Date,
        duration: int,
        now: DateTime,
    ):
        weekday = weekday_of(target)

        if not attendant.works_on(weekday):
            raise AttendantOffDay(attendant.id, weekday, attendant.name)
        if not index.has_windows(attendant.id):
            raise NoWorkWindowsConfigured(attendant.id, attendant.name)

        windows = index.windows_for(attendant.id, weekday)
        if not windows:
            raise NoWindowsForWeekday(attendant.id, weekday, attendant.name)

        conflicts = BookingConflictSet(
            self._records.bookings(attendant.id, target),
            cancelled_statuses=self.cancelled_statuses,
        )
        active = conflicts.active_bookings_for(attendant.id, target)

        slots = self._calculator.available_slots(windows, active, duration, target, now)
        return slots, active
