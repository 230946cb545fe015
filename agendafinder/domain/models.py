"""
Domain models for date resolution and slot availability.

Clock times are kept as minutes from midnight; the record store speaks
"HH:MM" or "HH:MM:SS" strings, converted at the edges with
``parse_clock`` / ``format_clock``.
"""

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from pendulum import Date

from .locale_pt import weekday_name, weekday_short_name

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")

DEFAULT_BOOKING_DURATION = 30


def parse_clock(value: str) -> int:
    """
    Parse "HH:MM" or "HH:MM:SS" into minutes from midnight.

    Raises:
        ValueError: If the value is not a valid clock time
    """
    match = _CLOCK_RE.match(str(value or ""))
    if not match:
        raise ValueError(f"Invalid clock time: {value!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid clock time: {value!r}")
    return hour * 60 + minute


def format_clock(minutes: int) -> str:
    """Render minutes from midnight as zero-padded "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def weekday_of(day: Date) -> int:
    """Weekday number of a date, 0=Sunday ... 6=Saturday."""
    return day.isoweekday() % 7


@dataclass(frozen=True)
class MinuteRange:
    """
    Half-open range of minutes from midnight, ``[start, end)``.

    Invariant: start must not be after end.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Start {self.start} must not be after end {self.end}")

    @classmethod
    def from_start(cls, start: int, duration_minutes: int) -> "MinuteRange":
        return cls(start=start, end=start + duration_minutes)

    def collides_with(self, occupied: "MinuteRange") -> bool:
        """
        Check whether this candidate range hits an occupied range.

        A collision is any of: the candidate starts inside ``[start, end)``,
        ends inside ``(start, end]``, or fully contains the occupied range.
        """
        return (
            occupied.start <= self.start < occupied.end
            or occupied.start < self.end <= occupied.end
            or (self.start <= occupied.start and self.end >= occupied.end)
        )

    def __str__(self) -> str:
        return f"{format_clock(self.start)} - {format_clock(self.end)}"


@dataclass(frozen=True)
class ResolvedDate:
    """
    A calendar date resolved from a free-form expression.

    The weekday is always derived from ``date`` itself.
    """
    date: Date

    @property
    def iso_date(self) -> str:
        return self.date.to_date_string()

    @property
    def display_date(self) -> str:
        return self.date.strftime("%d/%m/%Y")

    @property
    def weekday_number(self) -> int:
        return weekday_of(self.date)

    @property
    def weekday_name(self) -> str:
        return weekday_name(self.weekday_number)

    def to_dict(self) -> dict:
        return {
            "iso_date": self.iso_date,
            "date": self.display_date,
            "day_of_week": self.weekday_name,
            "day_number": self.weekday_number,
        }


@dataclass
class WorkWindow:
    """
    A configured bookable start time for one attendant.

    ``days`` is the multi-day field, ``day`` the legacy single-day field;
    a window is valid for the union of both.
    """
    id: str
    attendant_id: str
    start_time: int
    days: FrozenSet[int] = frozenset()
    day: Optional[int] = None
    end_time: Optional[int] = None
    duration_minutes: Optional[int] = None
    available: bool = True

    def is_valid_for(self, weekday: int) -> bool:
        return weekday in self.days or self.day == weekday

    @property
    def start_label(self) -> str:
        return format_clock(self.start_time)


@dataclass
class Booking:
    """An existing appointment occupying part of an attendant's day."""
    id: str
    attendant_id: str
    date: Date
    start_time: int
    duration_minutes: int = DEFAULT_BOOKING_DURATION
    status: str = ""
    client_name: str = ""
    client_phone: str = ""
    service_id: str = ""
    service_name: str = ""
    attendant_name: str = ""
    notes: str = ""

    def occupied(self) -> MinuteRange:
        return MinuteRange.from_start(self.start_time, self.duration_minutes)

    def is_cancelled(self, cancelled_statuses: Iterable[str]) -> bool:
        status = (self.status or "").strip().lower()
        return status in {s.lower() for s in cancelled_statuses}

    @property
    def start_label(self) -> str:
        return format_clock(self.start_time)


@dataclass(frozen=True)
class Slot:
    """A bookable start time, computed fresh on every query."""
    start_time: int
    duration_minutes: int

    @property
    def label(self) -> str:
        return format_clock(self.start_time)

    def to_dict(self) -> dict:
        return {"time": self.label, "duration": self.duration_minutes}


@dataclass
class Attendant:
    id: str
    name: str
    active: bool = True
    work_days: FrozenSet[int] = frozenset()

    def works_on(self, weekday: int) -> bool:
        return weekday in self.work_days


@dataclass
class Service:
    id: str
    name: str
    duration_minutes: Optional[int] = None
    price: Optional[float] = None


@dataclass
class CalendarDay:
    """One row of an availability calendar."""
    date: Date
    has_availability: bool
    slot_count: int

    @property
    def weekday(self) -> str:
        return weekday_short_name(weekday_of(self.date))

    def to_dict(self) -> dict:
        return {
            "date": self.date.to_date_string(),
            "day_of_week": self.weekday,
            "has_availability": self.has_availability,
            "available_slots_count": self.slot_count,
        }


@dataclass
class PendingCancellation:
    """Numbered list of bookings shown to a customer who must pick one."""
    options: dict = field(default_factory=dict)  # number -> booking id

    def booking_id_for(self, number: int) -> Optional[str]:
        return self.options.get(number)
