"""
Tests for slot calculator.
"""

import pendulum

from agendafinder.domain.models import Booking, WorkWindow, parse_clock
from agendafinder.domain.slot_calculator import SlotAvailabilityCalculator

TZ = "America/Sao_Paulo"
MONDAY = pendulum.date(2024, 6, 10)
TUESDAY = pendulum.date(2024, 6, 11)
WEEKDAYS = frozenset({1, 2, 3, 4, 5})


def _window(start: str, days=WEEKDAYS, window_id=None, available=True, day=None) -> WorkWindow:
    return WorkWindow(
        id=window_id or f"sch-{start}",
        attendant_id="att-1",
        start_time=parse_clock(start),
        days=frozenset(days),
        day=day,
        available=available,
    )


def _booking(start: str, duration: int = 30, date=TUESDAY, status: str = "agendamento_confirmado") -> Booking:
    return Booking(
        id=f"apt-{start}",
        attendant_id="att-1",
        date=date,
        start_time=parse_clock(start),
        duration_minutes=duration,
        status=status,
    )


def _labels(slots):
    return [slot.label for slot in slots]


class TestSlotAvailabilityCalculator:
    """Tests for SlotAvailabilityCalculator."""

    def setup_method(self):
        self.calculator = SlotAvailabilityCalculator(lead_time_minutes=30)
        self.earlier = pendulum.datetime(2024, 6, 10, 8, 0, tz=TZ)

    def test_no_bookings_returns_all_windows_sorted(self):
        """Windows come back ordered by start time."""
        windows = [_window("14:00"), _window("09:00"), _window("10:00")]

        slots = self.calculator.available_slots(windows, [], 30, TUESDAY, self.earlier)

        assert _labels(slots) == ["09:00", "10:00", "14:00"]
        assert all(slot.duration_minutes == 30 for slot in slots)

    def test_booking_at_same_time_blocks_slot(self):
        """A single 09:00 window with a 09:00 booking leaves nothing."""
        slots = self.calculator.available_slots(
            [_window("09:00")], [_booking("09:00")], 30, TUESDAY, self.earlier
        )

        assert slots == []

    def test_booking_overlapping_start_blocks_slot(self):
        """A booking from 08:45 to 09:15 covers the 09:00 start."""
        slots = self.calculator.available_slots(
            [_window("09:00"), _window("10:00")], [_booking("08:45")], 30, TUESDAY, self.earlier
        )

        assert _labels(slots) == ["10:00"]

    def test_adjacent_booking_does_not_block(self):
        """Half-open ranges: a booking ending at 09:00 leaves 09:00 free."""
        slots = self.calculator.available_slots(
            [_window("09:00")], [_booking("08:30")], 30, TUESDAY, self.earlier
        )

        assert _labels(slots) == ["09:00"]

    def test_long_service_contains_booking(self):
        """A 90 minute service starting at 10:00 swallows a 10:30 booking."""
        windows = [_window("09:00"), _window("10:00"), _window("11:00")]

        slots = self.calculator.available_slots(
            windows, [_booking("10:30")], 90, TUESDAY, self.earlier
        )

        assert _labels(slots) == ["09:00", "11:00"]
        assert slots[0].duration_minutes == 90

    def test_cancelled_bookings_are_ignored(self):
        """Cancelled status (any case) does not occupy the slot."""
        bookings = [_booking("09:00", status="Agendamento_Cancelado")]

        slots = self.calculator.available_slots(
            [_window("09:00")], bookings, 30, TUESDAY, self.earlier
        )

        assert _labels(slots) == ["09:00"]

    def test_bookings_on_other_dates_are_ignored(self):
        bookings = [_booking("09:00", date=MONDAY)]

        slots = self.calculator.available_slots(
            [_window("09:00")], bookings, 30, TUESDAY, self.earlier
        )

        assert _labels(slots) == ["09:00"]

    def test_lead_time_on_current_day(self):
        """Today, starts before now + 30 min are dropped; now + 45 min is kept."""
        now = pendulum.datetime(2024, 6, 11, 10, 0, tz=TZ)
        windows = [_window("09:00"), _window("10:15"), _window("10:45")]

        slots = self.calculator.available_slots(windows, [], 30, TUESDAY, now)

        assert _labels(slots) == ["10:45"]

    def test_lead_time_only_applies_today(self):
        """On a later date even early windows are offered."""
        now = pendulum.datetime(2024, 6, 10, 18, 0, tz=TZ)

        slots = self.calculator.available_slots([_window("09:00")], [], 30, TUESDAY, now)

        assert _labels(slots) == ["09:00"]

    def test_duplicate_start_times_collapse(self):
        """Two windows with the same start produce one slot."""
        windows = [_window("09:00", window_id="a"), _window("09:00", window_id="b")]

        slots = self.calculator.available_slots(windows, [], 30, TUESDAY, self.earlier)

        assert _labels(slots) == ["09:00"]

    def test_windows_for_other_weekdays_and_unavailable_are_skipped(self):
        windows = [
            _window("09:00", days={6}),
            _window("10:00", available=False),
            _window("11:00", days=set(), day=2),
        ]

        slots = self.calculator.available_slots(windows, [], 30, TUESDAY, self.earlier)

        assert _labels(slots) == ["11:00"]

    def test_no_windows(self):
        assert self.calculator.available_slots([], [], 30, TUESDAY, self.earlier) == []
