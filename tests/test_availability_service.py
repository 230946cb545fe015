"""
Tests for the AvailabilityService orchestration layer.
"""

import pendulum
import pytest

from agendafinder.adapters.mock_record_store import MockRecordStore
from agendafinder.config import AppConfig
from agendafinder.domain.exceptions import (
    AdvanceBookingLimitExceeded,
    AttendantInactive,
    AttendantNotFound,
    AttendantOffDay,
    DateInPast,
    NoWindowsForWeekday,
    NoWorkWindowsConfigured,
    WeekdayMismatch,
)
from agendafinder.services.availability import AvailabilityService

TUESDAY = pendulum.date(2024, 6, 11)


def _appointment(apt_id, date, time, attendant_id="att-ana", status="agendamento_confirmado", duration=30):
    return {
        "id": apt_id,
        "attendant_id": attendant_id,
        "appointment_date": date,
        "appointment_time": time,
        "appointment_datetime": f"{date} {time}",
        "service_duration": duration,
        "status": status,
        "client_phone": "5511999990000",
    }


class TestAvailableSlots:
    """Tests for AvailabilityService.available_slots."""

    def test_free_day(self, availability, now):
        """Ana works Tuesdays with the 09:00 and 10:00 windows."""
        result = availability.available_slots("att-ana", TUESDAY, now=now)

        assert result.slot_labels == ["09:00", "10:00"]
        assert result.service_duration == 30
        assert result.date.weekday_name == "Terça-feira"

    def test_date_expression_is_resolved(self, availability, now):
        result = availability.available_slots("att-ana", "amanhã", now=now)
        assert result.date.iso_date == "2024-06-11"

    def test_bad_expression_propagates(self, availability, now):
        with pytest.raises(WeekdayMismatch):
            availability.available_slots("att-ana", "segunda-feira, 11/06/2024", now=now)

    def test_today_respects_lead_time(self, availability):
        """At 09:45 on Monday only the 11:00 window is far enough ahead."""
        now = pendulum.datetime(2024, 6, 10, 9, 45, tz="America/Sao_Paulo")

        result = availability.available_slots("att-ana", "hoje", now=now)

        assert result.slot_labels == ["11:00"]

    def test_booked_slot_is_removed(self, store, availability, now):
        store.tables["appointments"].append(_appointment("apt-1", "2024-06-11", "09:00"))

        result = availability.available_slots("att-ana", TUESDAY, now=now)

        assert result.slot_labels == ["10:00"]
        assert [b.id for b in result.active_bookings] == ["apt-1"]

    def test_cancelled_booking_does_not_block(self, store, availability, now):
        store.tables["appointments"].append(
            _appointment("apt-1", "2024-06-11", "09:00", status="agendamento_cancelado")
        )

        result = availability.available_slots("att-ana", TUESDAY, now=now)

        assert result.slot_labels == ["09:00", "10:00"]

    def test_service_duration_from_service(self, store, availability, now):
        """A 90 minute colouring at 09:00 would run into a 10:30 booking."""
        store.tables["appointments"].append(_appointment("apt-1", "2024-06-10", "10:30:00"))

        result = availability.available_slots("att-ana", "hoje", service_id="srv-coloracao", now=now)

        assert result.service_duration == 90
        assert result.slot_labels == ["09:00", "11:00"]

    def test_explicit_duration_wins(self, availability, now):
        result = availability.available_slots(
            "att-ana", TUESDAY, service_id="srv-coloracao", service_duration=20, now=now
        )
        assert result.service_duration == 20

    def test_unknown_service_falls_back_to_default(self, availability, now):
        result = availability.available_slots("att-ana", TUESDAY, service_id="srv-x", now=now)
        assert result.service_duration == 30

    def test_legacy_single_day_window(self, availability, now):
        """Bruno's Saturday window only uses the legacy ``day`` field."""
        result = availability.available_slots("att-bruno", pendulum.date(2024, 6, 15), now=now)
        assert result.slot_labels == ["15:00"]

    def test_unavailable_schedule_is_not_offered(self, availability, now):
        """The 16:00 Monday schedule is flagged unavailable."""
        result = availability.available_slots("att-ana", "hoje", now=now)
        assert "16:00" not in result.slot_labels

    def test_duplicate_assignments_are_collapsed(self, store, availability, now):
        store.tables["schedule_assignments"].append(
            {"id": "asg-dup", "attendant_id": "att-ana", "schedule_id": "sch-0900"}
        )

        result = availability.available_slots("att-ana", TUESDAY, now=now)

        assert result.slot_labels == ["09:00", "10:00"]

    def test_to_dict(self, availability, now):
        data = availability.available_slots("att-ana", TUESDAY, now=now).to_dict()

        assert data["date"] == "2024-06-11"
        assert data["attendant"] == "Ana"
        assert data["available_slots"][0] == {"time": "09:00", "duration": 30}

    def test_is_slot_available(self, availability, now):
        assert availability.is_slot_available("att-ana", TUESDAY, "10:00", now=now)
        assert not availability.is_slot_available("att-ana", TUESDAY, "11:00", now=now)


class TestValidation:
    """Each validation failure raises its own error type."""

    def test_date_in_past(self, availability, now):
        with pytest.raises(DateInPast):
            availability.available_slots("att-ana", pendulum.date(2024, 6, 9), now=now)

    def test_advance_booking_limit(self, availability, now):
        assert availability.available_slots("att-ana", pendulum.date(2024, 7, 10), now=now)
        with pytest.raises(AdvanceBookingLimitExceeded) as exc_info:
            availability.available_slots("att-ana", pendulum.date(2024, 7, 11), now=now)
        assert exc_info.value.limit_days == 30

    def test_advance_limit_is_configurable(self, store, now):
        config = AppConfig(defaults={"advance_booking_days": 3})
        service = AvailabilityService.from_config(store, config)

        with pytest.raises(AdvanceBookingLimitExceeded):
            service.available_slots("att-ana", pendulum.date(2024, 6, 14), now=now)

    def test_attendant_not_found(self, availability, now):
        with pytest.raises(AttendantNotFound):
            availability.available_slots("att-nobody", TUESDAY, now=now)

    def test_attendant_inactive(self, availability, now):
        with pytest.raises(AttendantInactive) as exc_info:
            availability.available_slots("att-carla", TUESDAY, now=now)
        assert exc_info.value.name == "Carla"

    def test_attendant_off_day(self, availability, now):
        """Ana does not work Saturdays."""
        with pytest.raises(AttendantOffDay) as exc_info:
            availability.available_slots("att-ana", pendulum.date(2024, 6, 15), now=now)
        assert exc_info.value.weekday == 6

    def test_no_windows_configured(self, now):
        store = MockRecordStore({
            "attendants": [{"id": "att-1", "name": "Davi", "is_active": True, "work_days": ["Terça"]}],
            "schedule_assignments": [],
        })
        service = AvailabilityService.from_config(store, AppConfig())

        with pytest.raises(NoWorkWindowsConfigured):
            service.available_slots("att-1", TUESDAY, now=now)

    def test_no_windows_for_weekday(self, now):
        store = MockRecordStore({
            "attendants": [{"id": "att-1", "name": "Davi", "is_active": True, "work_days": ["Terça", "Quarta"]}],
            "schedules": [{"id": "sch-1", "start_time": "09:00", "days": ["Quarta"], "available": True}],
            "schedule_assignments": [{"id": "asg-1", "attendant_id": "att-1", "schedule_id": "sch-1"}],
        })
        service = AvailabilityService.from_config(store, AppConfig())

        with pytest.raises(NoWindowsForWeekday) as exc_info:
            service.available_slots("att-1", TUESDAY, now=now)
        assert not isinstance(exc_info.value, AttendantOffDay)

    def test_attendant_without_work_days_works_no_day(self, now):
        store = MockRecordStore({
            "attendants": [{"id": "att-1", "name": "Davi", "is_active": True, "work_days": []}],
        })
        service = AvailabilityService.from_config(store, AppConfig())

        with pytest.raises(AttendantOffDay):
            service.available_slots("att-1", TUESDAY, now=now)


class TestCalendar:
    """Tests for AvailabilityService.calendar."""

    def test_ten_day_range(self, availability, now):
        """Weekends are empty for Ana; weekdays count their windows."""
        result = availability.calendar(
            "att-ana", pendulum.date(2024, 6, 10), pendulum.date(2024, 6, 19), now=now
        )

        counts = {day.date.to_date_string(): day.slot_count for day in result.days}
        assert len(result.days) == 10
        assert counts["2024-06-10"] == 3
        assert counts["2024-06-11"] == 2
        assert counts["2024-06-15"] == 0
        assert counts["2024-06-16"] == 0

        sunday = next(day for day in result.days if day.date == pendulum.date(2024, 6, 16))
        assert sunday.has_availability is False

    def test_sunday_stays_empty_regardless_of_bookings(self, store, availability, now):
        store.tables["appointments"].append(_appointment("apt-1", "2024-06-16", "09:00"))

        result = availability.calendar("att-ana", "hoje", pendulum.date(2024, 6, 19), now=now)

        sunday = next(day for day in result.days if day.weekday == "Domingo")
        assert (sunday.has_availability, sunday.slot_count) == (False, 0)

    def test_fully_booked_workday(self, store, availability, now):
        for apt_id, time in (("a", "09:00"), ("b", "10:00")):
            store.tables["appointments"].append(_appointment(apt_id, "2024-06-11", time))

        result = availability.calendar("att-ana", TUESDAY, TUESDAY, now=now)

        assert [(d.has_availability, d.slot_count) for d in result.days] == [(False, 0)]

    def test_past_and_far_days_count_zero(self, availability, now):
        result = availability.calendar(
            "att-ana", pendulum.date(2024, 6, 7), pendulum.date(2024, 6, 10), now=now
        )

        assert [d.slot_count for d in result.days] == [0, 0, 0, 3]

    def test_span_is_clipped(self, store, now):
        config = AppConfig(defaults={"calendar_max_days": 5})
        service = AvailabilityService.from_config(store, config)

        result = service.calendar("att-ana", pendulum.date(2024, 6, 10), pendulum.date(2024, 6, 30), now=now)

        assert len(result.days) == 6

    def test_unknown_attendant(self, availability, now):
        with pytest.raises(AttendantNotFound):
            availability.calendar("att-nobody", TUESDAY, TUESDAY, now=now)


class TestAvailableAttendants:
    """Tests for AvailabilityService.available_attendants."""

    def test_tuesday(self, availability, now):
        """Ana and Bruno work on Tuesdays; Carla is inactive."""
        results = availability.available_attendants(TUESDAY, now=now)

        assert [r.attendant.name for r in results] == ["Ana", "Bruno"]
        assert results[0].slot_labels == ["09:00", "10:00"]
        assert results[1].slot_labels == ["10:00", "14:00"]

    def test_off_day_attendants_are_left_out(self, availability, now):
        results = availability.available_attendants("sábado", now=now)

        assert [r.attendant.id for r in results] == ["att-bruno"]
        assert results[0].slot_labels == ["15:00"]

    def test_fully_booked_attendant_is_left_out(self, store, availability, now):
        for apt_id, time in (("apt-1", "10:00"), ("apt-2", "14:00")):
            store.tables["appointments"].append(
                _appointment(apt_id, "2024-06-11", time, attendant_id="att-bruno")
            )

        results = availability.available_attendants(TUESDAY, now=now)

        assert [r.attendant.id for r in results] == ["att-ana"]

    def test_nobody_on_sunday(self, availability, now):
        assert availability.available_attendants(pendulum.date(2024, 6, 16), now=now) == []

    def test_date_in_past(self, availability, now):
        with pytest.raises(DateInPast):
            availability.available_attendants(pendulum.date(2024, 6, 7), now=now)
