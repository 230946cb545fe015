"""
Tests for Portuguese replies and the SchedulingAssistant facade.
"""

import pendulum
import pytest

from agendafinder.config import AppConfig
from agendafinder.domain.exceptions import (
    AdvanceBookingLimitExceeded,
    AttendantOffDay,
    InvalidSelection,
    RecordStoreError,
    UnrecognizedFormat,
    WeekdayMismatch,
)
from agendafinder.services.availability import AvailabilityService
from agendafinder.services.bookings import BookingRequest, BookingService
from agendafinder.services.conversation import ConversationContext
from agendafinder.services.replies import GENERIC_FAILURE, SchedulingAssistant, describe_error


@pytest.fixture
def assistant(availability, bookings):
    return SchedulingAssistant(availability, bookings)


class TestDescribeError:
    """Each error type gets its own customer-facing message."""

    def test_weekday_mismatch_names_both_days(self):
        error = WeekdayMismatch(expected=1, actual=2, derived_date=pendulum.date(2024, 8, 6))

        message = describe_error(error)

        assert "06/08/2024" in message
        assert "Terça-feira" in message
        assert "Segunda-feira" in message

    def test_off_day_uses_attendant_name(self):
        message = describe_error(AttendantOffDay("att-ana", 6, "Ana"))
        assert message == "Desculpe, Ana não atende aos sábados."

    def test_advance_limit(self):
        message = describe_error(AdvanceBookingLimitExceeded(pendulum.date(2024, 8, 1), 30))
        assert "30 dias" in message

    def test_invalid_selection(self):
        assert describe_error(InvalidSelection(5, 2)) == "Por favor, escolha um número entre 1 e 2."

    def test_unrecognized_format(self):
        assert "DD/MM" in describe_error(UnrecognizedFormat("xyz"))

    def test_record_store_failure_is_generic(self):
        assert describe_error(RecordStoreError("boom", status_code=500)) == GENERIC_FAILURE


class FailingStore:
    """Record store whose every call fails."""

    def select(self, *args, **kwargs):
        raise RecordStoreError("unreachable")

    def insert(self, *args, **kwargs):
        raise RecordStoreError("unreachable")

    def update(self, *args, **kwargs):
        raise RecordStoreError("unreachable")


class TestSchedulingAssistant:
    """The facade answers with text and never raises application errors."""

    def test_resolve_date(self, assistant, now):
        assert assistant.resolve_date("amanhã", now) == "Terça-feira, 11/06/2024"

    def test_resolve_date_mismatch(self, assistant, now):
        reply = assistant.resolve_date("segunda-feira, 06/08/2024", now)
        assert "não em Segunda-feira" in reply

    def test_list_slots(self, assistant, now):
        reply = assistant.list_slots("att-ana", "amanhã", now=now)

        assert reply.splitlines() == [
            "Horários disponíveis com Ana em Terça-feira, 11/06/2024:",
            "- 09:00",
            "- 10:00",
        ]

    def test_list_slots_for_inactive_attendant(self, assistant, now):
        reply = assistant.list_slots("att-carla", "amanhã", now=now)
        assert reply == "Desculpe, Carla não está atendendo no momento."

    def test_show_calendar(self, assistant, now):
        reply = assistant.show_calendar("att-ana", "hoje", "amanhã", now=now)

        assert reply.splitlines() == [
            "Disponibilidade de Ana:",
            "- Segunda 10/06: 3 horário(s)",
            "- Terça 11/06: 2 horário(s)",
        ]

    def test_book_and_cancel(self, assistant, now):
        request = BookingRequest(
            attendant_id="att-ana",
            date="amanhã",
            time="10:00",
            client_name="Maria",
            client_phone="11987654321",
            service_id="srv-corte",
        )

        confirmation = assistant.book(request, now)
        assert "confirmado com sucesso" in confirmation
        assert "Horário: 10:00" in confirmation

        reply = assistant.cancel(ConversationContext(conversation_id="c-1"), "11987654321")
        assert reply == "Seu agendamento de Terça-feira, 11/06/2024 às 10:00 foi cancelado."

    def test_cancel_with_several_bookings_lists_options(self, assistant, now):
        for time in ("09:00", "10:00"):
            assistant.book(
                BookingRequest("att-ana", "amanhã", time, "Maria", "11987654321", "srv-corte"), now
            )
        context = ConversationContext(conversation_id="c-1")

        reply = assistant.cancel(context, "11987654321")

        assert reply.splitlines()[1:] == [
            "1. Terça-feira, 11/06/2024 às 09:00 (Corte de cabelo)",
            "2. Terça-feira, 11/06/2024 às 10:00 (Corte de cabelo)",
        ]
        assert "09:00" in assistant.select_cancellation(context, 1)

    def test_select_without_pending_list(self, assistant):
        reply = assistant.select_cancellation(ConversationContext(conversation_id="c-1"), 1)
        assert reply.startswith("Não há nenhum cancelamento")

    def test_record_store_failure_is_logged(self, now, caplog):
        availability = AvailabilityService.from_config(FailingStore(), AppConfig())
        assistant = SchedulingAssistant(availability, BookingService(availability))

        reply = assistant.list_slots("att-ana", "amanhã", now=now)

        assert reply == GENERIC_FAILURE
        assert "Record store failure" in caplog.text
