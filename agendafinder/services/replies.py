"""
Portuguese replies for the WhatsApp conversation.

The services raise typed errors; this module is the boundary that turns
results and errors into text a customer can read.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pendulum import DateTime

from ..domain.date_resolver import friendly_date
from ..domain.exceptions import (
    AdvanceBookingLimitExceeded,
    AgendaError,
    AttendantInactive,
    AttendantNotFound,
    AttendantOffDay,
    BookingAlreadyCancelled,
    BookingCompleted,
    BookingNotFound,
    DateInPast,
    InvalidCalendarDate,
    InvalidSelection,
    MissingBookingField,
    NoPendingSelection,
    NoWindowsForWeekday,
    NoWorkWindowsConfigured,
    RecordStoreError,
    SlotUnavailable,
    UnknownMonth,
    UnrecognizedFormat,
    WeekdayMismatch,
)
from ..domain.locale_pt import weekday_name, weekday_short_name
from ..domain.models import Booking
from .availability import AvailabilityResult, AvailabilityService, CalendarResult
from .bookings import BookingRequest, BookingService
from .conversation import ConversationContext

logger = logging.getLogger(__name__)

GENERIC_FAILURE = (
    "Desculpe, ocorreu um erro ao consultar a agenda. Por favor, tente novamente mais tarde."
)

FIELD_LABELS = {
    "attendant_id": "o profissional",
    "date": "a data",
    "time": "o horário",
    "client_name": "o seu nome",
    "client_phone": "o seu telefone",
    "service_id": "o serviço",
}


def _who(name: str) -> str:
    return name or "o profissional"


def describe_error(exc: AgendaError) -> str:
    """Turn an application error into a message for the customer."""
    if isinstance(exc, WeekdayMismatch):
        return (
            f"A data {exc.derived_date.strftime('%d/%m/%Y')} cai em "
            f"{weekday_name(exc.actual)}, não em {weekday_name(exc.expected)}. "
            "Pode confirmar qual dia você deseja?"
        )
    if isinstance(exc, UnknownMonth):
        return f"Não reconheci o mês \"{exc.month_name}\". Pode informar a data no formato DD/MM?"
    if isinstance(exc, InvalidCalendarDate):
        return f"A data {exc.day:02d}/{exc.month:02d}/{exc.year} não existe no calendário."
    if isinstance(exc, UnrecognizedFormat):
        return (
            "Não consegui entender a data informada. "
            "Pode enviar no formato DD/MM ou dizer, por exemplo, \"amanhã\" ou \"próxima segunda\"?"
        )

    if isinstance(exc, AttendantNotFound):
        return f"Desculpe, não encontrei um profissional com o ID {exc.attendant_id}."
    if isinstance(exc, AttendantInactive):
        return f"Desculpe, {_who(exc.name)} não está atendendo no momento."
    if isinstance(exc, NoWorkWindowsConfigured):
        return f"Desculpe, não encontrei horários de trabalho cadastrados para {_who(exc.name)}."
    if isinstance(exc, AttendantOffDay):
        return f"Desculpe, {_who(exc.name)} não atende aos {weekday_short_name(exc.weekday).lower()}s."
    if isinstance(exc, NoWindowsForWeekday):
        return f"Desculpe, {_who(exc.name)} não tem horários disponíveis para {weekday_name(exc.weekday)}."
    if isinstance(exc, DateInPast):
        return "Não é possível agendar para datas passadas. Por favor, escolha uma data futura."
    if isinstance(exc, AdvanceBookingLimitExceeded):
        return f"Só é possível agendar com até {exc.limit_days} dias de antecedência."

    if isinstance(exc, MissingBookingField):
        return f"Para concluir o agendamento, preciso de {FIELD_LABELS.get(exc.field, exc.field)}."
    if isinstance(exc, SlotUnavailable):
        return (
            f"Desculpe, o horário das {exc.start_time} em {friendly_date(exc.target_date)} "
            "não está mais disponível."
        )
    if isinstance(exc, BookingNotFound):
        return "Desculpe, não encontrei nenhum agendamento ativo."
    if isinstance(exc, BookingAlreadyCancelled):
        return "Este agendamento já foi cancelado."
    if isinstance(exc, BookingCompleted):
        return "Este atendimento já foi concluído e não pode ser cancelado."
    if isinstance(exc, NoPendingSelection):
        return "Não há nenhum cancelamento aguardando escolha. Deseja cancelar um agendamento?"
    if isinstance(exc, InvalidSelection):
        return f"Por favor, escolha um número entre 1 e {exc.options}."

    return GENERIC_FAILURE


def format_slots(result: AvailabilityResult) -> str:
    when = friendly_date(result.date.date)
    if not result.slots:
        return f"Desculpe, não há horários disponíveis para {_who(result.attendant.name)} em {when}."

    lines = [f"Horários disponíveis com {_who(result.attendant.name)} em {when}:"]
    lines.extend(f"- {label}" for label in result.slot_labels)
    return "\n".join(lines)


def format_calendar(result: CalendarResult) -> str:
    lines = [f"Disponibilidade de {_who(result.attendant.name)}:"]
    for day in result.days:
        if day.has_availability:
            status = f"{day.slot_count} horário(s)"
        else:
            status = "sem horários"
        lines.append(f"- {day.weekday} {day.date.strftime('%d/%m')}: {status}")
    return "\n".join(lines)


def format_booking(booking: Booking) -> str:
    return "\n".join([
        "Ótimo! Seu agendamento foi confirmado com sucesso.",
        f"- Serviço: {booking.service_name or '-'}",
        f"- Profissional: {booking.attendant_name or '-'}",
        f"- Data: {friendly_date(booking.date)}",
        f"- Horário: {booking.start_label}",
    ])


def format_options(bookings: List[Booking]) -> str:
    lines = ["Encontrei mais de um agendamento. Qual deles você deseja cancelar?"]
    for number, booking in enumerate(bookings, start=1):
        lines.append(
            f"{number}. {friendly_date(booking.date)} às {booking.start_label}"
            + (f" ({booking.service_name})" if booking.service_name else "")
        )
    return "\n".join(lines)


def format_cancelled(booking: Booking) -> str:
    return f"Seu agendamento de {friendly_date(booking.date)} às {booking.start_label} foi cancelado."


class SchedulingAssistant:
    """
    Facade used by the conversation handler.

    Every method returns a reply string; application errors become
    Portuguese messages and never reach the request handler.
    """

    def __init__(self, availability: AvailabilityService, bookings: BookingService):
        self.availability = availability
        self.bookings = bookings

    def resolve_date(self, expression: str, now: Optional[DateTime] = None) -> str:
        try:
            resolved = self.availability.resolve_date_expression(expression, now)
        except AgendaError as e:
            return self._fail(e)
        return friendly_date(resolved.date)

    def list_slots(
        self,
        attendant_id: str,
        date_expression: str,
        service_id: Optional[str] = None,
        now: Optional[DateTime] = None,
    ) -> str:
        try:
            result = self.availability.available_slots(
                attendant_id, date_expression, service_id=service_id, now=now
            )
        except AgendaError as e:
            return self._fail(e)
        return format_slots(result)

    def show_calendar(
        self,
        attendant_id: str,
        start: str,
        end: str,
        service_id: Optional[str] = None,
        now: Optional[DateTime] = None,
    ) -> str:
        try:
            result = self.availability.calendar(attendant_id, start, end, service_id=service_id, now=now)
        except AgendaError as e:
            return self._fail(e)
        return format_calendar(result)

    def book(self, request: BookingRequest, now: Optional[DateTime] = None) -> str:
        try:
            booking = self.bookings.create_booking(request, now)
        except AgendaError as e:
            return self._fail(e)
        return format_booking(booking)

    def cancel(self, context: ConversationContext, phone: str, reason: str = "") -> str:
        try:
            outcome = self.bookings.begin_cancellation(context, phone, reason)
        except AgendaError as e:
            return self._fail(e)
        if outcome.cancelled is not None:
            return format_cancelled(outcome.cancelled)
        return format_options(outcome.options or [])

    def select_cancellation(self, context: ConversationContext, number: int, reason: str = "") -> str:
        try:
            booking = self.bookings.cancel_selected(context, number, reason)
        except AgendaError as e:
            return self._fail(e)
        return format_cancelled(booking)

    @staticmethod
    def _fail(exc: AgendaError) -> str:
        if isinstance(exc, RecordStoreError):
            logger.exception("Record store failure while answering the customer")
        else:
            logger.info("Request rejected: %s", exc)
        return describe_error(exc)
