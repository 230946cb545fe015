"""
Booking creation and cancellation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Union

import pendulum
from pendulum import Date, DateTime

from ..config import StatusConfig
from ..domain.exceptions import (
    BookingAlreadyCancelled,
    BookingCompleted,
    BookingNotFound,
    InvalidSelection,
    MissingBookingField,
    NoPendingSelection,
    SlotUnavailable,
)
from ..domain.models import Booking, PendingCancellation, format_clock, parse_clock
from .availability import AvailabilityService
from .conversation import ConversationContext

logger = logging.getLogger(__name__)

COUNTRY_CODE = "55"


def normalize_phone(phone: str) -> str:
    """Keep digits only and prefix the Brazilian country code when missing."""
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        return ""
    if not digits.startswith(COUNTRY_CODE):
        digits = COUNTRY_CODE + digits
    return digits


@dataclass
class BookingRequest:
    """What the customer asked to book."""
    attendant_id: str
    date: Union[Date, str]
    time: str
    client_name: str
    client_phone: str
    service_id: str = ""
    notes: str = ""

    REQUIRED = ("attendant_id", "date", "time", "client_name", "client_phone", "service_id")

    def missing_field(self) -> Optional[str]:
        for name in self.REQUIRED:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                return name
        return None


@dataclass
class CancellationOutcome:
    """Result of a cancellation request: either done, or waiting for a choice."""
    cancelled: Optional[Booking] = None
    pending: Optional[PendingCancellation] = None
    options: Optional[List[Booking]] = None


class BookingService:
    """
    Creates and cancels appointments.

    Availability is always checked again right before inserting, since the
    slot offered a few messages earlier may have been taken since.
    """

    def __init__(self, availability: AvailabilityService, statuses: Optional[StatusConfig] = None):
        self.availability = availability
        self.records = availability.records
        self.statuses = statuses or StatusConfig()

    def create_booking(self, request: BookingRequest, now: Optional[DateTime] = None) -> Booking:
        """
        Book a slot for a customer.

        Args:
            request: Booking details
            now: Current instant (defaults to now in the business timezone)

        Returns:
            The stored Booking

        Raises:
            MissingBookingField: A required field is empty
            SlotUnavailable: The time is not among the currently available slots
            AvailabilityError: The date or attendant failed validation
            RecordStoreError: The record store rejected the insert
        """
        missing = request.missing_field()
        if missing:
            raise MissingBookingField(missing)

        now = now or self.availability.now()
        start = parse_clock(request.time)
        result = self.availability.available_slots(
            request.attendant_id,
            request.date,
            service_id=request.service_id,
            now=now,
        )
        target = result.date.date
        if start not in {slot.start_time for slot in result.slots}:
            raise SlotUnavailable(format_clock(start), target)

        service = self.records.service(request.service_id)
        time_label = format_clock(start)
        record = {
            "client_name": request.client_name.strip(),
            "client_phone": normalize_phone(request.client_phone),
            "attendant_id": result.attendant.id,
            "attendant_name": result.attendant.name,
            "service_id": request.service_id,
            "service_name": service.name if service else "",
            "service_price": service.price if service else None,
            "service_duration": result.service_duration,
            "appointment_date": target.to_date_string(),
            "appointment_time": time_label,
            "appointment_datetime": f"{target.to_date_string()} {time_label}:00",
            "notes": request.notes,
            "status": self.statuses.booked,
            "created_at": now.to_iso8601_string(),
            "updated_at": now.to_iso8601_string(),
        }

        booking = self.records.insert_booking(record)
        logger.info(
            "Booked %s for attendant %s on %s at %s",
            booking.id, booking.attendant_id, record["appointment_date"], time_label,
        )
        return booking

    def cancel_booking(self, booking_id: str, reason: str = "") -> Booking:
        """
        Cancel one booking by id.

        Raises:
            BookingNotFound: No booking has this id
            BookingAlreadyCancelled: The booking was cancelled before
            BookingCompleted: The appointment already took place
        """
        booking = self.records.booking(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        if booking.is_cancelled(self.statuses.cancelled_aliases):
            raise BookingAlreadyCancelled(booking_id)
        if booking.status.lower() == self.statuses.completed.lower():
            raise BookingCompleted(booking_id)

        notes = booking.notes
        if reason:
            line = f"Motivo do cancelamento: {reason}"
            notes = f"{notes}\n{line}" if notes else line

        self.records.update_booking(
            booking_id,
            {
                "status": self.statuses.cancelled,
                "notes": notes,
                "updated_at": pendulum.now(self.availability.timezone).to_iso8601_string(),
            },
        )
        logger.info("Cancelled booking %s", booking_id)

        booking.status = self.statuses.cancelled
        booking.notes = notes
        return booking

    def active_bookings_for_phone(self, phone: str) -> List[Booking]:
        """Bookings of a customer that can still be cancelled, oldest first."""
        bookings = self.records.bookings_for_phone(normalize_phone(phone), self.statuses.cancelled)
        return [
            b for b in bookings
            if not b.is_cancelled(self.statuses.cancelled_aliases)
            and b.status.lower() != self.statuses.completed.lower()
        ]

    def begin_cancellation(self, context: ConversationContext, phone: str, reason: str = "") -> CancellationOutcome:
        """
        Start cancelling the customer's booking.

        A single active booking is cancelled right away. With several, a
        numbered list is stored on ``context`` and the customer must pick one
        through ``cancel_selected``.

        Raises:
            BookingNotFound: The customer has no active booking
        """
        bookings = self.active_bookings_for_phone(phone)
        if not bookings:
            raise BookingNotFound(normalize_phone(phone))

        if len(bookings) == 1:
            context.clear_pending()
            return CancellationOutcome(cancelled=self.cancel_booking(bookings[0].id, reason))

        pending = PendingCancellation(
            options={number: b.id for number, b in enumerate(bookings, start=1)},
        )
        context.pending_cancellation = pending
        logger.debug("Conversation %s: %d bookings to choose from", context.conversation_id, len(bookings))
        return CancellationOutcome(pending=pending, options=bookings)

    def cancel_selected(self, context: ConversationContext, number: int, reason: str = "") -> Booking:
        """
        Cancel the booking the customer picked from the pending list.

        Raises:
            NoPendingSelection: No list was offered in this conversation
            InvalidSelection: ``number`` is not one of the offered options
        """
        pending = context.pending_cancellation
        if pending is None:
            raise NoPendingSelection("No cancellation is waiting for a selection")

        booking_id = pending.booking_id_for(number)
        if booking_id is None:
            raise InvalidSelection(number, len(pending.options))

        context.clear_pending()
        return self.cancel_booking(booking_id, reason)
