"""
Mapping between record-store rows and domain models.

Tables used: ``attendants``, ``services``, ``schedules``,
``schedule_assignments`` and ``appointments``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

import pendulum
from pendulum import Date

from ..adapters.record_store import eq, in_, neq
from ..domain.exceptions import RecordStoreError
from ..domain.locale_pt import weekday_number
from ..domain.models import (
    DEFAULT_BOOKING_DURATION,
    Attendant,
    Booking,
    Service,
    WorkWindow,
    parse_clock,
)

logger = logging.getLogger(__name__)


class RecordStoreProtocol(Protocol):
    """Protocol describing the record store behaviour needed by the services."""

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, str]] = None,
        columns: str = "*",
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return rows matching the filters."""

    def insert(self, table: str, record: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Insert a row and return it."""

    def update(self, table: str, changes: Dict[str, Any], filters: Dict[str, str]) -> List[Dict[str, Any]]:
        """Patch matching rows and return them."""


def parse_iso_date(value: str) -> Date:
    """Parse the date part of "YYYY-MM-DD[...]"."""
    year, month, day = (int(part) for part in str(value)[:10].split("-"))
    return pendulum.date(year, month, day)


def _weekday_set(values) -> frozenset:
    if values is None:
        return frozenset()
    if not isinstance(values, (list, tuple, set, frozenset)):
        values = [values]

    days = set()
    for value in values:
        number = weekday_number(value)
        if number is None:
            logger.warning("Ignoring unknown weekday %r", value)
            continue
        days.add(number)
    return frozenset(days)


def attendant_from_row(row: Dict[str, Any]) -> Attendant:
    active = row.get("is_active", row.get("available", True))
    return Attendant(
        id=str(row["id"]),
        name=row.get("name") or "",
        active=bool(active),
        work_days=_weekday_set(row.get("work_days")),
    )


def service_from_row(row: Dict[str, Any]) -> Service:
    duration = row.get("duration")
    return Service(
        id=str(row["id"]),
        name=row.get("name") or "",
        duration_minutes=int(duration) if duration else None,
        price=row.get("price"),
    )


def window_from_row(row: Dict[str, Any], attendant_id: str) -> WorkWindow:
    end_time = row.get("end_time")
    duration = row.get("duration")
    day = weekday_number(row.get("day")) if row.get("day") not in (None, "") else None
    return WorkWindow(
        id=str(row["id"]),
        attendant_id=attendant_id,
        start_time=parse_clock(row["start_time"]),
        days=_weekday_set(row.get("days")),
        day=day,
        end_time=parse_clock(end_time) if end_time else None,
        duration_minutes=int(duration) if duration else None,
        available=bool(row.get("available", True)),
    )


def booking_from_row(row: Dict[str, Any], default_duration: int = DEFAULT_BOOKING_DURATION) -> Booking:
    duration = row.get("service_duration", row.get("duration"))
    return Booking(
        id=str(row["id"]),
        attendant_id=str(row.get("attendant_id") or ""),
        date=parse_iso_date(row["appointment_date"]),
        start_time=parse_clock(row["appointment_time"]),
        duration_minutes=int(duration) if duration is not None else default_duration,
        status=row.get("status") or "",
        client_name=row.get("client_name") or "",
        client_phone=row.get("client_phone") or "",
        service_id=str(row.get("service_id") or ""),
        service_name=row.get("service_name") or "",
        attendant_name=row.get("attendant_name") or "",
        notes=row.get("notes") or "",
    )


class ScheduleRecords:
    """
    Reads and writes scheduling rows through a record store.

    Malformed rows are logged and skipped rather than failing the whole query.
    """

    def __init__(self, store: RecordStoreProtocol, default_booking_duration: int = DEFAULT_BOOKING_DURATION):
        self.store = store
        self.default_booking_duration = default_booking_duration

    def attendants(self) -> List[Attendant]:
        rows = self.store.select("attendants", order="name.asc")
        return [attendant_from_row(row) for row in rows]

    def attendant(self, attendant_id: str) -> Optional[Attendant]:
        rows = self.store.select("attendants", {"id": eq(attendant_id)}, limit=1)
        return attendant_from_row(rows[0]) if rows else None

    def service(self, service_id: str) -> Optional[Service]:
        rows = self.store.select("services", {"id": eq(service_id)}, limit=1)
        return service_from_row(rows[0]) if rows else None

    def work_windows(self, attendant_id: str) -> List[WorkWindow]:
        """Windows assigned to the attendant through schedule_assignments."""
        assignments = self.store.select(
            "schedule_assignments",
            {"attendant_id": eq(attendant_id)},
            columns="id,schedule_id,schedule_info",
        )
        schedule_ids = [a["schedule_id"] for a in assignments if a.get("schedule_id")]
        if not schedule_ids:
            logger.info("No schedule assignments for attendant %s", attendant_id)
            return []

        schedules = {
            str(row["id"]): row
            for row in self.store.select(
                "schedules",
                {"id": in_(sorted(set(schedule_ids))), "available": eq(True)},
            )
        }

        windows: List[WorkWindow] = []
        for schedule_id in schedule_ids:
            row = schedules.get(str(schedule_id))
            if row is None:
                continue
            try:
                windows.append(window_from_row(row, attendant_id))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping malformed schedule %s: %s", schedule_id, e)

        logger.debug("Loaded %d work windows for attendant %s", len(windows), attendant_id)
        return windows

    def bookings(self, attendant_id: str, date: Date) -> List[Booking]:
        """All bookings of the attendant on the date, cancelled ones included."""
        rows = self.store.select(
            "appointments",
            {"attendant_id": eq(attendant_id), "appointment_date": eq(date.to_date_string())},
        )
        return self._to_bookings(rows)

    def booking(self, booking_id: str) -> Optional[Booking]:
        rows = self.store.select("appointments", {"id": eq(booking_id)}, limit=1)
        bookings = self._to_bookings(rows)
        return bookings[0] if bookings else None

    def bookings_for_phone(self, phone: str, exclude_status: str) -> List[Booking]:
        rows = self.store.select(
            "appointments",
            {"client_phone": eq(phone), "status": neq(exclude_status)},
            order="appointment_datetime.asc",
        )
        return self._to_bookings(rows)

    def insert_booking(self, record: Dict[str, Any]) -> Booking:
        rows = self.store.insert("appointments", record)
        if not rows:
            raise RecordStoreError("Record store returned no row for the new booking")
        return booking_from_row(rows[0], self.default_booking_duration)

    def update_booking(self, booking_id: str, changes: Dict[str, Any]) -> None:
        self.store.update("appointments", changes, {"id": eq(booking_id)})

    def _to_bookings(self, rows: List[Dict[str, Any]]) -> List[Booking]:
        bookings: List[Booking] = []
        for row in rows:
            try:
                bookings.append(booking_from_row(row, self.default_booking_duration))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping malformed appointment %s: %s", row.get("id"), e)
        return bookings
