"""
Natural-language date resolution for Portuguese expressions.

Turns what customers type ("amanhã", "próxima segunda", "dia 01 de abril",
"sexta-feira, 05/08/2024") into one unambiguous calendar date.

Rules are tried in a fixed order and the first match wins:

1. keywords ("hoje", "amanhã", "depois de amanhã")
2. "dia D de <mês> [de AAAA]"
3. "<dia da semana> [,|-] [dia] D [de <mês>] [de AAAA]"
4. "<dia da semana> [,|-] D/M[/AAAA]"
5. "próximo/próxima <dia da semana>" or a bare weekday name
6. "D/M[/AAAA]"
7. a strict ISO 8601 date ("2024-08-05", "20240805")

Each rule only derives ``(date, named weekday)``. A single validator then
compares the typed weekday against the real one and refuses to guess when
they disagree.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import pendulum
from pendulum import Date

from .exceptions import (
    InvalidCalendarDate,
    UnknownMonth,
    UnrecognizedFormat,
    WeekdayMismatch,
)
from .locale_pt import WEEKDAYS, WEEKDAY_PATTERN, month_number, weekday_name
from .models import ResolvedDate, weekday_of

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Sao_Paulo"

KEYWORD_OFFSETS = {
    "hoje": 0,
    "amanhã": 1,
    "amanha": 1,
    "depois de amanhã": 2,
    "depois de amanha": 2,
}

_MONTH_WORD = r"[a-zà-ú]+"

DAY_OF_MONTH_NAME_RE = re.compile(
    rf"dia\s+(\d{{1,2}})\s+de\s+({_MONTH_WORD})(?:\s+de\s+(\d{{4}}))?"
)
WEEKDAY_PREFIX_RE = re.compile(rf"^({WEEKDAY_PATTERN})(?:[,-]|\s+)")
WEEKDAY_WITH_DAY_RE = re.compile(
    rf"^({WEEKDAY_PATTERN})(?:[,-]|\s+)?\s*(?:dia\s+)?(\d{{1,2}})"
    rf"(?:\s+de\s+({_MONTH_WORD}))?(?:\s+de\s+(\d{{4}}))?"
)
WEEKDAY_WITH_SLASH_DATE_RE = re.compile(
    rf"^({WEEKDAY_PATTERN})(?:[,-]|\s+)?\s*(\d{{1,2}})/(\d{{1,2}})(?:/(\d{{4}}))?"
)
RELATIVE_WEEKDAY_RE = re.compile(r"pr[oó]xim[ao]\s+([a-zà-ú\-]+)")
SLASH_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})(?:/(\d{4}))?")


@dataclass(frozen=True)
class _Derivation:
    """What a rule produced: the date plus the weekday the user named, if any."""
    kind: str
    date: Date
    named_weekday: Optional[int] = None


def _build_date(day: int, month: int, year: int, expression: str) -> Date:
    try:
        return pendulum.date(year, month, day)
    except ValueError:
        raise InvalidCalendarDate(day, month, year, expression) from None


def _named_weekday(text: str) -> Optional[int]:
    match = WEEKDAY_PREFIX_RE.match(text)
    if not match:
        return None
    return WEEKDAYS.get(match.group(1))


def friendly_date(day: Date) -> str:
    """Format as "Segunda-feira, 05/08/2024"."""
    return f"{weekday_name(weekday_of(day))}, {day.strftime('%d/%m/%Y')}"


class DateExpressionResolver:
    """
    Resolves Portuguese date expressions against a reference instant.

    The reference instant defaults to "now" in the configured timezone; tests
    and callers that already know the current time pass it explicitly.
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self.timezone = timezone
        self._rules: Sequence[Callable[[str, Date], Optional[_Derivation]]] = (
            self._keyword,
            self._day_of_month_name,
            self._weekday_with_day,
            self._weekday_with_slash_date,
            self._relative_weekday,
            self._slash_date,
            self._generic,
        )

    def resolve(self, expression: str, reference_now: Optional[pendulum.DateTime] = None) -> ResolvedDate:
        """
        Resolve ``expression`` into a calendar date.

        Args:
            expression: Free-form date expression typed by the customer
            reference_now: Instant that "hoje" refers to

        Returns:
            ResolvedDate with ISO date, display date and weekday

        Raises:
            UnknownMonth: Month name not in the Portuguese table
            InvalidCalendarDate: Day/month/year do not form a real date
            WeekdayMismatch: Named weekday disagrees with the derived date
            UnrecognizedFormat: Nothing matched
        """
        now = reference_now or pendulum.now(self.timezone)
        today = pendulum.date(now.year, now.month, now.day)
        text = (expression or "").strip().lower()

        if not text:
            raise UnrecognizedFormat(expression or "")

        for rule in self._rules:
            derivation = rule(text, today)
            if derivation is None:
                continue

            logger.debug(
                "Expression %r matched %s -> %s",
                text, derivation.kind, derivation.date.to_date_string(),
            )
            self._check_weekday(derivation, text)
            return ResolvedDate(date=derivation.date)

        raise UnrecognizedFormat(expression)

    @staticmethod
    def _check_weekday(derivation: _Derivation, expression: str) -> None:
        """Refuse dates whose real weekday differs from the one the user named."""
        if derivation.named_weekday is None:
            return

        actual = weekday_of(derivation.date)
        if actual != derivation.named_weekday:
            logger.info(
                "Weekday conflict in %r: %s is %s, not %s",
                expression,
                derivation.date.to_date_string(),
                weekday_name(actual),
                weekday_name(derivation.named_weekday),
            )
            raise WeekdayMismatch(
                expected=derivation.named_weekday,
                actual=actual,
                derived_date=derivation.date,
                expression=expression,
            )

    # --- rules -------------------------------------------------------------

    def _keyword(self, text: str, today: Date) -> Optional[_Derivation]:
        offset = KEYWORD_OFFSETS.get(text)
        if offset is None:
            return None
        return _Derivation("keyword", today.add(days=offset))

    def _day_of_month_name(self, text: str, today: Date) -> Optional[_Derivation]:
        match = DAY_OF_MONTH_NAME_RE.search(text)
        if not match:
            return None

        day = int(match.group(1))
        month_name = match.group(2)
        year = int(match.group(3)) if match.group(3) else today.year

        month = month_number(month_name)
        if month is None:
            raise UnknownMonth(month_name, text)

        return _Derivation(
            "day_of_month_name",
            _build_date(day, month, year, text),
            _named_weekday(text),
        )

    def _weekday_with_day(self, text: str, today: Date) -> Optional[_Derivation]:
        match = WEEKDAY_WITH_DAY_RE.match(text)
        if not match:
            return None

        day = int(match.group(2))
        month_name = match.group(3)
        year = int(match.group(4)) if match.group(4) else today.year

        month = month_number(month_name) if month_name else None
        if month is None:
            month = today.month
            # "segunda, 05/08/2024": the embedded slash-date decides month and year
            slash = SLASH_DATE_RE.search(text)
            if slash:
                month = int(slash.group(2))
                if slash.group(3):
                    year = int(slash.group(3))

        return _Derivation(
            "weekday_with_day",
            _build_date(day, month, year, text),
            WEEKDAYS[match.group(1)],
        )

    def _weekday_with_slash_date(self, text: str, today: Date) -> Optional[_Derivation]:
        match = WEEKDAY_WITH_SLASH_DATE_RE.match(text)
        if not match:
            return None

        day, month = int(match.group(2)), int(match.group(3))
        year = int(match.group(4)) if match.group(4) else today.year

        return _Derivation(
            "weekday_with_slash_date",
            _build_date(day, month, year, text),
            WEEKDAYS[match.group(1)],
        )

    def _relative_weekday(self, text: str, today: Date) -> Optional[_Derivation]:
        match = RELATIVE_WEEKDAY_RE.search(text)
        if match:
            target = WEEKDAYS.get(match.group(1))
            if target is None:
                raise UnrecognizedFormat(text)
        elif text in WEEKDAYS:
            target = WEEKDAYS[text]
        else:
            return None

        days_to_add = target - weekday_of(today)
        if days_to_add <= 0:
            days_to_add += 7

        return _Derivation("relative_weekday", today.add(days=days_to_add))

    def _slash_date(self, text: str, today: Date) -> Optional[_Derivation]:
        match = SLASH_DATE_RE.search(text)
        if not match:
            return None

        day, month = int(match.group(1)), int(match.group(2))
        explicit_year = match.group(3)
        year = int(explicit_year) if explicit_year else today.year

        date = _build_date(day, month, year, text)
        if not explicit_year and date < today:
            # rebuilt rather than shifted, so 29/02 never turns into 28/02
            date = _build_date(day, month, today.year + 1, text)

        return _Derivation("slash_date", date, _named_weekday(text))

    def _generic(self, text: str, today: Date) -> Optional[_Derivation]:
        # strict ISO 8601: partial input must not be completed from the wall clock
        try:
            parsed = pendulum.parse(text, tz=self.timezone)
        except (ValueError, OverflowError) as exc:
            logger.debug("Generic parse failed for %r: %s", text, exc)
            return None

        # times ("12:30") and durations carry no calendar date
        if not isinstance(parsed, Date):
            return None
        return _Derivation("generic", pendulum.date(parsed.year, parsed.month, parsed.day))
