"""
Portuguese weekday and month vocabulary.

Weekday numbers follow the record store convention: 0=Sunday ... 6=Saturday.
"""

import unicodedata
from typing import Dict, Optional, Union

WEEKDAY_NAMES = (
    "Domingo",
    "Segunda-feira",
    "Terça-feira",
    "Quarta-feira",
    "Quinta-feira",
    "Sexta-feira",
    "Sábado",
)

# Short names as stored in attendant work_days and schedule days columns.
WEEKDAY_SHORT_NAMES = ("Domingo", "Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado")

WEEKDAYS: Dict[str, int] = {
    "domingo": 0, "dom": 0,
    "segunda": 1, "segunda-feira": 1, "seg": 1,
    "terça": 2, "terca": 2, "terça-feira": 2, "terca-feira": 2, "ter": 2,
    "quarta": 3, "quarta-feira": 3, "qua": 3,
    "quinta": 4, "quinta-feira": 4, "qui": 4,
    "sexta": 5, "sexta-feira": 5, "sex": 5,
    "sábado": 6, "sabado": 6, "sab": 6,
}

MONTHS: Dict[str, int] = {
    "janeiro": 1, "jan": 1,
    "fevereiro": 2, "fev": 2,
    "março": 3, "marco": 3, "mar": 3,
    "abril": 4, "abr": 4,
    "maio": 5, "mai": 5,
    "junho": 6, "jun": 6,
    "julho": 7, "jul": 7,
    "agosto": 8, "ago": 8,
    "setembro": 9, "set": 9,
    "outubro": 10, "out": 10,
    "novembro": 11, "nov": 11,
    "dezembro": 12, "dez": 12,
}

# Longest first so "segunda-feira" wins over "segunda" and "seg" in regex alternations.
WEEKDAY_PATTERN = "|".join(sorted(WEEKDAYS, key=len, reverse=True))


def strip_accents(text: str) -> str:
    """Lower-case ``text`` and drop combining marks ("Terça" -> "terca")."""
    normalized = unicodedata.normalize("NFKD", text or "")
    return "".join(ch for ch in normalized if not unicodedata.combining(ch)).lower().strip()


def weekday_number(value: Union[str, int, None]) -> Optional[int]:
    """
    Normalize a weekday given as a number or a Portuguese name.

    Accepts 0..6 (0=Sunday), numeric strings, and names with or without
    accents or the "-feira" suffix. Returns None when unrecognised.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 <= value <= 6 else None

    text = str(value).strip()
    if text.isdigit():
        number = int(text)
        return number if 0 <= number <= 6 else None

    key = text.lower()
    if key in WEEKDAYS:
        return WEEKDAYS[key]

    plain = strip_accents(text)
    if plain in WEEKDAYS:
        return WEEKDAYS[plain]
    if plain.endswith("-feira") and plain[: -len("-feira")] in WEEKDAYS:
        return WEEKDAYS[plain[: -len("-feira")]]
    return None


def weekday_name(number: int) -> str:
    """Full Portuguese name for a weekday number (0=Sunday)."""
    return WEEKDAY_NAMES[number]


def weekday_short_name(number: int) -> str:
    return WEEKDAY_SHORT_NAMES[number]


def month_number(name: str) -> Optional[int]:
    key = (name or "").strip().lower()
    if key in MONTHS:
        return MONTHS[key]
    return MONTHS.get(strip_accents(key))
