# agenda_studio/core/timeutils.py
import re
from datetime import date, datetime
from typing import Union

import pytz

from agenda_studio.core import config

MINUTES_PER_DAY = 24 * 60
HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
_HHMM_RE = re.compile(HHMM_PATTERN)

DateLike = Union[date, str]


def to_minutes(time_str: str) -> int:
    """'HH:MM' -> minutos desde 00:00."""
    hours, minutes = time_str.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(minutes: int) -> str:
    """Minutos desde 00:00 -> 'HH:MM'."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: str) -> str:
    """Aceita 'H:M', '9:00', '09:00:00' e devolve 'HH:MM'."""
    v = (value or "").strip()
    if _HHMM_RE.match(v):
        return v
    parts = v.split(":")
    if len(parts) < 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise ValueError(f"Horário inválido: '{value}' (esperado HH:MM)")
    normalized = f"{int(parts[0]):02d}:{int(parts[1]):02d}"
    if not _HHMM_RE.match(normalized):
        raise ValueError(f"Horário inválido: '{value}' (esperado HH:MM)")
    return normalized


def to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()


def local_now() -> datetime:
    return datetime.now(pytz.timezone(config.LOCAL_TIMEZONE))


def js_weekday(day: date) -> int:
    """Dia da semana com 0 = Domingo (convenção da agenda semanal)."""
    return (day.weekday() + 1) % 7
