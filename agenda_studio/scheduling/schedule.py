# agenda_studio/scheduling/schedule.py
from typing import List, Optional

from agenda_studio.core.errors import ValidationError
from agenda_studio.core.models import DaySchedule
from agenda_studio.core.timeutils import DateLike, js_weekday, to_date

WeekSchedule = List[DaySchedule]

_DEFAULT_HOURS = {0: ("09:00", "18:00"), 6: ("08:00", "17:00")}


def default_week_schedule() -> WeekSchedule:
    """Domingo fechado, dias úteis 07:00-18:00, sábado 08:00-17:00, almoço 12:00-13:00."""
    week = []
    for day in range(7):
        open_time, close_time = _DEFAULT_HOURS.get(day, ("07:00", "18:00"))
        week.append(DaySchedule(
            dayOfWeek=day,
            isOpen=day != 0,
            openTime=open_time,
            closeTime=close_time,
            lunchStart="12:00",
            lunchEnd="13:00",
            interval=30,
        ))
    return week


def validate_week(week: WeekSchedule) -> WeekSchedule:
    """Exige exatamente um registro por dia (0-6) e devolve ordenado por dia."""
    days = sorted(d.dayOfWeek for d in week)
    if days != list(range(7)):
        raise ValidationError(f"A agenda semanal precisa de 7 dias distintos (0-6), recebido: {days}")
    return sorted(week, key=lambda d: d.dayOfWeek)


def schedule_for(week: WeekSchedule, day: DateLike) -> Optional[DaySchedule]:
    weekday = js_weekday(to_date(day))
    return next((d for d in week if d.dayOfWeek == weekday), None)


def week_interval(week: WeekSchedule, fallback: int) -> int:
    """Intervalo do primeiro dia aberto (o admin usa um só intervalo na grade)."""
    first_open = next((d for d in week if d.isOpen), None)
    return first_open.interval if first_open else fallback


def apply_to_weekdays(week: WeekSchedule, source: DaySchedule) -> WeekSchedule:
    """Copia horários e intervalo de `source` para segunda a sexta; fim de semana fica intacto."""
    updated = []
    for day in week:
        if day.dayOfWeek in (0, 6):
            updated.append(day)
            continue
        updated.append(day.model_copy(update={
            "openTime": source.openTime,
            "lunchStart": source.lunchStart,
            "lunchEnd": source.lunchEnd,
            "closeTime": source.closeTime,
            "interval": source.interval,
        }))
    return updated


def schedule_or_closed(week: WeekSchedule, day: DateLike, interval: int) -> DaySchedule:
    """Como `schedule_for`, mas um dia ausente da agenda vira um dia fechado."""
    target = to_date(day)
    found = schedule_for(week, target)
    if found is None:
        return DaySchedule(dayOfWeek=js_weekday(target), isOpen=False, interval=interval)
    return found
