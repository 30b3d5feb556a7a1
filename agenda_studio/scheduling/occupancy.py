"""
Ocupação e Conflitos

Classifica cada horário da grade de um dia contra os agendamentos existentes:

    past      -> data anterior a hoje, ou hoje com horário antes de agora
    occupied  -> dentro de [início, início + duração) de um agendamento não cancelado
    conflict  -> o serviço candidato começando neste horário sobrepõe algum agendamento
    preview   -> horários que o candidato ocuparia a partir do horário escolhido
    free      -> nenhum dos anteriores

As marcações são informativas. No fluxo do admin nada aqui impede a
submissão; quem decide é o operador.
"""

import logging
import math
from datetime import datetime
from typing import Callable, Iterable, List, Optional

import pytz

from agenda_studio.core import config
from agenda_studio.core.models import (
    Booking,
    ConflictWarning,
    DaySchedule,
    Service,
    SlotAvailability,
    TimeSlot,
)
from agenda_studio.core.timeutils import DateLike, local_now, to_date, to_minutes
from agenda_studio.scheduling.blocked import BlockedPeriodSet
from agenda_studio.scheduling.grid import BoundedGrid, SlotGridGenerator, grid_for_policy


def spans_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Intervalos semiabertos [a_start, a_end) e [b_start, b_end) se cruzam?"""
    return a_start < b_end and b_start < a_end


def slots_needed(duration: int, interval: int) -> int:
    """Quantos horários da grade um procedimento ocupa (não precisa ser múltiplo)."""
    return math.ceil(duration / interval)


def _naive_local(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now
    return now.astimezone(pytz.timezone(config.LOCAL_TIMEZONE)).replace(tzinfo=None)


class OccupancyResolver:
    def __init__(
        self,
        grid: Optional[SlotGridGenerator] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.grid = grid or grid_for_policy()
        self.clock = clock

    # --- Consultas básicas ---
    @staticmethod
    def day_bookings(day: DateLike, bookings: Iterable[Booking]) -> List[Booking]:
        target = to_date(day)
        return [b for b in bookings if b.date == target and b.is_active]

    def occupying_booking(self, day: DateLike, time: str, bookings: Iterable[Booking]) -> Optional[Booking]:
        minutes = to_minutes(time)
        for b in self.day_bookings(day, bookings):
            if b.start_minutes <= minutes < b.end_minutes:
                return b
        return None

    def conflicts_for(
        self,
        day: DateLike,
        start_time: str,
        duration: int,
        bookings: Iterable[Booking],
        exclude_ids: Iterable[str] = (),
    ) -> List[Booking]:
        start = to_minutes(start_time)
        end = start + duration
        excluded = set(exclude_ids)
        return [
            b for b in self.day_bookings(day, bookings)
            if b.id not in excluded and spans_overlap(start, end, b.start_minutes, b.end_minutes)
        ]

    def conflict_warnings(self, day, start_time, duration, bookings, exclude_ids=()) -> List[ConflictWarning]:
        return [
            ConflictWarning(bookingId=b.id, time=b.time, serviceName=b.serviceName, clientName=b.clientName)
            for b in self.conflicts_for(day, start_time, duration, bookings, exclude_ids)
        ]

    def is_past(self, day: DateLike, time: str, now: Optional[datetime] = None) -> bool:
        now_local = _naive_local(now or self.clock())
        target = to_date(day)
        if target != now_local.date():
            return target < now_local.date()
        minutes = to_minutes(time)
        slot_dt = datetime.combine(target, datetime.min.time()).replace(hour=minutes // 60, minute=minutes % 60)
        return slot_dt < now_local

    # --- Grade classificada ---
    def classify(
        self,
        day: DateLike,
        schedule: DaySchedule,
        bookings: Iterable[Booking],
        candidate: Optional[Service] = None,
        selected_time: Optional[str] = None,
        blocked: Optional[BlockedPeriodSet] = None,
        now: Optional[datetime] = None,
    ) -> List[TimeSlot]:
        target = to_date(day)
        active = self.day_bookings(target, bookings)
        now = now or self.clock()

        duration = candidate.duration if candidate else None
        preview_start = preview_end = None
        if candidate and selected_time:
            preview_start = to_minutes(selected_time)
            preview_end = preview_start + duration

        slots = []
        for time in self.grid.generate(schedule):
            minutes = to_minutes(time)
            occupant = next((b for b in active if b.start_minutes <= minutes < b.end_minutes), None)
            conflict = bool(duration) and any(
                spans_overlap(minutes, minutes + duration, b.start_minutes, b.end_minutes) for b in active
            )
            slots.append(TimeSlot(
                time=time,
                past=self.is_past(target, time, now),
                occupied_by=occupant.id if occupant else None,
                conflict=conflict,
                preview=preview_start is not None and preview_start <= minutes < preview_end,
                blocked=bool(blocked) and blocked.is_blocked(target, time),
            ))
        return slots

    # --- Disponibilidade para o cliente ---
    def availability(
        self,
        day: DateLike,
        duration: int,
        schedule: Optional[DaySchedule],
        blocked: BlockedPeriodSet,
        bookings: Iterable[Booking],
        now: Optional[datetime] = None,
    ) -> List[SlotAvailability]:
        """
        Horários do expediente com `available` calculado para um serviço de `duration`.

        Indisponível quando: dia bloqueado, cruza bloqueio parcial, termina depois
        do fechamento, cruza o almoço, cruza agendamento não cancelado, ou já passou.
        """
        if not schedule or not schedule.isOpen:
            return []

        target = to_date(day)
        active = self.day_bookings(target, bookings)
        now = now or self.clock()
        close_m = to_minutes(schedule.closeTime)

        result = []
        for time in BoundedGrid().generate(schedule):
            start = to_minutes(time)
            end = start + duration
            available = not (
                blocked.blocks_span(target, start, end)
                or end > close_m
                or (schedule.has_lunch and spans_overlap(
                    start, end, to_minutes(schedule.lunchStart), to_minutes(schedule.lunchEnd)))
                or any(spans_overlap(start, end, b.start_minutes, b.end_minutes) for b in active)
                or self.is_past(target, time, now)
            )
            result.append(SlotAvailability(time=time, available=available))

        logging.info(
            f"Disponibilidade {target.isoformat()} ({duration}min): "
            f"{sum(1 for s in result if s.available)}/{len(result)} horários livres"
        )
        return result
