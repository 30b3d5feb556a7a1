"""
Geração da Grade de Horários

Produz os horários ordenados de um dia a partir do DaySchedule, sem olhar
agendamentos. Duas políticas com a mesma interface:

- FullDayGrid: todo múltiplo de `interval` desde 00:00 cujo slot cabe antes
  da meia-noite. Abertura/fechamento ficam por conta da exibição.
- BoundedGrid: só o expediente, manhã [openTime, lunchStart) e tarde
  [lunchEnd, closeTime). Dia fechado não tem horários.

A grade é recalculada a cada chamada, sem cache.
"""

from abc import ABC, abstractmethod
from typing import List

from agenda_studio.core import config
from agenda_studio.core.models import DaySchedule
from agenda_studio.core.timeutils import MINUTES_PER_DAY, from_minutes, to_minutes


class SlotGridGenerator(ABC):
    policy = "base"

    @abstractmethod
    def generate(self, schedule: DaySchedule) -> List[str]:
        """Horários 'HH:MM' do dia, em ordem."""


class FullDayGrid(SlotGridGenerator):
    policy = "full_day"

    def generate(self, schedule: DaySchedule) -> List[str]:
        interval = schedule.interval
        return [from_minutes(m) for m in range(0, MINUTES_PER_DAY - interval + 1, interval)]


class BoundedGrid(SlotGridGenerator):
    policy = "bounded"

    def generate(self, schedule: DaySchedule) -> List[str]:
        if not schedule.isOpen:
            return []

        open_m = to_minutes(schedule.openTime)
        close_m = to_minutes(schedule.closeTime)
        if schedule.has_lunch:
            periods = [
                (open_m, to_minutes(schedule.lunchStart)),
                (to_minutes(schedule.lunchEnd), close_m),
            ]
        else:
            periods = [(open_m, close_m)]

        slots = []
        for start, end in periods:
            slots.extend(from_minutes(m) for m in range(start, end, schedule.interval))
        return slots


_POLICIES = {
    FullDayGrid.policy: FullDayGrid,
    BoundedGrid.policy: BoundedGrid,
}


def grid_for_policy(name: str = None) -> SlotGridGenerator:
    name = name or config.SLOT_GRID_POLICY
    try:
        return _POLICIES[name]()
    except KeyError:
        raise ValueError(f"Política de grade desconhecida: {name}") from None
