# agenda_studio/scheduling/blocked.py
from typing import Iterable, List

from agenda_studio.core.models import BlockedPeriod
from agenda_studio.core.timeutils import DateLike, to_date, to_minutes


class BlockedPeriodSet:
    """
    Bloqueios explícitos (dia inteiro ou faixa de horário) sobre a agenda semanal.

    Bloqueios sobrepostos são permitidos e apenas redundantes: não há merge.
    Um bloqueio de dia inteiro vale para qualquer horário da data, mesmo que
    existam bloqueios parciais na mesma data.
    """

    def __init__(self, periods: Iterable[BlockedPeriod] = ()):
        self._periods: List[BlockedPeriod] = list(periods)

    @property
    def periods(self) -> List[BlockedPeriod]:
        return list(self._periods)

    def __len__(self):
        return len(self._periods)

    def add(self, period: BlockedPeriod) -> BlockedPeriod:
        self._periods.append(period)
        return period

    def remove(self, period_id: str) -> bool:
        before = len(self._periods)
        self._periods = [p for p in self._periods if p.id != period_id]
        return len(self._periods) < before

    def for_date(self, day: DateLike) -> List[BlockedPeriod]:
        target = to_date(day)
        return [p for p in self._periods if p.date == target]

    def is_day_blocked(self, day: DateLike) -> bool:
        return any(p.is_whole_day for p in self.for_date(day))

    def is_blocked(self, day: DateLike, time: str) -> bool:
        day_blocks = self.for_date(day)
        if any(p.is_whole_day for p in day_blocks):
            return True
        minutes = to_minutes(time)
        return any(
            to_minutes(p.startTime) <= minutes < to_minutes(p.endTime)
            for p in day_blocks
        )

    def blocks_span(self, day: DateLike, start_minutes: int, end_minutes: int) -> bool:
        """Verdadeiro se [start, end) toca algum bloqueio da data (ou o dia está bloqueado)."""
        day_blocks = self.for_date(day)
        if any(p.is_whole_day for p in day_blocks):
            return True
        for p in day_blocks:
            if start_minutes < to_minutes(p.endTime) and end_minutes > to_minutes(p.startTime):
                return True
        return False
