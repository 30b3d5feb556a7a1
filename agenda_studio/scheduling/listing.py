# agenda_studio/scheduling/listing.py
from datetime import date
from typing import Dict, Iterable, List, Optional

from agenda_studio.core.models import Booking, BookingStatus


def filter_bookings(
    bookings: Iterable[Booking],
    start: Optional[date] = None,
    end: Optional[date] = None,
    day: Optional[date] = None,
    search: Optional[str] = None,
    time: Optional[str] = None,
    status: Optional[BookingStatus] = None,
) -> List[Booking]:
    """
    Filtros da lista de agendamentos do painel, em ordem de data e hora.

    `search` procura (sem diferenciar maiúsculas) no nome do cliente e no
    nome do serviço; `time` é um trecho do horário ("09" pega 09:00 e 09:30).
    """
    term = search.strip().lower() if search else None
    result = []
    for b in bookings:
        if start and b.date < start:
            continue
        if end and b.date > end:
            continue
        if day and b.date != day:
            continue
        if term and term not in b.clientName.lower() and term not in b.serviceName.lower():
            continue
        if time and time not in b.time:
            continue
        if status and b.status != status:
            continue
        result.append(b)
    result.sort(key=lambda b: (b.date, b.time))
    return result


def count_by_status(bookings: Iterable[Booking]) -> Dict[str, int]:
    counts = {"todos": 0}
    counts.update({s.value: 0 for s in BookingStatus})
    for b in bookings:
        counts["todos"] += 1
        counts[b.status.value] += 1
    return counts
