# agenda_studio/core/events.py
import logging
from typing import Callable, List

from agenda_studio.core.models import BookingChange

Listener = Callable[[BookingChange], None]


class ChangeNotifier:
    """
    Canal de notificação de mudanças nos agendamentos.

    Publica depois de cada mutação para que outras telas (calendário, lista)
    recarreguem. Fire-and-forget: a falha de um ouvinte é registrada e não
    afeta a operação que publicou nem os demais ouvintes.
    """

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, change: BookingChange) -> None:
        logging.info(f"[Eventos] {change.action.value} agendamento {change.booking_id} (estúdio {change.tenant_id})")
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logging.exception(f"[Eventos] Ouvinte falhou ao processar {change.action.value} de {change.booking_id}")
