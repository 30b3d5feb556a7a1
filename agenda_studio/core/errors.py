# agenda_studio/core/errors.py
from typing import List, Optional


class AgendaError(Exception):
    """Base de todos os erros do motor de agendamento."""


class ValidationError(AgendaError, ValueError):
    """Entrada ausente ou malformada. Nada é aplicado parcialmente."""


class SlotUnavailableError(ValidationError):
    """Horário em conflito no fluxo público (o admin pode sobrescrever, o cliente não)."""

    def __init__(self, message: str, conflicting_ids: Optional[List[str]] = None):
        super().__init__(message)
        self.conflicting_ids = conflicting_ids or []


class BookingNotFoundError(AgendaError):
    def __init__(self, booking_id: str):
        super().__init__(f"Agendamento não encontrado: {booking_id}")
        self.booking_id = booking_id


class ExternalFailure(AgendaError):
    """
    Falha no armazenamento/rede durante create/update/delete/list.

    `created` guarda os agendamentos já gravados quando a falha ocorre no meio
    do laço de criação multi-serviço (não há rollback automático).
    """

    def __init__(self, message: str, created: Optional[list] = None):
        super().__init__(message)
        self.created = created or []


class SideEffectFailure(AgendaError):
    """Baixa de estoque falhou. Informativo: nunca reverte a mudança de status."""
