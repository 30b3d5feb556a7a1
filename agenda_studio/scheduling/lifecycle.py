# agenda_studio/scheduling/lifecycle.py
import logging
from typing import Any, Dict, Optional

from agenda_studio.core.errors import SideEffectFailure, ValidationError
from agenda_studio.core.events import ChangeNotifier
from agenda_studio.core.models import (
    Booking,
    BookingChange,
    BookingFieldsUpdate,
    BookingStatus,
    ChangeAction,
    ConsumptionResult,
    TransitionResult,
)
from agenda_studio.services.booking_store import BookingStore
from agenda_studio.services.inventory_service import InventoryConsumer

# Caminhos oferecidos ao operador. Qualquer transição é aceita (o operador
# é confiável); as fora desta tabela só geram aviso no log.
STANDARD_TRANSITIONS = {
    BookingStatus.PENDENTE: {BookingStatus.CONFIRMADO, BookingStatus.CANCELADO},
    BookingStatus.CONFIRMADO: {BookingStatus.CONCLUIDO, BookingStatus.CANCELADO, BookingStatus.PENDENTE},
    BookingStatus.CONCLUIDO: set(),
    BookingStatus.CANCELADO: set(),
}

REQUIRED_ON_EDIT = ("clientName", "serviceName", "servicePrice", "date", "time")


def is_standard_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in STANDARD_TRANSITIONS.get(current, set())


class BookingLifecycle:
    """
    Mudanças de status, edição e exclusão de um único agendamento.

    Toda entrada em `concluído` dispara a baixa de estoque do serviço, inclusive
    quando o agendamento já estava concluído (não é idempotente). A falha da
    baixa é informativa e nunca desfaz a mudança de status.
    """

    def __init__(
        self,
        store: BookingStore,
        inventory: Optional[InventoryConsumer] = None,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self.store = store
        self.inventory = inventory
        self.notifier = notifier or ChangeNotifier()

    def _publish(self, tenant_id: str, booking_id: str, action: ChangeAction, status=None):
        self.notifier.publish(BookingChange(tenant_id=tenant_id, booking_id=booking_id, action=action, status=status))

    async def transition(self, tenant_id: str, booking_id: str, status: BookingStatus) -> TransitionResult:
        current = await self.store.get(tenant_id, booking_id)
        if not is_standard_transition(current.status, status):
            logging.warning(
                f"[Lifecycle] Transição fora do fluxo padrão em {booking_id}: "
                f"{current.status.value} -> {status.value} (aceita por ação do operador)"
            )

        booking = await self.store.update_status(tenant_id, booking_id, status)
        logging.info(f"[Lifecycle] Agendamento {booking_id}: {current.status.value} -> {status.value}")

        inventory = None
        if status == BookingStatus.CONCLUIDO:
            inventory = await self._consume_inventory(tenant_id, booking)

        self._publish(tenant_id, booking_id, ChangeAction.STATUS_CHANGED, status)
        return TransitionResult(booking=booking, inventory=inventory)

    async def _consume_inventory(self, tenant_id: str, booking: Booking) -> ConsumptionResult:
        if self.inventory is None:
            return ConsumptionResult(success=False, message="Controle de estoque não configurado.")
        try:
            result = await self.inventory.consume_for_service(tenant_id, booking.serviceId)
            logging.info(f"[Lifecycle] Estoque para {booking.id}: {result.message}")
            return result
        except SideEffectFailure as e:
            logging.warning(f"[Lifecycle] Baixa de estoque falhou para {booking.id} (status mantido): {e}")
            return ConsumptionResult(success=False, message=str(e))

    async def edit(self, tenant_id: str, booking_id: str, changes: BookingFieldsUpdate) -> Booking:
        """Edita contato, serviço/preço (snapshot), data e hora. Nunca altera o status."""
        partial: Dict[str, Any] = changes.model_dump(mode="json", exclude_unset=True)
        if not partial:
            raise ValidationError("Nenhum campo para atualizar.")
        missing = [k for k in REQUIRED_ON_EDIT if k in partial and partial[k] is None]
        if missing:
            raise ValidationError(f"Campos obrigatórios não podem ficar vazios: {', '.join(missing)}")
        booking = await self.store.update_fields(tenant_id, booking_id, partial)
        logging.info(f"[Lifecycle] Agendamento {booking_id} editado: {sorted(partial)}")
        self._publish(tenant_id, booking_id, ChangeAction.UPDATED)
        return booking

    async def delete(self, tenant_id: str, booking_id: str, confirmed: bool = False) -> None:
        """Exclusão definitiva; exige confirmação explícita do operador."""
        if not confirmed:
            raise ValidationError("Confirme a exclusão do agendamento (ação irreversível).")
        await self.store.delete(tenant_id, booking_id)
        self._publish(tenant_id, booking_id, ChangeAction.DELETED)
