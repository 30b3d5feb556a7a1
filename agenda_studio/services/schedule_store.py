# agenda_studio/services/schedule_store.py
import logging
from abc import ABC, abstractmethod
from typing import List

from agenda_studio.core.db import tenant_ref
from agenda_studio.core.errors import ExternalFailure
from agenda_studio.core.models import BlockedPeriod, DaySchedule
from agenda_studio.scheduling.schedule import default_week_schedule, validate_week

WEEK_FIELD = "agendaSemanal"
BLOCKS_FIELD = "bloqueios"


class ScheduleStore(ABC):
    @abstractmethod
    async def get_week_schedule(self, tenant_id: str) -> List[DaySchedule]:
        pass

    @abstractmethod
    async def save_week_schedule(self, tenant_id: str, week: List[DaySchedule]) -> None:
        pass

    @abstractmethod
    async def get_blocked_periods(self, tenant_id: str) -> List[BlockedPeriod]:
        pass

    @abstractmethod
    async def save_blocked_periods(self, tenant_id: str, periods: List[BlockedPeriod]) -> None:
        pass


class FirestoreScheduleStore(ScheduleStore):
    """Agenda semanal e bloqueios ficam como campos do documento do estúdio."""

    def __init__(self, client):
        self.client = client

    def _tenant_doc(self, tenant_id: str):
        if self.client is None:
            logging.error("Firestore DB não está inicializado.")
            raise ExternalFailure("Banco de dados indisponível.")
        return tenant_ref(self.client, tenant_id)

    def _read(self, tenant_id: str) -> dict:
        try:
            doc = self._tenant_doc(tenant_id).get()
        except ExternalFailure:
            raise
        except Exception as e:
            logging.exception(f"Erro ao ler configuração de agenda de {tenant_id}:")
            raise ExternalFailure("Não foi possível carregar a agenda.") from e
        if not doc.exists:
            return {}
        return doc.to_dict() or {}

    def _write(self, tenant_id: str, field: str, value) -> None:
        try:
            self._tenant_doc(tenant_id).set({field: value}, merge=True)
        except ExternalFailure:
            raise
        except Exception as e:
            logging.exception(f"Erro ao salvar '{field}' de {tenant_id}:")
            raise ExternalFailure("Não foi possível salvar a agenda.") from e

    async def get_week_schedule(self, tenant_id: str) -> List[DaySchedule]:
        raw = self._read(tenant_id).get(WEEK_FIELD)
        if not raw:
            return default_week_schedule()
        try:
            return validate_week([DaySchedule(**d) for d in raw])
        except ValueError as e:
            logging.error(f"Agenda semanal inválida para {tenant_id}, usando padrão: {e}")
            return default_week_schedule()

    async def save_week_schedule(self, tenant_id: str, week: List[DaySchedule]) -> None:
        week = validate_week(week)
        self._write(tenant_id, WEEK_FIELD, [d.model_dump(mode="json") for d in week])
        logging.info(f"Agenda semanal de {tenant_id} salva.")

    async def get_blocked_periods(self, tenant_id: str) -> List[BlockedPeriod]:
        periods = []
        for raw in self._read(tenant_id).get(BLOCKS_FIELD) or []:
            try:
                periods.append(BlockedPeriod(**raw))
            except ValueError as e:
                logging.warning(f"Bloqueio ignorado em {tenant_id} (dados inválidos): {e}")
        return periods

    async def save_blocked_periods(self, tenant_id: str, periods: List[BlockedPeriod]) -> None:
        self._write(tenant_id, BLOCKS_FIELD, [p.model_dump(mode="json") for p in periods])
        logging.info(f"{len(periods)} bloqueio(s) salvos para {tenant_id}.")
