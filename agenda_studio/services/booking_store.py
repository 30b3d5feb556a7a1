# agenda_studio/services/booking_store.py
import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List

import pytz
from firebase_admin import firestore
from google.cloud.firestore import FieldFilter

from agenda_studio.core import config
from agenda_studio.core.db import tenant_ref
from agenda_studio.core.errors import AgendaError, BookingNotFoundError, ExternalFailure
from agenda_studio.core.models import Booking, BookingInput, BookingStatus
from agenda_studio.core.timeutils import DateLike, to_date


class BookingStore(ABC):
    """Leitura/escrita de agendamentos de um estúdio. O esquema é o de `Booking`."""

    @abstractmethod
    async def list_by_tenant_and_range(self, tenant_id: str, start: date, end: date) -> List[Booking]:
        pass

    async def list_for_date(self, tenant_id: str, day: DateLike) -> List[Booking]:
        target = to_date(day)
        return await self.list_by_tenant_and_range(tenant_id, target, target)

    @abstractmethod
    async def get(self, tenant_id: str, booking_id: str) -> Booking:
        """Raises: BookingNotFoundError"""

    @abstractmethod
    async def create(self, tenant_id: str, data: BookingInput) -> Booking:
        pass

    @abstractmethod
    async def update_status(self, tenant_id: str, booking_id: str, status: BookingStatus) -> Booking:
        pass

    @abstractmethod
    async def update_fields(self, tenant_id: str, booking_id: str, partial: Dict[str, Any]) -> Booking:
        pass

    @abstractmethod
    async def delete(self, tenant_id: str, booking_id: str) -> None:
        pass


def booking_from_doc(doc_id: str, data: Dict[str, Any]) -> Booking:
    return Booking(id=doc_id, **{k: v for k, v in data.items() if k in Booking.model_fields and k != "id"})


def booking_to_doc(data: BookingInput) -> Dict[str, Any]:
    doc = data.model_dump(mode="json")
    doc["createdAt"] = firestore.SERVER_TIMESTAMP
    return doc


class FirestoreBookingStore(BookingStore):
    """Agendamentos em estudios/{tenant}/agendamentos, com data 'YYYY-MM-DD' e hora 'HH:MM'."""

    def __init__(self, client):
        self.client = client

    def _collection(self, tenant_id: str):
        if self.client is None:
            logging.error("Firestore DB não está inicializado.")
            raise ExternalFailure("Banco de dados indisponível.")
        return tenant_ref(self.client, tenant_id).collection(config.BOOKINGS_COLLECTION)

    def _existing(self, tenant_id: str, booking_id: str):
        ref = self._collection(tenant_id).document(booking_id)
        doc = ref.get()
        if not doc.exists:
            raise BookingNotFoundError(booking_id)
        return ref, doc.to_dict()

    async def list_by_tenant_and_range(self, tenant_id: str, start: date, end: date) -> List[Booking]:
        try:
            query = self._collection(tenant_id)\
                .where(filter=FieldFilter("date", ">=", start.isoformat()))\
                .where(filter=FieldFilter("date", "<=", end.isoformat()))
            bookings = []
            for doc in query.stream():
                try:
                    bookings.append(booking_from_doc(doc.id, doc.to_dict()))
                except ValueError as e:
                    logging.warning(f"Agendamento {doc.id} ignorado (dados inválidos): {e}")
            bookings.sort(key=lambda b: (b.date, b.time))
            return bookings
        except AgendaError:
            raise
        except Exception as e:
            logging.exception(f"Erro ao buscar agendamentos de {tenant_id} ({start} a {end}):")
            raise ExternalFailure("Não foi possível carregar os agendamentos.") from e

    async def get(self, tenant_id: str, booking_id: str) -> Booking:
        try:
            _, data = self._existing(tenant_id, booking_id)
            return booking_from_doc(booking_id, data)
        except AgendaError:
            raise
        except Exception as e:
            logging.exception(f"Erro ao ler agendamento {booking_id}:")
            raise ExternalFailure("Não foi possível carregar o agendamento.") from e

    async def create(self, tenant_id: str, data: BookingInput) -> Booking:
        try:
            doc = booking_to_doc(data)
            ref = self._collection(tenant_id).document()
            ref.set(doc)
            logging.info(f"Agendamento criado no Firestore com ID: {ref.id}")
            return booking_from_doc(ref.id, {**doc, "createdAt": datetime.now(pytz.utc)})
        except AgendaError:
            raise
        except Exception as e:
            logging.exception(f"Erro CRÍTICO ao criar agendamento para {tenant_id}:")
            raise ExternalFailure("Falha ao salvar o agendamento no servidor.") from e

    async def update_status(self, tenant_id: str, booking_id: str, status: BookingStatus) -> Booking:
        return await self.update_fields(tenant_id, booking_id, {"status": status.value})

    async def update_fields(self, tenant_id: str, booking_id: str, partial: Dict[str, Any]) -> Booking:
        try:
            ref, current = self._existing(tenant_id, booking_id)
            ref.update(partial)
            return booking_from_doc(booking_id, {**current, **partial})
        except AgendaError:
            raise
        except Exception as e:
            logging.exception(f"Erro ao atualizar agendamento {booking_id}:")
            raise ExternalFailure("Falha ao atualizar o agendamento.") from e

    async def delete(self, tenant_id: str, booking_id: str) -> None:
        try:
            ref, _ = self._existing(tenant_id, booking_id)
            ref.delete()
            logging.info(f"Agendamento {booking_id} removido do Firestore.")
        except AgendaError:
            raise
        except Exception as e:
            logging.exception(f"Erro ao excluir agendamento {booking_id}:")
            raise ExternalFailure("Erro ao excluir agendamento.") from e
