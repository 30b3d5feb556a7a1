# agenda_studio/services/service_catalog.py
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from agenda_studio.core import config
from agenda_studio.core.db import tenant_ref
from agenda_studio.core.errors import ExternalFailure
from agenda_studio.core.models import Service


class ServiceCatalog(ABC):
    """Catálogo de serviços do estúdio. Entradas são snapshots somente leitura."""

    @abstractmethod
    async def list_services(self, tenant_id: str) -> List[Service]:
        pass

    async def get_many(self, tenant_id: str, service_ids: List[str]) -> List[Service]:
        """Serviços na ordem pedida; ids desconhecidos são ignorados."""
        by_id = {s.id: s for s in await self.list_services(tenant_id)}
        return [by_id[sid] for sid in service_ids if sid in by_id]

    async def get(self, tenant_id: str, service_id: str) -> Optional[Service]:
        found = await self.get_many(tenant_id, [service_id])
        return found[0] if found else None


def service_from_doc(doc_id: str, data: Dict[str, Any]) -> Service:
    # Documentos antigos usam nome_servico / duracao_minutos / preco
    return Service(
        id=doc_id,
        name=data.get("name") or data.get("nome_servico") or "Serviço",
        price=data.get("price", data.get("preco")) or 0.0,
        duration=data.get("duration", data.get("duracao_minutos")) or config.DEFAULT_SERVICE_DURATION,
        description=data.get("description", data.get("descricao")),
        products=data.get("products") or [],
    )


class FirestoreServiceCatalog(ServiceCatalog):
    def __init__(self, client):
        self.client = client

    async def list_services(self, tenant_id: str) -> List[Service]:
        if self.client is None:
            logging.error("Firestore DB não está inicializado. list_services falhou.")
            raise ExternalFailure("Banco de dados indisponível.")
        try:
            services_ref = tenant_ref(self.client, tenant_id).collection(config.SERVICES_COLLECTION)
            docs = list(services_ref.stream())
        except Exception as e:
            logging.exception(f"Erro ao buscar serviços de {tenant_id}:")
            raise ExternalFailure("Não foi possível carregar os serviços.") from e

        services = []
        for doc in docs:
            try:
                services.append(service_from_doc(doc.id, doc.to_dict()))
            except ValueError as e:
                logging.warning(f"Serviço {doc.id} ignorado (dados inválidos): {e}")
        return services
