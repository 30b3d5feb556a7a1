# agenda_studio/routers/common.py
import logging
from typing import List

from fastapi import HTTPException, status

from agenda_studio.core.errors import (
    AgendaError,
    BookingNotFoundError,
    ExternalFailure,
    SlotUnavailableError,
    ValidationError,
)
from agenda_studio.core.models import Service
from agenda_studio.services.service_catalog import ServiceCatalog


def http_error(e: Exception) -> HTTPException:
    """Traduz os erros do motor para a resposta HTTP correspondente."""
    if isinstance(e, SlotUnavailableError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e), "conflictingIds": e.conflicting_ids},
        )
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    if isinstance(e, BookingNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ExternalFailure):
        detail = {"message": str(e)}
        if e.created:
            detail["createdIds"] = [b.id for b in e.created]
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
    if isinstance(e, AgendaError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    logging.exception(f"Erro inesperado: {e}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erro interno.")


def parse_service_ids(raw: str) -> List[str]:
    ids = [sid.strip() for sid in (raw or "").split(",") if sid.strip()]
    if not ids:
        raise ValidationError("Informe pelo menos um serviço (service_ids).")
    return ids


async def load_services(catalog: ServiceCatalog, tenant_id: str, service_ids: List[str]) -> List[Service]:
    services = await catalog.get_many(tenant_id, service_ids)
    if len(services) != len(service_ids):
        found = {s.id for s in services}
        missing = [sid for sid in service_ids if sid not in found]
        raise ValidationError(f"Serviço(s) não encontrado(s): {', '.join(missing)}")
    return services
