# agenda_studio/routers/booking_routes.py
import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field

from agenda_studio.core.auth import get_current_studio_id
from agenda_studio.core.dependencies import (
    get_booking_store,
    get_lifecycle,
    get_resolver,
    get_schedule_store,
    get_service_catalog,
)
from agenda_studio.core.models import (
    Booking,
    BookingFieldsUpdate,
    BookingStatus,
    ConflictWarning,
    ConsumptionResult,
    CustomerData,
)
from agenda_studio.routers.common import http_error, load_services
from agenda_studio.scheduling.blocked import BlockedPeriodSet
from agenda_studio.scheduling.flow import BookingFlowController, FlowMode
from agenda_studio.scheduling.lifecycle import BookingLifecycle
from agenda_studio.scheduling.listing import count_by_status, filter_bookings
from agenda_studio.scheduling.occupancy import OccupancyResolver
from agenda_studio.services.booking_store import BookingStore
from agenda_studio.services.schedule_store import ScheduleStore
from agenda_studio.services.service_catalog import ServiceCatalog

router = APIRouter(prefix="/admin/agendamentos", tags=["Admin - Agendamentos"])

# Janela padrão da listagem quando o painel não informa período
DEFAULT_LIST_START = date(2000, 1, 1)
DEFAULT_LIST_END = date(2100, 12, 31)


# --- Modelos de Requisição/Resposta ---
class QuickBookingBody(BaseModel):
    serviceIds: List[str] = Field(..., min_length=1)
    date: date
    time: str
    clientName: str = Field(..., min_length=1)
    clientEmail: Optional[EmailStr] = None
    clientPhone: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, description="Preço manual (só com um serviço).")
    compensate: bool = Field(False, description="Desfaz os já criados se um falhar.")


class QuickBookingResponse(BaseModel):
    bookings: List[Booking]
    conflicts: List[ConflictWarning] = []


class StatusUpdateBody(BaseModel):
    status: BookingStatus


class StatusUpdateResponse(BaseModel):
    booking: Booking
    inventory: Optional[ConsumptionResult] = None


async def _load_bookings(store: BookingStore, studio_id: str, start: Optional[date], end: Optional[date]):
    return await store.list_by_tenant_and_range(studio_id, start or DEFAULT_LIST_START, end or DEFAULT_LIST_END)


# --- Listagem ---
@router.get("", response_model=List[Booking])
async def list_bookings(
    start: Optional[date] = Query(None, description="Data inicial (inclusive)."),
    end: Optional[date] = Query(None, description="Data final (inclusive)."),
    day: Optional[date] = Query(None, description="Apenas esta data."),
    search: Optional[str] = Query(None, description="Trecho do nome do cliente ou do serviço."),
    time: Optional[str] = Query(None, description="Trecho do horário, ex: '09'."),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    studio_id: str = Depends(get_current_studio_id),
    store: BookingStore = Depends(get_booking_store),
):
    try:
        bookings = await _load_bookings(store, studio_id, day or start, day or end)
        return filter_bookings(bookings, start=start, end=end, day=day, search=search, time=time, status=status_filter)
    except Exception as e:
        raise http_error(e)


@router.get("/contagem", response_model=Dict[str, int])
async def count_bookings(
    start: Optional[date] = Query(None),
    end: Optional[date] = Query(None),
    studio_id: str = Depends(get_current_studio_id),
    store: BookingStore = Depends(get_booking_store),
):
    try:
        return count_by_status(await _load_bookings(store, studio_id, start, end))
    except Exception as e:
        raise http_error(e)


# --- Criação rápida (admin) ---
@router.post("", response_model=QuickBookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: QuickBookingBody,
    studio_id: str = Depends(get_current_studio_id),
    store: BookingStore = Depends(get_booking_store),
    schedules: ScheduleStore = Depends(get_schedule_store),
    catalog: ServiceCatalog = Depends(get_service_catalog),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    resolver: OccupancyResolver = Depends(get_resolver),
):
    """
    Cria um agendamento por serviço, todos já confirmados.

    Conflitos não impedem a criação (decisão do operador); voltam na resposta.
    """
    try:
        services = await load_services(catalog, studio_id, body.serviceIds)
        flow = BookingFlowController(
            studio_id,
            store,
            await schedules.get_week_schedule(studio_id),
            blocked=BlockedPeriodSet(await schedules.get_blocked_periods(studio_id)),
            mode=FlowMode.ADMIN,
            lifecycle=lifecycle,
            resolver=resolver,
        )
        flow.select_services(services)
        flow.select_date(body.date)
        conflicts = flow.select_time(body.time, await store.list_for_date(studio_id, body.date))
        customer = CustomerData(
            name=body.clientName, email=body.clientEmail, phone=body.clientPhone, price=body.price,
        )
        created = await flow.submit(customer, compensate=body.compensate)
        return QuickBookingResponse(bookings=created, conflicts=conflicts)
    except Exception as e:
        raise http_error(e)


# --- Ciclo de vida ---
@router.patch("/{booking_id}/status", response_model=StatusUpdateResponse)
async def update_booking_status(
    booking_id: str,
    body: StatusUpdateBody,
    studio_id: str = Depends(get_current_studio_id),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    try:
        result = await lifecycle.transition(studio_id, booking_id, body.status)
        return StatusUpdateResponse(booking=result.booking, inventory=result.inventory)
    except Exception as e:
        raise http_error(e)


@router.patch("/{booking_id}", response_model=Booking)
async def edit_booking(
    booking_id: str,
    changes: BookingFieldsUpdate,
    studio_id: str = Depends(get_current_studio_id),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    try:
        return await lifecycle.edit(studio_id, booking_id, changes)
    except Exception as e:
        raise http_error(e)


@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: str,
    confirm: bool = Query(False, description="Obrigatório: confirma a exclusão definitiva."),
    studio_id: str = Depends(get_current_studio_id),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
):
    try:
        await lifecycle.delete(studio_id, booking_id, confirmed=confirm)
    except Exception as e:
        raise http_error(e)
    logging.info(f"Agendamento {booking_id} excluído por {studio_id}.")
    return {"message": "Agendamento excluído."}
