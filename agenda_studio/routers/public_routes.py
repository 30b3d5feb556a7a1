# agenda_studio/routers/public_routes.py
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, EmailStr, Field

from agenda_studio.core.dependencies import (
    get_booking_store,
    get_lifecycle,
    get_resolver,
    get_schedule_store,
    get_service_catalog,
)
from agenda_studio.core.models import Booking, CompositeService, CustomerData, Service, SlotAvailability
from agenda_studio.routers.common import http_error, load_services, parse_service_ids
from agenda_studio.scheduling.blocked import BlockedPeriodSet
from agenda_studio.scheduling.flow import BookingFlowController, FlowMode
from agenda_studio.scheduling.lifecycle import BookingLifecycle
from agenda_studio.scheduling.occupancy import OccupancyResolver
from agenda_studio.scheduling.schedule import schedule_for
from agenda_studio.services.booking_store import BookingStore
from agenda_studio.services.schedule_store import ScheduleStore
from agenda_studio.services.service_catalog import ServiceCatalog

router = APIRouter(prefix="/estudios/{studio_id}", tags=["Cliente Final"])


class PublicBookingBody(BaseModel):
    serviceIds: List[str] = Field(..., min_length=1)
    date: date
    time: str
    clientName: str = Field(..., min_length=1)
    clientEmail: Optional[EmailStr] = None
    clientPhone: Optional[str] = None


@router.get("/servicos", response_model=List[Service])
async def list_public_services(
    studio_id: str,
    catalog: ServiceCatalog = Depends(get_service_catalog),
):
    try:
        return await catalog.list_services(studio_id)
    except Exception as e:
        raise http_error(e)


@router.get("/horarios-disponiveis", response_model=List[SlotAvailability])
async def get_available_slots(
    studio_id: str,
    day: date = Query(..., alias="date", description="Data (YYYY-MM-DD)."),
    service_ids: str = Query(..., description="IDs dos serviços separados por vírgula."),
    schedules: ScheduleStore = Depends(get_schedule_store),
    store: BookingStore = Depends(get_booking_store),
    catalog: ServiceCatalog = Depends(get_service_catalog),
    resolver: OccupancyResolver = Depends(get_resolver),
):
    """Horários do expediente, cada um marcado como disponível ou não para o(s) serviço(s)."""
    try:
        services = await load_services(catalog, studio_id, parse_service_ids(service_ids))
        duration = CompositeService.from_services(services).duration
        week = await schedules.get_week_schedule(studio_id)
        blocked = BlockedPeriodSet(await schedules.get_blocked_periods(studio_id))
        bookings = await store.list_for_date(studio_id, day)
        return resolver.availability(day, duration, schedule_for(week, day), blocked, bookings)
    except Exception as e:
        raise http_error(e)


@router.post("/agendamentos", response_model=List[Booking], status_code=status.HTTP_201_CREATED)
async def create_public_booking(
    studio_id: str,
    body: PublicBookingBody,
    schedules: ScheduleStore = Depends(get_schedule_store),
    store: BookingStore = Depends(get_booking_store),
    catalog: ServiceCatalog = Depends(get_service_catalog),
    lifecycle: BookingLifecycle = Depends(get_lifecycle),
    resolver: OccupancyResolver = Depends(get_resolver),
):
    """Agendamento feito pelo cliente final: fica pendente e nunca sobrepõe outro."""
    try:
        services = await load_services(catalog, studio_id, body.serviceIds)
        flow = BookingFlowController(
            studio_id,
            store,
            await schedules.get_week_schedule(studio_id),
            blocked=BlockedPeriodSet(await schedules.get_blocked_periods(studio_id)),
            mode=FlowMode.CLIENT,
            lifecycle=lifecycle,
            resolver=resolver,
        )
        flow.select_services(services)
        flow.select_date(body.date)
        flow.select_time(body.time, await store.list_for_date(studio_id, body.date))
        created = await flow.submit(
            CustomerData(name=body.clientName, email=body.clientEmail, phone=body.clientPhone)
        )
        logging.info(f"Agendamento público criado em {studio_id}: {[b.id for b in created]}")
        return created
    except Exception as e:
        raise http_error(e)
