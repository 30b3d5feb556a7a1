# agenda_studio/routers/schedule_routes.py
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from agenda_studio.core import config
from agenda_studio.core.auth import get_current_studio_id
from agenda_studio.core.dependencies import (
    get_booking_store,
    get_resolver,
    get_schedule_store,
    get_service_catalog,
)
from agenda_studio.core.errors import ValidationError
from agenda_studio.core.models import BlockedPeriod, CompositeService, DaySchedule, TimeSlot
from agenda_studio.core.timeutils import normalize_time
from agenda_studio.routers.common import http_error, load_services, parse_service_ids
from agenda_studio.scheduling.blocked import BlockedPeriodSet
from agenda_studio.scheduling.occupancy import OccupancyResolver, slots_needed
from agenda_studio.scheduling.schedule import apply_to_weekdays, schedule_or_closed, week_interval
from agenda_studio.services.booking_store import BookingStore
from agenda_studio.services.schedule_store import ScheduleStore
from agenda_studio.services.service_catalog import ServiceCatalog

router = APIRouter(prefix="/admin/agenda", tags=["Admin - Agenda"])


# --- Modelos de Requisição/Resposta ---
class ApplyWeekdaysBody(BaseModel):
    sourceDay: int = Field(..., ge=0, le=6, description="Dia cujos horários serão copiados para seg-sex.")


class BlockedPeriodBody(BaseModel):
    date: date
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    reason: Optional[str] = None


class GridResponse(BaseModel):
    date: date
    interval: int
    slotsNeeded: int
    slots: List[TimeSlot]


# --- Agenda Semanal ---
@router.get("/horarios", response_model=List[DaySchedule])
async def get_week_schedule(
    studio_id: str = Depends(get_current_studio_id),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    try:
        return await schedules.get_week_schedule(studio_id)
    except Exception as e:
        raise http_error(e)


@router.put("/horarios", response_model=List[DaySchedule])
async def save_week_schedule(
    week: List[DaySchedule],
    studio_id: str = Depends(get_current_studio_id),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    try:
        await schedules.save_week_schedule(studio_id, week)
        return await schedules.get_week_schedule(studio_id)
    except Exception as e:
        raise http_error(e)


@router.post("/horarios/aplicar-dias-uteis", response_model=List[DaySchedule])
async def apply_schedule_to_weekdays(
    body: ApplyWeekdaysBody,
    studio_id: str = Depends(get_current_studio_id),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    try:
        week = await schedules.get_week_schedule(studio_id)
        source = next(d for d in week if d.dayOfWeek == body.sourceDay)
        updated = apply_to_weekdays(week, source)
        await schedules.save_week_schedule(studio_id, updated)
        logging.info(f"Horários de {source.dayName} aplicados a seg-sex em {studio_id}.")
        return updated
    except Exception as e:
        raise http_error(e)


# --- Bloqueios ---
@router.get("/bloqueios", response_model=List[BlockedPeriod])
async def list_blocked_periods(
    day: Optional[date] = Query(None, alias="date", description="Filtra por data (YYYY-MM-DD)."),
    studio_id: str = Depends(get_current_studio_id),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    try:
        blocked = BlockedPeriodSet(await schedules.get_blocked_periods(studio_id))
        return blocked.for_date(day) if day else blocked.periods
    except Exception as e:
        raise http_error(e)


@router.post("/bloqueios", response_model=BlockedPeriod, status_code=status.HTTP_201_CREATED)
async def create_blocked_period(
    body: BlockedPeriodBody,
    studio_id: str = Depends(get_current_studio_id),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    try:
        period = BlockedPeriod(**body.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    try:
        blocked = BlockedPeriodSet(await schedules.get_blocked_periods(studio_id))
        blocked.add(period)
        await schedules.save_blocked_periods(studio_id, blocked.periods)
        logging.info(f"Bloqueio {period.id} criado em {studio_id} para {period.date}.")
        return period
    except Exception as e:
        raise http_error(e)


@router.delete("/bloqueios/{period_id}")
async def delete_blocked_period(
    period_id: str,
    studio_id: str = Depends(get_current_studio_id),
    schedules: ScheduleStore = Depends(get_schedule_store),
):
    try:
        blocked = BlockedPeriodSet(await schedules.get_blocked_periods(studio_id))
        removed = blocked.remove(period_id)
        if removed:
            await schedules.save_blocked_periods(studio_id, blocked.periods)
    except Exception as e:
        raise http_error(e)

    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Bloqueio não encontrado.")
    return {"message": "Bloqueio removido."}


# --- Grade classificada (calendário do admin) ---
@router.get("/grade", response_model=GridResponse)
async def get_classified_grid(
    day: date = Query(..., alias="date", description="Data (YYYY-MM-DD)."),
    service_ids: str = Query(..., description="IDs dos serviços separados por vírgula."),
    selected_time: Optional[str] = Query(None, description="Horário escolhido (HH:MM) para a prévia."),
    studio_id: str = Depends(get_current_studio_id),
    schedules: ScheduleStore = Depends(get_schedule_store),
    bookings_store: BookingStore = Depends(get_booking_store),
    catalog: ServiceCatalog = Depends(get_service_catalog),
    resolver: OccupancyResolver = Depends(get_resolver),
):
    try:
        if selected_time:
            try:
                selected_time = normalize_time(selected_time)
            except ValueError as e:
                raise ValidationError(str(e)) from e
        services = await load_services(catalog, studio_id, parse_service_ids(service_ids))
        candidate = CompositeService.from_services(services)

        week = await schedules.get_week_schedule(studio_id)
        blocked = BlockedPeriodSet(await schedules.get_blocked_periods(studio_id))
        bookings = await bookings_store.list_for_date(studio_id, day)
        interval = week_interval(week, config.DEFAULT_SLOT_INTERVAL)

        slots = resolver.classify(
            day, schedule_or_closed(week, day, interval), bookings,
            candidate=candidate, selected_time=selected_time, blocked=blocked,
        )
        return GridResponse(
            date=day,
            interval=interval,
            slotsNeeded=slots_needed(candidate.duration, interval),
            slots=slots,
        )
    except Exception as e:
        raise http_error(e)
