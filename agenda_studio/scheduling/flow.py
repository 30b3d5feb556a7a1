# agenda_studio/scheduling/flow.py
import logging
from datetime import date, datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel

from agenda_studio.core import config
from agenda_studio.core.errors import AgendaError, ExternalFailure, SlotUnavailableError, ValidationError
from agenda_studio.core.events import ChangeNotifier
from agenda_studio.core.models import (
    Booking,
    BookingChange,
    BookingFieldsUpdate,
    BookingInput,
    BookingStatus,
    ChangeAction,
    CompositeService,
    ConflictWarning,
    CustomerData,
    DaySchedule,
    Service,
    TimeSlot,
)
from agenda_studio.core.timeutils import DateLike, local_now, normalize_time, to_date
from agenda_studio.scheduling.blocked import BlockedPeriodSet
from agenda_studio.scheduling.lifecycle import BookingLifecycle
from agenda_studio.scheduling.occupancy import OccupancyResolver, slots_needed
from agenda_studio.scheduling.schedule import WeekSchedule, schedule_or_closed, week_interval
from agenda_studio.services.booking_store import BookingStore


class FlowStep(str, Enum):
    SERVICE = "service"
    DATE = "date"
    CALENDAR = "calendar"
    FORM = "form"
    CONFIRMATION = "confirmation"


class FlowMode(str, Enum):
    ADMIN = "admin"
    CLIENT = "client"


class EditMode(str, Enum):
    RESCHEDULE = "reschedule"
    EDIT = "edit"


STEP_ORDER = [FlowStep.SERVICE, FlowStep.DATE, FlowStep.CALENDAR, FlowStep.FORM, FlowStep.CONFIRMATION]
STEP_LABELS = {
    FlowStep.SERVICE: "Serviços",
    FlowStep.DATE: "Data",
    FlowStep.CALENDAR: "Horário",
    FlowStep.FORM: "Dados do Cliente",
}


class StepProgress(BaseModel):
    id: FlowStep
    label: str
    completed: bool
    current: bool


class BookingFlowController:
    """
    Assistente de agendamento em passos: serviço -> data -> horário -> dados -> confirmação.

    Voltar a um passo anterior preserva as escolhas já feitas nos passos
    seguintes. No modo admin nenhum conflito bloqueia a escolha do horário
    (os conflitos ficam em `pending_conflicts` para o operador decidir) e os
    agendamentos nascem confirmados. No modo cliente o horário precisa estar
    livre e o agendamento fica pendente.
    """

    def __init__(
        self,
        tenant_id: str,
        store: BookingStore,
        week: WeekSchedule,
        blocked: Optional[BlockedPeriodSet] = None,
        mode: FlowMode = FlowMode.ADMIN,
        lifecycle: Optional[BookingLifecycle] = None,
        resolver: Optional[OccupancyResolver] = None,
        notifier: Optional[ChangeNotifier] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.tenant_id = tenant_id
        self.store = store
        self.week = list(week)
        self.blocked = blocked if blocked is not None else BlockedPeriodSet()
        self.mode = mode
        self.notifier = notifier or (lifecycle.notifier if lifecycle else ChangeNotifier())
        self.lifecycle = lifecycle or BookingLifecycle(store, notifier=self.notifier)
        self.resolver = resolver or OccupancyResolver(clock=clock)
        self.clock = clock
        self._clear()

    def _clear(self):
        self.current_step = FlowStep.SERVICE
        self.selected_services: List[Service] = []
        self.selected_date: Optional[date] = None
        self.selected_time: Optional[str] = None
        self.confirmed_bookings: List[Booking] = []
        self.pending_conflicts: List[ConflictWarning] = []
        self.editing_booking: Optional[Booking] = None
        self.edit_mode: Optional[EditMode] = None

    # --- Estado derivado ---
    @property
    def composite_service(self) -> Optional[CompositeService]:
        if not self.selected_services:
            return None
        return CompositeService.from_services(self.selected_services)

    @property
    def confirmed_booking(self) -> Optional[Booking]:
        return self.confirmed_bookings[0] if self.confirmed_bookings else None

    @property
    def interval(self) -> int:
        return week_interval(self.week, config.DEFAULT_SLOT_INTERVAL)

    @property
    def candidate(self) -> Optional[CompositeService]:
        """Serviço que ocupa a agenda; na edição vale a duração gravada no agendamento."""
        composite = self.composite_service
        if composite is None or self.editing_booking is None:
            return composite
        return composite.model_copy(update={"duration": self.editing_booking.serviceDuration})

    @property
    def slots_needed(self) -> Optional[int]:
        service = self.candidate
        if service is None:
            return None
        return slots_needed(service.duration or config.DEFAULT_SERVICE_DURATION, self.interval)

    def occupancy_message(self) -> Optional[str]:
        if self.slots_needed is None:
            return None
        return f"Este procedimento ocupará {self.slots_needed} horário(s) de {self.interval} minutos"

    def selections(self) -> Dict[str, object]:
        return {
            "step": self.current_step,
            "services": [s.id for s in self.selected_services],
            "date": self.selected_date,
            "time": self.selected_time,
            "confirmedBooking": self.confirmed_booking,
        }

    def _completed(self) -> Dict[FlowStep, bool]:
        return {
            FlowStep.SERVICE: len(self.selected_services) > 0,
            FlowStep.DATE: self.selected_date is not None,
            FlowStep.CALENDAR: self.selected_date is not None and self.selected_time is not None,
            FlowStep.FORM: self.confirmed_booking is not None,
        }

    def steps(self) -> List[StepProgress]:
        completed = self._completed()
        return [
            StepProgress(id=step, label=label, completed=completed[step], current=self.current_step == step)
            for step, label in STEP_LABELS.items()
        ]

    def _day_schedule(self, day: date) -> DaySchedule:
        return schedule_or_closed(self.week, day, self.interval)

    # --- Passos ---
    def select_services(self, services: Iterable[Service]) -> CompositeService:
        services = list(services)
        if not services:
            raise ValidationError("Selecione pelo menos um serviço.")
        if self.editing_booking is not None and {s.id for s in services} != set(self._booking_service_ids()):
            raise ValidationError("O serviço de um agendamento existente não pode ser trocado.")
        self.selected_services = services
        self.current_step = FlowStep.DATE
        composite = self.composite_service
        logging.info(f"[Flow] Serviços escolhidos: {composite.name} ({composite.duration}min)")
        return composite

    def select_date(self, day: DateLike) -> date:
        if not self.selected_services:
            raise ValidationError("Escolha o serviço antes da data.")
        try:
            target = to_date(day)
        except ValueError as e:
            raise ValidationError(f"Data inválida: {day}") from e

        if self.mode == FlowMode.CLIENT:
            if target < self.clock().date():
                raise ValidationError("Não é possível agendar em uma data passada.")
            if self.blocked.is_day_blocked(target):
                raise ValidationError("Data indisponível (bloqueada).")
            if not self._day_schedule(target).isOpen:
                raise ValidationError("O estúdio não abre nesta data.")

        self.selected_date = target
        self.current_step = FlowStep.CALENDAR
        return target

    def time_grid(self, bookings: Iterable[Booking], now: Optional[datetime] = None) -> List[TimeSlot]:
        if self.selected_date is None or not self.selected_services:
            raise ValidationError("Escolha serviço e data para ver os horários.")
        return self.resolver.classify(
            self.selected_date,
            self._day_schedule(self.selected_date),
            bookings,
            candidate=self.candidate,
            selected_time=self.selected_time,
            blocked=self.blocked,
            now=now,
        )

    def _booking_service_ids(self) -> List[str]:
        return self.editing_booking.serviceId.split(",")

    def _ignored_ids(self) -> List[str]:
        return [self.editing_booking.id] if self.editing_booking else []

    def select_time(self, time: str, bookings: Iterable[Booking] = ()) -> List[ConflictWarning]:
        if self.selected_date is None:
            raise ValidationError("Escolha a data antes do horário.")
        try:
            time = normalize_time(time)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        bookings = list(bookings)
        duration = self.candidate.duration
        warnings = self.resolver.conflict_warnings(
            self.selected_date, time, duration, bookings, exclude_ids=self._ignored_ids()
        )
        if self.mode == FlowMode.CLIENT:
            self._guard_client_slot(time, duration, bookings)

        self.selected_time = time
        self.pending_conflicts = warnings
        self.current_step = FlowStep.FORM
        if warnings:
            logging.warning(f"[Flow] Horário {self.selected_date} {time} em conflito com {len(warnings)} agendamento(s)")
        return warnings

    def _guard_client_slot(self, time: str, duration: int, bookings: List[Booking]) -> None:
        availability = self.resolver.availability(
            self.selected_date, duration, self._day_schedule(self.selected_date), self.blocked,
            [b for b in bookings if b.id not in self._ignored_ids()],
        )
        slot = next((s for s in availability if s.time == time), None)
        if slot is None or not slot.available:
            conflicting = [
                b.id for b in self.resolver.conflicts_for(
                    self.selected_date, time, duration, bookings, exclude_ids=self._ignored_ids()
                )
            ]
            raise SlotUnavailableError("Horário indisponível. Escolha outro horário.", conflicting)

    def go_back(self) -> FlowStep:
        if self.current_step == FlowStep.CONFIRMATION:
            raise ValidationError("Agendamento já confirmado. Reinicie o fluxo para um novo agendamento.")
        index = STEP_ORDER.index(self.current_step)
        if index > 0:
            self.current_step = STEP_ORDER[index - 1]
        return self.current_step

    def go_to(self, step: FlowStep) -> FlowStep:
        """Navega para um passo cujas escolhas anteriores já existem."""
        reachable = {
            FlowStep.SERVICE: True,
            FlowStep.DATE: bool(self.selected_services),
            FlowStep.CALENDAR: bool(self.selected_services) and self.selected_date is not None,
            FlowStep.FORM: self._completed()[FlowStep.CALENDAR] and bool(self.selected_services),
            FlowStep.CONFIRMATION: False,
        }
        if self.current_step == FlowStep.CONFIRMATION or not reachable[step]:
            raise ValidationError(f"Passo '{step.value}' indisponível no momento.")
        self.current_step = step
        return step

    def reset(self) -> None:
        self._clear()

    def start_from_booking(self, booking: Booking, services: Iterable[Service], edit_mode: EditMode) -> None:
        """
        Carrega um agendamento existente: edição começa nos serviços, adiamento na data.

        O serviço não pode ser trocado. Se ele saiu do catálogo, o flow usa o
        retrato gravado no próprio agendamento.
        """
        self._clear()
        wanted = booking.serviceId.split(",")
        self.selected_services = [s for s in services if s.id in wanted] or [Service(
            id=booking.serviceId,
            name=booking.serviceName,
            duration=booking.serviceDuration,
            price=booking.servicePrice,
        )]
        self.selected_date = booking.date
        self.selected_time = booking.time
        self.editing_booking = booking
        self.edit_mode = edit_mode
        self.current_step = FlowStep.SERVICE if edit_mode == EditMode.EDIT else FlowStep.DATE

    # --- Confirmação ---
    async def submit(self, customer: CustomerData, compensate: bool = False) -> List[Booking]:
        """
        Cria um agendamento por serviço componente, todos com a mesma data/hora.

        As criações acontecem em ordem, uma de cada vez. Se uma falhar, as já
        gravadas continuam gravadas (ExternalFailure.created) e o fluxo fica no
        formulário para nova tentativa; com `compensate=True` elas são excluídas.
        """
        if self.current_step != FlowStep.FORM or self.selected_time is None:
            raise ValidationError("Escolha serviço, data e horário antes de confirmar.")
        if customer.price is not None and len(self.selected_services) > 1:
            raise ValidationError("Preço manual só é permitido com um único serviço.")

        if self.editing_booking is not None:
            return await self._submit_edit(customer)

        if self.mode == FlowMode.CLIENT:
            fresh = await self.store.list_for_date(self.tenant_id, self.selected_date)
            self._guard_client_slot(self.selected_time, self.candidate.duration, fresh)

        created: List[Booking] = []
        try:
            for service in self.selected_services:
                booking = await self.store.create(self.tenant_id, BookingInput(
                    serviceId=service.id,
                    serviceName=service.name,
                    serviceDuration=service.duration,
                    servicePrice=customer.price if customer.price is not None else service.price,
                    date=self.selected_date,
                    time=self.selected_time,
                    clientName=customer.name,
                    clientEmail=customer.email,
                    clientPhone=customer.phone,
                ))
                created.append(booking)
                self.notifier.publish(BookingChange(
                    tenant_id=self.tenant_id, booking_id=booking.id, action=ChangeAction.CREATED, status=booking.status,
                ))
                if self.mode == FlowMode.ADMIN:
                    result = await self.lifecycle.transition(self.tenant_id, booking.id, BookingStatus.CONFIRMADO)
                    created[-1] = result.booking
        except Exception as e:
            logging.error(
                f"[Flow] Falha ao criar agendamento ({len(created)}/{len(self.selected_services)} gravados): {e}"
            )
            if compensate:
                created = await self._compensate(created)
            raise ExternalFailure(f"Falha ao salvar o agendamento no servidor: {e}", created=created) from e

        self.confirmed_bookings = created
        self.current_step = FlowStep.CONFIRMATION
        logging.info(f"[Flow] {len(created)} agendamento(s) confirmados para {self.selected_date} {self.selected_time}")
        return created

    async def _submit_edit(self, customer: CustomerData) -> List[Booking]:
        booking = self.editing_booking
        changes = BookingFieldsUpdate(
            clientName=customer.name,
            clientEmail=customer.email,
            clientPhone=customer.phone,
            servicePrice=customer.price if customer.price is not None else booking.servicePrice,
            date=self.selected_date,
            time=self.selected_time,
        )
        booking = await self.lifecycle.edit(self.tenant_id, booking.id, changes)
        self.confirmed_bookings = [booking]
        self.current_step = FlowStep.CONFIRMATION
        return [booking]

    async def _compensate(self, created: List[Booking]) -> List[Booking]:
        remaining = []
        for booking in created:
            try:
                await self.lifecycle.delete(self.tenant_id, booking.id, confirmed=True)
            except AgendaError as e:
                logging.error(f"[Flow] Não foi possível desfazer o agendamento {booking.id}: {e}")
                remaining.append(booking)
        return remaining
