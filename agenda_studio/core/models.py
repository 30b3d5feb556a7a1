# agenda_studio/core/models.py
import uuid
import datetime as dt
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from agenda_studio.core.timeutils import normalize_time, to_minutes

DAY_NAMES = {
    0: "Domingo", 1: "Segunda-feira", 2: "Terça-feira", 3: "Quarta-feira",
    4: "Quinta-feira", 5: "Sexta-feira", 6: "Sábado",
}


def _new_id() -> str:
    return uuid.uuid4().hex


# --- Status do Agendamento ---
class BookingStatus(str, Enum):
    PENDENTE = "pendente"
    CONFIRMADO = "confirmado"
    CONCLUIDO = "concluído"
    CANCELADO = "cancelado"

    @classmethod
    def _missing_(cls, value):
        # Valores antigos/da API externa que ainda circulam
        aliases = {
            "concluido": cls.CONCLUIDO,
            "pending": cls.PENDENTE,
            "confirmed": cls.CONFIRMADO,
            "completed": cls.CONCLUIDO,
            "cancelled": cls.CANCELADO,
            "canceled": cls.CANCELADO,
        }
        if isinstance(value, str):
            return aliases.get(value.strip().lower())
        return None


# --- Agenda Semanal ---
class DaySchedule(BaseModel):
    dayOfWeek: int = Field(..., ge=0, le=6, description="0 = Domingo, 6 = Sábado.")
    dayName: Optional[str] = None
    isOpen: bool = Field(..., description="Indica se o estúdio abre neste dia.")
    openTime: str = Field("09:00", description="Horário de abertura (HH:MM).")
    closeTime: str = Field("18:00", description="Horário de fechamento (HH:MM).")
    lunchStart: Optional[str] = Field(None, description="Início do almoço (HH:MM).")
    lunchEnd: Optional[str] = Field(None, description="Fim do almoço (HH:MM).")
    interval: int = Field(30, gt=0, description="Granularidade da grade em minutos.")

    @field_validator("openTime", "closeTime", mode="before")
    @classmethod
    def _normalize_required_time(cls, value):
        return normalize_time(value)

    @field_validator("lunchStart", "lunchEnd", mode="before")
    @classmethod
    def _normalize_optional_time(cls, value):
        if value is None or value == "":
            return None
        return normalize_time(value)

    @model_validator(mode="after")
    def _check_hours(self):
        if self.dayName is None:
            self.dayName = DAY_NAMES[self.dayOfWeek]
        if (self.lunchStart is None) != (self.lunchEnd is None):
            raise ValueError("Informe início e fim do almoço, ou nenhum dos dois.")
        if not self.isOpen:
            return self
        open_m, close_m = to_minutes(self.openTime), to_minutes(self.closeTime)
        if open_m >= close_m:
            raise ValueError(f"{self.dayName}: abertura deve ser antes do fechamento.")
        if self.has_lunch:
            lunch_s, lunch_e = to_minutes(self.lunchStart), to_minutes(self.lunchEnd)
            if not (open_m < lunch_s <= lunch_e < close_m):
                raise ValueError(
                    f"{self.dayName}: almoço deve ficar entre abertura e fechamento "
                    f"({self.openTime} < {self.lunchStart} <= {self.lunchEnd} < {self.closeTime})."
                )
        return self

    @property
    def has_lunch(self) -> bool:
        return self.lunchStart is not None and self.lunchEnd is not None


class BlockedPeriod(BaseModel):
    id: str = Field(default_factory=_new_id)
    date: date
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    reason: Optional[str] = None

    @field_validator("startTime", "endTime", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        if value is None or value == "":
            return None
        return normalize_time(value)

    @model_validator(mode="after")
    def _check_bounds(self):
        if (self.startTime is None) != (self.endTime is None):
            raise ValueError("Bloqueio parcial precisa de início e fim.")
        if self.startTime and to_minutes(self.startTime) >= to_minutes(self.endTime):
            raise ValueError("Início do bloqueio deve ser antes do fim.")
        return self

    @property
    def is_whole_day(self) -> bool:
        return self.startTime is None and self.endTime is None


# --- Serviços ---
class ServiceProduct(BaseModel):
    productId: str
    quantity: float = Field(..., gt=0)
    useSecondaryUnit: bool = False


class Service(BaseModel):
    id: str
    name: str
    price: float = Field(0.0, ge=0)
    duration: int = Field(..., gt=0, description="Duração em minutos.")
    description: Optional[str] = None
    products: List[ServiceProduct] = Field(default_factory=list)


class CompositeService(Service):
    """Vários serviços somados num serviço virtual (duração e preço agregados)."""

    components: List[Service] = Field(default_factory=list)

    @classmethod
    def from_services(cls, services: List[Service]) -> "CompositeService":
        if not services:
            raise ValueError("Selecione pelo menos um serviço.")
        return cls(
            id=",".join(s.id for s in services),
            name=" + ".join(s.name for s in services),
            price=sum(s.price for s in services),
            duration=sum(s.duration for s in services),
            description=", ".join(s.name for s in services),
            components=list(services),
        )


# --- Agendamentos ---
class Booking(BaseModel):
    id: str
    serviceId: str
    serviceName: str
    serviceDuration: int = Field(..., gt=0)
    servicePrice: float = 0.0
    date: date
    time: str
    clientName: str
    clientEmail: Optional[str] = None
    clientPhone: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDENTE
    createdAt: Optional[datetime] = None

    @field_validator("time", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return normalize_time(value)

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.serviceDuration

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELADO


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class BookingInput(BaseModel):
    """Dados para criação de um agendamento (um serviço por registro)."""

    serviceId: str
    serviceName: str = Field(..., min_length=1)
    serviceDuration: int = Field(..., gt=0)
    servicePrice: float = Field(0.0, ge=0)
    date: date
    time: str
    clientName: str = Field(..., min_length=1)
    clientEmail: Optional[EmailStr] = None
    clientPhone: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDENTE

    @field_validator("time", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        return normalize_time(value)

    @field_validator("clientName", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("clientEmail", "clientPhone", mode="before")
    @classmethod
    def _empty_contact(cls, value):
        return _blank_to_none(value)


class BookingFieldsUpdate(BaseModel):
    """Edição direta de campos. Status não faz parte: muda só via transição."""

    model_config = ConfigDict(extra="forbid")

    clientName: Optional[str] = Field(None, min_length=1)
    clientEmail: Optional[EmailStr] = None
    clientPhone: Optional[str] = None
    serviceName: Optional[str] = Field(None, min_length=1)
    servicePrice: Optional[float] = Field(None, ge=0)
    date: Optional[dt.date] = None
    time: Optional[str] = None

    @field_validator("time", mode="before")
    @classmethod
    def _normalize_time(cls, value):
        if value is None:
            return None
        return normalize_time(value)

    @field_validator("clientEmail", mode="before")
    @classmethod
    def _empty_email(cls, value):
        return _blank_to_none(value)


class CustomerData(BaseModel):
    """Formulário de dados do cliente (último passo do fluxo)."""

    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, description="Preço manual (só com um serviço).")

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", "phone", mode="before")
    @classmethod
    def _empty_contact(cls, value):
        return _blank_to_none(value)


# --- Grade derivada (nunca persistida) ---
class SlotStatus(str, Enum):
    PAST = "past"
    OCCUPIED = "occupied"
    CONFLICT = "conflict"
    PREVIEW = "preview"
    FREE = "free"


class TimeSlot(BaseModel):
    time: str
    past: bool = False
    occupied_by: Optional[str] = None
    conflict: bool = False
    preview: bool = False
    blocked: bool = False

    @computed_field
    @property
    def status(self) -> SlotStatus:
        if self.past:
            return SlotStatus.PAST
        if self.occupied_by:
            return SlotStatus.OCCUPIED
        if self.conflict:
            return SlotStatus.CONFLICT
        if self.preview:
            return SlotStatus.PREVIEW
        return SlotStatus.FREE


class SlotAvailability(BaseModel):
    time: str
    available: bool


class ConflictWarning(BaseModel):
    """Aviso (não erro): o horário candidato sobrepõe um agendamento existente."""

    bookingId: str
    time: str
    serviceName: str
    clientName: str


class ConsumptionResult(BaseModel):
    success: bool
    message: str


class TransitionResult(BaseModel):
    booking: Booking
    inventory: Optional[ConsumptionResult] = None


class ChangeAction(str, Enum):
    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    UPDATED = "updated"
    DELETED = "deleted"


class BookingChange(BaseModel):
    tenant_id: str
    booking_id: str
    action: ChangeAction
    status: Optional[BookingStatus] = None
