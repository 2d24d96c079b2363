"""Appointment data models and the request bodies sent to the remote service."""

from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from salon_admin.errors import ValidationError
from salon_admin.utils import format_date, normalize_time, parse_or_default


class AppointmentStatus(str, Enum):
    """Status values persisted by the remote service."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED})
EDITABLE_STATUSES = frozenset({AppointmentStatus.PENDING, AppointmentStatus.IN_PROGRESS})
DELETABLE_STATUSES = frozenset({AppointmentStatus.PENDING, AppointmentStatus.CANCELLED})


def _lenient_price(value: Any) -> Optional[float]:
    return None if value is None else parse_or_default(value)


# Bad price strings resolve to 0; the remote service recomputes prices.
LenientPrice = Annotated[Optional[float], BeforeValidator(_lenient_price)]


class CustomerRef(BaseModel):
    """Customer an appointment belongs to."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None


class BranchRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""


class ServiceLine(BaseModel):
    """One service on an appointment, optionally bound to a seat and staff member."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    price: LenientPrice = None
    seat_id: Optional[int] = None
    seat_name: Optional[str] = None
    staff_id: Optional[int] = None
    staff_name: Optional[str] = None
    duration_minutes: Optional[int] = None


class LockedServiceLine(BaseModel):
    """Service line with the price locked in when the appointment was booked."""

    model_config = ConfigDict(extra="ignore")

    id: int
    service_id: int
    price: LenientPrice = None
    status: Optional[str] = None
    seat_id: Optional[int] = None


class Appointment(BaseModel):
    """Snapshot of an appointment as returned by the remote service."""

    model_config = ConfigDict(extra="ignore")

    id: int
    ticket_number: str = ""
    appointment_date: Optional[str] = None
    appointment_time: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: Optional[str] = None
    original_total: Optional[float] = None
    discount_amount: Optional[float] = None
    final_total: Optional[float] = None
    currency_symbol: Optional[str] = None
    user: CustomerRef
    services: list[ServiceLine] = Field(default_factory=list)
    appointment_services: list[LockedServiceLine] = Field(default_factory=list)
    branch: Optional[BranchRef] = None

    @field_validator("appointment_date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> Optional[str]:
        return format_date(value) if value else None

    @field_validator("appointment_time", mode="before")
    @classmethod
    def _normalize_time(cls, value: Any) -> Optional[str]:
        return normalize_time(str(value)) if value else None

    @property
    def current_seat_id(self) -> Optional[int]:
        """The seat bound through the service lines. All bindings must agree."""
        seat_ids = {s.seat_id for s in self.services if s.seat_id is not None}
        seat_ids |= {s.seat_id for s in self.appointment_services if s.seat_id is not None}
        if len(seat_ids) > 1:
            raise ValidationError(
                f"Appointment {self.id} is bound to several seats: {sorted(seat_ids)}",
                field="seat_id",
                rule="seat_binding_mismatch",
            )
        return next(iter(seat_ids), None)

    @property
    def current_staff_id(self) -> Optional[int]:
        return next((s.staff_id for s in self.services if s.staff_id is not None), None)

    @property
    def service_ids(self) -> list[int]:
        """Service ids to resubmit, preferring the locked-price lines."""
        if self.appointment_services:
            return [s.service_id for s in self.appointment_services if s.service_id]
        return [s.id for s in self.services if s.id]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class ServiceRef(BaseModel):
    id: int


class AppointmentUpdate(BaseModel):
    """Full-replace body for ``PUT /appointments/{id}`` (approve and edit)."""

    user_id: int
    appointment_date: str
    appointment_time: str
    services: list[ServiceRef]
    status: AppointmentStatus
    seat_id: Optional[int] = None
    notes: Optional[str] = None
    staff_id: Optional[int] = None

    @field_validator("appointment_time", mode="before")
    @classmethod
    def _normalize_time(cls, value: Any) -> str:
        return normalize_time(str(value))

    @field_validator("appointment_date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> str:
        return format_date(value)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class AppointmentCreate(BaseModel):
    """Body for ``POST /appointments``. New appointments never carry a seat."""

    user_id: int
    appointment_date: str
    appointment_time: str
    services: list[ServiceRef]
    notes: Optional[str] = None
    staff_id: Optional[int] = None

    @field_validator("appointment_time", mode="before")
    @classmethod
    def _normalize_time(cls, value: Any) -> str:
        return normalize_time(str(value))

    @field_validator("appointment_date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> str:
        return format_date(value)

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json")
        if payload["staff_id"] is None:
            del payload["staff_id"]
        return payload


class StatusUpdate(BaseModel):
    """Body for ``PUT /appointments/{id}/status``."""

    status: AppointmentStatus

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class SeatStatusUpdate(BaseModel):
    """Body for ``PUT /appointments/{id}/seat-status``."""

    status: AppointmentStatus
    seat_id: int

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
