"""Seat inventory models and the seat-map display snapshot."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from salon_admin.schemas.appointment_schema import (
    Appointment,
    AppointmentStatus,
    CustomerRef,
    ServiceLine,
)


class SeatStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    CLEANING = "cleaning"
    MAINTENANCE = "maintenance"


class StaffRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""


class SeatedAppointment(BaseModel):
    """Appointment currently being served at a seat, as listed on the seat map."""

    model_config = ConfigDict(extra="ignore")

    id: int
    ticket_number: str = ""
    status: AppointmentStatus = AppointmentStatus.IN_PROGRESS
    service_name: str = ""
    service_id: Optional[int] = None
    user: Optional[CustomerRef] = None

    def to_appointment(self, seat_id: int) -> Appointment:
        """Build the lifecycle snapshot of this appointment, bound to ``seat_id``.

        Without a ``service_id`` the binding rides on a line with id 0,
        which ``Appointment.service_ids`` skips.
        """
        line = ServiceLine(id=self.service_id or 0, name=self.service_name, seat_id=seat_id)
        return Appointment(
            id=self.id,
            ticket_number=self.ticket_number,
            status=self.status,
            user=self.user or CustomerRef(id=0),
            services=[line],
            appointment_services=[],
        )


class Seat(BaseModel):
    """A physical service station.

    ``status`` is None when the seat was listed without live state
    (for example in the appointment form's seat picker).
    """

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    status: Optional[SeatStatus] = None
    staff: Optional[StaffRef] = None
    appointments: list[SeatedAppointment] = Field(default_factory=list)


class SeatAvailability(BaseModel):
    """Live answer of ``GET /seats/{id}/availability``."""

    model_config = ConfigDict(extra="ignore")

    available: bool = False


class SeatMap(BaseModel):
    """Display snapshot of the floor. May be stale; never a guard by itself."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    seats: list[Seat] = Field(default_factory=list)
    unassigned_appointments: list[Appointment] = Field(
        default_factory=list, alias="unassignedAppointments"
    )
    assigned_pending_appointments: list[Appointment] = Field(
        default_factory=list, alias="assignedPendingAppointments"
    )

    def find_seat(self, seat_id: int) -> Optional[Seat]:
        return next((s for s in self.seats if s.id == seat_id), None)

    def seat_of(self, appointment_id: int) -> Optional[Seat]:
        """Return the seat currently serving ``appointment_id``, if any."""
        for seat in self.seats:
            if any(a.id == appointment_id for a in seat.appointments):
                return seat
        return None
