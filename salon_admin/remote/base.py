"""Contracts of the remote services the core talks to.

The remote service owns the durable store and is the final arbiter of
seat exclusivity. Both the HTTP client and the in-memory stand-in
implement these protocols.
"""

from typing import Protocol

from salon_admin.schemas.appointment_schema import (
    Appointment,
    AppointmentCreate,
    AppointmentUpdate,
    SeatStatusUpdate,
    StatusUpdate,
)
from salon_admin.schemas.branch_schema import WorkingHour
from salon_admin.schemas.form_schema import FormData
from salon_admin.schemas.seat_schema import SeatMap


class RemoteAppointmentService(Protocol):
    async def get_appointment(self, appointment_id: int) -> Appointment: ...

    async def create_appointment(self, body: AppointmentCreate) -> Appointment: ...

    async def update_appointment(self, appointment_id: int, body: AppointmentUpdate) -> None: ...

    async def update_status(self, appointment_id: int, body: StatusUpdate) -> None: ...

    async def update_seat_status(self, appointment_id: int, body: SeatStatusUpdate) -> None: ...

    async def delete_appointment(self, appointment_id: int) -> None: ...

    async def get_working_hours(self) -> list[WorkingHour]: ...

    async def get_form_data(self) -> FormData: ...


class RemoteSeatService(Protocol):
    async def check_availability(self, seat_id: int) -> bool: ...

    async def get_seat_map(self) -> SeatMap: ...
