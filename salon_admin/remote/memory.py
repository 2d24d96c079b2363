"""
In-memory salon backend.

Stands in for the remote salon API in the offline console demo and in
tests. It arbitrates seat exclusivity the way the real service does: a
second in-progress appointment can never be bound to an occupied seat.
Every call is recorded with the same method/path/body the HTTP client
would send.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from salon_admin.errors import ConflictError, RemoteServiceError
from salon_admin.remote.http_client import SalonApiClient
from salon_admin.schemas.appointment_schema import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    AppointmentUpdate,
    CustomerRef,
    SeatStatusUpdate,
    ServiceLine,
    StatusUpdate,
)
from salon_admin.schemas.branch_schema import WorkingHour
from salon_admin.schemas.form_schema import CatalogService, FormData
from salon_admin.schemas.seat_schema import (
    Seat,
    SeatedAppointment,
    SeatMap,
    SeatStatus,
    StaffRef,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedCall:
    """One request as it would have gone over the wire."""

    method: str
    path: str
    body: Optional[dict[str, Any]] = None


class InMemorySalonService:
    """Implements both remote service protocols against local dictionaries."""

    def __init__(
        self,
        seats: Iterable[Seat] = (),
        appointments: Iterable[Appointment] = (),
        working_hours: Iterable[WorkingHour] = (),
        customers: Iterable[CustomerRef] = (),
        services: Iterable[CatalogService] = (),
        staff: Iterable[StaffRef] = (),
    ) -> None:
        self._seed = (
            list(seats), list(appointments), list(working_hours),
            list(customers), list(services), list(staff),
        )
        self.calls: list[RecordedCall] = []
        self.reset()

    def reset(self) -> None:
        """Restore the seeded state and clear the call log."""
        seats, appointments, working_hours, customers, services, staff = self._seed
        self._seats: dict[int, Seat] = {s.id: s.model_copy(deep=True) for s in seats}
        self._appointments: dict[int, Appointment] = {
            a.id: a.model_copy(deep=True) for a in appointments
        }
        self._working_hours = [wh.model_copy() for wh in working_hours]
        self._customers = {c.id: c.model_copy() for c in customers}
        self._catalog = {s.id: s.model_copy() for s in services}
        self._staff = [s.model_copy() for s in staff]
        self._next_id = max(self._appointments, default=0) + 1
        self._refresh_seat_statuses()
        self.calls.clear()

    # ------------------------------------------------------------------ #
    # Inspection helpers
    # ------------------------------------------------------------------ #

    def appointment(self, appointment_id: int) -> Appointment:
        return self._require(appointment_id).model_copy(deep=True)

    def occupant(self, seat_id: int) -> Optional[int]:
        """Id of the in-progress appointment seated at ``seat_id``."""
        for appt in self._appointments.values():
            if appt.status == AppointmentStatus.IN_PROGRESS and appt.current_seat_id == seat_id:
                return appt.id
        return None

    def set_seat_status(self, seat_id: int, status: SeatStatus) -> None:
        self._require_seat(seat_id).status = status

    def calls_to(self, method: str) -> list[RecordedCall]:
        return [c for c in self.calls if c.method == method]

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _record(self, method: str, path: str, body: Optional[dict[str, Any]] = None) -> None:
        self.calls.append(RecordedCall(method, path, body))

    def _require(self, appointment_id: int) -> Appointment:
        appt = self._appointments.get(appointment_id)
        if appt is None:
            raise RemoteServiceError("Appointment not found", status_code=404)
        return appt

    def _require_seat(self, seat_id: int) -> Seat:
        seat = self._seats.get(seat_id)
        if seat is None:
            raise RemoteServiceError(
                "The selected seat is invalid.",
                status_code=422,
                errors={"seat_id": ["The selected seat is invalid."]},
            )
        return seat

    def _seat_is_free(self, seat_id: int, for_appointment: int) -> bool:
        seat = self._require_seat(seat_id)
        occupant = self.occupant(seat_id)
        if occupant is not None:
            return occupant == for_appointment
        return seat.status == SeatStatus.AVAILABLE

    def _ensure_seat_free(self, seat_id: int, appointment_id: int) -> None:
        if not self._seat_is_free(seat_id, appointment_id):
            logger.info("Rejecting bind of appointment %s: seat %s taken", appointment_id, seat_id)
            raise ConflictError(
                "This seat is already occupied",
                errors={"seat_id": ["This seat is already occupied."]},
                status_code=409,
            )

    def _bind(
        self,
        appt: Appointment,
        status: AppointmentStatus,
        seat_id: Optional[int],
        staff_id: Optional[int] = None,
    ) -> None:
        released = appt.current_seat_id if appt.status == AppointmentStatus.IN_PROGRESS else None
        seat = self._seats.get(seat_id) if seat_id is not None else None
        staff_name = next((s.name for s in self._staff if s.id == staff_id), None)
        for line in appt.services:
            line.seat_id = seat_id
            line.seat_name = seat.name if seat else None
            line.staff_id = staff_id
            line.staff_name = staff_name
        for locked in appt.appointment_services:
            locked.seat_id = seat_id
        appt.status = status
        self._refresh_seat_statuses(released)

    def _refresh_seat_statuses(self, released: Optional[int] = None) -> None:
        """Mark occupied seats; a seat vacated by ``released`` becomes available."""
        for seat in self._seats.values():
            if self.occupant(seat.id) is not None:
                seat.status = SeatStatus.OCCUPIED
            elif seat.id == released and seat.status == SeatStatus.OCCUPIED:
                seat.status = SeatStatus.AVAILABLE

    def _service_lines(self, service_ids: Iterable[int], previous: list[ServiceLine]) -> list[ServiceLine]:
        known = {line.id: line for line in previous}
        lines = []
        for sid in service_ids:
            if sid in known:
                lines.append(known[sid].model_copy())
                continue
            catalog = self._catalog.get(sid)
            if catalog is None:
                raise RemoteServiceError(
                    "The selected service is invalid.",
                    status_code=422,
                    errors={"services": ["The selected service is invalid."]},
                )
            lines.append(ServiceLine(id=sid, name=catalog.name, price=catalog.price))
        return lines

    # ------------------------------------------------------------------ #
    # RemoteAppointmentService
    # ------------------------------------------------------------------ #

    async def get_appointment(self, appointment_id: int) -> Appointment:
        self._record("GET", SalonApiClient.appointment_path(appointment_id))
        return self.appointment(appointment_id)

    async def create_appointment(self, body: AppointmentCreate) -> Appointment:
        payload = body.to_payload()
        self._record("POST", SalonApiClient.APPOINTMENTS, payload)
        customer = self._customers.get(body.user_id) or CustomerRef(id=body.user_id)
        appt = Appointment(
            id=self._next_id,
            ticket_number=f"TK-{uuid.uuid4().hex[:6].upper()}",
            appointment_date=body.appointment_date,
            appointment_time=body.appointment_time,
            status=AppointmentStatus.PENDING,
            notes=body.notes,
            user=customer,
            services=self._service_lines((s.id for s in body.services), []),
        )
        self._next_id += 1
        self._appointments[appt.id] = appt
        if body.staff_id is not None:
            self._bind(appt, AppointmentStatus.PENDING, None, body.staff_id)
        logger.info("Appointment created: %s (%s)", appt.id, appt.ticket_number)
        return appt.model_copy(deep=True)

    async def update_appointment(self, appointment_id: int, body: AppointmentUpdate) -> None:
        self._record("PUT", SalonApiClient.appointment_path(appointment_id), body.to_payload())
        appt = self._require(appointment_id)
        if appt.is_terminal:
            raise ConflictError(
                f"Appointment is already {appt.status.value}", status_code=409
            )
        if body.status == AppointmentStatus.IN_PROGRESS and body.seat_id is None:
            raise RemoteServiceError(
                "A seat is required.", status_code=422, errors={"seat_id": ["A seat is required."]}
            )
        if body.seat_id is not None:
            self._require_seat(body.seat_id)
            if body.status == AppointmentStatus.IN_PROGRESS:
                self._ensure_seat_free(body.seat_id, appointment_id)

        previous_seat = appt.current_seat_id if appt.status == AppointmentStatus.IN_PROGRESS else None
        appt.appointment_date = body.appointment_date
        appt.appointment_time = body.appointment_time
        appt.notes = body.notes
        appt.services = self._service_lines((s.id for s in body.services), appt.services)
        appt.appointment_services = [
            s for s in appt.appointment_services if s.service_id in {x.id for x in body.services}
        ]
        self._bind(appt, body.status, body.seat_id, body.staff_id)
        self._refresh_seat_statuses(previous_seat)
        logger.info("Appointment %s updated: %s seat=%s", appointment_id, body.status.value, body.seat_id)

    async def update_status(self, appointment_id: int, body: StatusUpdate) -> None:
        path = f"{SalonApiClient.appointment_path(appointment_id)}/status"
        self._record("PUT", path, body.to_payload())
        appt = self._require(appointment_id)
        if appt.status != AppointmentStatus.IN_PROGRESS:
            raise ConflictError(
                f"Appointment is {appt.status.value}, not in progress", status_code=409
            )
        if body.status not in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED):
            raise RemoteServiceError(
                "The selected status is invalid.",
                status_code=422,
                errors={"status": ["The selected status is invalid."]},
            )
        self._bind(appt, body.status, None)

    async def update_seat_status(self, appointment_id: int, body: SeatStatusUpdate) -> None:
        path = f"{SalonApiClient.appointment_path(appointment_id)}/seat-status"
        self._record("PUT", path, body.to_payload())
        appt = self._require(appointment_id)
        if appt.is_terminal:
            raise ConflictError(f"Appointment is already {appt.status.value}", status_code=409)

        if body.status == AppointmentStatus.IN_PROGRESS:
            self._ensure_seat_free(body.seat_id, appointment_id)
            self._bind(appt, AppointmentStatus.IN_PROGRESS, body.seat_id, appt.current_staff_id)
        elif body.status == AppointmentStatus.PENDING:
            if appt.current_seat_id != body.seat_id:
                raise ConflictError(
                    "Appointment is no longer at this seat", status_code=409
                )
            self._bind(appt, AppointmentStatus.PENDING, None)
        else:
            raise RemoteServiceError(
                "The selected status is invalid.",
                status_code=422,
                errors={"status": ["The selected status is invalid."]},
            )

    async def delete_appointment(self, appointment_id: int) -> None:
        self._record("DELETE", SalonApiClient.appointment_path(appointment_id))
        appt = self._require(appointment_id)
        if appt.status not in (AppointmentStatus.PENDING, AppointmentStatus.CANCELLED):
            raise RemoteServiceError(
                f"Cannot delete a {appt.status.value} appointment", status_code=422
            )
        del self._appointments[appointment_id]
        self._refresh_seat_statuses()

    async def get_working_hours(self) -> list[WorkingHour]:
        self._record("GET", SalonApiClient.WORKING_HOURS)
        return [wh.model_copy() for wh in self._working_hours]

    async def get_form_data(self) -> FormData:
        self._record("GET", SalonApiClient.APPOINTMENT_FORM_DATA)
        return FormData(
            customers=list(self._customers.values()),
            services=list(self._catalog.values()),
            seats=[Seat(id=s.id, name=s.name) for s in self._seats.values()],
            staff=list(self._staff),
        )

    # ------------------------------------------------------------------ #
    # RemoteSeatService
    # ------------------------------------------------------------------ #

    async def check_availability(self, seat_id: int) -> bool:
        self._record("GET", SalonApiClient.seat_availability_path(seat_id))
        seat = self._seats.get(seat_id)
        if seat is None:
            return False
        return seat.status == SeatStatus.AVAILABLE and self.occupant(seat_id) is None

    async def get_seat_map(self) -> SeatMap:
        self._record("GET", SalonApiClient.APPOINTMENT_SEAT_MAP)
        seats = []
        for seat in self._seats.values():
            snapshot = seat.model_copy(deep=True)
            occupant = self.occupant(seat.id)
            snapshot.appointments = []
            if occupant is not None:
                appt = self._appointments[occupant]
                first = appt.services[0] if appt.services else None
                snapshot.appointments.append(SeatedAppointment(
                    id=appt.id,
                    ticket_number=appt.ticket_number,
                    status=appt.status,
                    service_name=first.name if first else "",
                    service_id=first.id if first else None,
                    user=appt.user,
                ))
            seats.append(snapshot)

        pending = [a for a in self._appointments.values() if a.status == AppointmentStatus.PENDING]
        return SeatMap(
            seats=seats,
            unassigned_appointments=[
                a.model_copy(deep=True) for a in pending if a.current_seat_id is None
            ],
            assigned_pending_appointments=[
                a.model_copy(deep=True) for a in pending if a.current_seat_id is not None
            ],
        )
