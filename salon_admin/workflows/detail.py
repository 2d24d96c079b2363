"""Appointment detail screen: load, approve onto a seat, complete, cancel, delete."""

from typing import Optional

from salon_admin.appointments.coordinator import SeatAssignmentCoordinator
from salon_admin.appointments.state_machine import (
    AppointmentStatusMachine,
    LifecyclePhase,
)
from salon_admin.errors import InvalidTransitionError, ValidationError
from salon_admin.logging_context import get_appointment_logger
from salon_admin.remote.base import RemoteAppointmentService, RemoteSeatService
from salon_admin.schemas.appointment_schema import Appointment
from salon_admin.schemas.form_schema import FormData
from salon_admin.schemas.seat_schema import Seat
from salon_admin.workflows.base import IntentOutcome, Workflow

logger = get_appointment_logger(__name__)


class AppointmentDetailWorkflow(Workflow):
    """Single-appointment view backed by the remote appointment service."""

    def __init__(
        self,
        appointments: RemoteAppointmentService,
        seats: RemoteSeatService,
        appointment_id: int,
    ) -> None:
        super().__init__()
        self._appointments = appointments
        self.appointment_id = appointment_id
        self.appointment: Optional[Appointment] = None
        self.form_data: Optional[FormData] = None
        self.deleted = False
        self.coordinator = SeatAssignmentCoordinator(appointments, seats)

    async def refresh(self) -> None:
        self.appointment = await self._appointments.get_appointment(self.appointment_id)

    async def load(self) -> Appointment:
        await self.refresh()
        return self.appointment

    # ------------------------------------------------------------------ #
    # Capabilities shown on the screen
    # ------------------------------------------------------------------ #

    @property
    def can_edit(self) -> bool:
        return self.appointment is not None and AppointmentStatusMachine.can_edit(
            self.appointment.status
        )

    @property
    def can_delete(self) -> bool:
        return self.appointment is not None and AppointmentStatusMachine.can_delete(
            self.appointment.status
        )

    @property
    def can_approve(self) -> bool:
        if self.appointment is None:
            return False
        machine = AppointmentStatusMachine.for_appointment(self.appointment)
        return machine.current_state.phase == LifecyclePhase.PENDING

    # ------------------------------------------------------------------ #
    # Intents
    # ------------------------------------------------------------------ #

    async def open_approve(self) -> list[Seat]:
        """Load the seats the admin can pick from when approving."""
        self.form_data = await self._appointments.get_form_data()
        return self.form_data.seats

    async def approve(self, seat_id: Optional[int]) -> IntentOutcome:
        async def action():
            appointment = self._require()
            if seat_id is None:
                raise ValidationError(
                    "Please select a seat to approve", field="seat_id", rule="seat_required"
                )
            if not self.can_approve:
                raise InvalidTransitionError(
                    "Only pending appointments without a seat can be approved"
                )
            seat = self.form_data.find_seat(seat_id) if self.form_data else None
            return await self.coordinator.assign_to_seat(appointment, seat or Seat(id=seat_id))

        return await self._run(
            self.appointment_id, "approve", action, "Appointment approved successfully"
        )

    async def complete(self) -> IntentOutcome:
        return await self._run(
            self.appointment_id,
            "complete",
            lambda: self.coordinator.complete(self._require()),
            "Appointment completed successfully",
        )

    async def cancel(self) -> IntentOutcome:
        return await self._run(
            self.appointment_id,
            "cancel",
            lambda: self.coordinator.cancel(self._require()),
            "Appointment cancelled successfully",
        )

    async def delete(self) -> IntentOutcome:
        outcome = await self._run(
            self.appointment_id,
            "delete",
            lambda: self.coordinator.delete(self._require()),
            "Appointment deleted successfully",
            refresh=False,
        )
        if outcome.accepted:
            self.deleted = True
            self.appointment = None
        return outcome

    def _require(self) -> Appointment:
        if self.appointment is None:
            raise ValidationError("Appointment is not loaded yet", rule="not_loaded")
        return self.appointment
