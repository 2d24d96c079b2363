"""
Seat map screen: the floor snapshot plus assign, move, and release intents.

The snapshot is for display. Guards that matter are re-checked live by the
coordinator; a rejected bind triggers a refresh so the admin sees the
floor as the remote service has it.
"""

from typing import Optional

from salon_admin.appointments.coordinator import SeatAssignmentCoordinator
from salon_admin.errors import ValidationError
from salon_admin.logging_context import get_appointment_logger
from salon_admin.remote.base import RemoteAppointmentService, RemoteSeatService
from salon_admin.schemas.appointment_schema import Appointment
from salon_admin.schemas.seat_schema import Seat, SeatMap
from salon_admin.workflows.base import IntentOutcome, Workflow

logger = get_appointment_logger(__name__)


class SeatMapWorkflow(Workflow):
    """Drag-and-drop seat assignment over the seat-map snapshot."""

    def __init__(self, appointments: RemoteAppointmentService, seats: RemoteSeatService) -> None:
        super().__init__()
        self._seats = seats
        self.snapshot: Optional[SeatMap] = None
        self.coordinator = SeatAssignmentCoordinator(
            appointments, seats, on_conflict=self._refresh_after_conflict
        )

    async def refresh(self) -> None:
        self.snapshot = await self._seats.get_seat_map()

    async def _refresh_after_conflict(self) -> None:
        await self._refresh_quietly()

    # ------------------------------------------------------------------ #
    # Snapshot lookups
    # ------------------------------------------------------------------ #

    def _map(self) -> SeatMap:
        if self.snapshot is None:
            raise ValidationError("Seat map is not loaded yet", rule="not_loaded")
        return self.snapshot

    def _seat(self, seat_id: int) -> Seat:
        seat = self._map().find_seat(seat_id)
        if seat is None:
            raise ValidationError("This seat is not available", field="seat_id", rule="unknown_seat")
        return seat

    def waiting_appointment(self, appointment_id: int) -> Optional[Appointment]:
        """A pending appointment from either waiting list."""
        snapshot = self._map()
        for appt in snapshot.unassigned_appointments + snapshot.assigned_pending_appointments:
            if appt.id == appointment_id:
                return appt
        return None

    def seated_appointment(self, appointment_id: int) -> Optional[Appointment]:
        """An in-progress appointment as listed on its seat."""
        seat = self._map().seat_of(appointment_id)
        if seat is None:
            return None
        listed = next(a for a in seat.appointments if a.id == appointment_id)
        return listed.to_appointment(seat.id)

    def _locate(self, appointment_id: int) -> Appointment:
        appt = self.waiting_appointment(appointment_id) or self.seated_appointment(appointment_id)
        if appt is None:
            raise ValidationError(
                f"Appointment {appointment_id} is not on the seat map", rule="unknown_appointment"
            )
        return appt

    # ------------------------------------------------------------------ #
    # Intents
    # ------------------------------------------------------------------ #

    async def assign(self, appointment_id: int, seat_id: int) -> IntentOutcome:
        async def action():
            appt = self.waiting_appointment(appointment_id)
            if appt is None:
                raise ValidationError(
                    "Only waiting appointments can be assigned to a seat",
                    rule="not_waiting",
                )
            return await self.coordinator.assign_to_seat(appt, self._seat(seat_id))

        return await self._run(appointment_id, "assign", action, "Appointment assigned successfully!")

    async def move(self, appointment_id: int, seat_id: int) -> IntentOutcome:
        async def action():
            return await self.coordinator.move_to_seat(
                self._locate(appointment_id), self._seat(seat_id)
            )

        outcome = await self._run(appointment_id, "move", action, "Appointment moved successfully!")
        if outcome.accepted and outcome.result is None:
            outcome.changed = False
            outcome.message = "Appointment is already at this seat"
        return outcome

    async def move_to_pending(self, appointment_id: int) -> IntentOutcome:
        async def action():
            appt = self.seated_appointment(appointment_id)
            if appt is None:
                raise ValidationError(
                    "Only appointments in progress can be moved back to pending",
                    rule="not_seated",
                )
            return await self.coordinator.release_to_pending(appt)

        return await self._run(
            appointment_id, "move_to_pending", action, "Appointment moved to pending successfully"
        )

    async def complete(self, appointment_id: int) -> IntentOutcome:
        async def action():
            return await self.coordinator.complete(self._locate(appointment_id))

        return await self._run(appointment_id, "complete", action, "Appointment completed successfully")
