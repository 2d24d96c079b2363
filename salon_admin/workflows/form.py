"""
Create/edit appointment form.

Loads the branch working hours and the form pick lists, keeps the draft
in sync with the working-hours policy as the admin picks a date and
time, and submits through the coordinator.

Usage:
    form = AppointmentFormWorkflow(api, api)          # create
    form = AppointmentFormWorkflow(api, api, 42)      # edit appointment 42
    await form.load()
    form.set_date("2025-03-10")
    form.set_time("14:00")
    outcome = await form.submit()
"""

from datetime import date
from typing import Optional

from salon_admin.appointments.coordinator import SeatAssignmentCoordinator
from salon_admin.appointments.form_validator import AppointmentDraft, AppointmentFormValidator
from salon_admin.appointments.pricing import calculate_total
from salon_admin.errors import ValidationError
from salon_admin.logging_context import get_appointment_logger
from salon_admin.remote.base import RemoteAppointmentService, RemoteSeatService
from salon_admin.scheduling.working_hours import PolicyResult, WorkingHoursPolicy
from salon_admin.schemas.appointment_schema import Appointment, AppointmentStatus
from salon_admin.schemas.form_schema import FormData
from salon_admin.workflows.base import IntentOutcome, Workflow

logger = get_appointment_logger(__name__)

NEW_APPOINTMENT = "new"


class AppointmentFormWorkflow(Workflow):
    """Form state for creating a new appointment or editing an existing one."""

    def __init__(
        self,
        appointments: RemoteAppointmentService,
        seats: RemoteSeatService,
        appointment_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> None:
        super().__init__()
        self._appointments = appointments
        self.appointment_id = appointment_id
        self.today = today
        self.coordinator = SeatAssignmentCoordinator(appointments, seats)
        self.appointment: Optional[Appointment] = None
        self.form_data: Optional[FormData] = None
        self.policy: Optional[WorkingHoursPolicy] = None
        self.draft = AppointmentDraft()
        self.saved: Optional[Appointment] = None

    @property
    def is_edit(self) -> bool:
        return self.appointment_id is not None

    async def refresh(self) -> None:
        if self.is_edit:
            self.appointment = await self._appointments.get_appointment(self.appointment_id)

    async def load(self) -> AppointmentDraft:
        """Fetch hours, pick lists and (for edits) the stored appointment."""
        self.policy = WorkingHoursPolicy(await self._appointments.get_working_hours())
        self.form_data = await self._appointments.get_form_data()
        if self.is_edit:
            await self.refresh()
            self.draft = AppointmentDraft.from_appointment(self.appointment)
        else:
            self.draft = AppointmentDraft()
        return self.draft

    # ------------------------------------------------------------------ #
    # Field changes
    # ------------------------------------------------------------------ #

    def set_date(self, value: str) -> PolicyResult:
        return self.draft.set_date(value, self._policy())

    def set_time(self, value: str) -> PolicyResult:
        return self.draft.set_time(value, self._policy())

    def toggle_service(self, service_id: int) -> None:
        self.draft.toggle_service(service_id)

    def set_status(self, status: AppointmentStatus) -> None:
        """Change the edit status. Leaving in_progress for pending releases the seat."""
        previous, self.draft.status = self.draft.status, status
        if status == AppointmentStatus.PENDING and previous == AppointmentStatus.IN_PROGRESS:
            self.draft.seat_id = None

    def time_bounds(self) -> Optional[tuple[str, str]]:
        """Open/close of the selected day, for the time picker."""
        if not self.draft.appointment_date:
            return None
        return self._policy().time_bounds(self.draft.appointment_date)

    @property
    def total(self) -> float:
        catalog = self.form_data.services if self.form_data else []
        return calculate_total(self.draft.service_ids, catalog, self.appointment)

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    def _policy(self) -> WorkingHoursPolicy:
        if self.policy is None:
            raise ValidationError("Working hours are not loaded yet", rule="not_loaded")
        return self.policy

    def validator(self) -> AppointmentFormValidator:
        return AppointmentFormValidator(self._policy(), today=self.today)

    async def submit(self) -> IntentOutcome:
        if self.is_edit:
            return await self._run(
                self.appointment_id, "edit", self._submit_edit, "Appointment updated successfully"
            )
        outcome = await self._run(
            NEW_APPOINTMENT, "create", self._submit_create, "Appointment created successfully"
        )
        if outcome.accepted:
            self.saved = outcome.result
        return outcome

    async def _submit_create(self) -> Appointment:
        return await self.coordinator.create(self.draft, self.validator())

    async def _submit_edit(self):
        if self.appointment is None:
            raise ValidationError("Appointment is not loaded yet", rule="not_loaded")
        return await self.coordinator.submit_edit(self.appointment, self.draft, self.validator())

    async def _refresh_quietly(self) -> bool:
        refreshed = await super()._refresh_quietly()
        if refreshed and self.is_edit:
            self.saved = self.appointment
        return refreshed
