"""
Seat assignment coordinator.

Orchestrates binding, moving, and releasing seats with check-then-act
against the remote authority: every bind re-checks live availability
immediately before submitting, and the two round trips always run in
sequence. The live check only avoids doomed submissions; the remote
service still arbitrates exclusivity and may reject the commit.

Usage:
    coordinator = SeatAssignmentCoordinator(api, api, on_conflict=refresh_seat_map)
    await coordinator.assign_to_seat(appointment, seat)
"""

from typing import Awaitable, Callable, Optional, Union

from salon_admin.appointments.form_validator import AppointmentDraft, AppointmentFormValidator
from salon_admin.appointments.state_machine import (
    AppointmentStatusMachine,
    LifecyclePhase,
    LifecycleState,
    TransitionResult,
    TransitionTrigger,
)
from salon_admin.errors import (
    ConflictError,
    RemoteServiceError,
    SeatUnavailableError,
    ValidationError,
)
from salon_admin.logging_context import get_appointment_logger, set_appointment_id
from salon_admin.remote.base import RemoteAppointmentService, RemoteSeatService
from salon_admin.schemas.appointment_schema import (
    Appointment,
    AppointmentUpdate,
    SeatStatusUpdate,
    ServiceRef,
    StatusUpdate,
)
from salon_admin.schemas.seat_schema import Seat, SeatStatus

logger = get_appointment_logger(__name__)

ConflictHook = Callable[[], Awaitable[None]]

SEAT_ERROR_FIELDS = frozenset({"seat_id", "seat"})


def _is_seat_rejection(exc: Union[ConflictError, RemoteServiceError]) -> bool:
    """A 409, or a rejection scoped to the seat field."""
    if isinstance(exc, ConflictError) or exc.status_code == 409:
        return True
    return any(field in SEAT_ERROR_FIELDS for field in exc.errors)


def build_update(
    appointment: Appointment,
    state: LifecycleState,
    draft: Optional[AppointmentDraft] = None,
) -> AppointmentUpdate:
    """Full-replace body carrying ``state``, from the draft or the stored snapshot."""
    if draft is not None:
        user_id, service_ids = draft.user_id, draft.service_ids
        appointment_date, appointment_time, notes = (
            draft.appointment_date, draft.appointment_time, draft.notes,
        )
    else:
        user_id, service_ids = appointment.user.id, appointment.service_ids
        appointment_date, appointment_time, notes = (
            appointment.appointment_date, appointment.appointment_time, appointment.notes,
        )
    if not appointment_date or not appointment_time:
        raise ValidationError(
            "Appointment date and time are required",
            field="appointment_date" if not appointment_date else "appointment_time",
            rule="required",
        )
    return AppointmentUpdate(
        user_id=user_id,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        services=[ServiceRef(id=sid) for sid in service_ids],
        status=state.persisted_status,
        seat_id=state.seat_id,
        notes=notes or None,
        staff_id=state.staff_id,
    )


class SeatAssignmentCoordinator:
    """Check-then-act seat binding against the remote services."""

    def __init__(
        self,
        appointments: RemoteAppointmentService,
        seats: RemoteSeatService,
        on_conflict: Optional[ConflictHook] = None,
    ) -> None:
        self._appointments = appointments
        self._seats = seats
        self._on_conflict = on_conflict

    # ------------------------------------------------------------------ #
    # Guards
    # ------------------------------------------------------------------ #

    async def check_available(self, seat_id: int) -> bool:
        """Ask the seat service for live availability. Never cached."""
        return await self._seats.check_availability(seat_id)

    async def _verify_seat(self, seat_id: int, snapshot_status: Optional[SeatStatus]) -> None:
        if snapshot_status is not None and snapshot_status != SeatStatus.AVAILABLE:
            logger.info("Seat %s is %s on the seat map", seat_id, snapshot_status.value)
            raise SeatUnavailableError(seat_id, live=False)
        if not await self.check_available(seat_id):
            logger.warning("Seat %s failed the live availability check", seat_id)
            await self._notify_conflict()
            raise SeatUnavailableError(seat_id, live=True)

    async def _notify_conflict(self) -> None:
        if self._on_conflict is not None:
            await self._on_conflict()

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    async def _send(
        self,
        appointment: Appointment,
        result: TransitionResult,
        draft: Optional[AppointmentDraft] = None,
    ) -> None:
        trigger, state = result.trigger, result.current
        if trigger in (TransitionTrigger.START, TransitionTrigger.MOVE_SEAT) and (
            state.phase == LifecyclePhase.IN_PROGRESS
        ):
            await self._appointments.update_seat_status(
                appointment.id, SeatStatusUpdate(status=state.persisted_status, seat_id=state.seat_id)
            )
        elif trigger == TransitionTrigger.MOVE_TO_PENDING:
            await self._appointments.update_seat_status(
                appointment.id,
                SeatStatusUpdate(status=state.persisted_status, seat_id=result.previous.seat_id),
            )
        elif trigger in (TransitionTrigger.COMPLETE, TransitionTrigger.CANCEL):
            await self._appointments.update_status(
                appointment.id, StatusUpdate(status=state.persisted_status)
            )
        else:
            await self._appointments.update_appointment(
                appointment.id, build_update(appointment, state, draft)
            )

    async def _commit(
        self,
        appointment: Appointment,
        result: TransitionResult,
        draft: Optional[AppointmentDraft] = None,
    ) -> TransitionResult:
        try:
            await self._send(appointment, result, draft)
        except (ConflictError, RemoteServiceError) as exc:
            if not result.binds_seat or not _is_seat_rejection(exc):
                raise
            logger.warning(
                "Remote service rejected seat %s for appointment %s: %s",
                result.current.seat_id, appointment.id, exc.message,
            )
            await self._notify_conflict()
            if isinstance(exc, ConflictError):
                raise
            raise ConflictError(
                exc.message, errors=exc.errors, status_code=exc.status_code
            ) from exc

        logger.info(
            "Appointment %s committed %s: %s seat=%s (released seat: %s)",
            appointment.id, result.trigger.value, result.current.persisted_status.value,
            result.current.seat_id, result.released_seat_id,
        )
        return result

    # ------------------------------------------------------------------ #
    # Seat operations
    # ------------------------------------------------------------------ #

    async def assign_to_seat(self, appointment: Appointment, seat: Seat) -> TransitionResult:
        """Bind a waiting appointment to ``seat``.

        A bare pending appointment is approved onto the seat (it stays
        ``pending`` on the wire); an approved one starts service there.
        """
        set_appointment_id(appointment.id)
        machine = AppointmentStatusMachine.for_appointment(appointment)
        if machine.current_state.phase == LifecyclePhase.PENDING:
            trigger = TransitionTrigger.APPROVE
        else:
            trigger = TransitionTrigger.START
        result = machine.propose(trigger, seat_id=seat.id, service_ids=appointment.service_ids)

        await self._verify_seat(seat.id, seat.status)
        await self._commit(appointment, result)
        machine.apply(result)
        return result

    async def move_to_seat(
        self, appointment: Appointment, new_seat: Seat
    ) -> Optional[TransitionResult]:
        """Move a seated appointment to ``new_seat``.

        Moving to the seat it already holds is a cancelled operation:
        nothing is sent and None is returned.
        """
        set_appointment_id(appointment.id)
        machine = AppointmentStatusMachine.for_appointment(appointment)
        if machine.current_state.seat_id == new_seat.id:
            logger.debug("Appointment %s already at seat %s; move skipped", appointment.id, new_seat.id)
            return None
        result = machine.propose(TransitionTrigger.MOVE_SEAT, seat_id=new_seat.id)

        await self._verify_seat(new_seat.id, new_seat.status)
        await self._commit(appointment, result)
        machine.apply(result)
        return result

    async def release_to_pending(self, appointment: Appointment) -> TransitionResult:
        """Undo a seat assignment: in_progress back to bare pending."""
        set_appointment_id(appointment.id)
        machine = AppointmentStatusMachine.for_appointment(appointment)
        result = machine.propose(TransitionTrigger.MOVE_TO_PENDING)
        await self._commit(appointment, result)
        machine.apply(result)
        return result

    # ------------------------------------------------------------------ #
    # Status and record operations
    # ------------------------------------------------------------------ #

    async def complete(self, appointment: Appointment) -> TransitionResult:
        return await self._finish(appointment, TransitionTrigger.COMPLETE)

    async def cancel(self, appointment: Appointment) -> TransitionResult:
        return await self._finish(appointment, TransitionTrigger.CANCEL)

    async def _finish(self, appointment: Appointment, trigger: TransitionTrigger) -> TransitionResult:
        set_appointment_id(appointment.id)
        machine = AppointmentStatusMachine.for_appointment(appointment)
        result = machine.propose(trigger)
        await self._commit(appointment, result)
        machine.apply(result)
        return result

    async def submit_edit(
        self,
        appointment: Appointment,
        draft: AppointmentDraft,
        validator: AppointmentFormValidator,
    ) -> TransitionResult:
        """Validate and submit an edit; a changed seat is re-checked first."""
        set_appointment_id(appointment.id)
        machine = AppointmentStatusMachine.for_appointment(appointment)
        machine.ensure_editable()
        validator.validate_edit(draft, appointment)
        result = machine.propose_edit(draft.status, seat_id=draft.seat_id, staff_id=draft.staff_id)

        if result.binds_seat:
            await self._verify_seat(result.current.seat_id, None)
        await self._commit(appointment, result, draft)
        machine.apply(result)
        return result

    async def delete(self, appointment: Appointment) -> None:
        set_appointment_id(appointment.id)
        AppointmentStatusMachine.for_appointment(appointment).ensure_deletable()
        await self._appointments.delete_appointment(appointment.id)
        logger.info("Appointment %s deleted", appointment.id)

    async def create(
        self, draft: AppointmentDraft, validator: AppointmentFormValidator
    ) -> Appointment:
        """Validate and create a new pending appointment."""
        set_appointment_id(None)
        validator.validate_create(draft)
        created = await self._appointments.create_appointment(draft.to_create())
        set_appointment_id(created.id)
        logger.info("Appointment %s created (%s)", created.id, created.ticket_number)
        return created
