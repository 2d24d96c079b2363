"""
Finite state machine for the appointment lifecycle.

Phases: pending, pending-approved (a persisted ``pending`` record that
already holds a seat), in_progress, completed, cancelled. Every
transition is declared explicitly; a trigger without a matching
transition is rejected locally and never sent to the remote service.

The machine only proposes states. The remote service commits them, so
``propose()`` computes a result without side effects and ``apply()``
records it once the service has accepted it.

Usage:
    sm = AppointmentStatusMachine.for_appointment(appointment)
    result = sm.propose(TransitionTrigger.APPROVE, seat_id=3, service_ids=[1])
    # ... submit result.current to the remote service ...
    sm.apply(result)
    assert sm.current_state.phase == LifecyclePhase.PENDING_APPROVED
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Sequence

from salon_admin.errors import InvalidTransitionError, ValidationError
from salon_admin.schemas.appointment_schema import (
    DELETABLE_STATUSES,
    EDITABLE_STATUSES,
    Appointment,
    AppointmentStatus,
)

logger = logging.getLogger(__name__)


class LifecyclePhase(str, Enum):
    """Lifecycle phases, including the derived approved phase."""

    PENDING = "pending"
    PENDING_APPROVED = "pending_approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


SEATED_PHASES = frozenset({LifecyclePhase.PENDING_APPROVED, LifecyclePhase.IN_PROGRESS})
TERMINAL_PHASES = frozenset({LifecyclePhase.COMPLETED, LifecyclePhase.CANCELLED})

_PERSISTED_STATUS = {
    LifecyclePhase.PENDING: AppointmentStatus.PENDING,
    LifecyclePhase.PENDING_APPROVED: AppointmentStatus.PENDING,
    LifecyclePhase.IN_PROGRESS: AppointmentStatus.IN_PROGRESS,
    LifecyclePhase.COMPLETED: AppointmentStatus.COMPLETED,
    LifecyclePhase.CANCELLED: AppointmentStatus.CANCELLED,
}


class TransitionTrigger(str, Enum):
    """Admin intents that move an appointment through its lifecycle."""

    APPROVE = "approve"
    START = "start"
    MOVE_SEAT = "move_seat"
    COMPLETE = "complete"
    CANCEL = "cancel"
    MOVE_TO_PENDING = "move_to_pending"
    EDIT = "edit"


@dataclass(frozen=True)
class LifecycleState:
    """Status/seat/staff triple of one appointment.

    A seat is held exactly in the seated phases; terminal phases hold
    neither seat nor staff.
    """

    phase: LifecyclePhase
    seat_id: Optional[int] = None
    staff_id: Optional[int] = None

    def __post_init__(self) -> None:
        seated = self.phase in SEATED_PHASES
        if seated and self.seat_id is None:
            raise ValidationError(
                f"Phase '{self.phase.value}' requires a seat",
                field="seat_id",
                rule="seat_required",
            )
        if not seated and self.seat_id is not None:
            raise ValidationError(
                f"Phase '{self.phase.value}' cannot hold a seat",
                field="seat_id",
                rule="seat_not_allowed",
            )
        if self.phase in TERMINAL_PHASES and self.staff_id is not None:
            raise ValidationError(
                f"Phase '{self.phase.value}' cannot hold a staff member",
                field="staff_id",
                rule="staff_not_allowed",
            )

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "LifecycleState":
        """Derive the phase from a remote snapshot.

        A ``pending`` record bound to a seat is the approved phase. Stale
        seat bindings left on terminal records are ignored.
        """
        seat_id = appointment.current_seat_id
        staff_id = appointment.current_staff_id
        status = appointment.status
        if status == AppointmentStatus.PENDING:
            if seat_id is not None:
                return cls(LifecyclePhase.PENDING_APPROVED, seat_id, staff_id)
            return cls(LifecyclePhase.PENDING, None, staff_id)
        if status == AppointmentStatus.IN_PROGRESS:
            if seat_id is None:
                raise ValidationError(
                    f"Appointment {appointment.id} is in progress without a seat",
                    field="seat_id",
                    rule="seat_binding_missing",
                )
            return cls(LifecyclePhase.IN_PROGRESS, seat_id, staff_id)
        return cls(LifecyclePhase(status.value))

    @property
    def persisted_status(self) -> AppointmentStatus:
        return _PERSISTED_STATUS[self.phase]

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES


@dataclass(frozen=True)
class Transition:
    """A single valid phase transition."""

    from_phase: LifecyclePhase
    to_phase: LifecyclePhase
    trigger: TransitionTrigger
    requires_seat: bool = False


@dataclass(frozen=True)
class TransitionResult:
    """Proposed outcome of a transition, before the remote service commits it."""

    trigger: TransitionTrigger
    previous: LifecycleState
    current: LifecycleState

    @property
    def seat_changed(self) -> bool:
        return self.previous.seat_id != self.current.seat_id

    @property
    def released_seat_id(self) -> Optional[int]:
        """Seat whose occupancy must be cleared along with this transition."""
        if self.seat_changed:
            return self.previous.seat_id
        return None

    @property
    def bound_seat_id(self) -> Optional[int]:
        """Seat newly bound by this transition, if any."""
        if self.seat_changed:
            return self.current.seat_id
        return None

    @property
    def binds_seat(self) -> bool:
        """True when the target state takes a seat it did not hold in this phase."""
        return self.current.seat_id is not None and (
            self.seat_changed or self.current.phase != self.previous.phase
        )


@dataclass
class StateEntry:
    """Recorded history entry for a committed state."""

    state: LifecycleState
    entered_at: datetime
    trigger: Optional[TransitionTrigger] = None


# Phases an edit submission may move to, per current phase.
EDIT_TARGETS: dict[LifecyclePhase, frozenset[LifecyclePhase]] = {
    LifecyclePhase.PENDING: frozenset({LifecyclePhase.PENDING, LifecyclePhase.PENDING_APPROVED}),
    LifecyclePhase.PENDING_APPROVED: frozenset(
        {LifecyclePhase.PENDING, LifecyclePhase.PENDING_APPROVED, LifecyclePhase.IN_PROGRESS}
    ),
    LifecyclePhase.IN_PROGRESS: frozenset({LifecyclePhase.IN_PROGRESS, LifecyclePhase.PENDING}),
}


class AppointmentStatusMachine:
    """
    Deterministic lifecycle of a single appointment.

    Completed and cancelled appointments are immutable. Reaching a
    terminal phase is only possible from in_progress, so seat-based
    work always passes through the seat map.
    """

    TRANSITIONS: list[Transition] = [
        Transition(LifecyclePhase.PENDING, LifecyclePhase.PENDING_APPROVED,
                   TransitionTrigger.APPROVE, requires_seat=True),
        Transition(LifecyclePhase.PENDING_APPROVED, LifecyclePhase.IN_PROGRESS,
                   TransitionTrigger.START, requires_seat=True),
        Transition(LifecyclePhase.PENDING_APPROVED, LifecyclePhase.PENDING_APPROVED,
                   TransitionTrigger.MOVE_SEAT, requires_seat=True),
        Transition(LifecyclePhase.IN_PROGRESS, LifecyclePhase.IN_PROGRESS,
                   TransitionTrigger.MOVE_SEAT, requires_seat=True),
        Transition(LifecyclePhase.IN_PROGRESS, LifecyclePhase.COMPLETED,
                   TransitionTrigger.COMPLETE),
        Transition(LifecyclePhase.IN_PROGRESS, LifecyclePhase.CANCELLED,
                   TransitionTrigger.CANCEL),
        Transition(LifecyclePhase.IN_PROGRESS, LifecyclePhase.PENDING,
                   TransitionTrigger.MOVE_TO_PENDING),
    ]

    def __init__(self, state: LifecycleState, appointment_id: Optional[int] = None) -> None:
        self.appointment_id = appointment_id
        self._current_state = state
        self._history: list[StateEntry] = [
            StateEntry(state=state, entered_at=datetime.now(timezone.utc))
        ]

    @classmethod
    def for_appointment(cls, appointment: Appointment) -> "AppointmentStatusMachine":
        return cls(LifecycleState.from_appointment(appointment), appointment.id)

    @property
    def current_state(self) -> LifecycleState:
        return self._current_state

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def _find(self, trigger: TransitionTrigger) -> Transition:
        for t in self.TRANSITIONS:
            if t.from_phase == self._current_state.phase and t.trigger == trigger:
                return t
        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.phase.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def propose(
        self,
        trigger: TransitionTrigger,
        seat_id: Optional[int] = None,
        service_ids: Optional[Sequence[int]] = None,
    ) -> TransitionResult:
        """
        Compute the state a trigger leads to, without committing it.

        Args:
            trigger: The admin intent.
            seat_id: Target seat for seat-binding triggers. START falls
                back to the currently bound seat.
            service_ids: Services on the appointment; APPROVE needs at least one.

        Raises:
            InvalidTransitionError: If the trigger is not valid from the current phase.
            ValidationError: If the transition's guard fails.
        """
        if trigger == TransitionTrigger.EDIT:
            raise InvalidTransitionError("Edits are proposed with propose_edit()")

        t = self._find(trigger)
        current = self._current_state

        if trigger == TransitionTrigger.START and seat_id is None:
            seat_id = current.seat_id
        if t.requires_seat and seat_id is None:
            raise ValidationError(
                "Please select a seat", field="seat_id", rule="seat_required"
            )
        if trigger == TransitionTrigger.APPROVE and not service_ids:
            raise ValidationError(
                "No services found for this appointment",
                field="services",
                rule="services_required",
            )
        if trigger == TransitionTrigger.MOVE_SEAT and seat_id == current.seat_id:
            raise ValidationError(
                "Appointment is already at this seat", field="seat_id", rule="same_seat"
            )

        if t.to_phase in SEATED_PHASES:
            # Approval drops any staff picked before a seat existed.
            staff_id = None if trigger == TransitionTrigger.APPROVE else current.staff_id
            new_state = LifecycleState(t.to_phase, seat_id, staff_id)
        else:
            new_state = LifecycleState(t.to_phase)

        return TransitionResult(trigger=trigger, previous=current, current=new_state)

    def propose_edit(
        self,
        status: AppointmentStatus,
        seat_id: Optional[int] = None,
        staff_id: Optional[int] = None,
    ) -> TransitionResult:
        """Compute the state an edit submission leads to.

        The status may stay as it is or follow one legal step. Terminal
        statuses are only reachable through complete/cancel.
        """
        self.ensure_editable()
        current = self._current_state

        if status in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED):
            raise InvalidTransitionError(
                f"Cannot set status '{status.value}' through an edit; "
                "complete or cancel the appointment from in progress"
            )
        if status == AppointmentStatus.IN_PROGRESS:
            target = LifecyclePhase.IN_PROGRESS
        elif seat_id is not None:
            target = LifecyclePhase.PENDING_APPROVED
        else:
            target = LifecyclePhase.PENDING

        if target not in EDIT_TARGETS[current.phase]:
            raise InvalidTransitionError(
                f"Cannot edit a '{current.phase.value}' appointment into '{target.value}'"
            )
        if target == LifecyclePhase.IN_PROGRESS and seat_id is None:
            raise ValidationError(
                "Please select a seat when status is not pending",
                field="seat_id",
                rule="seat_required",
            )

        new_state = LifecycleState(target, seat_id, staff_id)
        return TransitionResult(
            trigger=TransitionTrigger.EDIT, previous=current, current=new_state
        )

    def apply(self, result: TransitionResult) -> LifecycleState:
        """Commit a result the remote service has accepted."""
        if result.previous != self._current_state:
            raise InvalidTransitionError(
                "Transition was proposed from a different state; refresh and retry"
            )
        old = self._current_state
        self._current_state = result.current
        self._history.append(StateEntry(
            state=result.current,
            entered_at=datetime.now(timezone.utc),
            trigger=result.trigger,
        ))
        logger.debug(
            "Appointment %s transition: %s -> %s (trigger: %s, released seat: %s)",
            self.appointment_id, old.phase.value, result.current.phase.value,
            result.trigger.value, result.released_seat_id,
        )
        return self._current_state

    def transition(
        self,
        trigger: TransitionTrigger,
        seat_id: Optional[int] = None,
        service_ids: Optional[Sequence[int]] = None,
    ) -> LifecycleState:
        """Propose and immediately apply a transition."""
        return self.apply(self.propose(trigger, seat_id=seat_id, service_ids=service_ids))

    # ------------------------------------------------------------------ #
    # Edit / delete gates
    # ------------------------------------------------------------------ #

    @staticmethod
    def can_edit(status: AppointmentStatus) -> bool:
        return status in EDITABLE_STATUSES

    @staticmethod
    def can_delete(status: AppointmentStatus) -> bool:
        return status in DELETABLE_STATUSES

    def ensure_editable(self) -> None:
        status = self._current_state.persisted_status
        if not self.can_edit(status):
            raise ValidationError(
                f"You cannot edit an appointment whose status is {status.value.replace('_', ' ')}",
                field="status",
                rule="cannot_edit",
            )

    def ensure_deletable(self) -> None:
        status = self._current_state.persisted_status
        if not self.can_delete(status):
            raise ValidationError(
                f"You cannot delete an appointment whose status is {status.value.replace('_', ' ')}",
                field="status",
                rule="cannot_delete",
            )

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_valid_triggers(self) -> list[TransitionTrigger]:
        """Return all triggers valid from the current phase."""
        return [t.trigger for t in self.TRANSITIONS if t.from_phase == self._current_state.phase]

    def get_history(self) -> list[StateEntry]:
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of phase names visited."""
        return [entry.state.phase.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_state.is_terminal
