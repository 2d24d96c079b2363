"""Tests for the appointment lifecycle state machine."""

import pytest

from salon_admin.appointments.state_machine import (
    AppointmentStatusMachine,
    LifecyclePhase,
    LifecycleState,
    TransitionTrigger,
)
from salon_admin.errors import InvalidTransitionError, ValidationError
from salon_admin.schemas.appointment_schema import AppointmentStatus
from tests.conftest import make_appointment


def machine(phase, seat_id=None, staff_id=None):
    return AppointmentStatusMachine(LifecycleState(phase, seat_id, staff_id), appointment_id=1)


class TestLifecycleState:
    def test_bare_pending_from_snapshot(self):
        state = LifecycleState.from_appointment(make_appointment())
        assert state.phase == LifecyclePhase.PENDING
        assert state.seat_id is None

    def test_seat_bound_pending_is_approved(self):
        state = LifecycleState.from_appointment(make_appointment(seat_id=3))
        assert state.phase == LifecyclePhase.PENDING_APPROVED
        assert state.persisted_status == AppointmentStatus.PENDING

    def test_pending_with_staff_but_no_seat_is_bare_pending(self):
        state = LifecycleState.from_appointment(make_appointment(staff_id=5))
        assert state.phase == LifecyclePhase.PENDING
        assert state.staff_id == 5

    def test_in_progress_keeps_seat_and_staff(self):
        appt = make_appointment(status=AppointmentStatus.IN_PROGRESS, seat_id=2, staff_id=5)
        state = LifecycleState.from_appointment(appt)
        assert (state.phase, state.seat_id, state.staff_id) == (LifecyclePhase.IN_PROGRESS, 2, 5)

    def test_in_progress_without_seat_is_rejected(self):
        appt = make_appointment(status=AppointmentStatus.IN_PROGRESS)
        with pytest.raises(ValidationError) as exc_info:
            LifecycleState.from_appointment(appt)
        assert exc_info.value.rule == "seat_binding_missing"

    def test_terminal_snapshot_drops_stale_seat(self):
        appt = make_appointment(status=AppointmentStatus.COMPLETED, seat_id=2, staff_id=5)
        state = LifecycleState.from_appointment(appt)
        assert state.phase == LifecyclePhase.COMPLETED
        assert state.seat_id is None and state.staff_id is None
        assert state.is_terminal

    def test_seated_phase_requires_seat(self):
        with pytest.raises(ValidationError, match="requires a seat"):
            LifecycleState(LifecyclePhase.IN_PROGRESS)

    def test_pending_cannot_hold_seat(self):
        with pytest.raises(ValidationError, match="cannot hold a seat"):
            LifecycleState(LifecyclePhase.PENDING, seat_id=1)

    def test_terminal_cannot_hold_staff(self):
        with pytest.raises(ValidationError):
            LifecycleState(LifecyclePhase.CANCELLED, staff_id=5)

    def test_conflicting_seat_bindings_rejected(self):
        appt = make_appointment(service_ids=(1, 2))
        appt.services[0].seat_id = 1
        appt.services[1].seat_id = 2
        with pytest.raises(ValidationError) as exc_info:
            LifecycleState.from_appointment(appt)
        assert exc_info.value.rule == "seat_binding_mismatch"


class TestApprove:
    def test_approve_binds_seat_and_clears_staff(self):
        sm = machine(LifecyclePhase.PENDING, staff_id=5)
        state = sm.transition(TransitionTrigger.APPROVE, seat_id=3, service_ids=[1])
        assert state.phase == LifecyclePhase.PENDING_APPROVED
        assert state.seat_id == 3
        assert state.staff_id is None

    def test_approve_without_seat_rejected(self):
        sm = machine(LifecyclePhase.PENDING)
        with pytest.raises(ValidationError, match="Please select a seat") as exc_info:
            sm.propose(TransitionTrigger.APPROVE, service_ids=[1])
        assert exc_info.value.rule == "seat_required"

    def test_approve_without_services_rejected(self):
        sm = machine(LifecyclePhase.PENDING)
        with pytest.raises(ValidationError, match="No services found"):
            sm.propose(TransitionTrigger.APPROVE, seat_id=3, service_ids=[])

    def test_approve_from_approved_is_invalid(self):
        sm = machine(LifecyclePhase.PENDING_APPROVED, seat_id=3)
        with pytest.raises(InvalidTransitionError):
            sm.propose(TransitionTrigger.APPROVE, seat_id=4, service_ids=[1])


class TestSeatedTransitions:
    def test_start_falls_back_to_current_seat(self):
        sm = machine(LifecyclePhase.PENDING_APPROVED, seat_id=3, staff_id=5)
        result = sm.propose(TransitionTrigger.START)
        assert result.current == LifecycleState(LifecyclePhase.IN_PROGRESS, 3, 5)
        assert not result.seat_changed

    def test_start_on_other_seat_releases_reserved_seat(self):
        sm = machine(LifecyclePhase.PENDING_APPROVED, seat_id=3)
        result = sm.propose(TransitionTrigger.START, seat_id=4)
        assert result.released_seat_id == 3
        assert result.bound_seat_id == 4

    def test_move_seat_releases_previous(self):
        sm = machine(LifecyclePhase.IN_PROGRESS, seat_id=1, staff_id=5)
        result = sm.propose(TransitionTrigger.MOVE_SEAT, seat_id=2)
        assert result.current.phase == LifecyclePhase.IN_PROGRESS
        assert result.released_seat_id == 1
        assert result.bound_seat_id == 2
        assert result.current.staff_id == 5

    def test_move_to_same_seat_rejected(self):
        sm = machine(LifecyclePhase.IN_PROGRESS, seat_id=1)
        with pytest.raises(ValidationError) as exc_info:
            sm.propose(TransitionTrigger.MOVE_SEAT, seat_id=1)
        assert exc_info.value.rule == "same_seat"

    def test_move_seat_from_pending_is_invalid(self):
        sm = machine(LifecyclePhase.PENDING)
        with pytest.raises(InvalidTransitionError, match="Valid triggers"):
            sm.propose(TransitionTrigger.MOVE_SEAT, seat_id=2)

    def test_move_to_pending_clears_seat_and_staff(self):
        sm = machine(LifecyclePhase.IN_PROGRESS, seat_id=1, staff_id=5)
        result = sm.propose(TransitionTrigger.MOVE_TO_PENDING)
        assert result.current == LifecycleState(LifecyclePhase.PENDING)
        assert result.released_seat_id == 1
        assert result.bound_seat_id is None

    def test_move_to_pending_only_from_in_progress(self):
        sm = machine(LifecyclePhase.PENDING_APPROVED, seat_id=1)
        with pytest.raises(InvalidTransitionError):
            sm.propose(TransitionTrigger.MOVE_TO_PENDING)


class TestTerminalTransitions:
    @pytest.mark.parametrize("trigger,phase", [
        (TransitionTrigger.COMPLETE, LifecyclePhase.COMPLETED),
        (TransitionTrigger.CANCEL, LifecyclePhase.CANCELLED),
    ])
    def test_finish_from_in_progress(self, trigger, phase):
        sm = machine(LifecyclePhase.IN_PROGRESS, seat_id=1, staff_id=5)
        state = sm.transition(trigger)
        assert state == LifecycleState(phase)
        assert sm.is_terminal()

    @pytest.mark.parametrize("trigger", [TransitionTrigger.COMPLETE, TransitionTrigger.CANCEL])
    def test_finish_from_pending_is_invalid(self, trigger):
        with pytest.raises(InvalidTransitionError):
            machine(LifecyclePhase.PENDING).propose(trigger)

    def test_terminal_has_no_valid_triggers(self):
        assert machine(LifecyclePhase.COMPLETED).get_valid_triggers() == []

    def test_no_result_ever_holds_two_seats(self):
        sm = machine(LifecyclePhase.PENDING)
        sm.transition(TransitionTrigger.APPROVE, seat_id=1, service_ids=[1])
        sm.transition(TransitionTrigger.START, seat_id=2)
        sm.transition(TransitionTrigger.MOVE_SEAT, seat_id=3)
        for entry in sm.get_history():
            assert entry.state.seat_id in (None, 1, 2, 3)
        assert sm.current_state.seat_id == 3


class TestEdit:
    def test_edit_pending_into_approved(self):
        result = machine(LifecyclePhase.PENDING).propose_edit(AppointmentStatus.PENDING, seat_id=2)
        assert result.current.phase == LifecyclePhase.PENDING_APPROVED
        assert result.trigger == TransitionTrigger.EDIT

    def test_edit_in_progress_back_to_pending_releases_seat(self):
        sm = machine(LifecyclePhase.IN_PROGRESS, seat_id=1)
        result = sm.propose_edit(AppointmentStatus.PENDING)
        assert result.current.phase == LifecyclePhase.PENDING
        assert result.released_seat_id == 1

    def test_edit_into_terminal_status_rejected(self):
        sm = machine(LifecyclePhase.IN_PROGRESS, seat_id=1)
        with pytest.raises(InvalidTransitionError):
            sm.propose_edit(AppointmentStatus.COMPLETED)

    def test_edit_bare_pending_into_in_progress_rejected(self):
        with pytest.raises(InvalidTransitionError):
            machine(LifecyclePhase.PENDING).propose_edit(AppointmentStatus.IN_PROGRESS, seat_id=1)

    def test_edit_in_progress_requires_seat(self):
        sm = machine(LifecyclePhase.PENDING_APPROVED, seat_id=1)
        with pytest.raises(ValidationError, match="Please select a seat when status is not pending"):
            sm.propose_edit(AppointmentStatus.IN_PROGRESS)

    @pytest.mark.parametrize("phase", [LifecyclePhase.COMPLETED, LifecyclePhase.CANCELLED])
    def test_terminal_cannot_be_edited(self, phase):
        with pytest.raises(ValidationError, match="cannot edit") as exc_info:
            machine(phase).propose_edit(AppointmentStatus.PENDING)
        assert exc_info.value.rule == "cannot_edit"


class TestEditDeleteGates:
    @pytest.mark.parametrize("status,editable,deletable", [
        (AppointmentStatus.PENDING, True, True),
        (AppointmentStatus.IN_PROGRESS, True, False),
        (AppointmentStatus.COMPLETED, False, False),
        (AppointmentStatus.CANCELLED, False, True),
    ])
    def test_gates(self, status, editable, deletable):
        assert AppointmentStatusMachine.can_edit(status) is editable
        assert AppointmentStatusMachine.can_delete(status) is deletable

    def test_completed_cannot_be_deleted(self):
        sm = AppointmentStatusMachine.for_appointment(
            make_appointment(status=AppointmentStatus.COMPLETED)
        )
        with pytest.raises(ValidationError, match="cannot delete"):
            sm.ensure_deletable()


class TestHistory:
    def test_apply_rejects_stale_result(self):
        sm = machine(LifecyclePhase.PENDING)
        stale = sm.propose(TransitionTrigger.APPROVE, seat_id=1, service_ids=[1])
        sm.apply(stale)
        with pytest.raises(InvalidTransitionError, match="refresh"):
            sm.apply(stale)

    def test_state_trace(self):
        sm = machine(LifecyclePhase.PENDING)
        sm.transition(TransitionTrigger.APPROVE, seat_id=1, service_ids=[1])
        sm.transition(TransitionTrigger.START)
        sm.transition(TransitionTrigger.COMPLETE)
        assert sm.get_state_trace() == [
            "pending", "pending_approved", "in_progress", "completed",
        ]

    def test_valid_triggers_from_in_progress(self):
        triggers = machine(LifecyclePhase.IN_PROGRESS, seat_id=1).get_valid_triggers()
        assert set(triggers) == {
            TransitionTrigger.MOVE_SEAT,
            TransitionTrigger.COMPLETE,
            TransitionTrigger.CANCEL,
            TransitionTrigger.MOVE_TO_PENDING,
        }
