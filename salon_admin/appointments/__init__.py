from salon_admin.appointments.coordinator import SeatAssignmentCoordinator
from salon_admin.appointments.form_validator import AppointmentDraft, AppointmentFormValidator
from salon_admin.appointments.pricing import calculate_total, resolve_price
from salon_admin.appointments.state_machine import (
    AppointmentStatusMachine,
    LifecyclePhase,
    LifecycleState,
    TransitionResult,
    TransitionTrigger,
)

__all__ = [
    "AppointmentStatusMachine",
    "LifecyclePhase",
    "LifecycleState",
    "TransitionResult",
    "TransitionTrigger",
    "SeatAssignmentCoordinator",
    "AppointmentDraft",
    "AppointmentFormValidator",
    "calculate_total",
    "resolve_price",
]
