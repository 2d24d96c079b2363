from salon_admin.workflows.base import IntentOutcome, Workflow, describe_error
from salon_admin.workflows.detail import AppointmentDetailWorkflow
from salon_admin.workflows.form import AppointmentFormWorkflow
from salon_admin.workflows.seat_map import SeatMapWorkflow

__all__ = [
    "AppointmentDetailWorkflow",
    "AppointmentFormWorkflow",
    "SeatMapWorkflow",
    "IntentOutcome",
    "Workflow",
    "describe_error",
]
