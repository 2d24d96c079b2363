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
from salon_admin.schemas.seat_schema import Seat, SeatAvailability, SeatMap, SeatStatus

__all__ = [
    "Appointment",
    "AppointmentCreate",
    "AppointmentStatus",
    "AppointmentUpdate",
    "CatalogService",
    "CustomerRef",
    "FormData",
    "Seat",
    "SeatAvailability",
    "SeatMap",
    "SeatStatus",
    "SeatStatusUpdate",
    "ServiceLine",
    "StatusUpdate",
    "WorkingHour",
]
