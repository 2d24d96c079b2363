"""Shared test fixtures and helpers."""

from datetime import date
from typing import Optional

import pytest

from salon_admin.appointments.coordinator import SeatAssignmentCoordinator
from salon_admin.appointments.form_validator import AppointmentFormValidator
from salon_admin.remote.memory import InMemorySalonService
from salon_admin.scheduling.working_hours import DAYS, WorkingHoursPolicy
from salon_admin.schemas.appointment_schema import (
    Appointment,
    AppointmentStatus,
    CustomerRef,
    LockedServiceLine,
    ServiceLine,
)
from salon_admin.schemas.branch_schema import WorkingHour
from salon_admin.schemas.form_schema import CatalogService
from salon_admin.schemas.seat_schema import Seat, SeatStatus, StaffRef

# A Monday. Appointment dates below are later in the same week.
TODAY = date(2025, 3, 10)
WEDNESDAY = "2025-03-12"
SUNDAY = "2025-03-16"

CUSTOMER = CustomerRef(id=7, name="Ava Martin", phone="0400111222")


def make_appointment(
    appointment_id: int = 101,
    status: AppointmentStatus = AppointmentStatus.PENDING,
    seat_id: Optional[int] = None,
    staff_id: Optional[int] = None,
    service_ids: tuple[int, ...] = (1,),
    appointment_date: Optional[str] = WEDNESDAY,
    appointment_time: Optional[str] = "14:00:00",
    locked_prices: Optional[dict[int, object]] = None,
    user: CustomerRef = CUSTOMER,
) -> Appointment:
    """Helper to create an Appointment snapshot with sensible defaults."""
    services = [
        ServiceLine(id=sid, name=f"Service {sid}", price=10.0 * sid, seat_id=seat_id, staff_id=staff_id)
        for sid in service_ids
    ]
    locked = [
        LockedServiceLine(id=900 + sid, service_id=sid, price=price, seat_id=seat_id)
        for sid, price in (locked_prices or {}).items()
    ]
    return Appointment(
        id=appointment_id,
        ticket_number=f"TK-{appointment_id:06d}",
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        status=status,
        user=user,
        services=services,
        appointment_services=locked,
    )


def make_working_hours(closed: tuple[str, ...] = ("Sunday",)) -> list[WorkingHour]:
    return [
        WorkingHour(day=day, open="09:00", close="18:00", is_closed=day in closed)
        for day in DAYS
    ]


def make_seats() -> list[Seat]:
    return [
        Seat(id=1, name="Seat 1", status=SeatStatus.AVAILABLE),
        Seat(id=2, name="Seat 2", status=SeatStatus.AVAILABLE),
        Seat(id=3, name="Seat 3", status=SeatStatus.CLEANING),
    ]


def make_catalog() -> list[CatalogService]:
    return [
        CatalogService(id=1, name="Haircut", price=25.0),
        CatalogService(id=2, name="Beard Trim", price="12.50"),
        CatalogService(id=3, name="Colouring", price="abc"),
    ]


@pytest.fixture
def working_hours():
    return make_working_hours()


@pytest.fixture
def policy(working_hours):
    return WorkingHoursPolicy(working_hours)


@pytest.fixture
def validator(policy):
    return AppointmentFormValidator(policy, today=TODAY)


@pytest.fixture
def seats():
    return make_seats()


@pytest.fixture
def service(working_hours):
    """In-memory backend: 101 waiting, 102 approved at seat 2, 103 in progress at seat 1."""
    return InMemorySalonService(
        seats=make_seats(),
        appointments=[
            make_appointment(101),
            make_appointment(102, seat_id=2, service_ids=(2,), user=CustomerRef(id=8, name="Noah")),
            make_appointment(
                103, status=AppointmentStatus.IN_PROGRESS, seat_id=1, staff_id=5,
                user=CustomerRef(id=9, name="Mia"),
            ),
            make_appointment(104, status=AppointmentStatus.COMPLETED, user=CustomerRef(id=10)),
        ],
        working_hours=working_hours,
        customers=[CUSTOMER, CustomerRef(id=8, name="Noah"), CustomerRef(id=9, name="Mia")],
        services=make_catalog(),
        staff=[StaffRef(id=5, name="Liam")],
    )


@pytest.fixture
def coordinator(service):
    return SeatAssignmentCoordinator(service, service)
