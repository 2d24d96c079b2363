"""
Create/edit form draft and its fail-fast validator.

The draft is the only state the core holds: what the admin has picked so
far, before submission. The validator checks it rule by rule and stops at
the first failure, raising a field-scoped ValidationError.

Usage:
    policy = WorkingHoursPolicy(hours)
    draft = AppointmentDraft(user_id=7, service_ids=[1])
    draft.set_date("2025-03-10", policy)
    draft.set_time("14:00", policy)
    AppointmentFormValidator(policy).validate_create(draft)
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from salon_admin.errors import ValidationError
from salon_admin.scheduling.working_hours import PolicyResult, WorkingHoursPolicy
from salon_admin.schemas.appointment_schema import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    ServiceRef,
)
from salon_admin.utils import normalize_time

logger = logging.getLogger(__name__)


@dataclass
class AppointmentDraft:
    """In-flight create/edit submission."""

    user_id: Optional[int] = None
    appointment_date: Optional[str] = None
    appointment_time: Optional[str] = None
    service_ids: list[int] = field(default_factory=list)
    status: AppointmentStatus = AppointmentStatus.PENDING
    seat_id: Optional[int] = None
    staff_id: Optional[int] = None
    notes: Optional[str] = None

    @classmethod
    def from_appointment(cls, appointment: Appointment) -> "AppointmentDraft":
        """Prefill an edit draft from a stored appointment."""
        return cls(
            user_id=appointment.user.id,
            appointment_date=appointment.appointment_date,
            appointment_time=appointment.appointment_time,
            service_ids=appointment.service_ids,
            status=appointment.status,
            seat_id=appointment.current_seat_id,
            staff_id=appointment.current_staff_id,
            notes=appointment.notes,
        )

    def set_date(self, value: str, policy: WorkingHoursPolicy) -> PolicyResult:
        """Pick a date. A closed day, or a kept time now outside hours, clears the time."""
        self.appointment_date = value
        result = policy.check_day(value)
        if not result:
            self.appointment_time = None
            return result
        if self.appointment_time and not policy.is_bookable(value, self.appointment_time):
            logger.debug("Clearing time %s after date change to %s", self.appointment_time, value)
            self.appointment_time = None
        return result

    def set_time(self, value: str, policy: WorkingHoursPolicy) -> PolicyResult:
        """Pick a time. Rejected picks leave no time selected."""
        if not self.appointment_date:
            self.appointment_time = None
            return PolicyResult(
                passed=False,
                rule="date_required",
                message="Please select an appointment date",
            )
        result = policy.is_bookable(self.appointment_date, value)
        self.appointment_time = normalize_time(value) if result else None
        return result

    def toggle_service(self, service_id: int) -> None:
        if service_id in self.service_ids:
            self.service_ids.remove(service_id)
        else:
            self.service_ids.append(service_id)

    def to_create(self) -> AppointmentCreate:
        return AppointmentCreate(
            user_id=self.user_id,
            appointment_date=self.appointment_date,
            appointment_time=self.appointment_time,
            services=[ServiceRef(id=sid) for sid in self.service_ids],
            notes=self.notes or None,
            staff_id=self.staff_id,
        )


class AppointmentFormValidator:
    """Fail-fast validation of create and edit submissions."""

    def __init__(self, policy: WorkingHoursPolicy, today: Optional[date] = None) -> None:
        self.policy = policy
        self.today = today

    def _fail(self, message: str, field_name: str, rule: str) -> None:
        logger.debug("Form validation failed on %s (%s): %s", field_name, rule, message)
        raise ValidationError(message, field=field_name, rule=rule)

    def _check_policy(self, result: PolicyResult, field_name: str) -> None:
        if not result:
            self._fail(result.message or "Invalid value", field_name, result.rule or "policy")

    def _validate_common(self, draft: AppointmentDraft) -> None:
        if not draft.user_id:
            self._fail("Please select a customer", "user_id", "required")
        if not draft.appointment_date:
            self._fail("Please select an appointment date", "appointment_date", "required")
        try:
            future = self.policy.is_future_or_today(draft.appointment_date, today=self.today)
        except ValueError:
            self._fail("Please select a valid appointment date", "appointment_date", "invalid_date")
        self._check_policy(future, "appointment_date")
        self._check_policy(self.policy.check_day(draft.appointment_date), "appointment_date")
        if not draft.appointment_time:
            self._fail("Please select an appointment time", "appointment_time", "required")
        try:
            bookable = self.policy.is_bookable(draft.appointment_date, draft.appointment_time)
        except ValueError:
            self._fail("Please select a valid appointment time", "appointment_time", "invalid_time")
        self._check_policy(bookable, "appointment_time")
        if not draft.service_ids:
            self._fail("Please select at least one service", "services", "required")

    def validate_create(self, draft: AppointmentDraft) -> None:
        """Validate a new appointment. New appointments never carry a seat."""
        self._validate_common(draft)
        if draft.seat_id is not None:
            self._fail(
                "New appointments start pending without a seat; approve to assign one",
                "seat_id",
                "seat_not_allowed",
            )

    def validate_edit(self, draft: AppointmentDraft, appointment: Appointment) -> None:
        """Validate an edit of ``appointment``."""
        self._validate_common(draft)
        if draft.status != AppointmentStatus.PENDING and draft.seat_id is None:
            self._fail("Please select a seat when status is not pending", "seat_id", "required")
        if draft.user_id != appointment.user.id:
            self._fail(
                "The customer of an existing appointment cannot be changed",
                "user_id",
                "customer_immutable",
            )
