"""
Branch working-hours policy.

Answers whether booking activity is permitted for a branch on a given
day and time, from the branch's per-weekday open/close/closed table.
All checks are pure; the only ambient input is "today", which defaults
to the current date in the configured service time zone.

Usage:
    policy = WorkingHoursPolicy(working_hours)
    result = policy.is_bookable("2025-03-10", "14:00")
    if not result:
        print(result.message)
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo

from salon_admin.config import settings
from salon_admin.schemas.branch_schema import WorkingHour
from salon_admin.utils import parse_date, time_to_minutes

logger = logging.getLogger(__name__)

# Index matches date.weekday(); independent of the process locale.
DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

DateLike = Union[str, date]


@dataclass(frozen=True)
class PolicyResult:
    """Outcome of a single working-hours check."""

    passed: bool
    rule: Optional[str] = None
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.passed


def weekday_name(value: DateLike) -> str:
    return DAYS[parse_date(value).weekday()]


def service_today() -> date:
    """Current calendar day in the service's time zone."""
    return datetime.now(ZoneInfo(settings.booking.timezone)).date()


class WorkingHoursPolicy:
    """Per-branch opening hours, keyed by weekday name."""

    def __init__(self, working_hours: Iterable[Union[WorkingHour, dict]]) -> None:
        self._hours: dict[str, WorkingHour] = {}
        for entry in working_hours:
            wh = entry if isinstance(entry, WorkingHour) else WorkingHour.model_validate(entry)
            self._hours[wh.day] = wh

    def entry_for(self, value: DateLike) -> Optional[WorkingHour]:
        return self._hours.get(weekday_name(value))

    def check_day(self, value: DateLike) -> PolicyResult:
        """Reject days the branch is closed or has no hours configured for."""
        day = weekday_name(value)
        entry = self._hours.get(day)
        if entry is None:
            return PolicyResult(
                passed=False,
                rule="no_working_hours",
                message=f"No working hours found for {day}; the branch is closed on {day}.",
            )
        if entry.is_closed:
            return PolicyResult(
                passed=False,
                rule="closed_day",
                message=f"The branch is closed on {day}.",
            )
        return PolicyResult(passed=True)

    def time_bounds(self, value: DateLike) -> Optional[tuple[str, str]]:
        """Return ``(open, close)`` for the time picker, or None when closed."""
        if not self.check_day(value):
            return None
        entry = self._hours[weekday_name(value)]
        return entry.open, entry.close

    def is_bookable(self, value: DateLike, time: str) -> PolicyResult:
        """Check the day is open and ``open <= time <= close`` (inclusive)."""
        day_result = self.check_day(value)
        if not day_result:
            return day_result

        entry = self._hours[weekday_name(value)]
        minutes = time_to_minutes(time)
        if not time_to_minutes(entry.open) <= minutes <= time_to_minutes(entry.close):
            logger.debug(
                "Time %s outside %s-%s on %s", time, entry.open, entry.close, entry.day
            )
            return PolicyResult(
                passed=False,
                rule="outside_hours",
                message=f"Time is outside hours {entry.open}–{entry.close}.",
            )
        return PolicyResult(passed=True)

    @staticmethod
    def is_future_or_today(value: DateLike, today: Optional[date] = None) -> PolicyResult:
        """Reject dates strictly before today. Time of day is ignored."""
        today = today or service_today()
        if parse_date(value) < today:
            return PolicyResult(
                passed=False,
                rule="past_date",
                message="Appointment date must be today or later",
            )
        return PolicyResult(passed=True)
