from salon_admin.scheduling.working_hours import (
    DAYS,
    PolicyResult,
    WorkingHoursPolicy,
    weekday_name,
)

__all__ = ["DAYS", "PolicyResult", "WorkingHoursPolicy", "weekday_name"]
