"""Branch working-hours configuration."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from salon_admin.utils import normalize_time


class WorkingHour(BaseModel):
    """Opening hours of one weekday for a branch. Read-only here.

    Closed days may come back with null or empty ``open``/``close``;
    the times are only required when the branch opens that day.
    """

    model_config = ConfigDict(extra="ignore")

    day: str
    open: Optional[str] = "09:00"
    close: Optional[str] = "18:00"
    is_closed: bool = False

    @field_validator("open", "close", mode="before")
    @classmethod
    def _normalize_time(cls, value: Any) -> Optional[str]:
        return normalize_time(str(value)) if value else None

    @field_validator("day")
    @classmethod
    def _normalize_day(cls, value: str) -> str:
        return value.strip().capitalize()

    @model_validator(mode="after")
    def _require_hours_when_open(self) -> "WorkingHour":
        if not self.is_closed and (self.open is None or self.close is None):
            raise ValueError(f"{self.day} is open but has no open/close time")
        return self
