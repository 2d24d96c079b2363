"""Picker data for the create and edit appointment forms."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from salon_admin.schemas.appointment_schema import CustomerRef, LenientPrice
from salon_admin.schemas.seat_schema import Seat, StaffRef


class CatalogService(BaseModel):
    """A bookable service with its current catalogue price."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    price: LenientPrice = None
    duration_minutes: Optional[int] = None


class FormData(BaseModel):
    """Response of ``GET /appointments/form-data``."""

    model_config = ConfigDict(extra="ignore")

    customers: list[CustomerRef] = Field(default_factory=list)
    services: list[CatalogService] = Field(default_factory=list)
    seats: list[Seat] = Field(default_factory=list)
    staff: list[StaffRef] = Field(default_factory=list)

    def find_seat(self, seat_id: int) -> Optional[Seat]:
        return next((s for s in self.seats if s.id == seat_id), None)
