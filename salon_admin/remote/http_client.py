"""
Async HTTP client for the salon REST API.

Every response uses the ``{success, message, data, errors}`` envelope.
Failures are translated into the core's error taxonomy here, once, so
the coordinator and workflows never look at status codes.
"""

from typing import Any, Optional

import httpx

from salon_admin.config import settings
from salon_admin.errors import AuthError, ConflictError, RemoteServiceError, TransportError
from salon_admin.logging_context import get_appointment_logger
from salon_admin.schemas.appointment_schema import (
    Appointment,
    AppointmentCreate,
    AppointmentUpdate,
    SeatStatusUpdate,
    StatusUpdate,
)
from salon_admin.schemas.branch_schema import WorkingHour
from salon_admin.schemas.form_schema import FormData
from salon_admin.schemas.seat_schema import SeatAvailability, SeatMap

logger = get_appointment_logger(__name__)


class SalonApiClient:
    """Client for the appointment and seat endpoints of the salon API."""

    APPOINTMENTS = "/appointments"
    APPOINTMENT_FORM_DATA = "/appointments/form-data"
    APPOINTMENT_SEAT_MAP = "/appointments/seat-map"
    WORKING_HOURS = "/working-hours"

    def __init__(
        self,
        base_url: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        token = settings.api.access_token if access_token is None else access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api.root_url,
            headers=headers,
            timeout=timeout or settings.api.timeout_sec,
            transport=transport,
        )

    @staticmethod
    def appointment_path(appointment_id: int) -> str:
        return f"/appointments/{appointment_id}"

    @staticmethod
    def seat_availability_path(seat_id: int) -> str:
        return f"/seats/{seat_id}/availability"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SalonApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #

    async def request(
        self, method: str, path: str, json: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """Send a request and return the decoded envelope.

        Raises:
            TransportError: Network failure or timeout.
            AuthError: HTTP 401.
            ConflictError: HTTP 409.
            RemoteServiceError: Any other rejection, including ``success: false``.
        """
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out", method, path)
            raise TransportError(
                "Request timeout. Please check your connection.", status_code=408
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(
                str(exc) or "Network error. Please check your connection."
            ) from exc

        try:
            envelope = response.json()
        except ValueError:
            envelope = {}
        if not isinstance(envelope, dict):
            envelope = {"data": envelope}

        message = envelope.get("message") or "An error occurred"
        errors = envelope.get("errors") or {}

        if response.status_code == 401:
            logger.warning("%s %s rejected: session expired", method, path)
            raise AuthError(envelope.get("message") or AuthError().message)
        if response.status_code == 409:
            logger.warning("%s %s conflict: %s", method, path, message)
            raise ConflictError(message, errors=errors, status_code=409)
        if response.is_error:
            logger.warning("%s %s failed with %s: %s", method, path, response.status_code, message)
            raise RemoteServiceError(message, status_code=response.status_code, errors=errors)
        if envelope.get("success") is False:
            logger.warning("%s %s reported failure: %s", method, path, message)
            raise RemoteServiceError(message, status_code=response.status_code, errors=errors)

        logger.debug("%s %s -> %s", method, path, response.status_code)
        return envelope

    @staticmethod
    def _data(envelope: dict[str, Any]) -> Any:
        data = envelope.get("data")
        if data is None:
            raise RemoteServiceError("Malformed response: missing data")
        return data

    # ------------------------------------------------------------------ #
    # Appointments
    # ------------------------------------------------------------------ #

    async def get_appointment(self, appointment_id: int) -> Appointment:
        envelope = await self.request("GET", self.appointment_path(appointment_id))
        return Appointment.model_validate(self._data(envelope))

    async def create_appointment(self, body: AppointmentCreate) -> Appointment:
        envelope = await self.request("POST", self.APPOINTMENTS, json=body.to_payload())
        return Appointment.model_validate(self._data(envelope))

    async def update_appointment(self, appointment_id: int, body: AppointmentUpdate) -> None:
        await self.request("PUT", self.appointment_path(appointment_id), json=body.to_payload())

    async def update_status(self, appointment_id: int, body: StatusUpdate) -> None:
        await self.request(
            "PUT", f"{self.appointment_path(appointment_id)}/status", json=body.to_payload()
        )

    async def update_seat_status(self, appointment_id: int, body: SeatStatusUpdate) -> None:
        await self.request(
            "PUT", f"{self.appointment_path(appointment_id)}/seat-status", json=body.to_payload()
        )

    async def delete_appointment(self, appointment_id: int) -> None:
        await self.request("DELETE", self.appointment_path(appointment_id))

    async def get_working_hours(self) -> list[WorkingHour]:
        envelope = await self.request("GET", self.WORKING_HOURS)
        data = self._data(envelope)
        return [WorkingHour.model_validate(wh) for wh in data.get("workingHours") or []]

    async def get_form_data(self) -> FormData:
        envelope = await self.request("GET", self.APPOINTMENT_FORM_DATA)
        return FormData.model_validate(self._data(envelope))

    # ------------------------------------------------------------------ #
    # Seats
    # ------------------------------------------------------------------ #

    async def check_availability(self, seat_id: int) -> bool:
        envelope = await self.request("GET", self.seat_availability_path(seat_id))
        return SeatAvailability.model_validate(envelope.get("data") or {}).available

    async def get_seat_map(self) -> SeatMap:
        envelope = await self.request("GET", self.APPOINTMENT_SEAT_MAP)
        return SeatMap.model_validate(self._data(envelope))
