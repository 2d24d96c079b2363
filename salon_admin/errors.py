"""
Error taxonomy for the appointment core.

Local errors (ValidationError and its subclasses) are raised before any
network call. Remote errors carry the HTTP status and the server's
field errors when it sent them, so callers can show the root cause.
"""

from typing import Optional


class SalonAdminError(Exception):
    """Base class for every error raised by the salon admin core."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SalonAdminError):
    """A submission or intent was rejected locally, before reaching the network."""

    def __init__(
        self, message: str, field: Optional[str] = None, rule: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.field = field
        self.rule = rule


class InvalidTransitionError(ValidationError):
    """Raised when a lifecycle trigger is not valid from the current phase."""

    def __init__(self, message: str) -> None:
        super().__init__(message, field="status", rule="invalid_transition")


class _RemoteDetails:
    status_code: Optional[int]
    errors: dict[str, list[str]]

    def first_error(self) -> Optional[str]:
        """Return the first field message the server sent, if any."""
        for messages in self.errors.values():
            if isinstance(messages, (list, tuple)) and messages:
                return str(messages[0])
            if messages:
                return str(messages)
        return None


class ConflictError(_RemoteDetails, SalonAdminError):
    """A well-formed transition lost a race: seat taken or record changed.

    Recoverable: refresh the snapshot and let the admin retry.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[dict[str, list[str]]] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or {}
        self.status_code = status_code


class SeatUnavailableError(ConflictError):
    """The target seat failed the snapshot or the live availability check."""

    def __init__(self, seat_id: int, live: bool) -> None:
        message = (
            "This seat is not available at the moment"
            if live
            else "This seat is not available"
        )
        super().__init__(message)
        self.seat_id = seat_id
        self.live = live


class AuthError(SalonAdminError):
    """The session is missing, expired, or invalid. Never retried here."""

    def __init__(self, message: str = "Session expired. Please log in again.") -> None:
        super().__init__(message)
        self.status_code = 401


class TransportError(SalonAdminError):
    """The request never produced a usable response (network failure or timeout)."""

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteServiceError(_RemoteDetails, SalonAdminError):
    """The remote service rejected a request for a reason other than a conflict."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[dict[str, list[str]]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors or {}
