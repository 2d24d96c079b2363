"""
Shared plumbing for the presentation-facing workflows.

A workflow holds the last known-good snapshot a screen renders from and
turns admin intents into calls on the core. Intents are serialized per
appointment: a second intent for an appointment that still has one in
flight is ignored, not queued. Failures leave the snapshot untouched;
successes re-fetch canonical state from the remote service.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from salon_admin.errors import AuthError, SalonAdminError, ValidationError
from salon_admin.logging_context import get_appointment_logger, set_appointment_id

logger = get_appointment_logger(__name__)

IntentKey = Union[int, str]


@dataclass
class IntentOutcome:
    """Result of one admin intent, ready to be shown as a notification."""

    intent: str
    accepted: bool
    message: str
    error: Optional[SalonAdminError] = None
    ignored: bool = False
    changed: bool = True
    result: Any = None

    @property
    def field(self) -> Optional[str]:
        """Form field the failure belongs to, for field-level highlighting."""
        if isinstance(self.error, ValidationError):
            return self.error.field
        return None


def describe_error(exc: SalonAdminError) -> str:
    """Message to show for ``exc``; remote field errors win over the summary."""
    first_error = getattr(exc, "first_error", None)
    if callable(first_error):
        detail = first_error()
        if detail:
            return detail
    return exc.message


class Workflow:
    """Base class tracking in-flight intents per appointment."""

    def __init__(self) -> None:
        self._in_flight: set[IntentKey] = set()
        self.last_error: Optional[SalonAdminError] = None

    def is_busy(self, key: IntentKey) -> bool:
        return key in self._in_flight

    async def refresh(self) -> None:
        raise NotImplementedError

    async def _refresh_quietly(self) -> bool:
        """Re-fetch; on failure keep the previous snapshot and record the error."""
        try:
            await self.refresh()
        except AuthError:
            raise
        except SalonAdminError as exc:
            logger.warning("Refresh failed, keeping previous snapshot: %s", exc.message)
            self.last_error = exc
            return False
        return True

    async def _run(
        self,
        key: IntentKey,
        intent: str,
        action: Callable[[], Awaitable[Any]],
        success_message: str,
        refresh: bool = True,
    ) -> IntentOutcome:
        if key in self._in_flight:
            logger.info("Ignoring %s for %s: another intent is in flight", intent, key)
            return IntentOutcome(
                intent=intent,
                accepted=False,
                message="Another action is already in progress",
                ignored=True,
                changed=False,
            )

        self._in_flight.add(key)
        if isinstance(key, int):
            set_appointment_id(key)
        try:
            result = await action()
        except AuthError:
            raise
        except SalonAdminError as exc:
            logger.warning("%s failed: %s", intent, exc.message)
            self.last_error = exc
            return IntentOutcome(
                intent=intent,
                accepted=False,
                message=describe_error(exc),
                error=exc,
                changed=False,
            )
        finally:
            self._in_flight.discard(key)

        self.last_error = None
        if refresh and result is not None:
            await self._refresh_quietly()
        return IntentOutcome(intent=intent, accepted=True, message=success_message, result=result)
