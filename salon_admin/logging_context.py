"""Appointment-scoped logging context.

Every intent the admin issues concerns exactly one appointment. The id of
that appointment is kept in a context variable so each log line emitted
while the intent is in flight can be traced back to it, across the
workflow, coordinator, and remote client modules.

Usage:
    from salon_admin.logging_context import get_appointment_logger, set_appointment_id

    set_appointment_id(42)
    logger = get_appointment_logger(__name__)
    logger.info("Submitting seat change")  # record.appointment_id == "42"
"""

import logging
from contextvars import ContextVar
from typing import Optional, Union

_appointment_id: ContextVar[str] = ContextVar("appointment_id", default="-")


def set_appointment_id(appointment_id: Optional[Union[int, str]]) -> None:
    """Set the appointment id for the current async context."""
    _appointment_id.set("-" if appointment_id is None else str(appointment_id))


def get_appointment_id() -> str:
    """Retrieve the appointment id for the current async context."""
    return _appointment_id.get()


class AppointmentIdFilter(logging.Filter):
    """Injects appointment_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.appointment_id = _appointment_id.get()  # type: ignore[attr-defined]
        return True


def get_appointment_logger(name: str) -> logging.Logger:
    """Return a logger with the AppointmentIdFilter attached.

    The filter adds ``appointment_id`` to each record so formatters can
    include ``%(appointment_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, AppointmentIdFilter) for f in logger.filters):
        logger.addFilter(AppointmentIdFilter())
    return logger
