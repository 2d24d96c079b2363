"""Appointment lifecycle and seat-assignment core for the salon admin client."""

__version__ = "0.1.0"
