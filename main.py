"""
Salon admin entry point.

Prints the live seat map of the configured salon API, or starts the
offline console demo for development.

Usage:
    Live seat map: python main.py
    Console mode:  python main.py console
"""

import asyncio
import logging
import sys

from salon_admin.config import settings
from salon_admin.errors import AuthError, SalonAdminError
from salon_admin.remote.http_client import SalonApiClient

logger = logging.getLogger(__name__)


async def show_seat_map() -> None:
    """Fetch and print the seat map once."""
    async with SalonApiClient() as client:
        seat_map = await client.get_seat_map()

    for seat in seat_map.seats:
        status = seat.status.value if seat.status else "unknown"
        tickets = ", ".join(a.ticket_number or f"#{a.id}" for a in seat.appointments)
        print(f"{seat.name:<12} {status:<12} {tickets}")
    print(f"waiting:  {len(seat_map.unassigned_appointments)}")
    print(f"approved: {len(seat_map.assigned_pending_appointments)}")


def _run_live_mode() -> int:
    """Query the remote salon API (requires SALON_API_TOKEN)."""
    if not settings.api.access_token:
        logger.error("SALON_API_TOKEN is not set; use 'python main.py console' to run offline")
        return 1
    try:
        asyncio.run(show_seat_map())
    except AuthError as exc:
        logger.error("%s", exc.message)
        return 1
    except SalonAdminError as exc:
        logger.error("Failed to load seat map: %s", exc.message)
        return 1
    return 0


def _run_console_mode() -> int:
    """Start the offline console demo (no server required)."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    asyncio.run(session.run())
    return 0


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        sys.exit(_run_console_mode())
    else:
        sys.exit(_run_live_mode())
