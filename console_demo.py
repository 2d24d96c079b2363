"""
Offline console demo: drives the seat map and appointment form without a server.

Runs the real status machine, working-hours policy, form validator, and
seat coordinator against the in-memory salon backend. No network calls.
Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario floor
    python console_demo.py --scenario conflict
    python console_demo.py --scenario form
"""

import argparse
import asyncio
import shlex
from datetime import date, timedelta
from typing import Optional

from salon_admin.config import settings
from salon_admin.remote.memory import InMemorySalonService
from salon_admin.scheduling.working_hours import DAYS, service_today
from salon_admin.schemas.appointment_schema import (
    Appointment,
    AppointmentStatus,
    CustomerRef,
    ServiceLine,
)
from salon_admin.schemas.branch_schema import WorkingHour
from salon_admin.schemas.form_schema import CatalogService
from salon_admin.schemas.seat_schema import Seat, SeatStatus, StaffRef
from salon_admin.workflows import AppointmentFormWorkflow, IntentOutcome, SeatMapWorkflow

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


def next_open_day(start: date) -> date:
    """First day from ``start`` on that the demo branch is open (it closes Sundays)."""
    day = start
    while day.weekday() == 6:
        day += timedelta(days=1)
    return day


def build_demo_service(today: Optional[date] = None) -> InMemorySalonService:
    """Seed a small branch: three seats, a few waiting customers."""
    day = next_open_day(today or service_today()).isoformat()
    customers = [
        CustomerRef(id=1, name="Ava Martin", phone="0400111222"),
        CustomerRef(id=2, name="Noah Chen", phone="0400333444"),
        CustomerRef(id=3, name="Mia Rossi", phone="0400555666"),
    ]
    services = [
        CatalogService(id=1, name="Haircut", price=25.0, duration_minutes=30),
        CatalogService(id=2, name="Beard Trim", price=12.5, duration_minutes=15),
        CatalogService(id=3, name="Colouring", price="60.00", duration_minutes=90),
    ]
    seats = [
        Seat(id=1, name="Seat 1", status=SeatStatus.AVAILABLE),
        Seat(id=2, name="Seat 2", status=SeatStatus.AVAILABLE),
        Seat(id=3, name="Seat 3", status=SeatStatus.CLEANING),
    ]
    appointments = [
        Appointment(
            id=101, ticket_number="TK-000101", appointment_date=day,
            appointment_time="10:00:00", status=AppointmentStatus.PENDING,
            user=customers[0], services=[ServiceLine(id=1, name="Haircut", price=25.0)],
        ),
        Appointment(
            id=102, ticket_number="TK-000102", appointment_date=day,
            appointment_time="10:30:00", status=AppointmentStatus.PENDING,
            user=customers[1], services=[ServiceLine(id=2, name="Beard Trim", price=12.5)],
        ),
    ]
    working_hours = [
        WorkingHour(day=name, open="09:00", close="18:00", is_closed=(name == "Sunday"))
        for name in DAYS
    ]
    return InMemorySalonService(
        seats=seats,
        appointments=appointments,
        working_hours=working_hours,
        customers=customers,
        services=services,
        staff=[StaffRef(id=1, name="Liam")],
    )


class ConsoleSession:
    """Seat-map walkthrough in the terminal."""

    MAX_INPUT_LENGTH = 200

    def __init__(self, service: Optional[InMemorySalonService] = None) -> None:
        self.service = service or build_demo_service()
        self.seat_map = SeatMapWorkflow(self.service, self.service)

    def admin_say(self, text: str) -> None:
        print(f"{BLUE}[Admin] {RESET}{text}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def report(self, outcome: IntentOutcome) -> None:
        if outcome.ignored:
            print(f"{YELLOW}{outcome.message}{RESET}")
        elif outcome.accepted:
            print(f"{GREEN}{BOLD}[Success]{RESET} {GREEN}{outcome.message}{RESET}")
        else:
            print(f"{RED}{BOLD}[Error]{RESET} {RED}{outcome.message}{RESET}")
        for call in self.service.calls[-4:]:
            self.system_log(f"{call.method} {call.path} {call.body or ''}")
        self.service.calls.clear()

    def show_floor(self) -> None:
        snapshot = self.seat_map.snapshot
        if snapshot is None:
            return
        for seat in snapshot.seats:
            occupant = ", ".join(
                f"#{a.id} {a.user.name if a.user else ''}" for a in seat.appointments
            )
            status = seat.status.value if seat.status else "unknown"
            print(f"  {BOLD}{seat.name:<8}{RESET} {status:<12} {occupant}")
        waiting = [f"#{a.id}" for a in snapshot.unassigned_appointments]
        approved = [
            f"#{a.id}@seat{a.current_seat_id}" for a in snapshot.assigned_pending_appointments
        ]
        print(f"  {DIM}waiting: {', '.join(waiting) or '-'}{RESET}")
        print(f"  {DIM}approved: {', '.join(approved) or '-'}{RESET}")

    # Pre-scripted scenarios for --scenario flag
    SCENARIOS: dict[str, list[str]] = {
        "floor": [
            "assign 101 3",
            "assign 101 1",
            "assign 101 1",
            "move 101 1",
            "move 101 2",
            "pending 101",
            "assign 102 1",
            "assign 102 1",
            "complete 102",
        ],
        "conflict": [
            "assign 101 1",
            "steal 1",
            "assign 101 1",
            "assign 101 2",
        ],
    }

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        if scenario == "form":
            await self.run_form_scenario()
            return
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        await self.seat_map.refresh()
        self.show_floor()
        for step in steps:
            print()
            self.admin_say(step)
            await self._process_input(step)
        self._footer(f"Scenario '{scenario}' complete.")

    async def run_form_scenario(self) -> None:
        self._banner("Scenario: form")
        form = AppointmentFormWorkflow(self.service, self.service)
        await form.load()
        day = next_open_day(service_today())
        sunday = day + timedelta(days=(6 - day.weekday()))

        steps = [
            ("submit empty form", None),
            ("pick customer Mia Rossi", lambda: setattr(form.draft, "user_id", 3)),
            ("pick a Sunday", lambda: form.set_date(sunday.isoformat())),
            ("pick an open day", lambda: form.set_date(day.isoformat())),
            ("pick 19:30", lambda: form.set_time("19:30")),
            ("pick 17:00", lambda: form.set_time("17:00")),
            ("add Colouring", lambda: form.toggle_service(3)),
            ("add Haircut", lambda: form.toggle_service(1)),
        ]
        for label, change in steps:
            print()
            self.admin_say(label)
            if change is not None:
                result = change()
                if result is not None and not result:
                    print(f"{YELLOW}{result.message}{RESET}")
            self.system_log(f"Draft total: {form.total:.2f}")
            outcome = await form.submit()
            self.report(outcome)
            if outcome.accepted:
                self.system_log(f"Created {form.saved.ticket_number} ({form.saved.status.value})")
                break
        self._footer("Scenario 'form' complete.")

    async def run(self) -> None:
        self._banner("Console Demo")
        print(f"{DIM}  Commands: map | assign <appt> <seat> | move <appt> <seat> | "
              f"pending <appt> | complete <appt> | steal <seat> | quit{RESET}")
        await self.seat_map.refresh()
        self.show_floor()

        while True:
            user_input = input(f"\n{BLUE}[Admin] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            if len(user_input) > self.MAX_INPUT_LENGTH:
                print(f"{YELLOW}Command too long.{RESET}")
                continue
            await self._process_input(user_input)

    async def _process_input(self, text: str) -> None:
        parts = shlex.split(text)
        command, args = parts[0].lower(), parts[1:]
        try:
            ids = [int(a) for a in args]
        except ValueError:
            print(f"{YELLOW}Ids must be numbers.{RESET}")
            return

        if command == "map":
            await self.seat_map.refresh()
        elif command == "assign" and len(ids) == 2:
            self.report(await self.seat_map.assign(ids[0], ids[1]))
        elif command == "move" and len(ids) == 2:
            self.report(await self.seat_map.move(ids[0], ids[1]))
        elif command == "pending" and len(ids) == 1:
            self.report(await self.seat_map.move_to_pending(ids[0]))
        elif command == "complete" and len(ids) == 1:
            self.report(await self.seat_map.complete(ids[0]))
        elif command == "steal" and len(ids) == 1:
            # Another device takes the seat behind this screen's back.
            self.service.set_seat_status(ids[0], SeatStatus.OCCUPIED)
            self.system_log(f"Seat {ids[0]} taken elsewhere; seat map not refreshed")
            return
        else:
            print(f"{YELLOW}Unknown command: {text}{RESET}")
            return
        self.show_floor()

    def _banner(self, title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  SALON ADMIN - {title}{RESET}")
        print(f"{BOLD}  Client: {settings.client_name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

    def _footer(self, title: str) -> None:
        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  {title}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=["floor", "conflict", "form"],
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
