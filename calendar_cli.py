#!/usr/bin/env python3
"""
Interactive terminal client for the salon calendar.

Shows the week grid, the per-staff day grid or the all-appointments list
from the live backend, and books appointments into clicked slots.
"""
import sys

import requests

from salon_calendar import config
from salon_calendar.api_client import SalonApiClient
from salon_calendar.dashboard import Dashboard
from salon_calendar.errors import SalonCalendarError
from salon_calendar.grid import render_text
from salon_calendar.logging_config import setup_structured_logging
from salon_calendar.models import AppointmentStatus
from salon_calendar.navigation import ViewMode, status_counts
from salon_calendar.position import Viewport
from salon_calendar.timemodel import format_date_long, format_week_range, parse_date


def print_banner():
    """Print welcome banner."""
    print("\n" + "=" * 70)
    print("📅  SALON CALENDAR - Terminal Client")
    print("=" * 70)
    print("\nCommands:")
    print("  /next, /prev            - Move one week (week view) or one day (day view)")
    print("  /date YYYY-MM-DD        - Jump to a date")
    print("  /week, /day             - Switch between week grid and staff day grid")
    print("  /all                    - Toggle the all-appointments list")
    print("  /status <status|all>    - Filter the list by status")
    print("  /range FROM TO          - Filter the list by date range (YYYY-MM-DD)")
    print("  /sort date|status       - Sort the list")
    print("  /clear                  - Clear list filters")
    print("  /book COL HOUR SLOT     - Start a booking in a grid slot (SLOT 0-3)")
    print("  /refresh                - Re-fetch appointments")
    print("  /quit or /exit          - Exit")
    print("  /help                   - Show this help")
    print("\n" + "=" * 70 + "\n")


def print_view(dashboard: Dashboard):
    """Print the current view."""
    navigator = dashboard.navigator
    print()
    if navigator.mode == ViewMode.ALL_APPOINTMENTS:
        appointments = dashboard.list_view()
        counts = status_counts(dashboard.appointments)
        print(f"📋 All appointments ({len(appointments)} of {counts['total']} shown)")
        print("   " + "  ".join(f"{k}: {v}" for k, v in counts.items() if k != "total"))
        print("-" * 70)
        for apt in appointments:
            print(
                f"  {apt.date} {apt.time:>8}  {apt.client_name:<20} "
                f"{apt.staff_name:<16} {apt.service} [{apt.status.value}]"
            )
        if not appointments:
            print("  No appointments match the filters.")
    else:
        if navigator.mode == ViewMode.WEEK_GRID:
            print(f"🗓  Week of {format_week_range(navigator.week_start)}")
        else:
            print(f"🗓  {format_date_long(navigator.selected_date)} by staff")
        print("-" * 70)
        print(render_text(dashboard.grid()))
    print()


def prompt(label: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    value = input(f"   {label}{suffix}: ").strip()
    return value or default


def book(dashboard: Dashboard, args):
    """Walk through a booking for a clicked slot."""
    column, hour, slot = (int(a) for a in args)
    click = dashboard.grid().click(column, hour, slot)
    draft = dashboard.new_draft(click)
    print(f"\n📝 New appointment on {draft.date} at {draft.time}")

    draft.client_name = prompt("Client name")
    draft.phone = prompt("Phone")
    if not draft.staff_name:
        draft.staff_name = prompt("Staff name")

    for index, service in enumerate(dashboard.services):
        print(f"   {index}: {service.name} ({service.duration} min, {service.price:.0f})")
    picks = prompt("Services (numbers, comma separated)")
    for pick in filter(None, (p.strip() for p in picks.split(","))):
        draft.toggle(dashboard.services[int(pick)].id, dashboard.services)

    print(f"   → {draft.service_label or '(no services)'}: {draft.duration} min")
    if draft.price is None:
        draft.price = float(prompt("Price"))
    draft.notes = prompt("Notes") or None

    dashboard.save(draft)
    print("✅ Appointment saved.\n")


def handle_command(dashboard: Dashboard, user_input: str) -> bool:
    """Run one command. Returns False when the session should end."""
    parts = user_input.split()
    command, args = parts[0].lower(), parts[1:]
    navigator = dashboard.navigator

    if command in ("/quit", "/exit"):
        print("\n👋 Goodbye!\n")
        return False
    elif command == "/help":
        print_banner()
        return True
    elif command == "/next":
        dashboard.next()
    elif command == "/prev":
        dashboard.previous()
    elif command == "/date" and len(args) == 1:
        dashboard.select_date(parse_date(args[0]))
    elif command == "/week":
        dashboard.switch_grid(ViewMode.WEEK_GRID)
    elif command == "/day":
        dashboard.switch_grid(ViewMode.DAY_STAFF_GRID)
    elif command == "/all":
        dashboard.toggle_all_appointments()
    elif command == "/status" and len(args) == 1:
        navigator.filters.status = None if args[0] == "all" else AppointmentStatus(args[0])
    elif command == "/range" and len(args) == 2:
        parse_date(args[0])
        parse_date(args[1])
        navigator.filters.date_from, navigator.filters.date_to = args
    elif command == "/sort" and args and args[0] in ("date", "status"):
        navigator.filters.sort_by = args[0]
    elif command == "/clear":
        navigator.clear_filters()
    elif command == "/book" and len(args) == 3:
        book(dashboard, args)
    elif command == "/refresh":
        dashboard.refresh()
    else:
        print(f"❓ Unknown command: {user_input}")
        print("Type /help to see available commands\n")
        return True

    print_view(dashboard)
    return True


def main():
    """Run the interactive calendar client."""
    setup_structured_logging(config.LOG_LEVEL)

    if not config.API_TOKEN:
        print("\n❌ ERROR: SALON_API_TOKEN not configured!")
        print("\nPlease set your API token:")
        print("1. Copy .env.example to .env")
        print("2. Edit .env and add: SALON_API_TOKEN=your-token")
        print("3. Run this script again\n")
        sys.exit(1)

    print_banner()

    dashboard = Dashboard(SalonApiClient(), viewport=Viewport())
    print("🔄 Loading calendar...")
    try:
        dashboard.load_catalog()
        dashboard.refresh()
    except SalonCalendarError as e:
        print(f"❌ Could not load calendar: {e}")
        sys.exit(1)

    print_view(dashboard)

    active = True
    while active:
        try:
            user_input = input("📅 > ").strip()
            if not user_input:
                continue
            active = handle_command(dashboard, user_input)

        except KeyboardInterrupt:
            print("\n\n👋 Interrupted. Goodbye!\n")
            active = False

        except EOFError:
            print("\n\n👋 Goodbye!\n")
            active = False

        except (SalonCalendarError, ValueError, IndexError, requests.exceptions.RequestException) as e:
            print(f"\n❌ Error: {e}\n")


if __name__ == "__main__":
    main()
