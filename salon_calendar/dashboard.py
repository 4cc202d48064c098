"""Dashboard controller: navigation, fetching and the grid wired together.

Fetch discipline is last-request-wins. Every fetch is tagged with a
FetchTicket (sequence number + the view it was issued for); a result whose
ticket is no longer the latest, or whose view is no longer on screen, is
dropped. Writes never patch the local list: each successful create, update
or delete is followed by a full re-fetch.
"""
from dataclasses import dataclass
from datetime import date, tzinfo
from typing import Any, Dict, List, Optional, Tuple

from structlog.contextvars import bound_contextvars

from salon_calendar.adapter import (
    appointment_to_payload,
    appointments_from_records,
    customer_from_record,
    resolve_id_by_name,
    service_from_record,
    staff_from_record,
)
from salon_calendar.aggregation import AppointmentDraft, unmatched_service_names
from salon_calendar.api_client import SalonApiClient
from salon_calendar.errors import ApiError
from salon_calendar.grid import CalendarGrid, SlotClick, build_grid
from salon_calendar.logging_config import get_logger
from salon_calendar.models import Appointment, Customer, Service, StaffMember
from salon_calendar.navigation import CalendarNavigator, ViewMode, filter_appointments
from salon_calendar.position import Viewport

logger = get_logger(__name__)


@dataclass(frozen=True)
class FetchTicket:
    """Identifies one appointment fetch and the view it was issued for."""
    seq: int
    view_key: Tuple[str, Optional[str]]
    date_range: Optional[Tuple[date, date]]


class Dashboard:
    """
    Single-viewer calendar session against the REST backend.

    Configuration (API client, viewport, display timezone, today's date) is
    passed in here rather than read from globals.
    """

    def __init__(
        self,
        api: SalonApiClient,
        navigator: Optional[CalendarNavigator] = None,
        viewport: Viewport = Viewport(),
        tz: Optional[tzinfo] = None,
        today: Optional[date] = None,
        auto_refresh: bool = True
    ):
        """
        Args:
            api: Backend client
            navigator: View state (default: week grid at today)
            viewport: Current viewport size
            tz: Display timezone for backend timestamps (default: local)
            today: Override for the current date
            auto_refresh: Re-fetch appointments after every navigation
        """
        self.api = api
        self.navigator = navigator or CalendarNavigator(today=today)
        self.viewport = viewport
        self.tz = tz
        self.today = today
        self.auto_refresh = auto_refresh

        self.appointments: List[Appointment] = []
        self.staff: List[StaffMember] = []
        self.services: List[Service] = []
        self.customers: List[Customer] = []

        self._seq = 0
        self._latest: Optional[FetchTicket] = None

    # Fetching

    def begin_fetch(self) -> FetchTicket:
        """Tag a new fetch for the current view; older tickets become stale."""
        self._seq += 1
        ticket = FetchTicket(
            seq=self._seq,
            view_key=self.navigator.view_key(),
            date_range=self.navigator.visible_range(),
        )
        self._latest = ticket
        return ticket

    def is_current(self, ticket: FetchTicket) -> bool:
        return (
            self._latest is not None
            and ticket.seq == self._latest.seq
            and ticket.view_key == self.navigator.view_key()
        )

    def apply_fetch(self, ticket: FetchTicket, records: List[Dict[str, Any]]) -> bool:
        """
        Install fetched records if the ticket is still current.

        Returns:
            True if applied, False if the result was stale and dropped
        """
        if not self.is_current(ticket):
            logger.info(
                "stale_fetch_discarded",
                seq=ticket.seq,
                latest_seq=self._latest.seq if self._latest else None,
                view=ticket.view_key
            )
            return False

        self.appointments = appointments_from_records(records, self.tz)
        logger.debug("appointments_loaded", seq=ticket.seq, count=len(self.appointments))
        return True

    def refresh(self) -> bool:
        """Fetch appointments for the current view."""
        ticket = self.begin_fetch()
        with bound_contextvars(fetch_seq=ticket.seq, view=ticket.view_key[0]):
            if ticket.date_range is not None:
                start, end = ticket.date_range
                records = self.api.list_appointments(start, end)
            else:
                records = self.api.list_appointments()
            return self.apply_fetch(ticket, records)

    def load_catalog(self):
        """Load staff roster, service catalog and customers."""
        self.staff = [staff_from_record(r) for r in self.api.list_staff()]
        self.services = [service_from_record(r) for r in self.api.list_services()]
        self.customers = [customer_from_record(r) for r in self.api.list_customers()]
        logger.info(
            "catalog_loaded",
            staff=len(self.staff),
            services=len(self.services),
            customers=len(self.customers)
        )

    # Navigation

    def _navigated(self):
        if self.auto_refresh:
            self.refresh()

    def previous(self):
        self.navigator.previous()
        self._navigated()

    def next(self):
        self.navigator.next()
        self._navigated()

    def select_date(self, value: date):
        self.navigator.select_date(value)
        self._navigated()

    def switch_grid(self, mode: ViewMode):
        self.navigator.switch_grid(mode)
        self._navigated()

    def toggle_all_appointments(self):
        self.navigator.toggle_all_appointments()
        self._navigated()

    def resize(self, viewport: Viewport):
        """Record a new viewport; the next grid() call uses its cell heights."""
        self.viewport = viewport

    # Views

    def grid(self) -> CalendarGrid:
        return build_grid(
            self.navigator,
            self.appointments,
            staff=self.staff,
            viewport=self.viewport,
            today=self.today,
        )

    def list_view(self) -> List[Appointment]:
        return filter_appointments(self.appointments, self.navigator.filters)

    # Booking

    def new_draft(self, click: SlotClick) -> AppointmentDraft:
        """Draft pre-filled from an empty-slot click."""
        return AppointmentDraft.new(
            click.date, click.time, staff_name=click.staff_name or "", staff_id=click.staff_id
        )

    def edit_draft(self, appointment: Appointment) -> AppointmentDraft:
        """Draft for an existing appointment; unknown service names are dropped."""
        dropped = unmatched_service_names(appointment.service, self.services)
        if dropped:
            logger.warning(
                "edit_dropped_services",
                appointment_id=appointment.id,
                services=dropped
            )
        draft = AppointmentDraft.from_appointment(appointment, self.services)
        draft.staff_id = resolve_id_by_name(draft.staff_name, self.staff)
        draft.customer_id = resolve_id_by_name(draft.client_name, self.customers)
        return draft

    def save(self, draft: AppointmentDraft) -> bool:
        """
        Create or update the draft's appointment, then re-fetch.

        Returns:
            Result of the follow-up refresh (False if it was superseded)

        Raises:
            DraftIncompleteError: If the draft lacks required fields
            ApiError: If the backend rejects the write
        """
        if not draft.staff_id:
            draft.staff_id = resolve_id_by_name(draft.staff_name, self.staff)
        if not draft.customer_id:
            draft.customer_id = resolve_id_by_name(draft.client_name, self.customers)

        draft.to_appointment()  # validate invariants before sending
        payload = appointment_to_payload(draft, self.tz)

        if draft.backend_id:
            self.api.update_appointment(draft.backend_id, payload)
            logger.info("appointment_updated", backend_id=draft.backend_id)
        else:
            self.api.create_appointment(payload)
            logger.info("appointment_created", date=draft.date, time=draft.time)

        return self.refresh()

    def delete(self, appointment: Appointment) -> bool:
        if not appointment.backend_id:
            raise ApiError("Appointment has not been saved to the backend")
        self.api.delete_appointment(appointment.backend_id)
        logger.info("appointment_deleted", backend_id=appointment.backend_id)
        return self.refresh()
