"""Salon appointment calendar: scheduling grid core and backend client."""
from salon_calendar.aggregation import AppointmentDraft, aggregate_services
from salon_calendar.dashboard import Dashboard
from salon_calendar.models import Appointment, AppointmentStatus, Service, StaffMember
from salon_calendar.navigation import CalendarNavigator, ViewMode

__all__ = [
    "Appointment",
    "AppointmentDraft",
    "AppointmentStatus",
    "CalendarNavigator",
    "Dashboard",
    "Service",
    "StaffMember",
    "ViewMode",
    "aggregate_services",
]
