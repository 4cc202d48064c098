"""Shared test fixtures."""
from datetime import date, timezone
from unittest.mock import Mock

import pytest

from salon_calendar.models import Appointment, AppointmentStatus, Service, StaffMember

# Wednesday; its week runs Mon 2025-12-08 .. Sun 2025-12-14
TODAY = date(2025, 12, 10)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def catalog():
    """Service catalog."""
    return [
        Service(id="srv-a", name="A", duration=60, price=3000),
        Service(id="srv-b", name="B", duration=30, price=1500),
        Service(id="srv-cut", name="Precision Cut", duration=45, price=85),
        Service(id="srv-color", name="Full Color", duration=120, price=120),
    ]


@pytest.fixture
def staff():
    """Staff roster."""
    return [
        StaffMember(id="st-1", name="Emma Wilson", phone_number="(555) 000-0001"),
        StaffMember(id="st-2", name="Mia Rodriguez", phone_number="(555) 000-0002"),
        StaffMember(id="st-3", name="Olivia Kim", phone_number="(555) 000-0003"),
    ]


@pytest.fixture
def make_appointment():
    """Build an appointment with sensible defaults."""
    def _create(**overrides) -> Appointment:
        fields = {
            "id": 1,
            "client_name": "Jennifer Adams",
            "phone": "(555) 123-4567",
            "staff_name": "Emma Wilson",
            "service": "Full Color",
            "date": "2025-12-10",
            "time": "9:00 AM",
            "duration": 60,
            "price": 120,
            "status": AppointmentStatus.CONFIRMED,
        }
        fields.update(overrides)
        return Appointment(**fields)
    return _create


@pytest.fixture
def appointments(make_appointment):
    """A realistic day plus one appointment later in the week."""
    return [
        make_appointment(id=1, client_name="Jennifer Adams", staff_name="Emma Wilson",
                         service="Balayage + Cut", time="9:00 AM", duration=120, price=285),
        make_appointment(id=2, client_name="Rachel Green", staff_name="Mia Rodriguez",
                         service="Bridal Styling", time="10:30 AM", duration=90, price=150,
                         status=AppointmentStatus.PENDING),
        make_appointment(id=3, client_name="Monica Bell", staff_name="Emma Wilson",
                         service="Full Color", time="1:00 PM", duration=120, price=120),
        make_appointment(id=4, client_name="Sarah Johnson", staff_name="Olivia Kim",
                         service="Precision Cut", time="2:30 PM", duration=45, price=85),
        make_appointment(id=5, client_name="Lisa Brown", staff_name="Sophia Lee",
                         service="Gel Manicure", time="3:00 PM", duration=60, price=45,
                         status=AppointmentStatus.CANCELLED),
        make_appointment(id=6, client_name="Phoebe Buffay", staff_name="Emma Wilson",
                         service="Blowout", date="2025-12-12", time="11:00 AM",
                         duration=30, price=40),
    ]


@pytest.fixture
def appointment_record():
    """Backend appointment record as the API returns it."""
    def _create(**overrides):
        record = {
            "_id": "apt-100",
            "customer": {"name": "Jennifer Adams", "phone": "0771234567"},
            "staff": {"name": "Emma Wilson"},
            "services": [
                {"name": "Full Color", "duration": 120, "price": 120},
                {"name": "Blowout", "duration": 30, "price": 40},
            ],
            "appointmentDate": "2025-12-10T14:30:00.000Z",
            "status": "CONFIRMED",
            "notes": "Prefers warm tones",
        }
        record.update(overrides)
        return record
    return _create


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture
def mock_api():
    """SalonApiClient stand-in with an empty backend."""
    api = Mock()
    api.list_appointments.return_value = []
    api.list_staff.return_value = []
    api.list_services.return_value = []
    api.list_customers.return_value = []
    return api
