"""Conversion between backend records and the calendar's data model.

Wire conventions handled here and nowhere else:
- Status is UPPERCASE on the wire, lower-case in memory
- Appointment start is one ISO-8601 timestamp on the wire, a local
  "YYYY-MM-DD" date plus a 12-hour "H:MM AM|PM" time in memory
- Backend ids live in "_id" (older payloads use "id")
"""
from datetime import datetime, time, timezone, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from salon_calendar.aggregation import AppointmentDraft
from salon_calendar.config import (
    DEFAULT_SLOT_MINUTES,
    UNASSIGNED_STAFF_NAME,
    UNKNOWN_CLIENT_NAME,
)
from salon_calendar.errors import DraftIncompleteError
from salon_calendar.logging_config import get_logger
from salon_calendar.models import (
    Appointment,
    AppointmentStatus,
    Customer,
    Service,
    StaffMember,
)
from salon_calendar.timemodel import (
    format_date_to_string,
    format_time_to_string,
    parse_date,
    parse_time,
)

logger = get_logger(__name__)


# Status case convention

def status_from_wire(value: Optional[str]) -> AppointmentStatus:
    """UPPERCASE wire status -> enum. Unknown or missing values become pending."""
    try:
        return AppointmentStatus((value or "").lower())
    except ValueError:
        logger.debug("unknown_status_defaulted", status=value)
        return AppointmentStatus.PENDING


def status_to_wire(status: AppointmentStatus) -> str:
    return AppointmentStatus(status).value.upper()


# Timestamps

def _parse_iso(value: str) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"Timestamp must be a string, got {type(value).__name__}")
    # fromisoformat only learned the "Z" suffix in Python 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def split_timestamp(value: str, tz: Optional[tzinfo] = None) -> Tuple[str, str]:
    """
    Split an ISO-8601 timestamp into local calendar date and 12-hour time.

    Args:
        value: e.g. "2025-12-10T03:30:00.000Z"
        tz: Display timezone (default: the machine's local zone)

    Returns:
        ("YYYY-MM-DD", "H:MM AM|PM")

    Naive timestamps are taken as already being local wall-clock time.
    """
    moment = _parse_iso(value)
    if moment.tzinfo is not None:
        moment = moment.astimezone(tz) if tz is not None else moment.astimezone()
    return format_date_to_string(moment), format_time_to_string(moment.hour, moment.minute)


def build_timestamp(date_str: str, time_str: str, tz: Optional[tzinfo] = None) -> str:
    """
    Combine a form date and 12-hour time into a UTC ISO-8601 timestamp.

    Example:
        >>> build_timestamp("2025-12-10", "2:30 PM", timezone.utc)
        '2025-12-10T14:30:00.000Z'
    """
    hour, minutes = parse_time(time_str)
    local = datetime.combine(parse_date(date_str), time(hour, minutes))
    local = local.replace(tzinfo=tz) if tz is not None else local.astimezone()
    stamp = local.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


# Read path

def _record_id(record: Dict[str, Any]) -> Optional[str]:
    value = record.get("_id", record.get("id"))
    return str(value) if value is not None else None


def appointment_from_record(
    record: Dict[str, Any],
    local_id: int,
    tz: Optional[tzinfo] = None
) -> Appointment:
    """
    Adapt one backend appointment record.

    Only the first listed service is shown: multi-service bookings are
    aggregated on the write path, not expanded on the read path. A missing
    or deleted customer/staff member gets a placeholder name so the booking
    stays visible.

    Raises:
        ValueError: If the timestamp is malformed or a field breaks an
                    Appointment invariant (pydantic.ValidationError)
    """
    customer = record.get("customer") or {}
    staff = record.get("staff") or {}
    services = record.get("services") or []
    first_service = services[0] if services else {}

    day, start = split_timestamp(record.get("appointmentDate"), tz)

    return Appointment(
        id=local_id,
        backend_id=_record_id(record),
        client_name=customer.get("name") or UNKNOWN_CLIENT_NAME,
        phone=customer.get("phone") or customer.get("phoneNumber") or "",
        staff_name=staff.get("name") or UNASSIGNED_STAFF_NAME,
        service=first_service.get("name") or "",
        date=day,
        time=start,
        duration=first_service.get("duration") or DEFAULT_SLOT_MINUTES,
        price=first_service.get("price") or 0,
        status=status_from_wire(record.get("status")),
        notes=record.get("notes") or None,
    )


def appointments_from_records(
    records: Iterable[Dict[str, Any]],
    tz: Optional[tzinfo] = None
) -> List[Appointment]:
    """
    Adapt a list of records, numbering local ids from 1.

    A record that cannot be adapted is skipped with a warning so one bad row
    does not blank the whole calendar.
    """
    appointments = []
    for position, record in enumerate(records or [], start=1):
        try:
            appointments.append(appointment_from_record(record, position, tz))
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(
                "appointment_record_skipped",
                backend_id=_record_id(record) if isinstance(record, dict) else None,
                error=str(e)
            )
    return appointments


def staff_from_record(record: Dict[str, Any]) -> StaffMember:
    return StaffMember(
        id=_record_id(record),
        name=record.get("name", ""),
        phone_number=record.get("phoneNumber", record.get("phone", "")) or "",
    )


def service_from_record(record: Dict[str, Any]) -> Service:
    return Service(
        id=_record_id(record),
        name=record.get("name", ""),
        duration=record.get("duration") or DEFAULT_SLOT_MINUTES,
        price=record.get("price") or 0,
        category=record.get("category"),
        active=record.get("isActive", record.get("active", True)),
    )


def customer_from_record(record: Dict[str, Any]) -> Customer:
    return Customer(
        id=_record_id(record),
        name=record.get("name", ""),
        phone=record.get("phone", record.get("phoneNumber", "")) or "",
        email=record.get("email"),
    )


# Write path

def resolve_id_by_name(name: str, records: Iterable) -> Optional[str]:
    """
    Find the id of the first staff member/customer with exactly this name.

    Only for drafts that carry a name and no id (week-grid bookings, edits of
    appointments loaded from the backend). Two entries sharing a name resolve
    to the first one.
    """
    for record in records:
        if record.name == name:
            return record.id
    return None


def appointment_to_payload(
    draft: AppointmentDraft,
    tz: Optional[tzinfo] = None
) -> Dict[str, Any]:
    """
    Build the create/update request body for a draft.

    Raises:
        DraftIncompleteError: If customer, staff or price is missing
    """
    missing = draft.missing_fields()
    if not draft.customer_id:
        missing.append("customer_id")
    if not draft.staff_id:
        missing.append("staff_id")
    if missing:
        raise DraftIncompleteError(f"Missing fields: {', '.join(missing)}")

    payload = {
        "customerId": draft.customer_id,
        "staffId": draft.staff_id,
        "serviceIds": list(draft.service_ids),
        "appointmentDate": build_timestamp(draft.date, draft.time, tz),
        "status": status_to_wire(draft.status),
        "price": draft.price,
    }
    if draft.notes:
        payload["notes"] = draft.notes
    return payload
