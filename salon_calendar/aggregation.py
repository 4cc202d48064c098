"""Multi-service aggregation and the appointment booking draft.

One appointment can carry several catalog services. The draft's duration,
price and service label are always recomputed from the whole current
selection; the selection keeps no history.
"""
import datetime
import time
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, NamedTuple, Optional

from salon_calendar.config import DEFAULT_DRAFT_STATUS, DEFAULT_SLOT_MINUTES
from salon_calendar.errors import DraftIncompleteError
from salon_calendar.logging_config import get_logger
from salon_calendar.models import Appointment, AppointmentStatus, Service
from salon_calendar.timemodel import format_date_to_string

logger = get_logger(__name__)

SERVICE_SEPARATOR = ", "


class ServiceAggregate(NamedTuple):
    """Derived fields of one appointment from its selected services."""
    service_names: str
    total_duration: int
    total_price: Optional[float]  # None = nothing selected yet (not "free")


def _catalog_index(catalog: Iterable[Service]) -> Dict[str, Service]:
    return {service.id: service for service in catalog}


def aggregate_services(
    selected_ids: List[str],
    catalog: Iterable[Service]
) -> ServiceAggregate:
    """
    Combine selected services into one duration, price and label.

    Args:
        selected_ids: Service ids in selection order
        catalog: Available services

    Returns:
        ServiceAggregate. An empty selection falls back to a 60 minute slot
        with no price.

    Example:
        >>> aggregate_services(["a", "b"], catalog)
        ServiceAggregate(service_names='A, B', total_duration=90, total_price=4500.0)
    """
    index = _catalog_index(catalog)
    selected = []
    for service_id in selected_ids:
        service = index.get(service_id)
        if service is None:
            logger.warning("selected_service_not_in_catalog", service_id=service_id)
            continue
        selected.append(service)

    if not selected:
        return ServiceAggregate("", DEFAULT_SLOT_MINUTES, None)

    return ServiceAggregate(
        service_names=SERVICE_SEPARATOR.join(s.name for s in selected),
        total_duration=sum(s.duration for s in selected),
        total_price=float(sum(s.price for s in selected)),
    )


def toggle_service(selected_ids: List[str], service_id: str) -> List[str]:
    """Return a new selection with service_id added (at the end) or removed."""
    if service_id in selected_ids:
        return [sid for sid in selected_ids if sid != service_id]
    return list(selected_ids) + [service_id]


def _split_label(service_label: str) -> List[str]:
    if not service_label:
        return []
    return [name.strip() for name in service_label.split(",") if name.strip()]


def reconstruct_selection(
    service_label: str,
    catalog: Iterable[Service]
) -> List[str]:
    """
    Map a stored comma-joined service label back to catalog ids.

    Names are matched exactly. Names with no catalog entry are dropped from
    the selection (see unmatched_service_names to surface them).
    """
    by_name = {}
    for service in catalog:
        by_name.setdefault(service.name, service.id)

    selected = []
    for name in _split_label(service_label):
        service_id = by_name.get(name)
        if service_id is None:
            logger.debug("stored_service_not_in_catalog", service_name=name)
            continue
        if service_id not in selected:
            selected.append(service_id)
    return selected


def unmatched_service_names(
    service_label: str,
    catalog: Iterable[Service]
) -> List[str]:
    """Names in a stored label that reconstruct_selection would drop."""
    known = {service.name for service in catalog}
    return [name for name in _split_label(service_label) if name not in known]


@dataclass
class AppointmentDraft:
    """
    Form state behind the new/edit appointment panel.

    A draft is not an Appointment until to_appointment() validates it.
    """
    date: str = ""
    time: str = ""
    client_name: str = ""
    phone: str = ""
    staff_name: str = ""
    staff_id: Optional[str] = None
    customer_id: Optional[str] = None
    service_ids: List[str] = field(default_factory=list)
    service_label: str = ""
    duration: int = DEFAULT_SLOT_MINUTES
    price: Optional[float] = None
    status: AppointmentStatus = AppointmentStatus(DEFAULT_DRAFT_STATUS)
    notes: Optional[str] = None
    appointment_id: Optional[int] = None
    backend_id: Optional[str] = None

    @classmethod
    def new(
        cls,
        day: Optional[datetime.date] = None,
        time_str: str = "",
        staff_name: str = "",
        staff_id: Optional[str] = None
    ) -> "AppointmentDraft":
        """Blank draft, optionally pre-filled from a clicked slot."""
        return cls(
            date=format_date_to_string(day) if day is not None else "",
            time=time_str,
            staff_name=staff_name,
            staff_id=staff_id,
        )

    @classmethod
    def from_appointment(
        cls,
        appointment: Appointment,
        catalog: Iterable[Service]
    ) -> "AppointmentDraft":
        """Draft for editing: stored duration and price are kept as-is."""
        return cls(
            date=appointment.date,
            time=appointment.time,
            client_name=appointment.client_name,
            phone=appointment.phone,
            staff_name=appointment.staff_name,
            service_ids=reconstruct_selection(appointment.service, catalog),
            service_label=appointment.service,
            duration=appointment.duration,
            price=appointment.price,
            status=appointment.status,
            notes=appointment.notes,
            appointment_id=appointment.id,
            backend_id=appointment.backend_id,
        )

    @property
    def is_edit(self) -> bool:
        return self.appointment_id is not None

    def toggle(self, service_id: str, catalog: Iterable[Service]) -> ServiceAggregate:
        """Toggle a service and recompute duration, price and label."""
        catalog = list(catalog)
        self.service_ids = toggle_service(self.service_ids, service_id)
        aggregate = aggregate_services(self.service_ids, catalog)
        self.service_label = aggregate.service_names
        self.duration = aggregate.total_duration
        self.price = aggregate.total_price
        return aggregate

    def missing_fields(self) -> List[str]:
        required = {
            "client_name": self.client_name,
            "staff_name": self.staff_name,
            "date": self.date,
            "time": self.time,
        }
        missing = [name for name, value in required.items() if not value]
        if self.price is None:
            missing.append("price")
        return missing

    def to_appointment(self, local_id: Optional[int] = None) -> Appointment:
        """
        Validate the draft into an Appointment.

        Raises:
            DraftIncompleteError: If a required field (including price) is unset
            pydantic.ValidationError: If a field breaks an Appointment invariant
        """
        missing = self.missing_fields()
        if missing:
            raise DraftIncompleteError(f"Missing fields: {', '.join(missing)}")

        if self.appointment_id is not None:
            appointment_id = self.appointment_id
        elif local_id is not None:
            appointment_id = local_id
        else:
            appointment_id = int(time.time() * 1000)

        return Appointment(
            id=appointment_id,
            backend_id=self.backend_id,
            client_name=self.client_name,
            phone=self.phone,
            staff_name=self.staff_name,
            service=self.service_label,
            date=self.date,
            time=self.time,
            duration=self.duration,
            price=self.price,
            status=self.status,
            notes=self.notes,
        )
