"""Data model for the salon calendar.

Pydantic models validate everything that crosses the backend boundary.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from salon_calendar.timemodel import format_time_to_string, parse_date, parse_time


class AppointmentStatus(str, Enum):
    """Appointment lifecycle states (lower-case in memory)."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Appointment(BaseModel):
    """
    A scheduled booking as the calendar sees it.

    `id` is a local key for list rendering; `backend_id` is present once the
    backend has persisted the appointment. `service` is a display label and
    may be a comma-joined list of service names.
    """
    id: int = Field(..., description="Local numeric id (UI key)")
    backend_id: Optional[str] = Field(None, description="Backend-issued id")
    client_name: str = Field(..., min_length=1)
    phone: str = Field(default="")
    staff_name: str = Field(..., min_length=1)
    service: str = Field(default="")
    date: str = Field(..., description="Calendar date, YYYY-MM-DD")
    time: str = Field(..., description="Start time, H:MM AM|PM")
    duration: int = Field(..., gt=0, description="Duration in minutes")
    price: float = Field(..., ge=0, description="Price in currency units")
    status: AppointmentStatus = Field(default=AppointmentStatus.PENDING)
    notes: Optional[str] = None

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "backend_id": "6571f0c2a1b2c3d4e5f60718",
                "client_name": "Jennifer Adams",
                "phone": "(555) 123-4567",
                "staff_name": "Emma Wilson",
                "service": "Balayage + Cut",
                "date": "2025-12-10",
                "time": "9:00 AM",
                "duration": 120,
                "price": 285,
                "status": "confirmed"
            }
        }
    )

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        """Require the canonical 12-hour form (no leading zero)."""
        canonical = format_time_to_string(*parse_time(v))
        if canonical != v:
            raise ValueError(f"Time '{v}' is not canonical (expected '{canonical}')")
        return v

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        parse_date(v)
        return v

    @property
    def persisted(self) -> bool:
        return self.backend_id is not None


class Service(BaseModel):
    """Catalog service."""
    id: str = Field(..., description="Backend service id")
    name: str = Field(..., min_length=1, max_length=100)
    duration: int = Field(..., gt=0, le=480, description="Duration in minutes")
    price: float = Field(..., ge=0)
    category: Optional[str] = None
    active: bool = True


class StaffMember(BaseModel):
    """Staff member shown as a column in the day view."""
    id: str
    name: str = Field(..., min_length=1)
    phone_number: str = ""


class Customer(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    phone: str = ""
    email: Optional[str] = None


# Revenue reporting (read-only, camelCase on the wire)

class RevenueMetrics(BaseModel):
    total_revenue: float = Field(0, alias="totalRevenue")
    total_appointments: int = Field(0, alias="totalAppointments")
    avg_transaction: float = Field(0, alias="avgTransaction")
    total_customers: int = Field(0, alias="totalCustomers")

    model_config = ConfigDict(populate_by_name=True)


class RevenueByStaffItem(BaseModel):
    staff_name: str = Field(..., alias="staffName")
    total_revenue: float = Field(0, alias="totalRevenue")
    appointment_count: int = Field(0, alias="appointmentCount")

    model_config = ConfigDict(populate_by_name=True)


class RevenueByCategoryItem(BaseModel):
    category: str
    total_revenue: float = Field(0, alias="totalRevenue")
    service_count: int = Field(0, alias="serviceCount")

    model_config = ConfigDict(populate_by_name=True)


class RevenueTrendItem(BaseModel):
    month: str
    revenue: float = 0
    expenses: float = 0
    appointment_count: int = Field(0, alias="appointmentCount")

    model_config = ConfigDict(populate_by_name=True)
