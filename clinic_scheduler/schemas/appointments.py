"""Appointment schemas for request/response validation."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import ConfigDict, Field

from clinic_scheduler.schemas.common import CamelModel


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AppointmentBase(CamelModel):
    """Base appointment schema with common fields."""

    patient_id: UUID
    doctor_id: UUID
    start_time: datetime
    end_time: datetime
    notes: str | None = Field(None, max_length=2000)


class AppointmentCreate(AppointmentBase):
    """Schema for booking a new appointment."""


class AppointmentUpdate(AppointmentBase):
    """Schema for rescheduling an appointment (PUT)."""


class AppointmentStatusUpdate(CamelModel):
    """Schema for updating appointment status."""

    status: AppointmentStatus


class AppointmentResponse(AppointmentBase):
    """Schema for appointment response."""

    id: UUID
    status: AppointmentStatus
    created_at: datetime
    updated_at: datetime
    cancelled_at: datetime | None = None
    completed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class AppointmentListResponse(CamelModel):
    """Schema for paginated appointment list response."""

    total: int
    page: int
    size: int
    items: list[AppointmentResponse]


class AppointmentFilters(CamelModel):
    """Schema for appointment filtering."""

    patient_id: UUID | None = None
    doctor_id: UUID | None = None
    status: AppointmentStatus | None = None
    from_time: datetime | None = None
    to_time: datetime | None = None
    page: int = Field(default=1, ge=1)
    size: int = Field(default=20, ge=1, le=100)
