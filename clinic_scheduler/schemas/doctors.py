"""Doctor schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, EmailStr, Field, field_validator

from clinic_scheduler.schemas.common import CamelModel, validate_phone


class DoctorBase(CamelModel):
    """Base schema for doctor."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=20)
    specialization: str = Field(..., min_length=1, max_length=200)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        """Validate phone number format."""
        return validate_phone(v)


class DoctorCreate(DoctorBase):
    """Schema for creating a doctor."""


class DoctorUpdate(DoctorBase):
    """Schema for replacing a doctor (PUT)."""


class DoctorResponse(DoctorBase):
    """Doctor response schema."""

    id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DoctorListResponse(CamelModel):
    """Schema for paginated doctor list response."""

    total: int
    page: int
    size: int
    items: list[DoctorResponse]
