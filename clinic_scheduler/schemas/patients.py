"""Patient schemas for request/response validation."""

from datetime import date, datetime
from uuid import UUID

from pydantic import ConfigDict, EmailStr, Field, field_validator

from clinic_scheduler.schemas.common import CamelModel, validate_phone


class PatientBase(CamelModel):
    """Base patient schema with common fields."""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(None, max_length=20)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        """Validate phone number format."""
        return validate_phone(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: date | None) -> date | None:
        """Reject birth dates in the future."""
        if v and v > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return v


class PatientCreate(PatientBase):
    """Schema for creating a new patient."""


class PatientUpdate(PatientBase):
    """Schema for replacing a patient (PUT)."""


class PatientPatch(CamelModel):
    """Schema for partially updating a patient (PATCH)."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    date_of_birth: date | None = None
    gender: str | None = Field(None, max_length=20)

    @field_validator("first_name", "last_name", "email")
    @classmethod
    def reject_null(cls, v: str | None) -> str:
        """Required fields may be omitted but not cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        """Validate phone number format."""
        return validate_phone(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: date | None) -> date | None:
        """Reject birth dates in the future."""
        if v and v > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return v


class PatientResponse(PatientBase):
    """Schema for patient response."""

    id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PatientListResponse(CamelModel):
    """Schema for paginated patient list response."""

    total: int
    page: int
    size: int
    items: list[PatientResponse]
