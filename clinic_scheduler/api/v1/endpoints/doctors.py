"""Doctor management endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from clinic_scheduler.dependencies import DoctorServiceDep
from clinic_scheduler.schemas.doctors import (
    DoctorCreate,
    DoctorListResponse,
    DoctorResponse,
    DoctorUpdate,
)

router = APIRouter()


@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(data: DoctorCreate, service: DoctorServiceDep) -> DoctorResponse:
    """
    Create a new doctor profile.

    - **firstName** / **lastName**: Doctor's name
    - **email**: Contact email (unique among active doctors)
    - **phone**: Optional phone number
    - **specialization**: Primary medical specialization
    """
    doctor = await service.create_doctor(data)
    return DoctorResponse.model_validate(doctor)


@router.get("", response_model=DoctorListResponse)
async def list_doctors(
    service: DoctorServiceDep,
    q: str | None = Query(None, max_length=200, description="Substring of name or email"),
    specialization: str | None = Query(None, description="Filter by specialization"),
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(20, ge=1, le=100, description="Number of records to return"),
) -> DoctorListResponse:
    """List doctors with optional search and specialization filter."""
    items, total = await service.list_doctors(
        q=q,
        specialization=specialization,
        page=page,
        size=size,
    )
    return DoctorListResponse(
        total=total,
        page=page,
        size=size,
        items=[DoctorResponse.model_validate(d) for d in items],
    )


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(doctor_id: UUID, service: DoctorServiceDep) -> DoctorResponse:
    """Get doctor by ID."""
    doctor = await service.get_doctor(doctor_id)
    return DoctorResponse.model_validate(doctor)


@router.put("/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: UUID,
    data: DoctorUpdate,
    service: DoctorServiceDep,
) -> DoctorResponse:
    """Replace doctor information."""
    doctor = await service.update_doctor(doctor_id, data)
    return DoctorResponse.model_validate(doctor)


@router.delete("/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_doctor(doctor_id: UUID, service: DoctorServiceDep) -> None:
    """Soft delete a doctor. New bookings with this doctor are rejected afterwards."""
    await service.delete_doctor(doctor_id)
