"""Patient endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from clinic_scheduler.dependencies import PatientServiceDep
from clinic_scheduler.schemas.patients import (
    PatientCreate,
    PatientListResponse,
    PatientPatch,
    PatientResponse,
    PatientUpdate,
)

router = APIRouter()


@router.post(
    "",
    response_model=PatientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create patient",
)
async def create_patient(data: PatientCreate, service: PatientServiceDep) -> PatientResponse:
    """
    Register a new patient.

    Fails with 409 when a live patient already uses the email.
    """
    patient = await service.create_patient(data)
    return PatientResponse.model_validate(patient)


@router.get(
    "",
    response_model=PatientListResponse,
    status_code=status.HTTP_200_OK,
    summary="List patients",
)
async def list_patients(
    service: PatientServiceDep,
    q: str | None = Query(None, max_length=200, description="Substring of name or email"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
) -> PatientListResponse:
    """
    List patients.

    - **q**: case-insensitive match on first name, last name or email
    - **page**: 1-based page number
    - **size**: page size (max 100)
    """
    items, total = await service.list_patients(q=q, page=page, size=size)
    return PatientListResponse(
        total=total,
        page=page,
        size=size,
        items=[PatientResponse.model_validate(p) for p in items],
    )


@router.get(
    "/{patient_id}",
    response_model=PatientResponse,
    status_code=status.HTTP_200_OK,
    summary="Get patient by ID",
)
async def get_patient(patient_id: UUID, service: PatientServiceDep) -> PatientResponse:
    """Get a specific patient by ID."""
    patient = await service.get_patient(patient_id)
    return PatientResponse.model_validate(patient)


@router.put(
    "/{patient_id}",
    response_model=PatientResponse,
    status_code=status.HTTP_200_OK,
    summary="Replace patient",
)
async def update_patient(
    patient_id: UUID,
    data: PatientUpdate,
    service: PatientServiceDep,
) -> PatientResponse:
    """Replace every field of a patient."""
    patient = await service.update_patient(patient_id, data)
    return PatientResponse.model_validate(patient)


@router.patch(
    "/{patient_id}",
    response_model=PatientResponse,
    status_code=status.HTTP_200_OK,
    summary="Partially update patient",
)
async def patch_patient(
    patient_id: UUID,
    data: PatientPatch,
    service: PatientServiceDep,
) -> PatientResponse:
    """Update only the fields sent in the request body."""
    patient = await service.patch_patient(patient_id, data)
    return PatientResponse.model_validate(patient)


@router.delete(
    "/{patient_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete patient",
)
async def delete_patient(patient_id: UUID, service: PatientServiceDep) -> None:
    """Soft delete a patient; the row is kept and hidden from reads."""
    await service.delete_patient(patient_id)
