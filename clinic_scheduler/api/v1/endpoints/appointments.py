"""Appointment endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Query, status

from clinic_scheduler.dependencies import SchedulingServiceDep
from clinic_scheduler.schemas.appointments import (
    AppointmentCreate,
    AppointmentFilters,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)

router = APIRouter()


@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    service: SchedulingServiceDep,
) -> AppointmentResponse:
    """
    Book a new appointment.

    Args:
        data: Appointment creation data
        service: Scheduling service

    Returns:
        Created appointment (status SCHEDULED)
    """
    appointment = await service.create_appointment(
        patient_id=data.patient_id,
        doctor_id=data.doctor_id,
        start_time=data.start_time,
        end_time=data.end_time,
        notes=data.notes,
    )
    return AppointmentResponse.model_validate(appointment)


@router.get(
    "",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    summary="List appointments",
)
async def list_appointments(
    service: SchedulingServiceDep,
    patient_id: UUID | None = Query(None, alias="patientId"),
    doctor_id: UUID | None = Query(None, alias="doctorId"),
    from_time: datetime | None = Query(None, alias="from"),
    to_time: datetime | None = Query(None, alias="to"),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
) -> AppointmentListResponse:
    """
    List appointments with filtering.

    Args:
        service: Scheduling service
        patient_id: Filter by patient ID
        doctor_id: Filter by doctor ID
        from_time: Appointments starting at or after this instant
        to_time: Appointments starting before this instant
        status_filter: Filter by status
        page: Page number
        size: Items per page

    Returns:
        Paginated list of appointments
    """
    filters = AppointmentFilters(
        patient_id=patient_id,
        doctor_id=doctor_id,
        from_time=from_time,
        to_time=to_time,
        status=status_filter,
        page=page,
        size=size,
    )

    items, total = await service.list_appointments(filters)
    return AppointmentListResponse(
        total=total,
        page=page,
        size=size,
        items=[AppointmentResponse.model_validate(a) for a in items],
    )


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    service: SchedulingServiceDep,
) -> AppointmentResponse:
    """Get a specific appointment by ID."""
    appointment = await service.get_appointment(appointment_id)
    return AppointmentResponse.model_validate(appointment)


@router.put(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Reschedule appointment",
)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    service: SchedulingServiceDep,
) -> AppointmentResponse:
    """
    Reschedule or reassign a scheduled appointment.

    Returns 409 when the new window overlaps another booking of the doctor,
    or when the appointment is already completed or cancelled.
    """
    appointment = await service.update_appointment(
        appointment_id,
        patient_id=data.patient_id,
        doctor_id=data.doctor_id,
        start_time=data.start_time,
        end_time=data.end_time,
        notes=data.notes,
    )
    return AppointmentResponse.model_validate(appointment)


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Update appointment status",
)
async def update_appointment_status(
    appointment_id: UUID,
    data: AppointmentStatusUpdate,
    service: SchedulingServiceDep,
) -> AppointmentResponse:
    """Move a scheduled appointment to COMPLETED or CANCELLED."""
    appointment = await service.change_status(appointment_id, data.status)
    return AppointmentResponse.model_validate(appointment)


@router.post(
    "/{appointment_id}/cancel",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Cancel appointment",
)
async def cancel_appointment(
    appointment_id: UUID,
    service: SchedulingServiceDep,
) -> AppointmentResponse:
    """Cancel a scheduled appointment; its slot becomes bookable again."""
    appointment = await service.cancel_appointment(appointment_id)
    return AppointmentResponse.model_validate(appointment)


@router.post(
    "/{appointment_id}/complete",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Complete appointment",
)
async def complete_appointment(
    appointment_id: UUID,
    service: SchedulingServiceDep,
) -> AppointmentResponse:
    """Mark a scheduled appointment as completed."""
    appointment = await service.complete_appointment(appointment_id)
    return AppointmentResponse.model_validate(appointment)


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete appointment",
)
async def delete_appointment(
    appointment_id: UUID,
    service: SchedulingServiceDep,
    hard_delete: bool = Query(False),
) -> None:
    """
    Delete an appointment (soft delete by default).

    Args:
        appointment_id: Appointment ID
        service: Scheduling service
        hard_delete: If true, permanently delete the record
    """
    await service.delete_appointment(appointment_id, hard_delete)
