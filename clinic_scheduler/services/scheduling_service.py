"""Appointment scheduling: booking, rescheduling and status transitions."""

from datetime import UTC, datetime
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.exceptions import (
    ConflictException,
    InvalidStateException,
    NotFoundException,
    ValidationException,
)
from clinic_scheduler.database import unit_of_work
from clinic_scheduler.repositories.appointment_repository import AppointmentRepository
from clinic_scheduler.repositories.doctor_repository import DoctorRepository
from clinic_scheduler.repositories.patient_repository import PatientRepository
from clinic_scheduler.schemas.appointments import AppointmentFilters, AppointmentStatus

logger = structlog.get_logger()

# Allowed status transitions; anything not listed is illegal
TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


def as_utc(value: datetime) -> datetime:
    """Normalise a datetime to UTC; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    """Check whether ``current -> target`` is a legal status change."""
    return target in TRANSITIONS.get(current, frozenset())


class SchedulingService:
    """
    Enforces appointment invariants before anything is persisted.

    - an appointment ends after it starts
    - patient and doctor exist and are not soft-deleted
    - a doctor never has two overlapping non-cancelled appointments
    - SCHEDULED -> COMPLETED | CANCELLED, with terminal end states
    """

    def __init__(
        self,
        db: AsyncSession,
        appointments: AppointmentRepository | None = None,
        patients: PatientRepository | None = None,
        doctors: DoctorRepository | None = None,
    ):
        """Initialize service with database session and repositories."""
        self.db = db
        self.appointments = appointments or AppointmentRepository(db)
        self.patients = patients or PatientRepository(db)
        self.doctors = doctors or DoctorRepository(db)

    @staticmethod
    def _validate_range(start_time: datetime, end_time: datetime) -> tuple[datetime, datetime]:
        start_time, end_time = as_utc(start_time), as_utc(end_time)
        if end_time <= start_time:
            raise ValidationException("End time must be after start time")
        return start_time, end_time

    async def _ensure_participants(self, patient_id: UUID, doctor_id: UUID) -> None:
        patient = await self.patients.get(patient_id)
        if not patient:
            raise NotFoundException(f"Patient {patient_id} not found")

        # Locking the doctor row serializes concurrent bookings for that doctor
        doctor = await self.doctors.lock(doctor_id)
        if not doctor:
            raise NotFoundException(f"Doctor {doctor_id} not found")

    async def _ensure_slot_free(
        self,
        doctor_id: UUID,
        start_time: datetime,
        end_time: datetime,
        exclude_appointment_id: UUID | None = None,
    ) -> None:
        overlapping = await self.appointments.find_overlapping(
            doctor_id,
            start_time,
            end_time,
            exclude_appointment_id=exclude_appointment_id,
        )
        if overlapping:
            logger.info(
                "appointment_conflict",
                doctor_id=str(doctor_id),
                start_time=start_time.isoformat(),
                end_time=end_time.isoformat(),
                conflicting_ids=[str(a["id"]) for a in overlapping],
            )
            raise ConflictException(
                f"Doctor {doctor_id} already has an appointment between "
                f"{start_time.isoformat()} and {end_time.isoformat()}"
            )

    async def _get_or_404(self, appointment_id: UUID, for_update: bool = False) -> dict:
        appointment = await self.appointments.get(appointment_id, for_update=for_update)
        if not appointment:
            raise NotFoundException(f"Appointment {appointment_id} not found")
        return appointment

    async def create_appointment(
        self,
        patient_id: UUID,
        doctor_id: UUID,
        start_time: datetime,
        end_time: datetime,
        notes: str | None = None,
    ) -> dict:
        """
        Book a new appointment.

        Args:
            patient_id: Patient being seen
            doctor_id: Doctor being booked
            start_time: Start of the slot (inclusive)
            end_time: End of the slot (exclusive)
            notes: Free-text notes

        Returns:
            Created appointment with status SCHEDULED

        Raises:
            ValidationException: If end_time is not after start_time
            NotFoundException: If patient or doctor is unknown or deleted
            ConflictException: If the doctor is already booked in that window
        """
        start_time, end_time = self._validate_range(start_time, end_time)

        async with unit_of_work(self.db):
            await self._ensure_participants(patient_id, doctor_id)
            await self._ensure_slot_free(doctor_id, start_time, end_time)
            appointment = await self.appointments.create(
                {
                    "patient_id": patient_id,
                    "doctor_id": doctor_id,
                    "start_time": start_time,
                    "end_time": end_time,
                    "notes": notes,
                    "status": AppointmentStatus.SCHEDULED.value,
                }
            )

        logger.info(
            "appointment_created",
            appointment_id=str(appointment["id"]),
            doctor_id=str(doctor_id),
            patient_id=str(patient_id),
        )
        return appointment

    async def update_appointment(
        self,
        appointment_id: UUID,
        patient_id: UUID,
        doctor_id: UUID,
        start_time: datetime,
        end_time: datetime,
        notes: str | None = None,
    ) -> dict:
        """
        Reschedule or reassign an appointment.

        Only SCHEDULED appointments can change. The overlap check ignores the
        appointment being updated, so shifting it within its own slot works.

        Raises:
            NotFoundException: If the appointment, patient or doctor is missing
            InvalidStateException: If the appointment is COMPLETED or CANCELLED
            ValidationException: If end_time is not after start_time
            ConflictException: If the new window overlaps another booking
        """
        start_time, end_time = self._validate_range(start_time, end_time)

        async with unit_of_work(self.db):
            current = await self._get_or_404(appointment_id, for_update=True)
            if current["status"] != AppointmentStatus.SCHEDULED.value:
                raise InvalidStateException(
                    f"Cannot modify an appointment in status {current['status']}"
                )

            await self._ensure_participants(patient_id, doctor_id)
            await self._ensure_slot_free(
                doctor_id,
                start_time,
                end_time,
                exclude_appointment_id=appointment_id,
            )
            appointment = await self.appointments.update(
                appointment_id,
                {
                    "patient_id": patient_id,
                    "doctor_id": doctor_id,
                    "start_time": start_time,
                    "end_time": end_time,
                    "notes": notes,
                },
            )
            if not appointment:
                raise NotFoundException(f"Appointment {appointment_id} not found")

        logger.info("appointment_updated", appointment_id=str(appointment_id))
        return appointment

    async def _transition(self, appointment_id: UUID, target: AppointmentStatus) -> dict:
        async with unit_of_work(self.db):
            current = await self._get_or_404(appointment_id, for_update=True)
            current_status = AppointmentStatus(current["status"])
            if not can_transition(current_status, target):
                raise InvalidStateException(
                    f"Cannot change appointment status from {current_status.value} "
                    f"to {target.value}"
                )

            values: dict = {"status": target.value}
            now = datetime.now(UTC)
            if target == AppointmentStatus.CANCELLED:
                values["cancelled_at"] = now
            elif target == AppointmentStatus.COMPLETED:
                values["completed_at"] = now

            appointment = await self.appointments.update(appointment_id, values)
            if not appointment:
                raise NotFoundException(f"Appointment {appointment_id} not found")

        logger.info(
            "appointment_status_changed",
            appointment_id=str(appointment_id),
            old_status=current_status.value,
            new_status=target.value,
        )
        return appointment

    async def cancel_appointment(self, appointment_id: UUID) -> dict:
        """Cancel a scheduled appointment, freeing its slot."""
        return await self._transition(appointment_id, AppointmentStatus.CANCELLED)

    async def complete_appointment(self, appointment_id: UUID) -> dict:
        """Mark a scheduled appointment as completed."""
        return await self._transition(appointment_id, AppointmentStatus.COMPLETED)

    async def change_status(self, appointment_id: UUID, status: AppointmentStatus) -> dict:
        """Apply a status change requested through the API."""
        return await self._transition(appointment_id, status)

    async def get_appointment(self, appointment_id: UUID) -> dict:
        """Get appointment by ID."""
        return await self._get_or_404(appointment_id)

    async def list_appointments(self, filters: AppointmentFilters) -> tuple[list[dict], int]:
        """List appointments with filtering and pagination."""
        return await self.appointments.list(filters)

    async def delete_appointment(self, appointment_id: UUID, hard_delete: bool = False) -> None:
        """
        Delete an appointment (soft delete by default).

        Either way the appointment stops blocking its slot.
        """
        async with unit_of_work(self.db):
            await self._get_or_404(appointment_id, for_update=True)
            if hard_delete:
                await self.appointments.hard_delete(appointment_id)
            else:
                await self.appointments.soft_delete(appointment_id)

        logger.info(
            "appointment_deleted",
            appointment_id=str(appointment_id),
            hard_delete=hard_delete,
        )
