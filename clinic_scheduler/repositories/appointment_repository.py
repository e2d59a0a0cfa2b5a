"""Appointment data access."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, select
from sqlalchemy.sql import ColumnElement

from clinic_scheduler.models.appointments import appointments
from clinic_scheduler.repositories.base import BaseRepository
from clinic_scheduler.schemas.appointments import AppointmentFilters, AppointmentStatus


class AppointmentRepository(BaseRepository):
    """Repository for the ``appointments`` table."""

    table = appointments
    conflict_message = "The appointment conflicts with an existing booking"

    async def find_overlapping(
        self,
        doctor_id: UUID,
        start: datetime,
        end: datetime,
        exclude_appointment_id: UUID | None = None,
    ) -> list[dict]:
        """
        Find active bookings of a doctor that intersect ``[start, end)``.

        Cancelled and soft-deleted appointments never block a slot.
        Back-to-back intervals (one ends exactly when the other starts) do
        not overlap.
        """
        conditions: list[ColumnElement[bool]] = [
            appointments.c.doctor_id == doctor_id,
            appointments.c.status != AppointmentStatus.CANCELLED.value,
            self._live(),
            appointments.c.start_time < end,
            appointments.c.end_time > start,
        ]
        if exclude_appointment_id is not None:
            conditions.append(appointments.c.id != exclude_appointment_id)

        stmt = select(appointments).where(and_(*conditions)).order_by(appointments.c.start_time)
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()]

    async def list(self, filters: AppointmentFilters) -> tuple[list[dict], int]:
        """List live appointments by patient, doctor, status and start window."""
        conditions: list[ColumnElement[bool]] = [self._live()]

        if filters.patient_id:
            conditions.append(appointments.c.patient_id == filters.patient_id)

        if filters.doctor_id:
            conditions.append(appointments.c.doctor_id == filters.doctor_id)

        if filters.status:
            conditions.append(appointments.c.status == filters.status.value)

        if filters.from_time:
            conditions.append(appointments.c.start_time >= filters.from_time)

        if filters.to_time:
            conditions.append(appointments.c.start_time < filters.to_time)

        return await self._paginate(
            conditions,
            [appointments.c.start_time, appointments.c.id],
            filters.page,
            filters.size,
        )
