"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    Uuid,
)

from clinic_scheduler.models.base import UTCDateTime, metadata

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True),
    # References (no cascade: appointments are removed explicitly)
    Column("patient_id", Uuid, ForeignKey("patients.id"), nullable=False),
    Column("doctor_id", Uuid, ForeignKey("doctors.id"), nullable=False),
    # Appointment window, half-open [start_time, end_time)
    Column("start_time", UTCDateTime, nullable=False),
    Column("end_time", UTCDateTime, nullable=False),
    Column("notes", Text, nullable=True),
    # Status management
    Column("status", String(20), nullable=False, server_default="SCHEDULED"),
    Column("cancelled_at", UTCDateTime, nullable=True),
    Column("completed_at", UTCDateTime, nullable=True),
    # Audit fields
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime, nullable=False),
    # Soft delete
    Column("deleted_at", UTCDateTime, nullable=True),
    # Constraints
    CheckConstraint("end_time > start_time", name="appointments_time_range_check"),
    CheckConstraint(
        "status IN ('SCHEDULED', 'COMPLETED', 'CANCELLED')",
        name="appointments_status_check",
    ),
    Index("idx_appointments_patient_id", "patient_id"),
    Index("idx_appointments_doctor_id", "doctor_id"),
    Index("idx_appointments_start_time", "start_time"),
)
