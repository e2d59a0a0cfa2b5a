"""Data access layer: plain-dict repositories over SQLAlchemy Core tables."""

from clinic_scheduler.repositories.appointment_repository import AppointmentRepository
from clinic_scheduler.repositories.doctor_repository import DoctorRepository
from clinic_scheduler.repositories.patient_repository import PatientRepository

__all__ = [
    "AppointmentRepository",
    "DoctorRepository",
    "PatientRepository",
]
