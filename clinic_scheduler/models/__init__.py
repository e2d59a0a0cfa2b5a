"""Database models."""

from clinic_scheduler.models.appointments import appointments
from clinic_scheduler.models.base import metadata
from clinic_scheduler.models.doctors import doctors
from clinic_scheduler.models.patients import patients

__all__ = [
    "appointments",
    "doctors",
    "metadata",
    "patients",
]
