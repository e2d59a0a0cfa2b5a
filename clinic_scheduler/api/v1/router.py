"""API v1 router configuration."""

from fastapi import APIRouter, Depends

from clinic_scheduler.api.v1.endpoints import appointments, doctors, health, patients
from clinic_scheduler.dependencies import require_auth

api_router = APIRouter()

# Enforced only when SECURITY_ENABLED is set
protected = [Depends(require_auth)]

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(
    patients.router, prefix="/patients", tags=["Patients"], dependencies=protected
)
api_router.include_router(
    doctors.router, prefix="/doctors", tags=["Doctors"], dependencies=protected
)
api_router.include_router(
    appointments.router, prefix="/appointments", tags=["Appointments"], dependencies=protected
)
