"""FastAPI dependencies."""

from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.config import settings
from clinic_scheduler.core.exceptions import UnauthorizedException
from clinic_scheduler.core.security import decode_access_token
from clinic_scheduler.database import get_db
from clinic_scheduler.services.doctor_service import DoctorService
from clinic_scheduler.services.patient_service import PatientService
from clinic_scheduler.services.scheduling_service import SchedulingService

# Security; missing credentials are reported by require_auth, not by HTTPBearer
security = HTTPBearer(auto_error=False)


async def require_auth(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict[str, Any] | None:
    """
    Validate the bearer token when security is enabled.

    Args:
        credentials: Bearer token credentials, if any were sent

    Returns:
        Decoded token payload, or None when security is disabled

    Raises:
        UnauthorizedException: If the token is missing, invalid or expired
    """
    if not settings.security_enabled:
        return None

    if credentials is None:
        raise UnauthorizedException("Missing bearer token")

    payload = decode_access_token(credentials.credentials)
    if payload is None or not isinstance(payload.get("sub"), str):
        raise UnauthorizedException("Could not validate credentials")

    return payload


def get_patient_service(db: Annotated[AsyncSession, Depends(get_db)]) -> PatientService:
    """Get patient service instance."""
    return PatientService(db)


def get_doctor_service(db: Annotated[AsyncSession, Depends(get_db)]) -> DoctorService:
    """Get doctor service instance."""
    return DoctorService(db)


def get_scheduling_service(db: Annotated[AsyncSession, Depends(get_db)]) -> SchedulingService:
    """Get scheduling service instance."""
    return SchedulingService(db)


# Type aliases for dependency injection
PatientServiceDep = Annotated[PatientService, Depends(get_patient_service)]
DoctorServiceDep = Annotated[DoctorService, Depends(get_doctor_service)]
SchedulingServiceDep = Annotated[SchedulingService, Depends(get_scheduling_service)]
