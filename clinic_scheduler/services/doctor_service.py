"""Doctor service for business logic."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.repositories.doctor_repository import DoctorRepository
from clinic_scheduler.schemas.doctors import DoctorCreate, DoctorUpdate
from clinic_scheduler.services.directory_service import DirectoryService


class DoctorService(DirectoryService):
    """Service for doctor operations."""

    entity = "doctor"

    def __init__(
        self,
        db: AsyncSession,
        doctors: DoctorRepository | None = None,
        email_reuse_after_delete: bool | None = None,
    ):
        """Initialize service with database session and optional repository."""
        super().__init__(db, doctors or DoctorRepository(db), email_reuse_after_delete)

    async def create_doctor(self, data: DoctorCreate) -> dict:
        """Create a new doctor profile."""
        return await self._create(data.model_dump())

    async def get_doctor(self, doctor_id: UUID) -> dict:
        """Get a live doctor by ID."""
        return await self._get_or_404(doctor_id)

    async def update_doctor(self, doctor_id: UUID, data: DoctorUpdate) -> dict:
        """Replace every field of a doctor."""
        return await self._update(doctor_id, data.model_dump())

    async def delete_doctor(self, doctor_id: UUID) -> None:
        """Soft delete a doctor. Existing appointments are kept."""
        await self._delete(doctor_id)

    async def list_doctors(
        self,
        q: str | None = None,
        specialization: str | None = None,
        page: int = 1,
        size: int = 20,
    ) -> tuple[list[dict], int]:
        """List doctors with free-text search, specialization filter and pagination."""
        return await self.repository.list(
            q=q,
            specialization=specialization,
            page=page,
            size=size,
        )
