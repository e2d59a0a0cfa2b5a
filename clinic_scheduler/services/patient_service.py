"""Patient service for business logic."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.repositories.patient_repository import PatientRepository
from clinic_scheduler.schemas.patients import PatientCreate, PatientPatch, PatientUpdate
from clinic_scheduler.services.directory_service import DirectoryService


class PatientService(DirectoryService):
    """Service for patient operations."""

    entity = "patient"

    def __init__(
        self,
        db: AsyncSession,
        patients: PatientRepository | None = None,
        email_reuse_after_delete: bool | None = None,
    ):
        """Initialize service with database session and optional repository."""
        super().__init__(db, patients or PatientRepository(db), email_reuse_after_delete)

    async def create_patient(self, data: PatientCreate) -> dict:
        """Register a new patient."""
        return await self._create(data.model_dump())

    async def get_patient(self, patient_id: UUID) -> dict:
        """
        Get a live patient by ID.

        Raises:
            NotFoundException: If the patient is missing or soft-deleted
        """
        return await self._get_or_404(patient_id)

    async def update_patient(self, patient_id: UUID, data: PatientUpdate) -> dict:
        """Replace every field of a patient."""
        return await self._update(patient_id, data.model_dump())

    async def patch_patient(self, patient_id: UUID, data: PatientPatch) -> dict:
        """Update only the fields present in the request."""
        return await self._update(patient_id, data.model_dump(exclude_unset=True))

    async def delete_patient(self, patient_id: UUID) -> None:
        """Soft delete a patient."""
        await self._delete(patient_id)

    async def list_patients(
        self,
        q: str | None = None,
        page: int = 1,
        size: int = 20,
    ) -> tuple[list[dict], int]:
        """List patients with free-text search and pagination."""
        return await self.repository.list(q=q, page=page, size=size)
