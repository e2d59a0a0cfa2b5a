"""Patient data access."""

from clinic_scheduler.models.patients import patients
from clinic_scheduler.repositories.base import PersonRepository


class PatientRepository(PersonRepository):
    """Repository for the ``patients`` table."""

    table = patients
    conflict_message = "A patient with this email already exists"

    async def list(
        self,
        q: str | None = None,
        page: int = 1,
        size: int = 20,
    ) -> tuple[list[dict], int]:
        """List live patients matching ``q`` in name or email."""
        return await self._paginate(self._search_conditions(q), self._default_order(), page, size)
