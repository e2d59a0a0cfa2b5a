"""Doctor data access."""

from uuid import UUID

from clinic_scheduler.models.doctors import doctors
from clinic_scheduler.repositories.base import PersonRepository, like_pattern


class DoctorRepository(PersonRepository):
    """Repository for the ``doctors`` table."""

    table = doctors
    conflict_message = "A doctor with this email already exists"

    async def lock(self, doctor_id: UUID) -> dict | None:
        """
        Fetch a live doctor with a row lock held until the transaction ends.

        Bookings for one doctor serialize on this lock. SQLite has no row
        locks and serializes writers on its own.
        """
        return await self.get(doctor_id, for_update=True)

    async def list(
        self,
        q: str | None = None,
        specialization: str | None = None,
        page: int = 1,
        size: int = 20,
    ) -> tuple[list[dict], int]:
        """List live doctors matching ``q`` and an optional specialization."""
        conditions = self._search_conditions(q)
        if specialization:
            conditions.append(
                doctors.c.specialization.ilike(like_pattern(specialization), escape="\\")
            )
        return await self._paginate(conditions, self._default_order(), page, size)
