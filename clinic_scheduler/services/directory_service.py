"""Shared create/read/update/delete flow for the patient and doctor directories."""

from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.config import settings
from clinic_scheduler.core.exceptions import ConflictException, NotFoundException
from clinic_scheduler.database import unit_of_work
from clinic_scheduler.repositories.base import PersonRepository

logger = structlog.get_logger()


class DirectoryService:
    """Base service for people records identified by a unique email."""

    entity = "record"

    def __init__(
        self,
        db: AsyncSession,
        repository: PersonRepository,
        email_reuse_after_delete: bool | None = None,
    ):
        """Initialize service with database session and repository."""
        self.db = db
        self.repository = repository
        if email_reuse_after_delete is None:
            email_reuse_after_delete = settings.email_reuse_after_delete
        self.email_reuse_after_delete = email_reuse_after_delete

    async def _ensure_email_available(self, email: str, exclude_id: UUID | None = None) -> None:
        taken = await self.repository.exists_by_email(
            email,
            exclude_id=exclude_id,
            include_deleted=not self.email_reuse_after_delete,
        )
        if taken:
            logger.info(f"{self.entity}_email_conflict", email=email)
            raise ConflictException(f"A {self.entity} with email '{email}' already exists")

    @staticmethod
    def _normalize(values: dict[str, Any]) -> dict[str, Any]:
        if values.get("email"):
            values["email"] = values["email"].strip().lower()
        return values

    async def _get_or_404(self, record_id: UUID) -> dict:
        record = await self.repository.get(record_id)
        if not record:
            raise NotFoundException(f"{self.entity.capitalize()} {record_id} not found")
        return record

    async def _create(self, values: dict[str, Any]) -> dict:
        values = self._normalize(values)
        async with unit_of_work(self.db):
            await self._ensure_email_available(values["email"])
            record = await self.repository.create(values)

        logger.info(f"{self.entity}_created", **{f"{self.entity}_id": str(record["id"])})
        return record

    async def _update(self, record_id: UUID, values: dict[str, Any]) -> dict:
        values = self._normalize(values)
        async with unit_of_work(self.db):
            current = await self._get_or_404(record_id)
            if not values:
                return current

            if values.get("email") and values["email"] != current["email"]:
                await self._ensure_email_available(values["email"], exclude_id=record_id)

            record = await self.repository.update(record_id, values)
            if not record:
                raise NotFoundException(f"{self.entity.capitalize()} {record_id} not found")

        logger.info(f"{self.entity}_updated", **{f"{self.entity}_id": str(record_id)})
        return record

    async def _delete(self, record_id: UUID) -> None:
        async with unit_of_work(self.db):
            deleted = await self.repository.soft_delete(record_id)
            if not deleted:
                raise NotFoundException(f"{self.entity.capitalize()} {record_id} not found")

        logger.info(f"{self.entity}_deleted", **{f"{self.entity}_id": str(record_id)})
