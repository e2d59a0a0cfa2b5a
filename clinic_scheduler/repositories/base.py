"""Common repository plumbing."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import Table, and_, delete, exists, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from clinic_scheduler.core.exceptions import ConflictException


# SQLSTATEs for unique and exclusion violations
CONFLICT_SQLSTATES = frozenset({"23505", "23P01"})


def is_conflict(error: IntegrityError) -> bool:
    """
    Tell duplicate or overlapping rows apart from other integrity failures.

    Foreign key, CHECK and NOT NULL violations are not conflicts.
    """
    sqlstate = getattr(error.orig, "pgcode", None) or getattr(error.orig, "sqlstate", None)
    if sqlstate:
        return sqlstate in CONFLICT_SQLSTATES
    return "UNIQUE constraint failed" in str(error.orig)


def like_pattern(term: str) -> str:
    """Build a substring LIKE pattern with wildcards in ``term`` escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class BaseRepository:
    """CRUD over a single table; rows are returned as plain dicts."""

    table: Table
    conflict_message = "Record conflicts with an existing record"

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    def _live(self) -> ColumnElement[bool]:
        return self.table.c.deleted_at.is_(None)

    async def _execute(self, stmt: Any) -> Any:
        try:
            return await self.db.execute(stmt)
        except IntegrityError as e:
            if is_conflict(e):
                raise ConflictException(self.conflict_message) from e
            raise

    async def create(self, values: dict[str, Any]) -> dict:
        """Insert a row, assigning id and audit timestamps."""
        now = datetime.now(UTC)
        row_values = {"id": uuid4(), "created_at": now, "updated_at": now, **values}
        stmt = insert(self.table).values(**row_values).returning(self.table)
        result = await self._execute(stmt)
        return dict(result.mappings().one())

    async def get(
        self,
        record_id: UUID,
        include_deleted: bool = False,
        for_update: bool = False,
    ) -> dict | None:
        """Fetch a row by id; soft-deleted rows are hidden unless asked for."""
        stmt = select(self.table).where(self.table.c.id == record_id)
        if not include_deleted:
            stmt = stmt.where(self._live())
        if for_update:
            stmt = stmt.with_for_update()

        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def update(self, record_id: UUID, values: dict[str, Any]) -> dict | None:
        """Update a live row and bump ``updated_at``."""
        stmt = (
            update(self.table)
            .where(and_(self.table.c.id == record_id, self._live()))
            .values(**values, updated_at=datetime.now(UTC))
            .returning(self.table)
        )
        result = await self._execute(stmt)
        row = result.mappings().first()
        return dict(row) if row else None

    async def soft_delete(self, record_id: UUID) -> bool:
        """Mark a live row deleted. Returns False if there was nothing to delete."""
        now = datetime.now(UTC)
        stmt = (
            update(self.table)
            .where(and_(self.table.c.id == record_id, self._live()))
            .values(deleted_at=now, updated_at=now)
        )
        result = await self.db.execute(stmt)
        return result.rowcount > 0

    async def hard_delete(self, record_id: UUID) -> bool:
        """Physically remove a row."""
        stmt = delete(self.table).where(self.table.c.id == record_id)
        result = await self._execute(stmt)
        return result.rowcount > 0

    async def _paginate(
        self,
        conditions: list[ColumnElement[bool]],
        order_by: list[Any],
        page: int,
        size: int,
    ) -> tuple[list[dict], int]:
        where = and_(*conditions)

        count_stmt = select(func.count()).select_from(self.table).where(where)
        total_result = await self.db.execute(count_stmt)
        total = total_result.scalar() or 0

        stmt = (
            select(self.table)
            .where(where)
            .order_by(*order_by)
            .limit(size)
            .offset((page - 1) * size)
        )
        result = await self.db.execute(stmt)
        return [dict(row) for row in result.mappings().all()], total


class PersonRepository(BaseRepository):
    """Shared queries for the patient and doctor directories."""

    async def exists_by_email(
        self,
        email: str,
        exclude_id: UUID | None = None,
        include_deleted: bool = False,
    ) -> bool:
        """Check whether a record already uses ``email`` (case-insensitive)."""
        conditions: list[ColumnElement[bool]] = [
            func.lower(self.table.c.email) == email.lower(),
        ]
        if not include_deleted:
            conditions.append(self._live())
        if exclude_id is not None:
            conditions.append(self.table.c.id != exclude_id)

        result = await self.db.execute(select(exists().where(and_(*conditions))))
        return bool(result.scalar())

    def _search_conditions(self, q: str | None) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = [self._live()]
        if q and q.strip():
            pattern = like_pattern(q.strip())
            conditions.append(
                or_(
                    self.table.c.first_name.ilike(pattern, escape="\\"),
                    self.table.c.last_name.ilike(pattern, escape="\\"),
                    self.table.c.email.ilike(pattern, escape="\\"),
                )
            )
        return conditions

    def _default_order(self) -> list[Any]:
        return [self.table.c.last_name, self.table.c.first_name, self.table.c.id]
