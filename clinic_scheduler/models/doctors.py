"""Doctor model definition using SQLAlchemy Core."""

from sqlalchemy import Column, Index, String, Table, Uuid, text

from clinic_scheduler.models.base import UTCDateTime, metadata

doctors = Table(
    "doctors",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("email", String(255), nullable=False),
    Column("phone", String(20)),
    # Professional details
    Column("specialization", String(200), nullable=False, index=True),
    # Metadata
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime, nullable=False),
    # Soft delete
    Column("deleted_at", UTCDateTime, nullable=True),
    Index(
        "uq_doctors_email_active",
        "email",
        unique=True,
        postgresql_where=text("deleted_at IS NULL"),
        sqlite_where=text("deleted_at IS NULL"),
    ),
)
