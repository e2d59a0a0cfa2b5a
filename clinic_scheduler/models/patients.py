"""Patient model definition using SQLAlchemy Core."""

from sqlalchemy import Column, Date, Index, String, Table, Uuid, text

from clinic_scheduler.models.base import UTCDateTime, metadata

patients = Table(
    "patients",
    metadata,
    Column("id", Uuid, primary_key=True),
    # Personal information
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("email", String(255), nullable=False),
    Column("phone", String(20)),
    Column("date_of_birth", Date),
    Column("gender", String(20)),
    # Metadata
    Column("created_at", UTCDateTime, nullable=False),
    Column("updated_at", UTCDateTime, nullable=False),
    # Soft delete
    Column("deleted_at", UTCDateTime, nullable=True),
    # Email is unique among live rows only
    Index(
        "uq_patients_email_active",
        "email",
        unique=True,
        postgresql_where=text("deleted_at IS NULL"),
        sqlite_where=text("deleted_at IS NULL"),
    ),
    Index("idx_patients_last_name", "last_name"),
)
