"""Exclusion constraint preventing overlapping bookings per doctor (PostgreSQL only).

Revision ID: 002
Revises: 001
Create Date: 2026-10-17 00:00:00.000000

"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add the no-overlap exclusion constraint."""
    if op.get_bind().dialect.name != "postgresql":
        return

    # btree_gist lets the uuid equality share a GiST index with the range
    op.execute('CREATE EXTENSION IF NOT EXISTS "btree_gist"')
    op.execute(
        """
        ALTER TABLE appointments
        ADD CONSTRAINT appointments_doctor_no_overlap
        EXCLUDE USING gist (
            doctor_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
        )
        WHERE (status <> 'CANCELLED' AND deleted_at IS NULL)
        """
    )


def downgrade() -> None:
    """Drop the no-overlap exclusion constraint."""
    if op.get_bind().dialect.name != "postgresql":
        return

    op.execute("ALTER TABLE appointments DROP CONSTRAINT IF EXISTS appointments_doctor_no_overlap")
