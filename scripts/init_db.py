"""Script to initialize the database without running migrations."""

import asyncio

from clinic_scheduler.database import engine
from clinic_scheduler.models import metadata


async def init_db() -> None:
    """Initialize the database by creating all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    await engine.dispose()
    url = engine.url.render_as_string(hide_password=True)
    print(f"✓ Database initialized successfully! ({url})")


if __name__ == "__main__":
    asyncio.run(init_db())
