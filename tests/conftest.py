import os
import sys
from collections.abc import AsyncGenerator
from datetime import timedelta

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Load environment variables from .env file
load_dotenv()

from clinic_scheduler.config import settings  # noqa: E402
from clinic_scheduler.core.security import create_access_token  # noqa: E402
from clinic_scheduler.database import (  # noqa: E402
    async_database_url,
    configure_sqlite,
    get_db,
)
from clinic_scheduler.main import app  # noqa: E402
from clinic_scheduler.models import metadata  # noqa: E402
from clinic_scheduler.repositories.doctor_repository import DoctorRepository  # noqa: E402
from clinic_scheduler.repositories.patient_repository import PatientRepository  # noqa: E402

# Test database URL - MUST be different from production
# Defaults to a throwaway SQLite file; point TEST_DATABASE_URL at PostgreSQL to
# exercise row locking
TEST_DATABASE_URL = async_database_url(
    os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test_clinic_scheduler.db")
)

# Additional safety: ensure we're not using production database
if async_database_url(settings.database_url) == TEST_DATABASE_URL:
    print("\n❌ CRITICAL ERROR: Test database URL is same as production database!")
    print("This would DROP all production data during tests.")
    print("Please set TEST_DATABASE_URL to a separate test database in .env")
    sys.exit(1)

# Use NullPool to avoid event loop issues between tests
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,  # Set to True for SQL debugging
    poolclass=NullPool,
)
configure_sqlite(test_engine)

# Create test session factory
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on freshly created tables."""
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)
        await conn.run_sync(metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    # Drop tables after test
    async with test_engine.begin() as conn:
        await conn.run_sync(metadata.drop_all)


@pytest.fixture
def session_factory(db_session: AsyncSession) -> async_sessionmaker[AsyncSession]:
    """Factory for extra sessions, each on its own connection, over the test tables."""
    return TestSessionLocal


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_patient_data() -> dict:
    """Sample patient payload (camelCase, as clients send it)."""
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada.lovelace@example.com",
        "phone": "+44 20 7946 0000",
        "dateOfBirth": "1985-12-10",
        "gender": "female",
    }


@pytest.fixture
def sample_doctor_data() -> dict:
    """Sample doctor payload."""
    return {
        "firstName": "Gregory",
        "lastName": "House",
        "email": "g.house@example.com",
        "phone": "+1 555 010 2000",
        "specialization": "Diagnostic Medicine",
    }


@pytest_asyncio.fixture
async def patient(db_session: AsyncSession) -> dict:
    """Create a patient directly in the database."""
    record = await PatientRepository(db_session).create(
        {
            "first_name": "Pat",
            "last_name": "One",
            "email": "pat.one@example.com",
        }
    )
    await db_session.commit()
    return record


@pytest_asyncio.fixture
async def other_patient(db_session: AsyncSession) -> dict:
    """Create a second patient directly in the database."""
    record = await PatientRepository(db_session).create(
        {
            "first_name": "Pat",
            "last_name": "Two",
            "email": "pat.two@example.com",
        }
    )
    await db_session.commit()
    return record


@pytest_asyncio.fixture
async def doctor(db_session: AsyncSession) -> dict:
    """Create a doctor directly in the database."""
    record = await DoctorRepository(db_session).create(
        {
            "first_name": "Doc",
            "last_name": "One",
            "email": "doc.one@example.com",
            "specialization": "Cardiology",
        }
    )
    await db_session.commit()
    return record


@pytest.fixture
def auth_headers() -> dict:
    """Create authentication headers for protected endpoints."""
    token = create_access_token(
        data={"sub": "test-operator"},
        expires_delta=timedelta(minutes=30),
    )
    return {"Authorization": f"Bearer {token}"}
