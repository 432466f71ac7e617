"""
Pytest Configuration and Fixtures

Shared test fixtures for unit and API tests.
"""

import os

# The app engine is built at import time; default it to an in-memory database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import configure_mappers  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from gubaye.core.database import get_db  # noqa: E402
from gubaye.core.models import Base, Job, Student  # noqa: E402
from gubaye.main import app  # noqa: E402

# Ensure all mappers are configured
configure_mappers()


@pytest.fixture
async def async_engine():
    """Create async engine for testing, with a fresh schema per test."""
    database_url = os.environ["DATABASE_URL"]
    if database_url.startswith("sqlite"):
        engine = create_async_engine(
            database_url, connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    else:
        engine = create_async_engine(database_url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine) -> AsyncSession:
    """Create database session for testing."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncClient:
    """Create test client with database dependency override."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_student(db_session: AsyncSession):
    """Factory creating persisted students."""
    counter = {"n": 0}

    async def _make(
        first_name: str = "Abebe",
        last_name: str = "Kebede",
        gender: str = "male",
        batch: str | None = "2023/2024",
        number_of_jobs: int = 0,
        is_active: bool = True,
    ) -> Student:
        counter["n"] += 1
        student = Student(
            first_name=first_name,
            last_name=last_name,
            gender=gender,
            batch=batch,
            giby_gubaye_id=f"GG-{counter['n']:04d}",
            number_of_jobs=number_of_jobs,
            is_active=is_active,
        )
        db_session.add(student)
        await db_session.commit()
        await db_session.refresh(student)
        return student

    return _make


@pytest.fixture
def make_job(db_session: AsyncSession):
    """Factory creating persisted jobs (does not touch the student's job count)."""

    async def _make(
        student: Student, sub_class: str | None = None, job_type: str | None = None
    ) -> Job:
        job = Job(student_id=student.id, sub_class=sub_class, type=job_type)
        db_session.add(job)
        await db_session.commit()
        await db_session.refresh(job)
        return job

    return _make
