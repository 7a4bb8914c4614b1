"""
Shared fixtures: an in-memory database wired into the FastAPI app, an
HTTP client driving the app over ASGI, and signed tokens for each role.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from simhire.auth import create_access_token
from simhire.database import Base, get_db
from simhire.main import app
from simhire.models import Internship, Job

JOB_DESCRIPTION = (
    "Build and maintain the services behind our hiring platform, "
    "working closely with product and design."
)
INTERNSHIP_DESCRIPTION = (
    "Join the engineering team for three months and ship real features "
    "with guidance from a dedicated mentor."
)


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def company_headers():
    return bearer(create_access_token("company-1", "company"))


@pytest.fixture
def other_company_headers():
    return bearer(create_access_token("company-2", "company"))


@pytest.fixture
def candidate_headers():
    return bearer(create_access_token("candidate-1", "candidate"))


@pytest.fixture
def other_candidate_headers():
    return bearer(create_access_token("candidate-2", "candidate"))


@pytest.fixture
def job_payload():
    return {
        "title": "Backend Engineer",
        "department": "Engineering",
        "employment_type": "full-time",
        "experience_level": "mid",
        "location_mode": "hybrid",
        "location": "Jakarta",
        "description": JOB_DESCRIPTION,
        "requirements": ["3+ years with Python"],
        "skills": ["Python", "FastAPI"],
        "salary_min": 10_000_000,
        "salary_max": 15_000_000,
    }


@pytest.fixture
def make_job(db):
    async def _make(**overrides) -> Job:
        fields = {
            "company_id": "company-1",
            "title": "Backend Engineer",
            "department": "Engineering",
            "employment_type": "full-time",
            "experience_level": "mid",
            "location_mode": "hybrid",
            "location": "Jakarta",
            "description": JOB_DESCRIPTION,
            "requirements": ["3+ years with Python"],
            "skills": ["Python", "FastAPI"],
            "status": "open",
        }
        fields.update(overrides)
        job = Job(**fields)
        db.add(job)
        await db.commit()
        await db.refresh(job)
        return job

    return _make


@pytest.fixture
def make_internship(db):
    async def _make(**overrides) -> Internship:
        fields = {
            "company_id": "company-1",
            "position": "Frontend Intern",
            "duration": "3 months",
            "is_paid": True,
            "description": INTERNSHIP_DESCRIPTION,
            "requirements": ["Basic React"],
            "tags": ["react"],
            "location": "Bandung",
            "status": "active",
        }
        fields.update(overrides)
        internship = Internship(**fields)
        db.add(internship)
        await db.commit()
        await db.refresh(internship)
        return internship

    return _make
