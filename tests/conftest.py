"""
Pytest fixtures for portal tests.
"""

import os
import tempfile

# Keep imports of src.database from pointing at a developer database
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'data_portal_test_default.db')}",
)
os.environ.setdefault("EXPORT_API_KEY", "")

from typing import AsyncGenerator, Callable, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.kernel.identity.jwt import JWTManager, create_access_token
from src.kernel.models.base import Base
from src.kernel.models.entry import Entry, EntryKind
from src.kernel.models.role_assignment import RoleAssignment


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a throwaway SQLite database for one test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def assign_roles(db_session: AsyncSession) -> Callable:
    """Write role rows directly, bypassing admin checks."""

    async def _assign(**roles: str) -> None:
        for email, role in roles.items():
            db_session.add(RoleAssignment(email=email, role=role))
        await db_session.commit()

    return _assign


@pytest.fixture
def make_entry(db_session: AsyncSession) -> Callable:
    """Store an entry with an arbitrary raw status (test setup only)."""

    async def _make(
        created_by: str = "alice",
        status: Optional[str] = "draft",
        kind: EntryKind = EntryKind.RESEARCH,
        payload: Optional[dict] = None,
    ) -> Entry:
        entry = Entry(
            kind=kind.value,
            status=status,
            created_by=created_by,
            payload=payload or {},
        )
        db_session.add(entry)
        await db_session.commit()
        return entry

    return _make


# Standard three-role cast used across tests
STAFF = {
    "head@uni.edu": "department_head",
    "director@uni.edu": "academic_director",
    "admin@uni.edu": "admin",
}


@pytest_asyncio.fixture
async def staff(assign_roles) -> dict:
    await assign_roles(**STAFF)
    return STAFF


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create a JWT manager for tests."""
    return JWTManager(
        secret_key="test-secret-key-for-testing-only",
        algorithm="HS256",
        access_token_expire_minutes=30,
    )


@pytest.fixture
def auth_headers_for() -> Callable[[str], dict]:
    """Bearer headers for any identity, signed with the app's settings."""

    def _headers(email: str) -> dict:
        token = create_access_token(email)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, bound to the test database."""
    from src.database import get_db, session_scope
    from src.main import app

    async def _get_test_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_scope(session_factory) as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# Sample payloads

@pytest.fixture
def research_payload() -> dict:
    return {
        "title": "Federated Learning for Healthcare Analytics",
        "authors": "Jean-Luc Martin",
        "publication_type": "working_paper",
        "year": "2026",
        "abstract": "A federated approach to training models across hospitals.",
        "keywords": "Federated Learning, Privacy",
        "department": "AI & Data Science",
    }


@pytest.fixture
def ranking_payload() -> dict:
    return {
        "ranking_body": "Eduniversal",
        "program_name": "Bachelor in AI & Management",
        "year": "2025",
        "rank": "8",
        "previous_rank": "12",
        "category": "Undergraduate AI Programs",
    }


@pytest.fixture
def partnership_payload() -> dict:
    return {
        "partner_name": "ETH Zurich",
        "partner_type": "academic",
        "country": "Switzerland",
        "strategic_objectives": "Student exchange and joint research",
        "start_date": "2026-03-01",
        "contact_person": "Dr. Hans Mueller",
        "contact_email": "h.mueller@ethz.ch",
        "description": "Academic partnership on responsible AI.",
    }
