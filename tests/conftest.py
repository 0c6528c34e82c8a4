"""
DevCamper Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the test suite.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: AsyncMock session for service unit tests
    ├── temp_storage:    Temporary upload directory
    ├── sample_image_bytes
    ├── make_user / make_bootcamp: in-memory model instances
    ├── db_session_factory: in-memory SQLite with the real schema
    └── test_client:     httpx AsyncClient over ASGITransport, with the
                         database dependency pointed at db_session_factory
"""

import os
import tempfile
from datetime import datetime, timezone
from typing import List
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

# Settings are read at import time, so the environment comes first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["GEOCODER_API_KEY"] = "test-key-not-real"
os.environ["FILE_UPLOAD_PATH"] = tempfile.mkdtemp(prefix="devcamper_test_")
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from devcamper.database import Base, get_db_session  # noqa: E402
from devcamper.models.bootcamp import DEFAULT_PHOTO, Bootcamp  # noqa: E402
from devcamper.models.user import PUBLISHER_ROLE, User  # noqa: E402
from devcamper.services.geocoder_base import GeocodeResult  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = bootcamp
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def make_user():
    def _make(role: str = PUBLISHER_ROLE, **kwargs) -> User:
        defaults = {
            "id": uuid4(),
            "name": f"{role.title()} User",
            "email": f"{uuid4().hex[:8]}@example.com",
            "role": role,
            "created_at": datetime.now(timezone.utc),
        }
        defaults.update(kwargs)
        return User(**defaults)

    return _make


@pytest.fixture
def make_bootcamp():
    def _make(owner: User, **kwargs) -> Bootcamp:
        defaults = {
            "id": uuid4(),
            "user_id": owner.id,
            "name": f"Bootcamp {uuid4().hex[:6]}",
            "slug": "bootcamp",
            "description": "Full stack web development",
            "careers": ["Web Development"],
            "latitude": 42.350504,
            "longitude": -71.105399,
            "formatted_address": "233 Bay State Rd, Boston, MA 02215, US",
            "city": "Boston",
            "state": "MA",
            "zipcode": "02215",
            "country": "US",
            "photo": DEFAULT_PHOTO,
            "housing": False,
            "job_assistance": False,
            "job_guarantee": False,
            "accept_gi": False,
            "created_at": datetime.now(timezone.utc),
        }
        defaults.update(kwargs)
        return Bootcamp(**defaults)

    return _make


class FakeGeocoder:
    """Returns canned candidates and records every query it was asked."""

    def __init__(self, results: List[GeocodeResult]):
        self.results = results
        self.queries: List[str] = []

    async def geocode(self, query: str) -> List[GeocodeResult]:
        self.queries.append(query)
        return list(self.results)


BOSTON = GeocodeResult(
    latitude=42.350504,
    longitude=-71.105399,
    formatted_address="233 Bay State Rd, Boston, MA 02215, US",
    street="233 Bay State Rd",
    city="Boston",
    state="MA",
    zipcode="02215",
    country="US",
)


@pytest.fixture
def boston():
    return BOSTON


@pytest.fixture
def fake_geocoder():
    """Factory: fake_geocoder([result, ...]) → object with an async geocode()."""
    return FakeGeocoder


# ══════════════════════════════════════════════════════════════════════════
# Database-backed fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_session_factory():
    """
    In-memory SQLite with the full schema.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(db_session_factory):
    """
    HTTP client for the app, backed by the in-memory database.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    from devcamper.main import app

    async def _override_session():
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def seed_user(db_session_factory):
    """Persist a user and return it."""

    async def _seed(role: str = PUBLISHER_ROLE) -> User:
        async with db_session_factory() as session:
            user = User(
                name=f"{role.title()} User",
                email=f"{uuid4().hex[:8]}@example.com",
                role=role,
            )
            session.add(user)
            await session.commit()
            return user

    return _seed
