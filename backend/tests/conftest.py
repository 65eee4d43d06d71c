"""
IdeaFlow Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite database file (aiosqlite) and its own
       uploads directory. The app under test is built with
       `create_app(database=..., storage=...)`, so no lifespan or PostgreSQL
       is needed.

Fixture Hierarchy (all function-scoped):
    database ──┬── app ── client        HTTPX AsyncClient over ASGITransport
    storage ───┘
    database ── make_user / make_case   ORM seeding helpers
    client ──── register                registration through the API
"""

import os
import tempfile

# Override settings BEFORE any ideaflow import: the settings singleton and
# the bcrypt context are built at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./ideaflow_test.db"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="ideaflow_uploads_")
os.environ["FRONTEND_BUILD_DIR"] = tempfile.mkdtemp(prefix="ideaflow_build_")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import List, Optional  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from ideaflow.database import Database  # noqa: E402
from ideaflow.main import create_app  # noqa: E402
from ideaflow.models.case import Case  # noqa: E402
from ideaflow.models.user import User  # noqa: E402
from ideaflow.services.storage_service import LocalFileStorage  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Infrastructure
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database(tmp_path):
    """A fresh SQLite database file with every table created."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'ideaflow.db'}", echo=False)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def app(database, storage):
    return create_app(database=database, storage=storage)


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    Usage:
        async def test_status(client):
            response = await client.get("/api")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def session(database):
    """A session for service-level tests. Keep writes short: SQLite has one writer."""
    async with database.session() as s:
        yield s


# ══════════════════════════════════════════════════════════════════════════
# Seeding Helpers
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user(database):
    """Inserts a user directly (placeholder password hash) and returns its id."""

    async def _make_user(email: str, **fields) -> int:
        async with database.session() as s:
            user = User(email=email, password="not-a-real-hash", **fields)
            s.add(user)
            await s.commit()
            return user.id

    return _make_user


@pytest.fixture
def make_case(database):
    """Inserts an open case directly and returns its id."""

    async def _make_case(
        user_id: int,
        title: str = "Landing page redesign",
        theme: str = "Design",
        description: str = "Refresh the product landing page",
        cover: Optional[str] = None,
        files: Optional[List[str]] = None,
    ) -> int:
        async with database.session() as s:
            case = Case(
                user_id=user_id,
                title=title,
                theme=theme,
                description=description,
                cover=cover,
                files=files or [],
            )
            s.add(case)
            await s.commit()
            return case.id

    return _make_case


@pytest.fixture
def register(client):
    """Registers through POST /api/register and returns the new user id."""

    async def _register(email: str, password: str = "s3cret-pass") -> int:
        response = await client.post("/api/register", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["id"]

    return _register
