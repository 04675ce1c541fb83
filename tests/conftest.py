"""Test fixtures — a fresh in-memory database per test.

Each test gets its own SQLite (aiosqlite) in-memory engine with the schema
created from the ORM metadata, so there is no cross-test pollution and no
database server to run. StaticPool keeps the single in-memory connection
alive for the life of the engine.

The app's get_db dependency is overridden to hand out the test session.
Auth is NOT overridden: API tests sign up and sign in for real tokens so
the JWT verification path is exercised on every protected request.
"""

import os

# Must be set before taskvault.config is imported.
os.environ.setdefault("TASKVAULT_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TASKVAULT_BCRYPT_ROUNDS", "4")
os.environ.setdefault("TASKVAULT_JWT_SECRET", "test-secret-0123456789abcdef0123456789")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from taskvault.auth.dependencies import CurrentUser
from taskvault.db.engine import get_db
from taskvault.db.models import Base
from taskvault.main import app
from taskvault.services.credential_store import CredentialStore

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "Str0ngPass!"


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a brand new in-memory database."""
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with the app's get_db overridden for testing."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def login(client):
    """Factory: sign up + sign in a user, return Bearer auth headers."""

    async def _login(username: str, password: str = DEFAULT_PASSWORD) -> dict:
        r = await client.post(
            "/api/v1/auth/signup",
            json={"username": username, "password": password},
        )
        assert r.status_code == 201, r.text
        r = await client.post(
            "/api/v1/auth/signin",
            json={"username": username, "password": password},
        )
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login


@pytest_asyncio.fixture()
async def make_user(db_session):
    """Factory: register a user directly and return it as a CurrentUser."""
    store = CredentialStore(db_session)

    async def _make(username: str, password: str = DEFAULT_PASSWORD) -> CurrentUser:
        await store.register(username, password)
        user = await store.get_user(username)
        return CurrentUser(id=user.id, username=user.username)

    return _make
