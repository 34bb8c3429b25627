"""Test fixtures — a fresh in-memory database per test.

Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own aiosqlite in-memory engine. StaticPool keeps
   one connection alive so every session sees the same database.
2. The app's get_db dependency and the authenticate middleware's
   session factory both point at that engine.
3. The engine is disposed after the test — all test data vanishes.

bcrypt rounds are lowered through the environment before the app
settings load, so signups and logins stay fast.
"""

import os

os.environ.setdefault("STARBLOOM_BCRYPT_ROUNDS", "4")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from starbloom.db.engine import get_db  # noqa: E402
from starbloom.db.models import Base  # noqa: E402
from starbloom.main import app  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite://"

PASSWORD = "pa55word-long"


@pytest_asyncio.fixture()
async def db_engine():
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Direct session for service-level tests and for inspecting tables."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client running the real auth pipeline against the test database.

    No identity override: tests that need a logged-in caller sign up and
    log in through the API (see the `login` fixture).
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    original_factory = app.state.session_factory
    app.state.session_factory = session_factory
    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    app.state.session_factory = original_factory


async def _signup(client, username: str, password: str = PASSWORD) -> dict:
    r = await client.post(
        "/v1/users",
        json={
            "username": username,
            "email": f"{username}@example.com",
            "first_name": username.capitalize(),
            "last_name": "Tester",
            "password": password,
        },
    )
    assert r.status_code == 201, r.text
    return r.json()["user"]


async def _get_token(client, username: str, password: str = PASSWORD) -> str:
    r = await client.post(
        "/v1/tokens/authentication",
        json={"username": username, "password": password},
    )
    assert r.status_code == 200, r.text
    return r.json()["authentication_token"]["plain_text"]


@pytest_asyncio.fixture()
async def login(client):
    """Factory: sign up + log in a user, return (user, auth headers)."""

    async def _login(username: str) -> tuple[dict, dict]:
        user = await _signup(client, username)
        token = await _get_token(client, username)
        return user, {"Authorization": f"Bearer {token}"}

    return _login


@pytest_asyncio.fixture()
async def signup(client):
    """signup(username, password=PASSWORD) → user dict."""

    async def _run(username: str, password: str = PASSWORD) -> dict:
        return await _signup(client, username, password)

    return _run


@pytest_asyncio.fixture()
async def get_token(client):
    """get_token(username, password=PASSWORD) → plaintext bearer token."""

    async def _run(username: str, password: str = PASSWORD) -> str:
        return await _get_token(client, username, password)

    return _run
