"""Shared pytest fixtures for all test suites."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from backend.app.accounts.client import LocalAuthClient
from backend.app.accounts.service import AccountService
from backend.app.api.deps import get_generator, get_rate_limit
from backend.app.db.engine import get_session
from backend.app.db.inmemory import (
    InMemoryAccountStore,
    InMemoryDocumentStore,
    InMemoryProfileStore,
    InMemoryRateLimiter,
    InMemoryUsageLogStore,
)
from backend.app.db.models import Base
from backend.app.main import app
from backend.app.middleware.ratelimit import RateLimitMiddleware, create_default_bucket_map
from backend.app.models.common import DocType
from backend.app.workflow.session import DraftSession

USER_EMAIL = "asha@example.com"
USER_PASSWORD = "secret123"
DRAFT_TEXT = "Subject: Leave Application\n\nRespected Sir/Madam,\n\nYours faithfully,\nAsha"


class FakeGenerator:
    """DocumentGenerator double that records calls."""

    def __init__(self, text: str = DRAFT_TEXT, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[DocType, dict[str, str]]] = []

    async def generate(self, document_type: DocType, field_values: dict[str, str]) -> str:
        self.calls.append((document_type, dict(field_values)))
        if self.error is not None:
            raise self.error
        return self.text


# --- in-memory workflow stack ---------------------------------------------------


@pytest.fixture
def documents() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def profiles() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def usage_logs(profiles: InMemoryProfileStore) -> InMemoryUsageLogStore:
    return InMemoryUsageLogStore(profiles)


@pytest.fixture
def accounts() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def account_service(
    accounts: InMemoryAccountStore, profiles: InMemoryProfileStore
) -> AccountService:
    return AccountService(accounts, profiles, signup_credits=3)


@pytest.fixture
def auth_client(account_service: AccountService) -> LocalAuthClient:
    return LocalAuthClient(account_service)


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def make_generator() -> type[FakeGenerator]:
    """The FakeGenerator class, for tests that need a failing or custom one."""
    return FakeGenerator


@pytest_asyncio.fixture
async def registered_user(account_service: AccountService) -> tuple[str, str]:
    """Register the default test account; returns (email, password)."""
    await account_service.sign_up(USER_EMAIL, USER_PASSWORD)
    return USER_EMAIL, USER_PASSWORD


@pytest_asyncio.fixture
async def draft_session(
    generator: FakeGenerator,
    documents: InMemoryDocumentStore,
    profiles: InMemoryProfileStore,
    usage_logs: InMemoryUsageLogStore,
    auth_client: LocalAuthClient,
) -> AsyncGenerator[DraftSession, None]:
    """Started DraftSession over the in-memory collaborators."""
    session = DraftSession(generator, documents, profiles, usage_logs, auth_client)
    await session.start()
    yield session
    session.close()


# --- sqlite-backed API ------------------------------------------------------------


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory sqlite engine shared by every connection of a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(sqlite_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def api_client(
    session_factory: async_sessionmaker[AsyncSession],
    generator: FakeGenerator,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """AsyncClient against the app with sqlite storage and the fake generator."""

    async def _session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    limiter = RateLimitMiddleware(InMemoryRateLimiter(max_requests=100), create_default_bucket_map())

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_generator] = lambda: generator
    app.dependency_overrides[get_rate_limit] = lambda: limiter

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def _sign_in_over_api(
    client: httpx.AsyncClient, email: str = USER_EMAIL, password: str = USER_PASSWORD
) -> dict[str, str]:
    await client.post("/auth/signup", json={"email": email, "password": password})
    response = await client.post("/auth/signin", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def sign_in_over_api() -> Callable[..., Awaitable[dict[str, str]]]:
    """Register and sign in through the API; returns the Authorization header."""
    return _sign_in_over_api


@pytest_asyncio.fixture
async def auth_headers(api_client: httpx.AsyncClient) -> dict[str, str]:
    """Authorization header of the default test user."""
    return await _sign_in_over_api(api_client)


# --- postgres ---------------------------------------------------------------------


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    if not database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine = create_async_engine(database_url, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def postgres_session(postgres_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create async session for PostgreSQL integration tests."""
    async with AsyncSession(postgres_engine, expire_on_commit=False) as session:
        yield session
        await session.rollback()
