"""
Pytest fixtures for sessionauth tests.

Every test gets its own file-based SQLite database (in-memory SQLite is
per-connection, and the engine uses one connection per session).
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from sessionauth.config import Settings
from sessionauth.database import build_engine, build_session_maker, close_db, init_db
from sessionauth.kernel.identity.auth_orchestrator import AuthOrchestrator
from sessionauth.kernel.identity.password import PasswordHasher
from sessionauth.kernel.identity.stores import SqlAlchemySessionStore, SqlAlchemyUserStore
from sessionauth.kernel.identity.tokens import TokenIssuer
from sessionauth.main import create_app

TEST_SECRET = "test-secret-key-for-testing-only-0123456789"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret=TEST_SECRET,
        # Cheap argon2 parameters keep the suite fast.
        argon2_time_cost=1,
        argon2_memory_cost=8,
        argon2_parallelism=1,
        environment="development",
        cors_origins=["http://localhost:3000"],
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings_factory(tmp_path):
    """Build settings against this test's database with overrides."""

    def _make(**overrides) -> Settings:
        return make_settings(tmp_path, **overrides)

    return _make


@pytest.fixture
def settings(settings_factory) -> Settings:
    return settings_factory()


@pytest_asyncio.fixture
async def db_engine(settings: Settings):
    """Create a test database engine with all tables."""
    engine = build_engine(settings)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return build_session_maker(db_engine)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def password_hasher(settings: Settings) -> PasswordHasher:
    return PasswordHasher.from_settings(settings)


@pytest.fixture
def token_issuer(settings: Settings) -> TokenIssuer:
    return TokenIssuer.from_settings(settings)


@pytest.fixture
def build_orchestrator(password_hasher: PasswordHasher, token_issuer: TokenIssuer):
    """Factory: orchestrator over stores bound to the given DB session."""

    def _build(session: AsyncSession) -> AuthOrchestrator:
        return AuthOrchestrator(
            users=SqlAlchemyUserStore(session),
            sessions=SqlAlchemySessionStore(session),
            hasher=password_hasher,
            tokens=token_issuer,
        )

    return _build


@pytest.fixture
def orchestrator(db_session: AsyncSession, build_orchestrator) -> AuthOrchestrator:
    return build_orchestrator(db_session)


@pytest_asyncio.fixture
async def app(settings: Settings):
    """Application wired to the per-test database (lifespan is not run by ASGITransport)."""
    application = create_app(settings)
    await init_db(application.state.engine)
    yield application
    await close_db(application.state.engine)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
