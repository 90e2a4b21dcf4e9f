"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cadence.config import Settings
from cadence.db.base import Base
# Import all models to register with Base.metadata
import cadence.db.models  # noqa: F401
from cadence.services.orchestration.factory import create_services

from fakes import make_plugins


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def plugins():
    return make_plugins()


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite:///",
        docker_registry=None,
        multi_build_cluster_enabled=False,
        cluster_env={},
    )


@pytest.fixture
def services(db_session, plugins, test_settings):
    return create_services(db_session, plugins, test_settings)


@pytest.fixture
def app(db_engine, session_factory, plugins):
    """Create a test application instance with in-memory DB."""
    from cadence.main import create_app

    _app = create_app(plugins)
    _app.state.db_engine = db_engine
    _app.state.db_session_factory = session_factory
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
