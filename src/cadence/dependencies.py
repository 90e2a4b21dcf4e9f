"""FastAPI dependency injection providers."""

from collections.abc import AsyncGenerator

from fastapi import Request

from cadence.errors.exceptions import PluginsNotConfiguredError
from cadence.plugins import Plugins


async def get_db(request: Request) -> AsyncGenerator:
    """Yield a database session from the app's session factory."""
    session_factory = request.app.state.db_session_factory
    async with session_factory() as session:
        yield session


def get_plugins(request: Request) -> Plugins:
    """Return the SCM/bookend/executor/config-parser bundle or raise 503."""
    plugins = getattr(request.app.state, "plugins", None)
    if plugins is None:
        raise PluginsNotConfiguredError()
    return plugins


def get_trace_id(request: Request) -> str:
    """Extract trace_id from request state (set by middleware)."""
    return getattr(request.state, "trace_id", "unknown")

