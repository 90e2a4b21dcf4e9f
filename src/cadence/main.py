"""FastAPI application factory and lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from cadence.config import settings
from cadence.db.engine import create_db_engine, create_session_factory
from cadence.logging_config import configure_logging
from cadence.plugins import Plugins

# Configure logging at import time
configure_logging(log_level=settings.log_level, json_output=settings.json_logs and not settings.local_mode)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    db_url = settings.effective_database_url
    engine = create_db_engine(db_url)

    # Auto-create tables for SQLite (local dev, no migrations)
    if "sqlite" in db_url:
        from cadence.db.base import Base
        import cadence.db.models  # noqa: F401 register all ORM models

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("SQLite tables created (local mode)")

    app.state.db_engine = engine
    app.state.db_session_factory = create_session_factory(engine)

    if app.state.plugins is None:
        logger.warning("No plugins configured; event and build creation will return 503")

    logger.info("cadence API started (db=%s)", "sqlite" if "sqlite" in db_url else "postgresql")
    yield

    await engine.dispose()
    logger.info("cadence API shutdown complete")


def create_app(plugins: Plugins | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``plugins`` carries the SCM, config parser, bookend and executor the
    orchestration services drive.
    """
    app = FastAPI(
        title="cadence API",
        version="0.1.0",
        description="Event and build orchestration for CI/CD pipelines.",
        lifespan=lifespan,
    )
    app.state.plugins = plugins

    from cadence.api.middleware.trace_id import TraceIdMiddleware
    app.add_middleware(TraceIdMiddleware)

    from cadence.errors.handlers import register_exception_handlers
    register_exception_handlers(app)

    from cadence.api.router import api_router
    app.include_router(api_router)

    return app
