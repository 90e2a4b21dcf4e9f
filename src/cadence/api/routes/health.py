"""Health check endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

router = APIRouter()


@router.get("/health")
async def health_check():
    return {"status": "healthy", "service": "cadence"}


@router.get("/health/ready")
async def readiness(request: Request):
    """Readiness probe: database reachable and plugins configured."""
    checks: dict[str, str] = {}
    overall_ok = True

    try:
        session_factory = request.app.state.db_session_factory
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as exc:
        checks["database"] = f"error: {exc}"
        overall_ok = False

    if getattr(request.app.state, "plugins", None) is None:
        checks["plugins"] = "not configured"
        overall_ok = False
    else:
        checks["plugins"] = "ok"

    return JSONResponse(
        status_code=200 if overall_ok else 503,
        content={"status": "ready" if overall_ok else "not_ready", "checks": checks},
    )
