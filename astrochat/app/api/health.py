"""Service information and health endpoints."""

from typing import Any

from fastapi import APIRouter, Request

from astrochat.app.core.clock import utc_now
from astrochat.app.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)

SERVICE_NAME = "AstroChat Backend"
SERVICE_VERSION = "1.0.0"


@router.get("/")
async def root() -> dict[str, Any]:
    return {
        "message": f"{SERVICE_NAME} API",
        "version": SERVICE_VERSION,
        "endpoints": {
            "health": "GET /api/health",
            "chat": "POST /api/chat",
            "user_status": "POST /api/user-status",
        },
    }


@router.get("/api/health")
async def health(request: Request) -> dict[str, Any]:
    """Health check with configuration flags and database status.

    The service keeps answering questions while the database is down, so a
    failed database check reports "degraded" rather than an error status.
    """
    config = request.app.state.settings
    database = getattr(request.app.state, "database", None)

    health_status: dict[str, Any] = {
        "status": "ok",
        "timestamp": utc_now().isoformat(),
        "service": SERVICE_NAME,
        "environment": {
            "has_gemini_key": bool(config.gemini_api_key),
            "has_database_url": bool(config.database_url),
            "environment": config.environment,
        },
        "components": {},
    }

    if database is None:
        health_status["components"]["database"] = {"status": "not_configured"}
        return health_status

    try:
        await database.ping()
        health_status["components"]["database"] = {
            "status": "ok",
            "dialect": database.dialect,
        }
    except Exception as e:
        logger.warning(f"Health check: database unreachable ({type(e).__name__}: {e})")
        health_status["status"] = "degraded"
        health_status["components"]["database"] = {"status": "error"}

    return health_status
