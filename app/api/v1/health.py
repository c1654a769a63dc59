"""Health and monitoring API endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging_config import get_logger
from app.db.session import database


logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/")
async def health_check():
    """Basic health check endpoint.

    Returns service status and version information.
    Use for load balancer health checks.

    Returns:
        dict: Health status with service info and timestamp
    """
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check: the database connection can be opened and queried.

    Returns:
        JSONResponse: 200 when ready, 503 when the database is unreachable
    """
    try:
        await database.ping()
        database_status = "connected"
        ready = True
    except Exception as e:
        logger.warning(
            "readiness_check_failed",
            error_type=type(e).__name__,
            error=str(e),
        )
        database_status = f"unavailable: {type(e).__name__}"
        ready = False

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "not_ready",
            "database": database_status,
            "timestamp": datetime.now(timezone.utc).isoformat()
        },
    )
