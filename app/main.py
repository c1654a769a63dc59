"""Main FastAPI application for the DevEvent API."""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from pathlib import Path

from app.core.config import settings
from app.core.errors import ServiceError
from app.core.logging_config import setup_logging, get_logger
from app.db.session import connect_db, database
from app.api.v1 import events, health, metrics
from app.api.middleware import RequestLoggingMiddleware, PerformanceLoggingMiddleware, PrometheusMiddleware
from app.api.exception_handlers import (
    service_error_handler,
    http_exception_handler,
    validation_exception_handler,
    general_exception_handler,
)


# Initialize logging system (MUST be done before any logging calls)
setup_logging(debug=settings.is_debug_mode, json_logs=settings.use_json_logs)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events (startup and shutdown).

    Handles:
    - Opening the memoized database connection
    - Logging startup information
    - Disposing the engine on shutdown
    """
    logger.info(
        "application_startup",
        service=settings.SERVICE_NAME,
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        debug_mode=settings.is_debug_mode,
        log_level=settings.LOG_LEVEL,
        storage_backend=settings.STORAGE_BACKEND,
    )

    try:
        await connect_db()
    except Exception as e:
        # Start degraded; the next request retries the connection
        logger.error(
            "database_startup_connect_failed",
            error_type=type(e).__name__,
            error=str(e),
        )

    yield

    logger.info("application_shutdown_initiated")

    try:
        await database.dispose()
    except Exception as e:
        logger.error(
            "database_cleanup_failed",
            error=str(e),
            exc_info=True,
        )

    logger.info("application_shutdown", graceful=True)


app = FastAPI(
    title=settings.SERVICE_NAME,
    description="Developer event listings, event creation with image upload, and bookings",
    version=settings.VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# ServiceError subclasses HTTPException; the more specific handler wins
app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Middleware stack (order matters - first added is executed last!)
# 1. Prometheus metrics (outermost - measures everything)
app.add_middleware(PrometheusMiddleware)
# 2. Request logging with trace IDs
app.add_middleware(RequestLoggingMiddleware)
# 3. Performance monitoring for slow requests
app.add_middleware(PerformanceLoggingMiddleware, slow_request_threshold_ms=1000.0)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(events.router)
app.include_router(health.router)
app.include_router(metrics.router)

# Serve uploaded images when they live on local disk
if settings.STORAGE_BACKEND == "local":
    storage_path = Path(settings.STORAGE_PATH)
    storage_path.mkdir(parents=True, exist_ok=True)

    app.mount(
        "/storage",
        StaticFiles(directory=settings.STORAGE_PATH),
        name="storage"
    )
    logger.info(
        "static_files_mounted",
        mount_path="/storage",
        directory=settings.STORAGE_PATH,
        backend=settings.STORAGE_BACKEND,
    )


@app.get("/")
async def root():
    """Root endpoint with service information.

    Returns:
        dict: Service metadata and useful links
    """
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "description": "Developer event listings and bookings",
        "documentation": "/docs",
        "events": "/api/v1/events",
        "health_check": "/api/v1/health/",
        "storage_backend": settings.STORAGE_BACKEND
    }


@app.get("/info")
async def service_info():
    """Detailed service configuration information.

    Returns:
        dict: Current service configuration (non-sensitive data)
    """
    return {
        "service": {
            "name": settings.SERVICE_NAME,
            "version": settings.VERSION
        },
        "storage": {
            "backend": settings.STORAGE_BACKEND,
            "region": settings.AWS_REGION if settings.STORAGE_BACKEND == "s3" else None
        },
        "images": {
            "folder": settings.IMAGE_FOLDER,
            "max_width": settings.IMAGE_BOX.width,
            "max_height": settings.IMAGE_BOX.height,
            "webp_quality": settings.IMAGE_QUALITY,
            "allowed_mime_types": settings.ALLOWED_MIME_TYPES
        },
        "limits": {
            "max_upload_size_mb": settings.MAX_UPLOAD_SIZE_MB
        }
    }
