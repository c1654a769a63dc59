"""
Custom FastAPI exception handlers for structured error logging.

Every failure leaves the API as the same envelope:
{"ok": false, "code": ..., "message": ..., "issues": [...]}
"""

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import ErrorCode, ServiceError, code_for_status
from app.core.logging_config import get_logger


logger = get_logger(__name__)


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render business-logic errors raised by the service layer."""
    log = logger.error if exc.code == ErrorCode.UNKNOWN else logger.info
    log(
        "service_error",
        method=request.method,
        path=str(request.url.path),
        code=exc.code.value,
        message=exc.message,
        issue_count=len(exc.issues),
    )

    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_result(),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions raised outside the service layer (404 routes, 413...)."""
    logger.warning(
        "http_exception",
        method=request.method,
        path=str(request.url.path),
        status_code=exc.status_code,
        detail=exc.detail,
        client_host=_client_host(request),
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "ok": False,
            "code": code_for_status(exc.status_code).value,
            "message": str(exc.detail),
        },
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors (malformed JSON bodies, wrong types)."""
    errors = exc.errors()

    logger.warning(
        "validation_error",
        method=request.method,
        path=str(request.url.path),
        error_count=len(errors),
        client_host=_client_host(request),
    )

    issues = [
        {
            "path": [str(part) for part in error.get("loc", ())],
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in errors
    ]

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({
            "ok": False,
            "code": ErrorCode.VALIDATION_ERROR.value,
            "message": "Validation failed",
            "issues": issues,
        }),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with structured logging."""
    logger.error(
        "unhandled_exception",
        method=request.method,
        path=str(request.url.path),
        error_type=type(exc).__name__,
        error_message=str(exc),
        client_host=_client_host(request),
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "ok": False,
            "code": ErrorCode.UNKNOWN.value,
            "message": "Internal server error",
        },
    )
