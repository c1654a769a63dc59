"""
FastAPI Middleware for Request Tracking and Logging

Features:
- Trace IDs bound into every log line of a request
- Request/response logging with durations
- Slow request warnings
- Prometheus metrics labelled by route template
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from starlette.types import ASGIApp

from app.core.config import settings
from app.core.logging_config import get_logger, set_trace_id, clear_trace_id
from app.core.metrics import (
    http_requests_total,
    http_request_duration_seconds,
    http_requests_in_progress,
    errors_total,
)


logger = get_logger(__name__)

TRACE_HEADER = "X-Trace-ID"


def route_template(request: Request) -> str:
    """Route path template (``/api/v1/events/{slug}``) for a request.

    Event slugs are unbounded, so metrics are labelled by template rather
    than the concrete path. Unmatched requests share one label.
    """
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return "unmatched"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request trace IDs and request logging.

    Reuses an incoming X-Trace-ID header or generates one, binds it into the
    logging context for the duration of the request and echoes it back on
    the response.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        trace_id = request.headers.get(TRACE_HEADER) or str(uuid.uuid4())
        set_trace_id(trace_id)

        start_time = time.time()

        client_host = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path

        logger.info(
            "request_started",
            method=method,
            path=path,
            client_host=client_host,
            user_agent=request.headers.get("user-agent", "unknown"),
            query_params=dict(request.query_params) if request.query_params else {},
        )

        try:
            response = await call_next(request)

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            response.headers[TRACE_HEADER] = trace_id
            return response

        except Exception as exc:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "request_failed",
                method=method,
                path=path,
                client_host=client_host,
                duration_ms=round(duration_ms, 2),
                error_type=type(exc).__name__,
                error_message=str(exc),
                exc_info=True,
            )
            # Handled by the FastAPI exception handlers
            raise

        finally:
            clear_trace_id()


class PerformanceLoggingMiddleware(BaseHTTPMiddleware):
    """Logs warnings for requests exceeding a duration threshold."""

    def __init__(self, app: ASGIApp, slow_request_threshold_ms: float = 1000.0):
        super().__init__(app)
        self.slow_request_threshold_ms = slow_request_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        if duration_ms > self.slow_request_threshold_ms:
            logger.warning(
                "slow_request_detected",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                threshold_ms=self.slow_request_threshold_ms,
                status_code=response.status_code,
            )

        return response


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware for automatic Prometheus metrics collection.

    Tracks:
    - HTTP request counts by method, route and status
    - HTTP request duration by method and route
    - Active HTTP requests by method
    - Unhandled errors by type and route
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        method = request.method

        if request.url.path == "/metrics":
            return await call_next(request)

        endpoint = route_template(request)
        http_requests_in_progress.labels(
            service=settings.SERVICE_NAME,
            method=method
        ).inc()

        start_time = time.time()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response

        except Exception as exc:
            errors_total.labels(
                service=settings.SERVICE_NAME,
                error_type=type(exc).__name__,
                endpoint=endpoint
            ).inc()
            raise

        finally:
            duration = time.time() - start_time

            http_requests_in_progress.labels(
                service=settings.SERVICE_NAME,
                method=method
            ).dec()

            http_requests_total.labels(
                service=settings.SERVICE_NAME,
                method=method,
                endpoint=endpoint,
                status=status_code
            ).inc()

            http_request_duration_seconds.labels(
                service=settings.SERVICE_NAME,
                method=method,
                endpoint=endpoint
            ).observe(duration)
