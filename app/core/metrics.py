"""Prometheus metric definitions and domain recording helpers."""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    REGISTRY,
)

from app.core.config import settings


service_info = Info(
    'service',
    'Service information',
    registry=REGISTRY
)
service_info.info({
    'name': settings.SERVICE_NAME,
    'version': settings.VERSION,
    'environment': settings.ENVIRONMENT,
})

# HTTP Request Metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['service', 'method', 'endpoint', 'status'],
    registry=REGISTRY
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['service', 'method', 'endpoint'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0),
    registry=REGISTRY
)

http_requests_in_progress = Gauge(
    'http_requests_in_progress',
    'HTTP requests currently in progress',
    ['service', 'method'],
    registry=REGISTRY
)

# Domain Metrics
events_created_total = Counter(
    'events_created_total',
    'Event creation attempts',
    ['service', 'status'],  # status: created, validation_error, conflict, unknown
    registry=REGISTRY
)

bookings_created_total = Counter(
    'bookings_created_total',
    'Booking creation attempts',
    ['service', 'status'],  # status: created, validation_error, not_found, conflict, unknown
    registry=REGISTRY
)

image_uploads_total = Counter(
    'image_uploads_total',
    'Total event image uploads',
    ['service', 'status'],  # status: stored, rejected, failed
    registry=REGISTRY
)

# Error Tracking Metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['service', 'error_type', 'endpoint'],
    registry=REGISTRY
)

def record_event_creation(status: str) -> None:
    events_created_total.labels(service=settings.SERVICE_NAME, status=status).inc()

def record_booking_creation(status: str) -> None:
    bookings_created_total.labels(service=settings.SERVICE_NAME, status=status).inc()

def record_image_upload(status: str) -> None:
    image_uploads_total.labels(service=settings.SERVICE_NAME, status=status).inc()

