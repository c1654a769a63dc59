"""
Event API endpoints.

Routers only translate HTTP to service calls: form parsing, file reading and
status codes. Validation, persistence and error classification live in the
service layer, whose ServiceError is rendered by the exception handlers.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from app.api.dependencies import (
    get_booking_service,
    get_event_service,
    read_image,
    verify_content_length,
)
from app.core.logging_config import get_logger
from app.schemas.results import ActionFailure, ActionSuccess
from app.services.booking_service import BookingService
from app.services.event_service import EventService


logger = get_logger(__name__)
router = APIRouter(
    prefix="/api/v1/events",
    tags=["events"],
    responses={
        400: {"model": ActionFailure, "description": "Validation error"},
        404: {"model": ActionFailure, "description": "Event not found"},
        409: {"model": ActionFailure, "description": "Conflict"},
        500: {"model": ActionFailure, "description": "Unknown error"},
    },
)


def _success(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ActionSuccess[Any](data=data).model_dump(mode="json"),
    )


@router.get("")
async def list_events(service: EventService = Depends(get_event_service)):
    """All events, newest first, as ``{"events": [...], "total": n}``."""
    return _success(await service.list_events())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    overview: Optional[str] = Form(None),
    venue: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    date: Optional[str] = Form(None),
    time: Optional[str] = Form(None),
    mode: Optional[str] = Form(None),
    audience: Optional[str] = Form(None),
    organizer: Optional[str] = Form(None),
    agenda: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    content_length: Optional[int] = Depends(verify_content_length),
    service: EventService = Depends(get_event_service),
):
    """Create an event from a multipart form.

    ``agenda`` and ``tags`` are JSON arrays of strings sent as text fields;
    ``image`` is a JPEG, PNG or WebP file of at most the configured size.
    Every field is optional at the HTTP level so that missing values are
    reported through the same validation envelope as malformed ones.

    Returns:
        JSONResponse: 201 with the created event

    Raises:
        ServiceError: VALIDATION_ERROR (400), CONFLICT (409) or UNKNOWN (500)
    """
    form = {
        "title": title,
        "description": description,
        "overview": overview,
        "venue": venue,
        "location": location,
        "date": date,
        "time": time,
        "mode": mode,
        "audience": audience,
        "organizer": organizer,
        "agenda": agenda,
        "tags": tags,
    }
    logger.info(
        "create_event_request_received",
        title=title,
        filename=image.filename if image else None,
        content_length=content_length,
    )

    image_bytes = await read_image(image)
    event = await service.create_event(form, image_bytes)

    return _success(event, status.HTTP_201_CREATED)


@router.get("/{slug}")
async def get_event(slug: str, service: EventService = Depends(get_event_service)):
    """Single event by slug.

    Raises:
        ServiceError: VALIDATION_ERROR (400) for a malformed slug, NOT_FOUND (404)
    """
    return _success(await service.get_event_by_slug(slug))


@router.get("/{slug}/similar")
async def get_similar_events(slug: str, service: EventService = Depends(get_event_service)):
    """Other events sharing at least one tag with this one."""
    return _success(await service.get_similar_events_by_slug(slug))


@router.post("/{slug}/bookings", status_code=status.HTTP_201_CREATED)
async def create_booking(
    slug: str,
    payload: Dict[str, Any] = Body(...),
    service: BookingService = Depends(get_booking_service),
):
    """Book an email address onto an event.

    Raises:
        ServiceError: VALIDATION_ERROR (400), NOT_FOUND (404) or CONFLICT (409)
    """
    booking = await service.create_booking(slug, payload)
    return _success(booking, status.HTTP_201_CREATED)


@router.get("/{slug}/bookings/count")
async def count_bookings(slug: str, service: BookingService = Depends(get_booking_service)):
    return _success(await service.count_bookings(slug))
