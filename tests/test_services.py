"""
Service layer tests for EventService and BookingService.

Tests business logic in isolation from the HTTP layer: validation,
error classification, image handling and persistence.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from app.core.errors import ErrorCode, ServiceError
from app.repositories.event_repository import EventRepository
from app.schemas.events import EventMode
from app.services.booking_service import BookingService
from app.services.event_service import EventService


@pytest.fixture
def event_service(test_db_session, test_uploader) -> EventService:
    return EventService(test_db_session, test_uploader)


@pytest.fixture
def booking_service(test_db_session) -> BookingService:
    return BookingService(test_db_session)


def stored_images(test_storage) -> list:
    folder = test_storage.get_local_path("images", "DevEvent/placeholder").parent
    return sorted(folder.glob("*.webp")) if folder.exists() else []


# ============================================================================
# create_event
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_event_success(event_service, event_form, sample_image_bytes, test_storage):
    event = await event_service.create_event(event_form(), sample_image_bytes)

    assert event.slug == "pycon-workshop"
    assert event.mode is EventMode.hybrid
    assert event.agenda == ["Welcome", "Async deep dive", "Q&A"]
    assert event.tags == ["python", "async", "web"]
    assert event.image.startswith("/storage/images/DevEvent/")
    assert len(stored_images(test_storage)) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_event_requires_image(event_service, event_form):
    with pytest.raises(ServiceError) as exc_info:
        await event_service.create_event(event_form(), None)

    assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
    assert exc_info.value.message == "Image file is required"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_event_rejects_non_image(event_service, event_form):
    with pytest.raises(ServiceError) as exc_info:
        await event_service.create_event(event_form(), b"%PDF-1.7 not an image")

    assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
    assert exc_info.value.message == "Image must be JPEG, PNG, or WebP format"
    assert exc_info.value.issues[0]["path"] == ["image"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_event_field_issues(event_service, event_form, small_jpeg_bytes, test_storage):
    form = event_form(title="ab", time="7pm", tags="[]")

    with pytest.raises(ServiceError) as exc_info:
        await event_service.create_event(form, small_jpeg_bytes)

    error = exc_info.value
    assert error.code == ErrorCode.VALIDATION_ERROR
    assert error.message == "Validation failed"
    paths = {issue["path"][0] for issue in error.issues}
    assert paths == {"title", "time", "tags"}
    # Nothing is uploaded for rejected input
    assert stored_images(test_storage) == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_event_malformed_json_list(event_service, event_form, small_jpeg_bytes):
    with pytest.raises(ServiceError) as exc_info:
        await event_service.create_event(event_form(agenda="[not json"), small_jpeg_bytes)

    assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
    assert exc_info.value.issues[0]["path"] == ["agenda"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_event_deeply_nested_json_list(event_service, event_form, small_jpeg_bytes):
    with pytest.raises(ServiceError) as exc_info:
        await event_service.create_event(event_form(tags="[" * 100000), small_jpeg_bytes)

    assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
    assert exc_info.value.issues[0]["path"] == ["tags"]
    assert exc_info.value.issues[0]["message"] == "Tags must be a JSON array of strings"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_event_title_without_slug(event_service, event_form, small_jpeg_bytes):
    with pytest.raises(ServiceError) as exc_info:
        await event_service.create_event(event_form(title="!!! ???"), small_jpeg_bytes)

    assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
    assert exc_info.value.issues[0]["path"] == ["title"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_event_duplicate_title_conflicts(
    event_service, event_form, small_jpeg_bytes, test_storage
):
    await event_service.create_event(event_form(), small_jpeg_bytes)

    with pytest.raises(ServiceError) as exc_info:
        await event_service.create_event(event_form(title="PyCon   workshop"), small_jpeg_bytes)

    assert exc_info.value.code == ErrorCode.CONFLICT
    assert exc_info.value.message == "An event with this title already exists"
    assert exc_info.value.http_status == 409
    # The second image was removed again
    assert len(stored_images(test_storage)) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_event_storage_failure_is_unknown(event_service, event_form, small_jpeg_bytes):
    with patch.object(event_service.uploader.storage, "save", AsyncMock(side_effect=OSError("disk full"))):
        with pytest.raises(ServiceError) as exc_info:
            await event_service.create_event(event_form(), small_jpeg_bytes)

    assert exc_info.value.code == ErrorCode.UNKNOWN
    assert exc_info.value.message == "Failed to create event"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_event_from_object(event_service, future_date, small_jpeg_bytes):
    event = await event_service.create_event_from_object(
        {
            "title": "Rust for Pythonistas",
            "description": "Writing Python extensions in Rust",
            "overview": "An afternoon of PyO3 and maturin.",
            "venue": "Room 4",
            "location": "Amsterdam",
            "date": future_date,
            "time": "14:00",
            "mode": EventMode.offline,
            "audience": "Python developers",
            "organizer": "PyAmsterdam",
            "agenda": ["PyO3 basics", "Packaging"],
            "tags": ["rust", "python"],
        },
        small_jpeg_bytes,
    )

    assert event.slug == "rust-for-pythonistas"
    assert event.mode is EventMode.offline
    assert event.tags == ["rust", "python"]


# ============================================================================
# Queries
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_events_newest_first(event_service, event_form, small_jpeg_bytes):
    await event_service.create_event(event_form(title="First Event"), small_jpeg_bytes)
    await event_service.create_event(event_form(title="Second Event"), small_jpeg_bytes)

    result = await event_service.list_events()

    assert result.total == 2
    assert [event.slug for event in result.events] == ["second-event", "first-event"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_events_empty(event_service):
    result = await event_service.list_events()
    assert result.total == 0
    assert result.events == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_events_database_failure_is_unknown(event_service):
    with patch.object(EventRepository, "list_recent", AsyncMock(side_effect=RuntimeError("db down"))):
        with pytest.raises(ServiceError) as exc_info:
            await event_service.list_events()

    assert exc_info.value.code == ErrorCode.UNKNOWN
    assert exc_info.value.message == "Failed to fetch events"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_event_by_slug(event_service, event_form, small_jpeg_bytes):
    created = await event_service.create_event(event_form(), small_jpeg_bytes)

    found = await event_service.get_event_by_slug("  PyCon-Workshop ")

    assert found.id == created.id


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_event_unknown_slug_not_found(event_service):
    with pytest.raises(ServiceError) as exc_info:
        await event_service.get_event_by_slug("no-such-event")

    assert exc_info.value.code == ErrorCode.NOT_FOUND
    assert exc_info.value.message == "Event with slug 'no-such-event' not found"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_event_invalid_slug(event_service):
    with pytest.raises(ServiceError) as exc_info:
        await event_service.get_event_by_slug("not a slug!")

    assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
    assert exc_info.value.message == "Invalid slug format"
    assert exc_info.value.issues


@pytest.mark.unit
@pytest.mark.asyncio
async def test_similar_events(event_service, event_form, small_jpeg_bytes):
    await event_service.create_event(event_form(), small_jpeg_bytes)
    await event_service.create_event(
        event_form(title="Async Python Meetup", tags=json.dumps(["async"])), small_jpeg_bytes
    )
    await event_service.create_event(
        event_form(title="CSS Day", tags=json.dumps(["css"])), small_jpeg_bytes
    )

    result = await event_service.get_similar_events_by_slug("pycon-workshop")

    assert [event.slug for event in result.events] == ["async-python-meetup"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_similar_events_unknown_slug(event_service):
    with pytest.raises(ServiceError) as exc_info:
        await event_service.get_similar_events_by_slug("missing")

    assert exc_info.value.code == ErrorCode.NOT_FOUND


# ============================================================================
# Bookings
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_booking(event_service, booking_service, event_form, small_jpeg_bytes):
    event = await event_service.create_event(event_form(), small_jpeg_bytes)

    booking = await booking_service.create_booking("pycon-workshop", {"email": " Dev@Example.com "})

    assert booking.event_id == event.id
    assert booking.email == "dev@example.com"
    count = await booking_service.count_bookings("pycon-workshop")
    assert count.count == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_booking_duplicate_conflicts(event_service, booking_service, event_form, small_jpeg_bytes):
    await event_service.create_event(event_form(), small_jpeg_bytes)
    await booking_service.create_booking("pycon-workshop", {"email": "dev@example.com"})

    with pytest.raises(ServiceError) as exc_info:
        await booking_service.create_booking("pycon-workshop", {"email": "DEV@example.com"})

    assert exc_info.value.code == ErrorCode.CONFLICT


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_booking_unknown_event(booking_service):
    with pytest.raises(ServiceError) as exc_info:
        await booking_service.create_booking("missing", {"email": "dev@example.com"})

    assert exc_info.value.code == ErrorCode.NOT_FOUND


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_booking_invalid_email(booking_service):
    with pytest.raises(ServiceError) as exc_info:
        await booking_service.create_booking("pycon-workshop", {"email": "nope"})

    assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
    assert exc_info.value.issues[0]["message"] == "Invalid email format"
