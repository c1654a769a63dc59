"""
Event Service Layer - Business Logic Orchestration

Listing, slug lookup and creation of events. The service knows nothing
about HTTP: it returns DTOs and raises ServiceError, which the exception
handlers turn into the failure envelope.
"""
import json
import time
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.metrics import record_event_creation, record_image_upload
from app.core.errors import (
    ServiceError,
    conflict_error,
    issues_from,
    not_found_error,
    unknown_error,
    validation_error,
)
from app.core.logging_config import get_logger
from app.db.models import Event, slugify
from app.repositories.event_repository import EventRepository
from app.schemas.events import (
    CreateEventInput,
    EventDTO,
    EventsListDTO,
    SLUG_PATTERN,
    validate_slug,
)
from app.services.image_uploader import ImageUploader, InvalidImage, UploadedImage

logger = get_logger(__name__)

EVENT_FIELDS = (
    "title",
    "description",
    "overview",
    "venue",
    "location",
    "date",
    "time",
    "mode",
    "audience",
    "organizer",
)
LIST_FIELDS = ("agenda", "tags")


def to_event_dto(event: Event) -> EventDTO:
    return EventDTO.model_validate(event)


def _parse_json_list(raw: Any, field: str) -> Any:
    """Decode a JSON array sent as a form string; lists pass through."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    try:
        return json.loads(raw)
    except (TypeError, ValueError, RecursionError):
        raise validation_error(
            "Validation failed",
            issues=[{
                "path": [field],
                "message": f"{field.capitalize()} must be a JSON array of strings",
                "type": "json_invalid",
            }],
        )


class EventService:
    """
    Core service for event operations.

    Responsibilities:
    - Validate input (slugs, event fields, images)
    - Coordinate repository and image uploader
    - Commit or roll back the session
    - Classify failures as validation, not-found, conflict or unknown
    """

    def __init__(self, session: AsyncSession, uploader: Optional[ImageUploader] = None):
        self.session = session
        self.events = EventRepository(session)
        self.uploader = uploader

    def _checked_slug(self, slug: str) -> str:
        try:
            return validate_slug(slug)
        except ValidationError as exc:
            raise validation_error("Invalid slug format", issues=issues_from(exc))

    async def list_events(self) -> EventsListDTO:
        """All events, newest first."""
        try:
            events = await self.events.list_recent()
        except Exception as exc:
            logger.error("list_events_failed", error_type=type(exc).__name__, error=str(exc), exc_info=True)
            raise unknown_error("Failed to fetch events")

        dtos = [to_event_dto(event) for event in events]
        logger.debug("events_listed", total=len(dtos))
        return EventsListDTO(events=dtos, total=len(dtos))

    async def _require_event(self, slug: str) -> Event:
        checked = self._checked_slug(slug)
        try:
            event = await self.events.get_by_slug(checked)
        except Exception as exc:
            logger.error("get_event_failed", slug=checked, error_type=type(exc).__name__, error=str(exc), exc_info=True)
            raise unknown_error("Failed to fetch event")

        if event is None:
            logger.info("event_not_found", slug=checked)
            raise not_found_error(f"Event with slug '{checked}' not found")
        return event

    async def get_event_by_slug(self, slug: str) -> EventDTO:
        """Look up a single event.

        Raises:
            ServiceError: VALIDATION_ERROR for a malformed slug, NOT_FOUND if absent
        """
        return to_event_dto(await self._require_event(slug))

    async def get_similar_events_by_slug(self, slug: str) -> EventsListDTO:
        """Other events sharing at least one tag with the given event."""
        event = await self._require_event(slug)
        try:
            similar = await self.events.find_sharing_tags(event)
        except Exception as exc:
            logger.error("similar_events_failed", slug=event.slug, error_type=type(exc).__name__, error=str(exc), exc_info=True)
            raise unknown_error("Failed to fetch event")

        dtos = [to_event_dto(other) for other in similar]
        return EventsListDTO(events=dtos, total=len(dtos))

    async def create_event(self, form: Mapping[str, Any], image: Optional[bytes]) -> EventDTO:
        """Create a new event from submitted form fields and an image.

        Flow:
        1. Validate the image
        2. Decode agenda/tags and validate every field
        3. Upload the image
        4. Persist the event (removing the image again if that fails)

        Args:
            form: Field values; ``agenda`` and ``tags`` may be JSON array strings
            image: Raw image bytes, or None when no file was sent

        Raises:
            ServiceError: VALIDATION_ERROR, CONFLICT or UNKNOWN
        """
        try:
            return await self._create_event(form, image)
        except ServiceError as exc:
            record_event_creation(exc.code.value.lower())
            raise

    async def _create_event(self, form: Mapping[str, Any], image: Optional[bytes]) -> EventDTO:
        start_time = time.time()

        if self.uploader is None:
            raise unknown_error("Failed to create event")

        if image is None:
            raise validation_error("Image file is required")

        try:
            self.uploader.inspect(image)
        except InvalidImage as exc:
            record_image_upload("rejected")
            raise validation_error(
                str(exc),
                issues=[{"path": ["image"], "message": str(exc), "type": "image_invalid"}],
            )

        raw: Dict[str, Any] = {field: form.get(field) for field in EVENT_FIELDS}
        for field in LIST_FIELDS:
            raw[field] = _parse_json_list(form.get(field), field)

        try:
            validated = CreateEventInput.model_validate(raw)
        except ValidationError as exc:
            logger.info("create_event_validation_failed", error_count=exc.error_count())
            raise validation_error("Validation failed", issues=issues_from(exc))

        # Slugs must stay fetchable through the slug route
        if not SLUG_PATTERN.match(slugify(validated.title)):
            raise validation_error(
                "Validation failed",
                issues=[{
                    "path": ["title"],
                    "message": "Title must contain letters or numbers and produce a valid slug",
                    "type": "title_no_slug",
                }],
            )

        try:
            uploaded = await self.uploader.upload(image)
        except InvalidImage as exc:
            record_image_upload("rejected")
            raise validation_error(str(exc))
        except Exception as exc:
            record_image_upload("failed")
            logger.error("image_upload_failed", error_type=type(exc).__name__, error=str(exc), exc_info=True)
            raise unknown_error("Failed to create event")
        record_image_upload("stored")

        data = validated.model_dump(mode="json")
        try:
            event = await self.events.create(**data, image=uploaded.url)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            await self._discard_image(uploaded)
            logger.info("create_event_conflict", slug=slugify(validated.title))
            raise conflict_error("An event with this title already exists")
        except ValueError as exc:
            await self.session.rollback()
            await self._discard_image(uploaded)
            raise validation_error(str(exc))
        except Exception as exc:
            await self.session.rollback()
            await self._discard_image(uploaded)
            logger.error("create_event_failed", error_type=type(exc).__name__, error=str(exc), exc_info=True)
            raise unknown_error("Failed to create event")

        record_event_creation("created")
        logger.info(
            "event_created",
            event_id=event.id,
            slug=event.slug,
            image=uploaded.path,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )
        return to_event_dto(event)

    async def create_event_from_object(self, data: Mapping[str, Any], image: Optional[bytes]) -> EventDTO:
        """Programmatic variant of create_event taking list-valued agenda/tags."""
        form: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, (list, tuple)):
                form[key] = json.dumps(list(value))
            elif value is not None:
                form[key] = str(value.value if hasattr(value, "value") else value)
        return await self.create_event(form, image)

    async def _discard_image(self, uploaded: UploadedImage) -> None:
        """Remove an image whose event was never saved."""
        try:
            await self.uploader.remove(uploaded.path)
        except Exception as exc:
            logger.warning("orphan_image_cleanup_failed", path=uploaded.path, error=str(exc))
