"""Service layer for bookings."""

from typing import Any, Mapping

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.metrics import record_booking_creation
from app.core.errors import (
    ServiceError,
    conflict_error,
    issues_from,
    not_found_error,
    unknown_error,
    validation_error,
)
from app.core.logging_config import get_logger
from app.db.models import Event
from app.repositories.booking_repository import BookingRepository, EventDoesNotExist
from app.repositories.event_repository import EventRepository
from app.schemas.events import BookingCountDTO, BookingDTO, CreateBookingInput, validate_slug

logger = get_logger(__name__)


class BookingService:
    """Books emails onto events."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.events = EventRepository(session)
        self.bookings = BookingRepository(session)

    async def _require_event(self, slug: str) -> Event:
        try:
            checked = validate_slug(slug)
        except ValidationError as exc:
            raise validation_error("Invalid slug format", issues=issues_from(exc))

        event = await self.events.get_by_slug(checked)
        if event is None:
            raise not_found_error(f"Event with slug '{checked}' not found")
        return event

    async def create_booking(self, slug: str, payload: Mapping[str, Any]) -> BookingDTO:
        """Book an email onto the event identified by ``slug``.

        Raises:
            ServiceError: VALIDATION_ERROR, NOT_FOUND, CONFLICT or UNKNOWN
        """
        try:
            booking = await self._create_booking(slug, payload)
        except ServiceError as exc:
            record_booking_creation(exc.code.value.lower())
            raise

        record_booking_creation("created")
        return booking

    async def _create_booking(self, slug: str, payload: Mapping[str, Any]) -> BookingDTO:
        try:
            data = CreateBookingInput.model_validate(payload)
        except ValidationError as exc:
            raise validation_error("Validation failed", issues=issues_from(exc))

        event = await self._require_event(slug)
        event_id = event.id

        try:
            booking = await self.bookings.create(event_id=event_id, email=data.email)
            await self.session.commit()
        except EventDoesNotExist as exc:
            # Event deleted between lookup and insert
            await self.session.rollback()
            raise not_found_error(str(exc))
        except IntegrityError:
            await self.session.rollback()
            raise conflict_error("This email is already booked for the event")
        except Exception as exc:
            await self.session.rollback()
            logger.error(
                "create_booking_failed",
                event_id=event_id,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            raise unknown_error("Failed to create booking")

        logger.info("booking_created", booking_id=booking.id, event_id=event_id)
        return BookingDTO.model_validate(booking)

    async def count_bookings(self, slug: str) -> BookingCountDTO:
        event = await self._require_event(slug)
        count = await self.bookings.count_by_event(event.id)
        return BookingCountDTO(event_id=event.id, count=count)
