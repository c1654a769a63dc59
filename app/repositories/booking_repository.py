"""Repository for Booking models."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Booking, Event
from app.repositories.base import BaseRepository


class EventDoesNotExist(LookupError):
    """Raised when a booking references an event that is not stored."""


class BookingRepository(BaseRepository[Booking]):
    """Repository for accessing booking data."""

    def __init__(self, session: AsyncSession):
        super().__init__(Booking, session)

    async def create(self, **kwargs) -> Booking:
        """Create a booking, refusing orphans.

        Raises:
            EventDoesNotExist: If ``event_id`` names no stored event
        """
        event_id = kwargs.get("event_id")
        if event_id is None or await self.session.get(Event, event_id) is None:
            raise EventDoesNotExist(
                f"Event with ID {event_id} does not exist. "
                "Cannot create booking for non-existent event."
            )
        return await super().create(**kwargs)

    async def count_by_event(self, event_id: str) -> int:
        stmt = select(func.count(self.model.id)).where(self.model.event_id == event_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def delete_all(self) -> int:
        result = await self.session.execute(delete(self.model))
        return result.rowcount
