"""Repository for Event models."""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Event
from app.repositories.base import BaseRepository


class EventRepository(BaseRepository[Event]):
    """Repository for accessing event data."""

    def __init__(self, session: AsyncSession):
        super().__init__(Event, session)

    async def list_recent(self) -> List[Event]:
        """All events, newest first."""
        stmt = select(self.model).order_by(self.model.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_slug(self, slug: str) -> Optional[Event]:
        """Get event by its unique slug."""
        stmt = select(self.model).where(self.model.slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_sharing_tags(self, event: Event) -> List[Event]:
        """Other events that share at least one tag with ``event``.

        Tags live in a JSON column, so the overlap test runs here rather
        than in SQL.
        """
        wanted = set(event.tags or [])
        if not wanted:
            return []

        stmt = (
            select(self.model)
            .where(self.model.id != event.id)
            .order_by(self.model.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [other for other in result.scalars().all() if wanted.intersection(other.tags or [])]

    async def delete_all(self) -> int:
        """Delete every event (used by the seed script)."""
        result = await self.session.execute(delete(self.model))
        return result.rowcount
