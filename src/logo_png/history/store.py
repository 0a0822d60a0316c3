"""History store — append-only timeline of rendered logos.

Learn: Same shape as an event store: rows are only ever inserted, never
updated. The database assigns `created_at`, which doubles as the primary
key and the ordering key, so the history API can address an entry by its
exact timestamp.

Writes from the update loop go through save_logo(), which opens its own
session and turns any database failure into StoreError. A failed write is
logged by the caller and never reaches live viewers.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logo_png.db.engine import async_session_factory
from logo_png.db.models import TimelineEntry


class StoreError(Exception):
    pass


class HistoryEntryNotFoundError(Exception):
    pass


class HistoryStore:
    """Timeline queries backed by PostgreSQL."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, image_png: bytes) -> datetime:
        """Append a logo state. Returns the store-assigned timestamp."""
        entry = TimelineEntry(image_png=image_png)
        self.db.add(entry)
        await self.db.flush()  # created_at comes back via RETURNING
        return entry.created_at

    async def list_all(self, limit: Optional[int] = None) -> list[TimelineEntry]:
        q = select(TimelineEntry).order_by(TimelineEntry.created_at)
        if limit is not None:
            q = q.limit(limit)
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def get_by_timestamp(self, created_at: datetime) -> bytes:
        result = await self.db.execute(
            select(TimelineEntry.image_png).where(TimelineEntry.created_at == created_at)
        )
        image = result.scalar_one_or_none()
        if image is None:
            raise HistoryEntryNotFoundError(f"No logo stored at {created_at.isoformat()}")
        return image

    async def list_timestamps(self) -> list[datetime]:
        result = await self.db.execute(
            select(TimelineEntry.created_at).order_by(TimelineEntry.created_at)
        )
        return list(result.scalars().all())


async def save_logo(image_png: bytes) -> None:
    """Persist one rendered logo in its own transaction."""
    try:
        async with async_session_factory() as db:
            await HistoryStore(db).insert(image_png)
            await db.commit()
    except (SQLAlchemyError, OSError) as e:
        raise StoreError(f"Could not save logo: {e}") from e
