"""History API — browse past logo states.

Learn: Routes over the timeline table:
- GET /history → every entry as {time, logo(base64 PNG)}, oldest first
- GET /history/index → timestamps only, for cheap scrubbing UIs
- GET /history/{timestamp} → the raw PNG stored at that exact instant

/history/index is declared before /history/{timestamp} so "index" is never
parsed as a timestamp.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from logo_png.db.engine import get_db
from logo_png.history.store import HistoryEntryNotFoundError, HistoryStore
from logo_png.logo.render import PNG_MEDIA_TYPE
from logo_png.schemas.history import HistoryIndexEntry, LogoState

router = APIRouter()


def _get_store(db: AsyncSession = Depends(get_db)) -> HistoryStore:
    return HistoryStore(db)


@router.get("/history", response_model=list[LogoState])
async def get_history(
    limit: Optional[int] = Query(None, ge=1),
    store: HistoryStore = Depends(_get_store),
):
    """All stored logo states, oldest first."""
    entries = await store.list_all(limit=limit)
    return [LogoState.model_validate(e) for e in entries]


@router.get("/history/index", response_model=list[HistoryIndexEntry])
async def get_history_index(store: HistoryStore = Depends(_get_store)):
    """Timestamps of every stored logo state, oldest first."""
    return [HistoryIndexEntry(time=t) for t in await store.list_timestamps()]


@router.get(
    "/history/{timestamp}",
    response_class=Response,
    responses={200: {"content": {PNG_MEDIA_TYPE: {}}}, 404: {}},
)
async def get_history_entry(
    timestamp: datetime,
    store: HistoryStore = Depends(_get_store),
):
    """The PNG stored at exactly `timestamp` (ISO 8601, as listed by /history/index)."""
    try:
        image = await store.get_by_timestamp(timestamp)
    except HistoryEntryNotFoundError:
        raise HTTPException(status_code=404, detail="No logo stored at that time")
    return Response(content=image, media_type=PNG_MEDIA_TYPE)
