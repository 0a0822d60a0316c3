"""Update loop — poll, detect change, render, broadcast, persist.

Learn: One long-lived asyncio task, started from the FastAPI lifespan. Each
cycle walks a small state machine:

  Idle → Fetching → Deciding → Propagating → Idle
            │           │
            └ fetch     └ unchanged → Idle
              failed → Idle

Nothing in a cycle is fatal. A failed fetch waits for the next tick, a
failed render skips that cycle's broadcast and persist, and a failed or
timed-out persist is logged after subscribers already have the frame.
Live delivery comes before history completeness.
"""

import asyncio
import enum
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Optional

import structlog

from logo_png.history.store import StoreError
from logo_png.live.broadcaster import Broadcaster
from logo_png.live.cache import ChangeDetectingCache, SwapResult
from logo_png.live.source import FetchError, SourceFetcher
from logo_png.logo.models import DEFAULT_OPTIONS, LogoDescription, RenderOptions
from logo_png.logo.render import RenderError, render

logger = structlog.get_logger()

Renderer = Callable[[LogoDescription, RenderOptions], bytes]
Persist = Callable[[bytes], Awaitable[None]]


class LoopState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    DECIDING = "deciding"
    PROPAGATING = "propagating"


class UpdateLoop:
    """Background poller that turns upstream changes into live frames.

    Usage:
        loop = UpdateLoop(fetcher, cache, broadcaster, persist=save_logo)
        asyncio.create_task(loop.run_loop())
    """

    def __init__(
        self,
        fetcher: SourceFetcher,
        cache: ChangeDetectingCache,
        broadcaster: Broadcaster,
        persist: Persist,
        renderer: Renderer = render,
        poll_interval: float = 1.0,
        persist_timeout: float = 5.0,
    ):
        self.fetcher = fetcher
        self.cache = cache
        self.broadcaster = broadcaster
        self.persist = persist
        self.renderer = renderer
        self.poll_interval = poll_interval
        self.persist_timeout = persist_timeout

        self.state = LoopState.IDLE
        self.changes = 0
        self.last_change_at: Optional[datetime] = None
        self._running = False

    async def run_loop(self) -> None:
        """Main loop — one cycle, then sleep poll_interval, until stopped."""
        self._running = True
        logger.info("update_loop.started", poll_interval=self.poll_interval)

        while self._running:
            try:
                await self.run_once()
            except Exception:
                logger.exception("update_loop.error")
                self.state = LoopState.IDLE
            await asyncio.sleep(self.poll_interval)

    async def run_once(self) -> bool:
        """Run a single cycle. Returns True if a change was propagated."""
        self.state = LoopState.FETCHING
        try:
            description = await self.fetcher.fetch()
        except FetchError as e:
            logger.warning("update_loop.fetch_failed", kind=e.kind, error=str(e))
            self.state = LoopState.IDLE
            return False

        self.state = LoopState.DECIDING
        if self.cache.compare_and_swap(description) is SwapResult.UNCHANGED:
            self.state = LoopState.IDLE
            return False

        self.state = LoopState.PROPAGATING
        try:
            await self.notify_change_and_persist(description)
        finally:
            self.state = LoopState.IDLE
        return True

    async def notify_change_and_persist(self, description: LogoDescription) -> None:
        """Render the new description, broadcast it, then hand it to history."""
        try:
            image = await asyncio.to_thread(self.renderer, description, DEFAULT_OPTIONS)
        except RenderError as e:
            logger.error("update_loop.render_failed", error=str(e))
            return

        delivered = self.broadcaster.broadcast(image)
        self.changes += 1
        self.last_change_at = datetime.now(timezone.utc)
        logger.info("update_loop.logo_changed", subscribers=delivered, bytes=len(image))

        try:
            await asyncio.wait_for(self.persist(image), timeout=self.persist_timeout)
        except StoreError as e:
            logger.error("history.persist_failed", error=str(e))
        except asyncio.TimeoutError:
            logger.error(
                "history.persist_failed",
                error=f"timed out after {self.persist_timeout}s",
            )

    def stop(self) -> None:
        """Signal the loop to stop after the current cycle."""
        self._running = False
        logger.info("update_loop.stopping")
