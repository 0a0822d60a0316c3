"""Live logo service — owns the cache, the subscriber set and the update loop.

Learn: Everything mutable lives on one LiveLogoService instance that the app
factory stores on `app.state.live`. Tests build their own instance with fake
collaborators; nothing here is a module-level singleton.
"""

import asyncio
from typing import Optional

import structlog
from starlette.requests import HTTPConnection

from logo_png.config import Settings
from logo_png.history.store import save_logo
from logo_png.live.broadcaster import Broadcaster
from logo_png.live.cache import ChangeDetectingCache
from logo_png.live.registry import Outbox, Subscriber, SubscriberRegistry
from logo_png.live.source import SourceFetcher
from logo_png.live.update_loop import Persist, Renderer, UpdateLoop
from logo_png.logo.models import RenderOptions
from logo_png.logo.render import render

logger = structlog.get_logger()


class LiveLogoService:
    def __init__(
        self,
        fetcher: SourceFetcher,
        persist: Persist,
        *,
        poll_interval: float = 1.0,
        subscriber_queue_size: int = 0,
        persist_timeout: float = 5.0,
        renderer: Renderer = render,
    ):
        self.fetcher = fetcher
        self.renderer = renderer
        self.subscriber_queue_size = subscriber_queue_size

        self.cache = ChangeDetectingCache()
        self.registry = SubscriberRegistry()
        self.broadcaster = Broadcaster(self.registry)
        self.update_loop = UpdateLoop(
            fetcher,
            self.cache,
            self.broadcaster,
            persist=persist,
            renderer=renderer,
            poll_interval=poll_interval,
            persist_timeout=persist_timeout,
        )
        self._task: Optional[asyncio.Task] = None

    # ─── Subscribers ─────────────────────────────────────────

    def subscribe(self) -> Subscriber:
        """Register a new viewer and return its handle."""
        outbox = Outbox(max_size=self.subscriber_queue_size)
        subscriber_id = self.registry.register(outbox)
        logger.info(
            "live.subscriber_connected",
            subscriber_id=subscriber_id,
            subscribers=len(self.registry),
        )
        return Subscriber(subscriber_id, outbox)

    def unsubscribe(self, subscriber: Subscriber) -> None:
        subscriber.outbox.close()
        if self.registry.unregister(subscriber.id):
            logger.info(
                "live.subscriber_disconnected",
                subscriber_id=subscriber.id,
                subscribers=len(self.registry),
            )

    # ─── Rendering ───────────────────────────────────────────

    async def current_image(self, options: RenderOptions) -> bytes:
        """Render the current snapshot with caller-supplied options."""
        description = self.cache.snapshot()
        return await asyncio.to_thread(self.renderer, description, options)

    # ─── Lifecycle ───────────────────────────────────────────

    def start(self) -> None:
        self._task = asyncio.create_task(self.update_loop.run_loop(), name="update-loop")

    async def stop(self) -> None:
        self.update_loop.stop()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.fetcher.aclose()

    def stats(self) -> dict:
        return {
            "subscribers": len(self.registry),
            "loop_state": self.update_loop.state.value,
            "changes": self.update_loop.changes,
            "last_change_at": self.update_loop.last_change_at,
        }


def build_live_service(settings: Settings) -> LiveLogoService:
    """Wire the production collaborators from settings."""
    fetcher = SourceFetcher(settings.source_url, timeout=settings.fetch_timeout_seconds)
    return LiveLogoService(
        fetcher,
        persist=save_logo,
        poll_interval=settings.poll_interval_seconds,
        subscriber_queue_size=settings.subscriber_queue_size,
        persist_timeout=settings.persist_timeout_seconds,
    )


def get_live_service(conn: HTTPConnection) -> LiveLogoService:
    """FastAPI dependency — the service created by the app factory."""
    return conn.app.state.live
