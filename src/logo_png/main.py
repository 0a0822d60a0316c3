"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. The live service (cache, subscribers, update loop) is created
here and stored on app.state; lifespan starts and stops its loop.

Because the service exists before lifespan runs, test clients that skip
lifespan still get working /logo.png and /live routes, just without the
background poller.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from logo_png import __version__
from logo_png.api import api_router, root_router
from logo_png.config import settings
from logo_png.live.service import LiveLogoService, build_live_service

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "logo_png.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        source_url=settings.source_url,
    )

    from logo_png.db.engine import engine, init_db
    try:
        await init_db()
        logger.info("logo_png.database_ready")
    except Exception as e:
        logger.warning("logo_png.database_unavailable", error=str(e))
        # History writes will fail and be logged; live delivery still works

    live: LiveLogoService = app.state.live
    live.start()
    logger.info("logo_png.update_loop_started", poll_interval=settings.poll_interval_seconds)

    yield

    logger.info("logo_png.shutdown")
    await live.stop()
    await engine.dispose()


def create_app(live: LiveLogoService | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="Logo PNG",
        description="Live logo renderer with history",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.live = live or build_live_service(settings)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → GZip → Security → RequestId → handler

    from logo_png.middleware.request_id import RequestIdMiddleware
    from logo_png.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(root_router)
    app.include_router(api_router)

    from logo_png.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: logo_png.main:app)
app = create_app()
