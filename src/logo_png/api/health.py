"""Health check endpoints.

Learn: Two flavours:
- GET /health → plain "OK", for load balancers and container probes
- GET /api/v1/health → JSON with Postgres connectivity and live-loop stats
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy import text

from logo_png import __version__
from logo_png.db.engine import engine
from logo_png.live.service import LiveLogoService, get_live_service

router = APIRouter()
probe_router = APIRouter()


@probe_router.get("/health", response_class=PlainTextResponse)
async def liveness():
    return "OK"


@router.get("/health")
async def health_check(live: LiveLogoService = Depends(get_live_service)):
    """Check server health, database connectivity and live distribution state."""
    checks = {"server": "ok", "version": __version__}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["postgres"] = "ok"
    except Exception as e:
        checks["postgres"] = f"error: {e}"

    status = "healthy" if checks["postgres"] == "ok" else "degraded"

    return {"status": status, **checks, "live": live.stats()}
