"""API route aggregation.

All routers registered here get mounted in main.py. JSON APIs live under
/api/v1; the image, viewer page and liveness probe keep their original
root-level paths so existing embeds keep working.
"""

from fastapi import APIRouter

from logo_png.api.health import probe_router
from logo_png.api.health import router as health_router
from logo_png.api.history import router as history_router
from logo_png.api.logo import router as logo_router
from logo_png.api.pages import router as pages_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health_router, tags=["health"])
api_router.include_router(history_router, tags=["history"])

root_router = APIRouter()
root_router.include_router(pages_router)
root_router.include_router(logo_router, tags=["logo"])
root_router.include_router(probe_router, tags=["health"])
