"""Logo image endpoint.

Learn: GET /logo.png renders the cached description on demand, so callers
can pick their own scale and character without waiting for the next
change. A render failure never turns into an error page: viewers get a
fixed placeholder PNG and the failure goes to the log.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from logo_png.config import settings
from logo_png.live.service import LiveLogoService, get_live_service
from logo_png.logo.models import RenderOptions
from logo_png.logo.render import CHARACTER_COUNT, PNG_MEDIA_TYPE, RenderError, placeholder_png

logger = structlog.get_logger()
router = APIRouter()


@router.get(
    "/logo.png",
    response_class=Response,
    responses={200: {"content": {PNG_MEDIA_TYPE: {}}}},
)
async def get_logo_png(
    size: int = Query(1, ge=1, le=settings.max_pixel_scale, description="Pixel scale"),
    character: Optional[int] = Query(
        None, ge=0, lt=CHARACTER_COUNT, description="Render a single character"
    ),
    live: LiveLogoService = Depends(get_live_service),
):
    options = RenderOptions(size=size, character=character)
    try:
        png = await live.current_image(options)
    except RenderError as e:
        logger.error("logo.render_failed", error=str(e), size=size, character=character)
        png = placeholder_png()

    return Response(
        content=png,
        media_type=PNG_MEDIA_TYPE,
        headers={"Cache-Control": "no-cache"},
    )
