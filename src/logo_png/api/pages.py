"""Viewer page — shows the logo and swaps in frames pushed over /live."""

from importlib import resources

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter()


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index():
    return resources.files("logo_png.static").joinpath("index.html").read_text("utf-8")
