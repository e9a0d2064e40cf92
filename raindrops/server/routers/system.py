from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel

from raindrops.errors import ErrorCode, RaindropsError
from raindrops.server.state import ApplicationState, get_app_state

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])

LOGO_SHAPES = "path,circle,rect,polygon,ellipse"


class PermissionsResponse(BaseModel):
    read: bool
    write: bool


def read_asset(assets_dir: Path, name: str) -> Optional[str]:
    try:
        return (assets_dir / name).read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"[Web] Missing asset {name}: {e}")
        return None


def _asset_response(state: ApplicationState, name: str, media_type: str) -> Response:
    text = read_asset(state.config.web.assets_dir, name)
    if text is None:
        raise RaindropsError(
            ErrorCode.RESOURCE_NOT_FOUND,
            f"{name} not found",
            details={"asset": name},
        )
    return Response(content=text, media_type=media_type)


def recolor_svg(svg: str, color: str) -> str:
    """Force every shape in the SVG to `color` with an injected style block."""
    style = f"<style>{LOGO_SHAPES}{{fill:{color} !important;}}</style>"
    if "</svg>" not in svg:
        return svg + style
    return svg.replace("</svg>", f"{style}</svg>")


@router.get("/", response_class=HTMLResponse)
async def index(state: ApplicationState = Depends(get_app_state)):
    html = read_asset(state.config.web.assets_dir, "index.html")
    if html is None:
        return HTMLResponse("Error loading UI.", status_code=500)
    return HTMLResponse(html)


@router.get("/style.css")
async def style_css(state: ApplicationState = Depends(get_app_state)):
    return _asset_response(state, "style.css", "text/css")


@router.get("/app.js")
async def app_js(state: ApplicationState = Depends(get_app_state)):
    return _asset_response(state, "app.js", "application/javascript")


@router.get("/logo")
async def logo(state: ApplicationState = Depends(get_app_state)):
    svg = read_asset(state.config.web.assets_dir, "logo.svg")
    if svg is None:
        raise RaindropsError(ErrorCode.RESOURCE_NOT_FOUND, "logo not found")
    return Response(content=recolor_svg(svg, state.config.web.accent_color), media_type="image/svg+xml")


@router.get("/permissions", response_model=PermissionsResponse)
async def permissions(state: ApplicationState = Depends(get_app_state)):
    """Current read/write flags so the UI can hide what it may not use."""
    return state.control.permissions().to_dict()
