"""
PIN session guard, login routes and the read/write permission gate.

A session is a cookie whose value equals the current PIN. There is no
hashing and no expiry: the PIN is a short code read off the host's screen,
and regenerating it logs every client out at once.
"""
from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from raindrops.errors import ErrorCode, RaindropsError
from raindrops.server.state import ApplicationState, get_app_state

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# Reachable without a session: the login page needs its assets, and an
# unauthenticated client still observes connectivity through /events.
PUBLIC_PATHS = frozenset({"/login", "/logo", "/style.css", "/app.js", "/events"})

LOGIN_ERROR_MESSAGE = "Incorrect PIN"


def login_page(assets_dir: Path, error: bool = False) -> Response:
    """Render login.html; 401 when answering a failed attempt, 200 otherwise."""
    try:
        html = (assets_dir / "login.html").read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"[Auth] Cannot load login page: {e}")
        return HTMLResponse("Error loading login UI.", status_code=500)

    html = html.replace("{{ERROR}}", LOGIN_ERROR_MESSAGE if error else "")
    return HTMLResponse(html, status_code=401 if error else 200)


class AuthGuardMiddleware(BaseHTTPMiddleware):
    """
    Lets a request through when its path is public or its session cookie
    matches the current PIN. Anything else gets the login page instead of
    the resource it asked for.
    """

    def __init__(self, app, state: ApplicationState):
        super().__init__(app)
        self.state = state

    async def dispatch(self, request, call_next):
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)

        cookie = request.cookies.get(self.state.config.security.cookie_name)
        if self.state.control.check_pin(cookie):
            return await call_next(request)

        logger.debug(f"[Auth] No valid session for {request.method} {request.url.path}")
        return login_page(self.state.config.web.assets_dir)


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

async def read_submitted_pin(request: Request) -> str:
    """
    PIN from a form field named `pin`, or else the whole body as text.

    Raises RaindropsError(REQUEST_MISSING_FIELD) for an empty body.
    """
    body = await request.body()
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        value = form.get("pin")
        if isinstance(value, str):
            return value.strip()

    if not body:
        raise RaindropsError(
            ErrorCode.REQUEST_MISSING_FIELD,
            "PIN required",
            details={"field": "pin"},
        )
    try:
        return body.decode("utf-8").strip()
    except UnicodeDecodeError as e:
        raise RaindropsError(
            ErrorCode.REQUEST_INVALID_BODY,
            "PIN must be text",
        ) from e


@router.get("/login")
async def get_login(state: ApplicationState = Depends(get_app_state)):
    return login_page(state.config.web.assets_dir)


@router.post("/login")
async def post_login(request: Request, state: ApplicationState = Depends(get_app_state)):
    pin = await read_submitted_pin(request)

    if not state.control.check_pin(pin):
        client = request.client.host if request.client else "unknown"
        logger.info(f"[Auth] Rejected PIN from {client}")
        return login_page(state.config.web.assets_dir, error=True)

    response = RedirectResponse(url="/", status_code=303)
    response.set_cookie(
        state.config.security.cookie_name,
        pin,
        httponly=True,
        samesite="lax",
    )
    return response


# ---------------------------------------------------------------------------
# Permission gate
# ---------------------------------------------------------------------------

async def require_read(state: ApplicationState = Depends(get_app_state)) -> bool:
    if not state.control.read_allowed:
        raise RaindropsError(
            ErrorCode.AUTH_READ_DISABLED,
            "Downloads are disabled on this host",
        )
    return True


async def require_write(state: ApplicationState = Depends(get_app_state)) -> bool:
    if not state.control.write_allowed:
        raise RaindropsError(
            ErrorCode.AUTH_WRITE_DISABLED,
            "Uploads are disabled on this host",
        )
    return True
