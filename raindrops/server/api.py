# raindrops/server/api.py
# FastAPI application for the file drop server

from __future__ import annotations

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from raindrops import __version__
from raindrops.errors import RaindropsError
from raindrops.server.routers import auth, files, realtime, system
from raindrops.server.state import ApplicationState

logger = logging.getLogger(__name__)


async def raindrops_error_handler(request: Request, exc: RaindropsError):
    """Convert RaindropsError into its HTTP status and a JSON body."""
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(f"[API] {exc.code.value}: {exc.message} ({request.method} {request.url.path})", extra={"details": exc.details})
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict()
    )


def create_app(state: Optional[ApplicationState] = None) -> FastAPI:
    """
    Build the application around one ApplicationState.

    The state is injected rather than imported so the desktop shell (or a
    test) decides which PIN store, flags and change bus the server uses.
    """
    state = state or ApplicationState.instance()

    app = FastAPI(
        title="Raindrops",
        description="Local network file drop",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.raindrops = state

    app.add_exception_handler(RaindropsError, raindrops_error_handler)
    app.add_middleware(auth.AuthGuardMiddleware, state=state)

    app.include_router(system.router)
    app.include_router(auth.router)
    app.include_router(files.router)
    app.include_router(realtime.router)

    logger.info(f"[API] Serving {state.root}")
    return app


def serve(state: Optional[ApplicationState] = None, host: Optional[str] = None, port: Optional[int] = None):
    """Run the server until interrupted."""
    state = state or ApplicationState.instance()
    config = state.config
    uvicorn.run(
        create_app(state),
        host=host or config.host,
        port=port or config.port,
        log_level="debug" if config.debug else "info",
        timeout_keep_alive=30,
    )
