"""
File exchange routes: listing, downloads (plain or zipped) and uploads.

Each route consults the permission gate before anything else, then
resolves the client path against the storage root, and only then touches
the filesystem.
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse, PlainTextResponse, StreamingResponse
from pydantic import BaseModel

from raindrops.errors import ErrorCode, RaindropsError
from raindrops.server.routers.auth import require_read, require_write
from raindrops.server.state import ApplicationState, get_app_state
from raindrops.storage.archive import ArchiveStream, content_disposition_attachment
from raindrops.storage.paths import list_directory, resolve_path
from raindrops.storage.uploads import write_stream

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])


class FileItem(BaseModel):
    name: str
    type: str
    size: str


@router.get("/list", response_model=List[FileItem], dependencies=[Depends(require_read)])
async def list_files(
    path: str = Query(default="", description="Directory relative to the storage root"),
    state: ApplicationState = Depends(get_app_state),
):
    directory = resolve_path(state.root, path)
    return [entry.to_dict() for entry in list_directory(directory)]


@router.get("/files/{path:path}", dependencies=[Depends(require_read)])
async def download(path: str, state: ApplicationState = Depends(get_app_state)):
    target = resolve_path(state.root, path)

    if target.is_dir():
        stream = ArchiveStream(target, state.config.archive)
        await stream.start()
        return StreamingResponse(
            stream,
            media_type="application/zip",
            headers={"Content-Disposition": content_disposition_attachment(stream.filename)},
        )

    if not target.is_file():
        raise RaindropsError(
            ErrorCode.PATH_NOT_FOUND,
            "File not found",
            details={"path": path},
        )

    logger.info(f"[Download] {target}")
    return FileResponse(target)


@router.post("/upload", response_class=PlainTextResponse, dependencies=[Depends(require_write)])
async def upload(request: Request, state: ApplicationState = Depends(get_app_state)):
    """
    Stream the request body to `name` under the storage root.

    `name` may contain subdirectories (folder uploads); they are created.
    """
    name = request.query_params.get("name")
    if not name:
        raise RaindropsError(
            ErrorCode.REQUEST_MISSING_FIELD,
            "Query parameter 'name' is required",
            details={"field": "name"},
        )

    destination = resolve_path(state.root, name)
    if destination == state.root or name.endswith(("/", "\\")):
        raise RaindropsError(
            ErrorCode.REQUEST_MISSING_FIELD,
            "Upload name must include a file name",
            details={"name": name},
        )

    state.control.set_busy(True)
    try:
        await write_stream(destination, request.stream(), state.config.storage.max_upload_bytes)
    finally:
        state.control.set_busy(False)

    state.refresh()
    return "OK"
