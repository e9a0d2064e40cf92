"""
Upload pipeline: stream a request body straight to disk.

Chunks are appended as they arrive; the body is never held in memory as a
whole. A failed upload leaves whatever was written on disk (there is no
rollback) and reports the failure to the caller.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import AsyncIterable

from raindrops.errors import ErrorCode, RaindropsError

logger = logging.getLogger(__name__)


async def write_stream(destination: Path, chunks: AsyncIterable[bytes], max_bytes: int) -> int:
    """
    Write `chunks` to `destination`, creating parent directories first.

    Returns the number of bytes written.

    Raises:
        RaindropsError(UPLOAD_OPEN_FAILED): directory or file could not be created
        RaindropsError(UPLOAD_TOO_LARGE): body grew past max_bytes
        RaindropsError(UPLOAD_WRITE_FAILED): I/O error or client gone mid-stream
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        handle = open(destination, "wb")
    except OSError as e:
        logger.error(f"[Upload] Cannot create {destination}: {e}")
        raise RaindropsError(
            ErrorCode.UPLOAD_OPEN_FAILED,
            "Could not create destination file",
            details={"path": str(destination), "reason": str(e)},
        ) from e

    written = 0
    try:
        async for chunk in chunks:
            if not chunk:
                continue
            written += len(chunk)
            if written > max_bytes:
                raise RaindropsError(
                    ErrorCode.UPLOAD_TOO_LARGE,
                    "Upload exceeds the maximum accepted size",
                    details={"path": str(destination), "max_bytes": max_bytes},
                )
            await asyncio.to_thread(handle.write, chunk)
    except RaindropsError:
        raise
    except asyncio.CancelledError:
        raise
    except Exception as e:
        # OSError from the disk, or ClientDisconnect from the request stream
        logger.warning(f"[Upload] Aborted {destination} after {written} bytes: {e!r}")
        raise RaindropsError(
            ErrorCode.UPLOAD_WRITE_FAILED,
            "Upload interrupted",
            details={"path": str(destination), "bytes_written": written, "reason": repr(e)},
        ) from e
    finally:
        handle.close()

    logger.info(f"[Upload] Stored {destination} ({written} bytes)")
    return written
