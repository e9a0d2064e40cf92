"""
Directory downloads as an on-the-fly zip stream.

`zip -r - <dir>` runs in the directory's parent and writes the archive to
its stdout; the bytes are forwarded to the client as they are produced.
Nothing is staged on disk and the archive is never held in memory.
"""
from __future__ import annotations

import asyncio
import logging
import shutil
import urllib.parse
from pathlib import Path
from typing import AsyncIterator, Optional

from raindrops.base.config import ArchiveConfig
from raindrops.errors import ErrorCode, RaindropsError

logger = logging.getLogger(__name__)


def content_disposition_attachment(filename: str) -> str:
    """
    Content-Disposition for a download, RFC 6266 style.

    ASCII names get a plain quoted filename; anything else also gets a
    UTF-8 `filename*` so browsers keep the original name.
    """
    fallback = "".join(ch if 0x20 <= ord(ch) < 0x7F else "_" for ch in filename)
    fallback = fallback.replace("\\", "\\\\").replace('"', '\\"')
    if fallback == filename:
        return f'attachment; filename="{fallback}"'
    filename_star = "UTF-8''" + urllib.parse.quote(filename, safe="")
    return f'attachment; filename="{fallback}"; filename*={filename_star}'


class ArchiveStream:
    """
    One zip subprocess feeding one HTTP response.

    Usage:
        stream = ArchiveStream(directory, config)
        await stream.start()        # RaindropsError before any byte is sent
        async for chunk in stream:  # kills the subprocess if left early
            ...
    """

    def __init__(self, directory: Path, config: Optional[ArchiveConfig] = None):
        self.directory = directory
        self.config = config or ArchiveConfig()
        self.proc: Optional[asyncio.subprocess.Process] = None

    @property
    def filename(self) -> str:
        return f"{self.directory.name}.zip"

    def _find_binary(self) -> Optional[str]:
        return shutil.which(self.config.binary, path=self.config.search_path)

    async def start(self) -> None:
        binary = self._find_binary()
        if binary is None:
            logger.error(f"[Archive] '{self.config.binary}' not found in {self.config.search_path}")
            raise RaindropsError(
                ErrorCode.ARCHIVE_START_FAILED,
                "Failed to create zip archive",
                details={"binary": self.config.binary, "reason": "not found"},
            )

        try:
            self.proc = await asyncio.create_subprocess_exec(
                binary, "-r", "-", self.directory.name,
                cwd=str(self.directory.parent),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                env={"PATH": self.config.search_path},
            )
        except OSError as e:
            logger.error(f"[Archive] Failed to start {binary} for {self.directory}: {e}")
            raise RaindropsError(
                ErrorCode.ARCHIVE_START_FAILED,
                "Failed to create zip archive",
                details={"binary": binary, "reason": str(e)},
            ) from e

        logger.info(f"[Archive] Streaming {self.directory} (pid={self.proc.pid})")

    async def __aiter__(self) -> AsyncIterator[bytes]:
        if self.proc is None:
            await self.start()
        proc = self.proc
        if proc is None or proc.stdout is None:
            raise RaindropsError(
                ErrorCode.SYSTEM_INTERNAL_ERROR,
                "Archiver has no output pipe",
                details={"directory": str(self.directory)},
            )

        sent = 0
        try:
            while True:
                chunk = await proc.stdout.read(self.config.chunk_size)
                if not chunk:
                    break
                sent += len(chunk)
                yield chunk

            returncode = await proc.wait()
            if returncode != 0:
                logger.warning(f"[Archive] zip exited with {returncode} for {self.directory}")
            else:
                logger.info(f"[Archive] Finished {self.filename} ({sent} bytes)")
        finally:
            self.terminate()

    def terminate(self) -> None:
        """Kill the archiver if it is still running (client left early)."""
        proc = self.proc
        if proc is None or proc.returncode is not None:
            return
        logger.info(f"[Archive] Client left early; killing zip pid={proc.pid}")
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        # The loop's child watcher reaps the killed process.
