"""
Path resolution and directory listing for the storage root.

Every caller-supplied path goes through resolve_path() before anything
touches the filesystem. Listings are computed from the live directory on
every call; there is no cache to go stale after an upload.
"""
from __future__ import annotations

import locale
import logging
import os
import re
import shutil
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from raindrops.errors import ErrorCode, RaindropsError

logger = logging.getLogger(__name__)

FOLDER = "folder"
FILE = "file"

_SEGMENT_SPLIT = re.compile(r"[\\/]")
_DIGITS = re.compile(r"(\d+)")


@dataclass(frozen=True)
class FileEntry:
    name: str
    type: str
    size: str

    @property
    def is_folder(self) -> bool:
        return self.type == FOLDER

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type, "size": self.size}


def has_parent_segment(relative: str) -> bool:
    return any(segment == ".." for segment in _SEGMENT_SPLIT.split(relative))


def resolve_path(root: Path, relative: str = "") -> Path:
    """
    Map a client path onto the storage root.

    Raises RaindropsError(PATH_TRAVERSAL) when the path has a ".." segment or
    resolves (symlinks included) to anything outside the root.
    """
    relative = relative or ""
    if has_parent_segment(relative):
        logger.warning(f"[Paths] Rejected path with parent segment: {relative!r}")
        raise RaindropsError(
            ErrorCode.PATH_TRAVERSAL,
            "Path may not contain '..'",
            details={"path": relative},
        )

    root = root.resolve()
    cleaned = relative.lstrip("/\\")
    target = (root / cleaned).resolve() if cleaned else root

    root_str = str(root)
    target_str = str(target)
    if target_str != root_str and not target_str.startswith(root_str.rstrip(os.sep) + os.sep):
        logger.warning(f"[Paths] Rejected path outside storage root: {relative!r} -> {target_str}")
        raise RaindropsError(
            ErrorCode.PATH_TRAVERSAL,
            "Path escapes the storage root",
            details={"path": relative},
        )
    return target


def format_size(num_bytes: int) -> str:
    """
    Human-readable size in decimal units.

    >>> format_size(532), format_size(12_400), format_size(4_210_000)
    ('532 bytes', '12 KB', '4.2 MB')
    """
    if num_bytes == 1:
        return "1 byte"
    if num_bytes < 1000:
        return f"{num_bytes} bytes"

    value = num_bytes / 1000.0
    unit, decimals = "KB", 0
    for next_unit, next_decimals in (("MB", 1), ("GB", 2), ("TB", 2), ("PB", 2)):
        if value < 1000:
            break
        value /= 1000.0
        unit, decimals = next_unit, next_decimals

    text = f"{value:.{decimals}f}"
    if decimals:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {unit}"


def _base_letters(text: str) -> str:
    """Casefolded with accents stripped: "Éclair" -> "eclair"."""
    decomposed = unicodedata.normalize("NFKD", text.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _natural_key(name: str) -> Tuple:
    parts = []
    for chunk in _DIGITS.split(name):
        if not chunk:
            continue
        # \d only matches decimal digits; "²" and friends stay text
        if _DIGITS.fullmatch(chunk):
            parts.append((0, int(chunk), "", ""))
        else:
            parts.append((1, 0, _base_letters(chunk), locale.strxfrm(chunk.casefold())))
    return tuple(parts)


def sort_key(entry: FileEntry) -> Tuple:
    """Folders first, then locale-aware, case-insensitive, numeric-aware name."""
    return (0 if entry.is_folder else 1, _natural_key(entry.name), entry.name)


def list_directory(directory: Path) -> List[FileEntry]:
    """
    Immediate children of `directory`, hidden entries excluded, sorted.

    A directory that is missing or unreadable lists as empty.
    """
    entries: List[FileEntry] = []
    try:
        with os.scandir(directory) as it:
            for item in it:
                if item.name.startswith("."):
                    continue
                try:
                    is_dir = item.is_dir()
                    size = "--" if is_dir else format_size(item.stat().st_size)
                except OSError as e:
                    # Dangling symlink or entry removed mid-scan
                    logger.debug(f"[Paths] Skipping {item.path}: {e}")
                    continue
                entries.append(FileEntry(name=item.name, type=FOLDER if is_dir else FILE, size=size))
    except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
        logger.debug(f"[Paths] Cannot list {directory}: {e}")
        return []

    entries.sort(key=sort_key)
    return entries


def clear_storage(root: Path) -> int:
    """Delete every child of the storage root, hidden ones included."""
    removed = 0
    for child in Path(root).iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
        removed += 1
    logger.info(f"[Paths] Cleared storage root {root}: {removed} item(s) removed")
    return removed
