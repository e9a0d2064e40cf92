# ============================================================================
# raindrops/base/config.py
# Application Configuration Management
# ============================================================================
#
# PURPOSE:
# Every tunable of the file drop server lives here: where files are stored,
# which port to listen on, how the PIN looks, how directories are zipped and
# how logging is set up. Values come from RAINDROPS_* environment variables
# or the command line; everything else falls back to the defaults below.
#
# KEY CONCEPTS:
# 1. Frozen dataclasses: one small immutable section per concern
# 2. Environment variables: RAINDROPS_PORT=9000 overrides the default port
# 3. Singleton accessors: get_config() / set_config() share one instance
#
# Runtime state that the operator changes while the server runs (the PIN and
# the read/write flags) is NOT configuration; it lives in HostControl
# (raindrops/base/control.py). The values here only seed it.
#
# ============================================================================

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def default_storage_root() -> Path:
    """~/Downloads/Raindrops, the directory the desktop app always served."""
    return Path.home() / "Downloads" / "Raindrops"


# ============================================================================
# Access Control Configuration
# ============================================================================

@dataclass(frozen=True)
class SecurityConfig:
    # Fixed PIN to start with. None = generate a random one at startup.
    pin: Optional[str] = None

    # Number of digits in a generated PIN. Four digits are meant to be read
    # off the host's screen by a person standing next to it.
    pin_length: int = 4

    # Name of the session cookie. Its value is the PIN itself.
    cookie_name: str = "raindrops-auth"


# ============================================================================
# Storage Root Configuration
# ============================================================================

@dataclass(frozen=True)
class StorageConfig:
    # The entire served namespace. Nothing outside it is ever read or written.
    root: Path = field(default_factory=default_storage_root)

    # Largest accepted upload. 100 GB is "unbounded" for a LAN drop box.
    max_upload_bytes: int = 100 * 1000 ** 3


# ============================================================================
# Directory Archive Configuration
# ============================================================================

@dataclass(frozen=True)
class ArchiveConfig:
    # Executable producing a zip stream on stdout (`zip -r - <dir>`)
    binary: str = "zip"

    # PATH handed to the archiver; nothing else from our environment leaks in
    search_path: str = "/usr/bin:/bin"

    # Bytes read from the archiver's stdout per iteration
    chunk_size: int = 64 * 1024


# ============================================================================
# Web UI Configuration
# ============================================================================

@dataclass(frozen=True)
class WebConfig:
    # Fill colour injected into the logo SVG
    accent_color: str = "#00cbff"

    # Directory holding index.html, login.html, style.css, app.js, logo.svg
    assets_dir: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent / "web")


# ============================================================================
# Logging Configuration
# ============================================================================

@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"

    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    # Also write to <state_dir>/<file_name>, rotated at max_file_size_mb.
    # Never inside the storage root: clients would see it in archives.
    file_enabled: bool = True
    file_name: str = "raindrops.log"
    max_file_size_mb: int = 10
    backup_count: int = 3


# ============================================================================
# Master Configuration Container
# ============================================================================

@dataclass  # Not frozen because __post_init__ prepares directories
class RaindropsConfig:
    security: SecurityConfig = field(default_factory=SecurityConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    archive: ArchiveConfig = field(default_factory=ArchiveConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log: LogConfig = field(default_factory=LogConfig)

    debug: bool = False

    # 0.0.0.0 so phones on the same network can reach the host
    host: str = "0.0.0.0"
    port: int = 8080

    # Where the server keeps its own files (logs)
    state_dir: Path = field(default_factory=lambda: Path.home() / ".raindrops")

    # Initial permission flags handed to HostControl
    allow_read: bool = True
    allow_write: bool = True

    def __post_init__(self):
        self.storage.root.mkdir(parents=True, exist_ok=True)

    @property
    def storage_root(self) -> Path:
        """The storage root as an absolute, symlink-free path."""
        return self.storage.root.resolve()

    @classmethod
    def from_env(cls) -> "RaindropsConfig":
        security = SecurityConfig(
            pin=os.getenv("RAINDROPS_PIN") or None,
            pin_length=int(os.getenv("RAINDROPS_PIN_LENGTH", "4")),
            cookie_name=os.getenv("RAINDROPS_COOKIE_NAME", "raindrops-auth"),
        )

        root = os.getenv("RAINDROPS_ROOT")
        storage = StorageConfig(
            root=Path(root).expanduser() if root else default_storage_root(),
            max_upload_bytes=int(os.getenv("RAINDROPS_MAX_UPLOAD_BYTES", str(100 * 1000 ** 3))),
        )

        archive = ArchiveConfig(
            binary=os.getenv("RAINDROPS_ZIP_BINARY", "zip"),
            search_path=os.getenv("RAINDROPS_ZIP_PATH", "/usr/bin:/bin"),
        )

        web = WebConfig(
            accent_color=os.getenv("RAINDROPS_ACCENT_COLOR", "#00cbff"),
        )

        log = LogConfig(
            level=os.getenv("RAINDROPS_LOG_LEVEL", "INFO"),
            file_enabled=_env_flag("RAINDROPS_LOG_FILE", "true"),
        )

        state_dir = os.getenv("RAINDROPS_STATE_DIR")

        return cls(
            security=security,
            storage=storage,
            archive=archive,
            web=web,
            log=log,
            debug=_env_flag("RAINDROPS_DEBUG", "false"),
            host=os.getenv("RAINDROPS_HOST", "0.0.0.0"),
            port=int(os.getenv("RAINDROPS_PORT", "8080")),
            state_dir=Path(state_dir).expanduser() if state_dir else Path.home() / ".raindrops",
            allow_read=_env_flag("RAINDROPS_ALLOW_READ", "true"),
            allow_write=_env_flag("RAINDROPS_ALLOW_WRITE", "true"),
        )


# ============================================================================
# Global Configuration Singleton
# ============================================================================

_config: Optional[RaindropsConfig] = None


def get_config() -> RaindropsConfig:
    """
    Get the global configuration instance.

    Loaded from the environment on first use and reused afterwards.
    """
    global _config
    if _config is None:
        _config = RaindropsConfig.from_env()
    return _config


def set_config(config: RaindropsConfig) -> None:
    """Replace the global configuration (command line overrides, tests)."""
    global _config
    _config = config


def setup_logging(config: Optional[RaindropsConfig] = None) -> None:
    """
    Configure Python's logging system from LogConfig.

    Console output always; a rotating file under state_dir when enabled.
    Call this once at application startup.
    """
    cfg = config or get_config()

    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if cfg.log.file_enabled:
        from logging.handlers import RotatingFileHandler
        cfg.state_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            cfg.state_dir / cfg.log.file_name,
            maxBytes=cfg.log.max_file_size_mb * 1024 * 1024,
            backupCount=cfg.log.backup_count,
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, cfg.log.level.upper(), logging.INFO),
        format=cfg.log.format,
        handlers=handlers,
        force=True,
    )
