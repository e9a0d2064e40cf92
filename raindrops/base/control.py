"""
Operator-owned runtime state: the PIN, the permission flags and the
transfer indicator.

The desktop shell (or the terminal console in raindrops.cli) writes these
values from its own thread while request handlers read them on the event
loop, so every access goes through one lock. Nothing is cached per session:
a request always sees the latest PIN and flags.
"""
from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

StatusCallback = Callable[[bool], None]
RefreshCallback = Callable[[], None]


def generate_pin(length: int = 4) -> str:
    """Random zero-padded numeric PIN, e.g. "0427"."""
    return f"{secrets.randbelow(10 ** length):0{length}d}"


@dataclass(frozen=True)
class Permissions:
    read: bool
    write: bool

    def to_dict(self) -> dict:
        return {"read": self.read, "write": self.write}


class HostControl:
    """
    PIN, permission flags and busy indicator behind a single lock.

    Regenerating the PIN invalidates every outstanding session at once,
    since a session cookie is only valid while it equals the current PIN.
    """

    def __init__(
        self,
        pin: Optional[str] = None,
        read: bool = True,
        write: bool = True,
        pin_length: int = 4,
    ):
        self._lock = threading.Lock()
        self._pin_length = pin_length
        self._pin = pin or generate_pin(pin_length)
        self._read = read
        self._write = write
        self._busy = False
        self._status_callbacks: List[StatusCallback] = []
        self._refresh_callbacks: List[RefreshCallback] = []

    # ------------------------------------------------------------------
    # PIN
    # ------------------------------------------------------------------

    @property
    def pin(self) -> str:
        with self._lock:
            return self._pin

    def regenerate_pin(self) -> str:
        with self._lock:
            self._pin = generate_pin(self._pin_length)
            pin = self._pin
        logger.info("[Control] PIN regenerated; existing sessions are no longer valid")
        return pin

    def check_pin(self, candidate: Optional[str]) -> bool:
        # Plain equality: the PIN is a short shared secret shown on screen.
        if candidate is None:
            return False
        with self._lock:
            return candidate == self._pin

    # ------------------------------------------------------------------
    # Permission flags
    # ------------------------------------------------------------------

    @property
    def read_allowed(self) -> bool:
        with self._lock:
            return self._read

    @property
    def write_allowed(self) -> bool:
        with self._lock:
            return self._write

    def permissions(self) -> Permissions:
        with self._lock:
            return Permissions(read=self._read, write=self._write)

    def set_permissions(self, read: Optional[bool] = None, write: Optional[bool] = None) -> Permissions:
        with self._lock:
            if read is not None:
                self._read = read
            if write is not None:
                self._write = write
            current = Permissions(read=self._read, write=self._write)
        logger.info(f"[Control] Permissions set: read={current.read} write={current.write}")
        return current

    # ------------------------------------------------------------------
    # Busy indicator & observers
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    def set_busy(self, active: bool) -> None:
        with self._lock:
            self._busy = active
            callbacks = list(self._status_callbacks)
        for callback in callbacks:
            try:
                callback(active)
            except Exception as e:
                logger.warning(f"[Control] Status observer failed: {e}")

    def on_status(self, callback: StatusCallback) -> None:
        """Register an observer called with the new busy value on each change."""
        with self._lock:
            self._status_callbacks.append(callback)

    def on_refresh(self, callback: RefreshCallback) -> None:
        """Register an observer called after every completed upload."""
        with self._lock:
            self._refresh_callbacks.append(callback)

    def notify_refresh(self) -> None:
        with self._lock:
            callbacks = list(self._refresh_callbacks)
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning(f"[Control] Refresh observer failed: {e}")
