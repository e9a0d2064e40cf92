"""
Operator console: the terminal stand-in for the desktop shell.

Reads one command per line from stdin on its own thread and applies it to
the running server's HostControl and ChangeBus, both of which are safe to
touch from outside the event loop.
"""
from __future__ import annotations

import logging
import sys
import threading
from typing import Callable, Dict, List, Optional, TextIO

from raindrops.server.state import ApplicationState
from raindrops.storage.paths import clear_storage

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  pin            generate a new PIN (signs every client out)
  read on|off    allow or block listing and downloads
  write on|off   allow or block uploads
  status         show PIN, permissions and transfer state
  refresh        tell connected browsers to reload their listing
  clear          delete everything in the storage root
  help           show this text"""


def _parse_switch(args: List[str]) -> Optional[bool]:
    if len(args) != 1:
        return None
    return {"on": True, "off": False}.get(args[0].lower())


class OperatorConsole:
    def __init__(self, state: ApplicationState, stream: Optional[TextIO] = None):
        self.state = state
        self.stream = stream or sys.stdin
        self._thread: Optional[threading.Thread] = None
        self._commands: Dict[str, Callable[[List[str]], str]] = {
            "pin": self._pin,
            "read": self._read,
            "write": self._write,
            "status": self._status,
            "refresh": self._refresh,
            "clear": self._clear,
            "help": lambda _args: HELP_TEXT,
        }

    def execute(self, line: str) -> str:
        """Run one command line and return the reply text."""
        parts = line.strip().split()
        if not parts:
            return ""
        handler = self._commands.get(parts[0].lower())
        if handler is None:
            return f"Unknown command: {parts[0]} (try 'help')"
        return handler(parts[1:])

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self._loop, name="raindrops-console", daemon=True)
        self._thread.start()
        return self._thread

    def _loop(self) -> None:
        for line in self.stream:
            reply = self.execute(line)
            if reply:
                print(reply, flush=True)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _pin(self, _args: List[str]) -> str:
        return f"New PIN: {self.state.control.regenerate_pin()}"

    def _read(self, args: List[str]) -> str:
        value = _parse_switch(args)
        if value is None:
            return "Usage: read on|off"
        self.state.control.set_permissions(read=value)
        self.state.bus.signal()
        return f"Downloads {'enabled' if value else 'disabled'}"

    def _write(self, args: List[str]) -> str:
        value = _parse_switch(args)
        if value is None:
            return "Usage: write on|off"
        self.state.control.set_permissions(write=value)
        self.state.bus.signal()
        return f"Uploads {'enabled' if value else 'disabled'}"

    def _status(self, _args: List[str]) -> str:
        control = self.state.control
        perms = control.permissions()
        return (
            f"PIN {control.pin} | read {'on' if perms.read else 'off'} | "
            f"write {'on' if perms.write else 'off'} | "
            f"{'busy' if control.busy else 'idle'} | "
            f"{self.state.bus.subscriber_count} live client(s)"
        )

    def _refresh(self, _args: List[str]) -> str:
        self.state.bus.signal()
        return "Refresh sent"

    def _clear(self, _args: List[str]) -> str:
        try:
            removed = clear_storage(self.state.root)
        except OSError as e:
            logger.error(f"[Console] Clearing {self.state.root} failed: {e}")
            return f"Clear failed: {e}"
        self.state.refresh()
        return f"Removed {removed} item(s)"
