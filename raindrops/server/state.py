from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import Request

from raindrops.base.config import RaindropsConfig, get_config
from raindrops.base.control import HostControl
from raindrops.events import ChangeBus, get_change_bus

logger = logging.getLogger(__name__)


class ApplicationState:
    """
    Everything a request handler needs, injected once at startup:
    the configuration, the operator-owned HostControl and the ChangeBus.
    """
    _instance = None

    @classmethod
    def instance(cls) -> ApplicationState:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __init__(
        self,
        config: Optional[RaindropsConfig] = None,
        control: Optional[HostControl] = None,
        bus: Optional[ChangeBus] = None,
    ):
        self.config = config or get_config()
        self.control = control or HostControl(
            pin=self.config.security.pin,
            read=self.config.allow_read,
            write=self.config.allow_write,
            pin_length=self.config.security.pin_length,
        )
        self.bus = bus or get_change_bus()

    @property
    def root(self) -> Path:
        return self.config.storage_root

    def refresh(self) -> None:
        """Tell the desktop shell and every open /events stream that files changed."""
        self.control.notify_refresh()
        self.bus.signal()


def get_app_state(request: Request) -> ApplicationState:
    """FastAPI dependency: the state the running app was created with."""
    return request.app.state.raindrops
