"""
Router initialization module.

Exports all routers of the Raindrops server.
"""
from raindrops.server.routers import auth, files, realtime, system

__all__ = [
    "auth",
    "files",
    "realtime",
    "system",
]
