# ============================================================================
# raindrops/__init__.py
# Raindrops - local network file drop server
# ============================================================================
#
# PURPOSE:
# A host exposes one directory over HTTP so phones and laptops on the same
# network can drop files into it and pull files (or whole folders, zipped on
# the fly) out of it from a browser.
#
# LAYOUT:
# - base/: configuration and the operator-owned PIN/permission state
# - storage/: path resolution, listing, upload and archive pipelines
# - events.py: change notification bus behind the /events stream
# - server/: FastAPI application and routers
# - cli/: `raindrops` command and operator console
#
# ============================================================================

__version__ = "1.0.0"
