# ============================================================================
# raindrops/server/__init__.py
# Server Package - FastAPI Web Server
# ============================================================================
#
# PURPOSE:
# The HTTP side of Raindrops: the browser UI, the PIN login, listings,
# uploads, downloads and the live change stream.
#
# REQUEST FLOW:
# Browser -> AuthGuardMiddleware -> router -> permission gate
#         -> path resolution -> streaming disk / subprocess I/O
#
# KEY MODULES:
# - api.py: application factory, error handler, serve()
# - state.py: ApplicationState (config, HostControl, ChangeBus)
# - routers/: auth, system, files, realtime
#
# ============================================================================
