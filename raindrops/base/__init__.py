#
# PURPOSE:
# Foundational pieces the rest of the package depends on.
#
# WHAT'S IN THIS MODULE:
# - config.py: application configuration (storage root, port, archiver, logging)
# - control.py: PIN, read/write permission flags and busy indicator
#
