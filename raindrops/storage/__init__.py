#
# PURPOSE:
# Everything that touches the storage root on disk.
#
# WHAT'S IN THIS MODULE:
# - paths.py: path resolution, traversal checks, listing, clearing
# - uploads.py: streaming request bodies to files
# - archive.py: zip streams for directory downloads
#
