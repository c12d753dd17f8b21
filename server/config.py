"""Configuration settings for the storage server."""

import os
from common.constants import DEFAULT_PIECE_SIZE, DEFAULT_SERVER_PORT


DATABASE_PATH = os.environ.get("TAGVAULT_DATABASE_PATH", "data/storage.db")

STORAGE_DIR = os.environ.get("TAGVAULT_STORAGE_DIR", "data/uploads")

SERVER_HOST = os.environ.get("TAGVAULT_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("TAGVAULT_PORT", str(DEFAULT_SERVER_PORT)))

ARCHIVE_PIECE_SIZE = int(os.environ.get("TAGVAULT_ARCHIVE_PIECE_SIZE", str(DEFAULT_PIECE_SIZE)))

# Uploaded archives stay in memory up to this size, then roll over to a temp file
RESTORE_SPOOL_MAX_BYTES = int(os.environ.get("TAGVAULT_RESTORE_SPOOL_MAX_BYTES", str(32 * 1024 * 1024)))

DEFAULT_PAGE_LIMIT = int(os.environ.get("TAGVAULT_DEFAULT_PAGE_LIMIT", "50"))
