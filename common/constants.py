"""Project-wide constants (archive layout, default ports)."""

MANIFEST_ENTRY_NAME: str = "metadata.json"
BLOB_ENTRY_PREFIX: str = "files/"

DEFAULT_SERVER_PORT: int = 8081
DEFAULT_PIECE_SIZE: int = 64 * 1024  # 64 KiB per blob copy step
