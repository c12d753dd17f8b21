"""Manages blob files on disk: put/get/open/delete by derived name."""

import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Optional, Union

from common.constants import DEFAULT_PIECE_SIZE
from common.logging_config import get_logger
from server.config import STORAGE_DIR
from server.exceptions import BlobUnavailableError

logger = get_logger(__name__)


class BlobStore:
    """
    Flat directory of blobs addressed by opaque names (``<id><ext>``).
    """

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            base_dir: Storage directory; defaults to TAGVAULT_STORAGE_DIR
        """
        self.base_dir = Path(base_dir or STORAGE_DIR)

    def ensure_directory(self) -> None:
        """Ensure the storage directory exists."""
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        """
        Get file path for a blob.

        Raises:
            BlobUnavailableError: If the name would escape the storage directory
        """
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise BlobUnavailableError(f"Invalid blob name: {name!r}")
        return self.base_dir / name

    def put(self, name: str, data: Union[bytes, BinaryIO], piece_size: int = DEFAULT_PIECE_SIZE) -> int:
        """
        Write blob data to disk, replacing any existing blob with that name.

        Args:
            name: Blob name
            data: Raw bytes or a readable binary stream
            piece_size: Copy buffer size for streams

        Returns:
            Number of bytes written

        Raises:
            BlobUnavailableError: If the write fails
        """
        filepath = self.path_for(name)
        try:
            self.ensure_directory()
            fd, tmp_path = tempfile.mkstemp(dir=self.base_dir, prefix=".", suffix=".tmp")
        except OSError as e:
            raise BlobUnavailableError(f"Failed to write blob {name}: {e}") from e

        # Readers never observe a half-written blob: the temp file replaces the old one only when complete
        try:
            with os.fdopen(fd, 'wb') as f:
                if isinstance(data, (bytes, bytearray)):
                    f.write(data)
                else:
                    shutil.copyfileobj(data, f, piece_size)
                written = f.tell()
            os.replace(tmp_path, filepath)
            return written
        except OSError as e:
            raise BlobUnavailableError(f"Failed to write blob {name}: {e}") from e
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def open(self, name: str) -> BinaryIO:
        """
        Open a blob for reading.

        Raises:
            BlobUnavailableError: If the blob does not exist or cannot be opened
        """
        filepath = self.path_for(name)
        try:
            return open(filepath, 'rb')
        except OSError as e:
            raise BlobUnavailableError(f"Blob {name} not available: {e}") from e

    def get(self, name: str) -> bytes:
        """
        Read an entire blob.

        Raises:
            BlobUnavailableError: If the blob does not exist or cannot be read
        """
        with self.open(name) as f:
            try:
                return f.read()
            except OSError as e:
                raise BlobUnavailableError(f"Failed to read blob {name}: {e}") from e

    def rename(self, old_name: str, new_name: str) -> None:
        """
        Move a blob to a new name.

        Raises:
            BlobUnavailableError: If the source is missing or the move fails
        """
        try:
            os.replace(self.path_for(old_name), self.path_for(new_name))
        except OSError as e:
            raise BlobUnavailableError(f"Failed to rename blob {old_name} -> {new_name}: {e}") from e

    def delete(self, name: str) -> bool:
        """
        Delete blob file from disk. Best-effort: failures are logged, not raised.

        Returns:
            True if file was deleted, False otherwise
        """
        try:
            filepath = self.path_for(name)
            filepath.unlink()
            return True
        except FileNotFoundError:
            return False
        except (OSError, BlobUnavailableError) as e:
            logger.warning(f"Failed to delete blob {name}: {e}")
            return False

    def exists(self, name: str) -> bool:
        """
        Check if a blob file exists on disk.
        """
        try:
            return self.path_for(name).is_file()
        except BlobUnavailableError:
            return False

