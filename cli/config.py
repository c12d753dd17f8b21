"""Configuration management for the Tagvault CLI.

Settings come from ``~/.tagvault/config.json``; ``TAGVAULT_SERVER_HOST`` and
``TAGVAULT_PORT`` override the file for a single session without rewriting it.
"""

import json
import os
import shutil
import tempfile
from pathlib import Path

from common.constants import DEFAULT_SERVER_PORT
from common.logging_config import get_logger

logger = get_logger(__name__)

ENV_OVERRIDES = {
    "TAGVAULT_SERVER_HOST": ("server_host", str),
    "TAGVAULT_PORT": ("server_port", int),
}


class Config:
    """JSON-file backed CLI settings."""

    DEFAULT_CONFIG = {
        "server_host": "localhost",
        "server_port": DEFAULT_SERVER_PORT,
        "timeout": 30,
        "transfer_timeout": 600,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
    }

    def __init__(self, config_path: Path):
        """
        Args:
            config_path: Path to config JSON file (typically ~/.tagvault/config.json)
        """
        self.config_path = config_path
        self.data = self._load()
        self.overrides = self._read_env_overrides()

    def _load(self) -> dict:
        """
        Read the config file, writing one with defaults if it does not exist.

        An unreadable file is copied to config.json.bak and defaults are used.
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.tagvault' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config = dict(self.DEFAULT_CONFIG)

        if not self.config_path.exists():
            self._write(config)
            return config

        try:
            with open(self.config_path, 'r') as f:
                config.update(json.load(f))
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Unreadable config {self.config_path}, using defaults: {e}")
            try:
                shutil.copy(self.config_path, self.config_path.with_suffix('.json.bak'))
            except IOError as copy_error:
                logger.warning(f"Could not back up config: {copy_error}")
            return dict(self.DEFAULT_CONFIG)

        return config

    @staticmethod
    def _read_env_overrides() -> dict:
        overrides = {}
        for variable, (key, cast) in ENV_OVERRIDES.items():
            raw = os.environ.get(variable)
            if not raw:
                continue
            try:
                overrides[key] = cast(raw)
            except ValueError:
                logger.warning(f"Ignoring {variable}={raw!r}: not a valid {cast.__name__}")
        return overrides

    def _write(self, data: dict) -> None:
        try:
            with open(self.config_path, 'w') as f:
                json.dump(data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not write config {self.config_path}: {e}")

    def save(self) -> None:
        """Persist the file-backed settings (environment overrides are not saved)."""
        self._write(self.data)

    def get(self, key: str):
        return self.overrides.get(key, self.data.get(key, self.DEFAULT_CONFIG.get(key)))

    def get_base_url(self) -> str:
        """Server base URL, e.g. http://localhost:8081."""
        return f"http://{self.get('server_host')}:{self.get('server_port')}"

    def get_timeout(self) -> int:
        """Timeout in seconds for ordinary API calls."""
        return self.get('timeout')

    def get_transfer_timeout(self) -> int:
        """Timeout in seconds for uploads, downloads, backups and restores."""
        return self.get('transfer_timeout')

    def get_retry_config(self) -> dict:
        return {
            'max_retries': self.get('max_retries'),
            'retry_backoff_multiplier': self.get('retry_backoff_multiplier'),
        }
