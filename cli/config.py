"""Settings for the p2pshare shell, kept in a small JSON file."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.constants import BASE_PORT, DEFAULT_PEER_IP, TRACKER_PORT
from common.logging_config import get_logger

logger = get_logger(__name__)


class Config:
    """
    Shell settings backed by ~/.p2pshare/config.json.

    Keys missing from the file fall back to DEFAULT_CONFIG. A file that
    cannot be parsed is copied aside to config.json.bak and the defaults
    are used instead.
    """

    DEFAULT_CONFIG = {
        "tracker_host": os.environ.get("P2P_TRACKER_HOST", "localhost"),
        "tracker_port": int(os.environ.get("P2P_TRACKER_PORT", str(TRACKER_PORT))),
        "timeout": 10,
        "max_retries": 3,
        "retry_backoff_multiplier": 2,
        "peer_host": os.environ.get("P2P_PEER_HOST", DEFAULT_PEER_IP),
        "base_port": int(os.environ.get("P2P_BASE_PORT", str(BASE_PORT))),
    }

    def __init__(self, config_path: Path):
        self.config_path = Path(config_path)
        self._prepare_directory()

        stored = self._read()
        self.data = {**self.DEFAULT_CONFIG, **(stored or {})}
        if stored is None and not self.config_path.exists():
            self._write(self.data)

    def _prepare_directory(self) -> None:
        """Create the config directory, moving to the temp dir if home is read-only."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            fallback = Path(tempfile.gettempdir()) / '.p2pshare' / self.config_path.name
            logger.warning(f"Cannot create {self.config_path.parent}, using {fallback}")
            self.config_path = fallback
            fallback.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> Optional[dict]:
        """Stored settings, or None when there is no usable file."""
        if not self.config_path.exists():
            return None

        try:
            stored = json.loads(self.config_path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            backup = self.config_path.with_suffix('.json.bak')
            logger.warning(f"Unreadable config {self.config_path} ({e}), backing up to {backup}")
            try:
                shutil.copy(self.config_path, backup)
            except OSError as copy_error:
                logger.warning(f"Could not back up config: {copy_error}")
            return None

        if not isinstance(stored, dict):
            logger.warning(f"Ignoring config {self.config_path}: expected a JSON object")
            return None
        return stored

    def _write(self, data: dict) -> None:
        try:
            self.config_path.write_text(json.dumps(data, indent=2))
        except OSError as e:
            logger.warning(f"Could not write config {self.config_path}: {e}")

    def save(self) -> None:
        self._write(self.data)

    def get_tracker_url(self) -> str:
        """Tracker base URL, e.g. "http://localhost:8000"."""
        host = self.data['tracker_host']
        port = self.data['tracker_port']
        return f"http://{host}:{port}"

    def get_timeout(self) -> float:
        return self.data['timeout']

    def get_retry_config(self) -> dict:
        """Keyword arguments for the tracker client's retry policy."""
        return {
            'max_retries': self.data['max_retries'],
            'retry_backoff_multiplier': self.data['retry_backoff_multiplier'],
        }

    def get_peer_host(self) -> str:
        return self.data['peer_host']

    def get_base_port(self) -> int:
        return self.data['base_port']
