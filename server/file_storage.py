"""File-based storage implementation."""

import json
import logging
import os
import tempfile

from core.config import SNAPSHOT_SENTINEL_KEY
from core.interfaces import Storage

logger = logging.getLogger(__name__)


class FileStorage(Storage):
    """File-based storage implementation. One JSON file per namespace."""

    def __init__(self, config_file: str = None, state_dir: str = None):
        self.config_file = config_file or os.path.expanduser('~/.config/deutschweg/config.json')
        # Project root is one level up from server/
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.state_dir = state_dir or os.environ.get('DEUTSCHWEG_STATE_DIR') or project_root

    def _get_state_file(self, namespace: str) -> str:
        """Get state file path for a namespace."""
        return os.path.join(self.state_dir, f'{namespace}.json')

    def _get_vocabulary_file(self) -> str:
        return os.path.join(self.state_dir, 'deutschweg_vocabulary.json')

    def _read_json(self, path: str):
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    def _write_json(self, path: str, data) -> None:
        """Write to a temp file in the same directory, then rename over the target."""
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path) or '.', suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def load_config(self) -> dict:
        config = self._read_json(self.config_file)
        return config if isinstance(config, dict) else {}

    def load_state(self, namespace: str) -> dict | None:
        return self._read_json(self._get_state_file(namespace))

    def save_state(self, state: dict, namespace: str) -> None:
        self._write_json(self._get_state_file(namespace), state)

    def has_vocabulary_snapshot(self) -> bool:
        snapshot = self._read_json(self._get_vocabulary_file())
        return isinstance(snapshot, dict) and SNAPSHOT_SENTINEL_KEY in snapshot

    def save_vocabulary_snapshot(self, snapshot: dict) -> None:
        self._write_json(self._get_vocabulary_file(), snapshot)
