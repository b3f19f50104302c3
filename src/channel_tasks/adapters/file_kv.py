"""File-based key-value storage adapter."""

import os
import re
import tempfile
from pathlib import Path

from channel_tasks.ports.kv_store import StoreError

_VALID_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileKVStore:
    """
    File-based key-value storage.

    Implements KVStore protocol. Each key gets its own file in the data directory.
    Writes go to a temp file that is then renamed over the target, so readers
    see either the old value or the new one.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for_key(self, key: str) -> Path:
        """Get the file path for a given key."""
        if not _VALID_KEY.match(key) or key.startswith("."):
            raise StoreError(f"Invalid key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> bytes | None:
        """Read a value. Returns None if not found."""
        path = self._path_for_key(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as e:
            raise StoreError(f"Failed to read {key}: {e}") from e

    def set(self, key: str, value: bytes) -> None:
        """Write/overwrite a value."""
        path = self._path_for_key(key)
        tmp_path = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
            os.close(fd)
            tmp_path = Path(tmp_name)
            tmp_path.write_bytes(value)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StoreError(f"Failed to write {key}: {e}") from e
