"""
Local key-value store implementations.
"""
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.logging import LoggingMixin
from .interfaces import KeyValueStoreInterface


class JsonFileStore(KeyValueStoreInterface, LoggingMixin):
    """Key-value store persisted as a single JSON object file."""

    def __init__(self, path: Union[str, Path]):
        """
        Initialize file storage.

        Args:
            path: JSON file holding the mapping; created on first write
        """
        self.path = Path(path)
        self._lock = threading.RLock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, 'r') as f:
            content = f.read()
        if not content.strip():
            return {}
        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError(f"Store file does not hold a JSON object: {self.path}")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write to a temp file in the same directory, then swap it in
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)
            self.log_debug("Stored key", key=key, path=str(self.path))

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)
                self.log_debug("Removed key", key=key, path=str(self.path))

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            return sorted(key for key in self._read() if key.startswith(prefix))


class MemoryStore(KeyValueStoreInterface):
    """In-process store; nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(key for key in self._data if key.startswith(prefix))
