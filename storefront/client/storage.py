"""
Durable key/value storage for client components, modelled on browser
localStorage: string keys map to string values.
"""
import json
import logging
import os
from typing import Dict, Optional

from filelock import FileLock

log = logging.getLogger(__name__)


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """All keys live in one JSON object on disk; writes are atomic and file-locked."""

    def __init__(self, path: str, lock_timeout: float = 5.0):
        self.path = os.path.abspath(path)
        self._lock = FileLock(self.path + ".lock")
        self.lock_timeout = lock_timeout

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log.warning("Storage file %s unreadable, treating as empty: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, str]) -> None:
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock.acquire(timeout=self.lock_timeout):
            value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock.acquire(timeout=self.lock_timeout):
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def remove_item(self, key: str) -> None:
        with self._lock.acquire(timeout=self.lock_timeout):
            data = self._read_all()
            if data.pop(key, None) is not None:
                self._write_all(data)
