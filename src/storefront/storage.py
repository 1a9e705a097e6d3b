"""Durable client cache, one JSON document per concern.

Writes go to a temporary file in the same directory and are moved into place
with ``os.replace``, so a crash mid-write leaves the previous document intact.
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class JsonFileStorage:
    """Key-value store backed by ``<directory>/<key>.json`` files."""

    def __init__(self, directory: str | os.PathLike):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        with self._lock:
            if not path.exists():
                return default
            try:
                return json.loads(path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.warning("Discarding unreadable cache file", key=key, path=str(path))
                path.unlink(missing_ok=True)
                return default

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        data = json.dumps(value, ensure_ascii=False, indent=2)
        with self._lock:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    tmp.write(data)
                    tmp.flush()
                    os.fsync(tmp.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

    def remove(self, key: str) -> None:
        with self._lock:
            self._path(key).unlink(missing_ok=True)
