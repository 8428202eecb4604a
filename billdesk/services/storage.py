# billdesk/services/storage.py
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    def put(self, key: str, data: bytes, content_type: str = "application/pdf") -> str: ...

    def get(self, key: str) -> bytes: ...


class LocalObjectStore:
    """Stores objects as files under a base directory, keyed by relative path."""

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir).resolve()

    def _path(self, key: str) -> Path:
        path = (self.base_dir / key).resolve()
        if self.base_dir not in path.parents:
            raise ValueError(f"Invalid storage key: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: str = "application/pdf") -> str:
        path = self._path(key)
        os.makedirs(path.parent, exist_ok=True)

        tmp = path.with_suffix(path.suffix + ".part")
        with open(tmp, "wb") as f:
            f.write(data)
        os.replace(tmp, path)

        logger.info("Stored %s (%d bytes, %s)", key, len(data), content_type)
        return key

    def get(self, key: str) -> bytes:
        with open(self._path(key), "rb") as f:
            return f.read()
