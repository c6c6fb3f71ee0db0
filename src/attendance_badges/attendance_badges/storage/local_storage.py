from __future__ import annotations

import os
from pathlib import Path

from ..core.exceptions import StorageError
from .base import ObjectStorage, StoredObject


class LocalObjectStorage(ObjectStorage):
    """Writes badge images to a directory served at ``base_url`` (development)."""

    def __init__(self, directory: str | Path, *, base_url: str):
        self._dir = Path(directory)
        self._base_url = base_url.rstrip("/")

    def store(self, data: bytes, name: str, content_type: str) -> StoredObject:
        path = self._dir / name
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e
        return StoredObject(key=name, url=f"{self._base_url}/{name}")

    def set_public_readable(self, obj: StoredObject) -> None:
        try:
            os.chmod(self._dir / obj.key, 0o644)
        except OSError as e:
            raise StorageError(f"Could not share {obj.key}: {e}") from e
