from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class StoredObject:
    key: str
    url: str


class ObjectStorage(Protocol):
    def store(self, data: bytes, name: str, content_type: str) -> StoredObject:
        raise NotImplementedError

    def set_public_readable(self, obj: StoredObject) -> None:
        raise NotImplementedError
